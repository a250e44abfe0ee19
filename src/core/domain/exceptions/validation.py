"""Validation exceptions for docqa."""

from .base import DocQAError


class ValidationError(DocQAError):
    """Input validation failed."""

    error_code = "DQA_VAL_001"


class EmptyQueryError(ValidationError):
    """Query cannot be empty or whitespace only."""

    error_code = "DQA_VAL_002"


class QueryTooLongError(ValidationError):
    """Query exceeds maximum allowed length."""

    error_code = "DQA_VAL_003"


class InvalidMetadataError(ValidationError):
    """Metadata or filter value is not a string, number, boolean or null."""

    error_code = "DQA_VAL_004"


class LocalFileAccessError(ValidationError):
    """Locator points at the server filesystem, which this caller may not read."""

    error_code = "DQA_VAL_005"
