"""LLM exceptions for docqa."""

from .base import DocQAError


class LLMError(DocQAError):
    """Base error for LLM operations."""

    error_code = "DQA_LLM_001"


class LLMConnectionError(LLMError):
    """Failed to connect to LLM provider.

    Common causes:
    - Invalid API key
    - Network issues
    - Service unavailable
    """

    error_code = "DQA_LLM_002"


class LLMRateLimitError(LLMError):
    """Rate limit exceeded on LLM provider."""

    error_code = "DQA_LLM_003"


class LLMGenerationError(LLMError):
    """Failed to generate LLM response.

    Common causes:
    - Content filtered by safety settings
    - Token limit exceeded
    - Invalid prompt format
    """

    error_code = "DQA_LLM_004"


class GenerationFormatError(LLMError):
    """Model output could not be parsed as the structured answer.

    Fatal to the single query that produced it; never retried.
    """

    error_code = "DQA_LLM_005"
