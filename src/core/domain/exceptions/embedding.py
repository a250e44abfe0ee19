"""Embedding exceptions for docqa."""

from .base import DocQAError


class EmbeddingError(DocQAError):
    """Failed to generate embeddings."""

    error_code = "DQA_EMB_001"


class EmbeddingAPIError(EmbeddingError):
    """Embedding API returned an error."""

    error_code = "DQA_EMB_002"


class EmbeddingRateLimitError(EmbeddingError):
    """Embedding API rate limit exceeded."""

    error_code = "DQA_EMB_003"
