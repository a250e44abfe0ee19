"""Custom exception hierarchy for docqa.

This package provides structured exceptions with automatic context capture.
Each exception includes:
- Error codes for quick identification
- Automatic capture of class, method, file, and line number
- Cause chaining for underlying exceptions
- JSON serialization for structured logging

Import from this package directly:

    from src.core.domain.exceptions import DocQAError, PipelineError
"""

# Base classes
from .base import DocQAError, ExceptionContext

# Configuration exceptions
from .configuration import (
    ConfigurationError,
    InvalidConfigurationError,
    MissingAPIKeyError,
)

# Embedding exceptions
from .embedding import (
    EmbeddingAPIError,
    EmbeddingError,
    EmbeddingRateLimitError,
)

# Ingestion exceptions
from .ingestion import (
    FetchError,
    IngestionError,
    InvalidStatusTransitionError,
    ParseError,
    PipelineError,
)

# LLM exceptions
from .llm import (
    GenerationFormatError,
    LLMConnectionError,
    LLMError,
    LLMGenerationError,
    LLMRateLimitError,
)

# Retrieval exceptions
from .retrieval import (
    RetrievalError,
    RetrievalSignalError,
)

# Storage exceptions
from .storage import (
    DocumentNotFoundError,
    StorageError,
    VectorStoreConnectionError,
    VectorStoreQueryError,
)

# Validation exceptions
from .validation import (
    EmptyQueryError,
    InvalidMetadataError,
    LocalFileAccessError,
    QueryTooLongError,
    ValidationError,
)

__all__ = [
    # Base
    "ExceptionContext",
    "DocQAError",
    # Configuration
    "ConfigurationError",
    "MissingAPIKeyError",
    "InvalidConfigurationError",
    # Ingestion
    "IngestionError",
    "FetchError",
    "PipelineError",
    "ParseError",
    "InvalidStatusTransitionError",
    # Embedding
    "EmbeddingError",
    "EmbeddingAPIError",
    "EmbeddingRateLimitError",
    # Retrieval
    "RetrievalError",
    "RetrievalSignalError",
    # LLM
    "LLMError",
    "LLMConnectionError",
    "LLMRateLimitError",
    "LLMGenerationError",
    "GenerationFormatError",
    # Storage
    "StorageError",
    "VectorStoreConnectionError",
    "VectorStoreQueryError",
    "DocumentNotFoundError",
    # Validation
    "ValidationError",
    "EmptyQueryError",
    "QueryTooLongError",
    "InvalidMetadataError",
    "LocalFileAccessError",
]
