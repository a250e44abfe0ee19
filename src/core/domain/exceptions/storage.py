"""Storage and vector index exceptions for docqa."""

from .base import DocQAError


class StorageError(DocQAError):
    """Base error for document/chunk store operations."""

    error_code = "DQA_STO_001"


class VectorStoreConnectionError(StorageError):
    """Failed to connect to the vector index.

    Common causes:
    - Invalid URL or API key
    - Network connectivity issues
    - Qdrant service is down
    """

    error_code = "DQA_STO_002"


class VectorStoreQueryError(StorageError):
    """Failed to query the vector index.

    Common causes:
    - Collection does not exist
    - Invalid filter parameters
    - Embedding dimension mismatch
    """

    error_code = "DQA_STO_003"


class DocumentNotFoundError(StorageError):
    """Requested document does not exist."""

    error_code = "DQA_STO_004"
