"""Domain models for docqa.

This package contains all data models used across the application.
Models are organized by domain area:

- document: Document, DocumentStatus, Chunk and metadata validation
- source: FetchedDocument and ExtractedText from the fetch/parse stages
- retrieval: RankedResult and FusedResult for hybrid search
- answer: Citation and StructuredAnswer returned to callers

All models are re-exported here for convenient importing:

    from src.core.domain import Document, Chunk, RankedResult
"""

from .answer import Citation, StructuredAnswer
from .document import (
    Chunk,
    ChunkSpan,
    Document,
    DocumentStatus,
    Metadata,
    MetadataValue,
    new_id,
    validate_metadata,
)
from .retrieval import FusedResult, RankedResult
from .source import ExtractedText, FetchedDocument

__all__ = [
    # Document models
    "Document",
    "DocumentStatus",
    "Chunk",
    "ChunkSpan",
    "Metadata",
    "MetadataValue",
    "new_id",
    "validate_metadata",
    # Source models
    "FetchedDocument",
    "ExtractedText",
    # Retrieval models
    "RankedResult",
    "FusedResult",
    # Answer models
    "Citation",
    "StructuredAnswer",
]
