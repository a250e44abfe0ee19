"""Document and chunk models for the ingestion pipeline."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .exceptions import InvalidMetadataError, InvalidStatusTransitionError

MetadataValue = str | int | float | bool | None
Metadata = dict[str, MetadataValue]

_METADATA_TYPES = (str, int, float, bool, type(None))


def validate_metadata(values: Any, *, what: str = "metadata") -> Metadata:
    """Return a copy of ``values`` restricted to the closed metadata variant.

    Keys must be strings and values must be str, int, float, bool or None.
    Insertion order is preserved.

    Raises:
        InvalidMetadataError: If the mapping or any entry is not allowed.
    """
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise InvalidMetadataError(
            f"{what} must be a mapping of string keys to scalar values",
            context={"type": type(values).__name__},
        )

    clean: Metadata = {}
    for key, value in values.items():
        if not isinstance(key, str):
            raise InvalidMetadataError(f"{what} keys must be strings", context={"key": repr(key)})
        if not isinstance(value, _METADATA_TYPES):
            raise InvalidMetadataError(
                f"{what} value for '{key}' must be a string, number, boolean or null",
                context={"key": key, "type": type(value).__name__},
            )
        clean[key] = value
    return clean


def _now() -> str:
    return datetime.now(UTC).isoformat()


def new_id() -> str:
    """Generate a new opaque identifier for documents and chunks."""
    return uuid.uuid4().hex


class DocumentStatus(str, Enum):
    """Lifecycle of a document inside the ingestion pipeline.

    Statuses advance one step at a time along the declared order. ``FAILED``
    is reachable from any non-terminal status. ``INDEXED`` and ``FAILED``
    are terminal.
    """

    UPLOADED = "uploaded"
    PARSING = "parsing"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    INDEXED = "indexed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentStatus.INDEXED, DocumentStatus.FAILED)

    def can_transition_to(self, target: "DocumentStatus") -> bool:
        """Check whether moving from this status to ``target`` is allowed."""
        if self.is_terminal:
            return False
        if target is DocumentStatus.FAILED:
            return True
        if target not in _FORWARD_ORDER:
            return False
        return _FORWARD_ORDER.index(target) == _FORWARD_ORDER.index(self) + 1


_FORWARD_ORDER = [
    DocumentStatus.UPLOADED,
    DocumentStatus.PARSING,
    DocumentStatus.CHUNKING,
    DocumentStatus.EMBEDDING,
    DocumentStatus.INDEXED,
]


@dataclass
class Document:
    """A source document tracked through ingestion.

    Attributes:
        filename: Name derived from the source URL or the uploaded file.
        source_url: Locator the bytes were fetched from (None for uploads).
        content_type: Declared content type used for text extraction.
        metadata: Domain tags (e.g. ``{"domain": "insurance"}``).
        status: Current lifecycle status.
        chunk_count: Number of chunks persisted for this document.
        doc_id: Unique identifier.
    """

    filename: str
    content_type: str
    source_url: str | None = None
    metadata: Metadata = field(default_factory=dict)
    status: DocumentStatus = DocumentStatus.UPLOADED
    chunk_count: int = 0
    doc_id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def transition(self, target: DocumentStatus) -> None:
        """Move the document to ``target``, enforcing the lifecycle.

        Raises:
            InvalidStatusTransitionError: If the move is not allowed.
        """
        if not self.status.can_transition_to(target):
            raise InvalidStatusTransitionError(
                f"Cannot move document from '{self.status.value}' to '{target.value}'",
                context={"document_id": self.doc_id},
            )
        self.status = target
        self.updated_at = _now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.doc_id,
            "filename": self.filename,
            "source_url": self.source_url,
            "content_type": self.content_type,
            "metadata": dict(self.metadata),
            "status": self.status.value,
            "chunk_count": self.chunk_count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Chunk:
    """A passage of a document, the unit of embedding and retrieval.

    Attributes:
        document_id: Owning document.
        chunk_number: 1-based position among the chunks originally extracted
            from the document. Gaps appear when a chunk failed embedding.
        content: Passage text.
        embedding: Vector returned by the embedding model.
        page_number: Page the passage starts on, when the format has pages.
        section_title: Optional heading the passage belongs to.
        metadata: Tags copied from the owning document.
        chunk_id: Unique identifier.
    """

    document_id: str
    chunk_number: int
    content: str
    embedding: list[float]
    page_number: int | None = None
    section_title: str | None = None
    metadata: Metadata = field(default_factory=dict)
    chunk_id: str = field(default_factory=new_id)


@dataclass
class ChunkSpan:
    """A chunk of text and the character offsets it was cut from."""

    content: str
    start: int
    end: int
