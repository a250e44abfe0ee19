"""Document and Chunk Store Port Interfaces."""

from abc import ABC, abstractmethod

from ..domain import Chunk, Document


class DocumentStorePort(ABC):
    """Abstract interface for persisting documents and their status."""

    @abstractmethod
    def create_document(self, document: Document) -> None:
        """Persist a new document."""
        ...

    @abstractmethod
    def update_status(self, document: Document) -> None:
        """Persist the current status (and chunk count) of ``document``."""
        ...

    @abstractmethod
    def find_document(self, doc_id: str) -> Document | None:
        """Look up a document by id."""
        ...


class ChunkStorePort(ABC):
    """Abstract interface for persisting and loading chunks."""

    @abstractmethod
    def insert_chunks(self, chunks: list[Chunk]) -> int:
        """Insert chunks as one batch and return how many were stored."""
        ...

    @abstractmethod
    def find_chunks(self, chunk_ids: list[str]) -> list[Chunk]:
        """Load the chunks with the given ids, in no particular order."""
        ...

    @abstractmethod
    def delete_chunks(self, document_id: str) -> int:
        """Remove every chunk of a document and return how many were removed."""
        ...
