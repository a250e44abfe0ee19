"""Search Index Port Interfaces.

Filters are metadata mappings combined with AND and matched by equality.
The reserved key ``document_id`` restricts results to one document.
"""

from abc import ABC, abstractmethod

from ..domain import Chunk, Metadata, RankedResult


class VectorIndexPort(ABC):
    """Abstract interface for vector similarity search."""

    @abstractmethod
    def index_chunks(self, chunks: list[Chunk]) -> None:
        """Make ``chunks`` searchable by their embeddings."""
        ...

    @abstractmethod
    def vector_search(
        self,
        vector: list[float],
        filters: Metadata | None = None,
        top_k: int = 10,
    ) -> list[RankedResult]:
        """Return the chunks closest to ``vector``, best first."""
        ...


class LexicalIndexPort(ABC):
    """Abstract interface for keyword / full-text search."""

    @abstractmethod
    def lexical_search(
        self,
        text: str,
        filters: Metadata | None = None,
        top_k: int = 10,
    ) -> list[RankedResult]:
        """Return the chunks best matching ``text``, best first."""
        ...
