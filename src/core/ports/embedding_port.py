"""Embedding Port Interface."""

from abc import ABC, abstractmethod


class EmbeddingPort(ABC):
    """Abstract interface for embedding models.

    Implementations make a single attempt per call; retries belong to
    ``EmbeddingClient``.
    """

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return the fixed-length vector for ``text``."""
        ...
