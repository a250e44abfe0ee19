"""Document Fetcher Port Interface."""

from abc import ABC, abstractmethod

from ..domain import FetchedDocument


class DocumentFetcherPort(ABC):
    """Abstract interface for retrieving raw document bytes."""

    @abstractmethod
    def fetch(self, locator: str) -> FetchedDocument:
        """Fetch the bytes behind ``locator``.

        Raises:
            FetchError: If the source cannot be reached or read.
        """
        ...
