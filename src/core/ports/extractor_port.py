"""Text Extraction Port Interfaces."""

from abc import ABC, abstractmethod

from ..domain import ExtractedText


class TextExtractorPort(ABC):
    """Abstract interface for turning document bytes into text."""

    @abstractmethod
    def extract_text(self, content: bytes, content_type: str) -> ExtractedText:
        """Extract text from ``content`` of the declared ``content_type``.

        Raises:
            ParseError: If no text can be extracted.
        """
        ...


class OCRPort(ABC):
    """Abstract interface for reading text out of images."""

    @abstractmethod
    def extract_image_text(self, content: bytes, content_type: str) -> str:
        """Return the text visible in the image."""
        ...
