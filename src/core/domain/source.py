"""Raw source models produced by fetching and text extraction."""

from bisect import bisect_right
from dataclasses import dataclass, field


@dataclass
class FetchedDocument:
    """Bytes fetched from a source locator.

    Attributes:
        content: Raw document bytes.
        content_type: MIME type reported by the source or guessed from the name.
        filename: File name derived from the locator.
        source_url: The locator the bytes came from.
    """

    content: bytes
    content_type: str
    filename: str
    source_url: str | None = None


@dataclass
class ExtractedText:
    """Text extracted from a document.

    Attributes:
        text: Full extracted text.
        page_offsets: Character offset at which each page starts, in page
            order. Empty for formats without pages.
    """

    text: str
    page_offsets: list[int] = field(default_factory=list)

    def page_for_offset(self, offset: int) -> int | None:
        """Return the 1-based page containing ``offset``, or None without pages."""
        if not self.page_offsets:
            return None
        index = bisect_right(self.page_offsets, offset)
        return max(index, 1)
