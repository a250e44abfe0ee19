"""Text helpers shared by the ingestion and query paths.

Text handling contract
----------------------
* Extracted documents and user queries have BOM markers stripped and are
  NFKC-normalised once, at the boundary, by ``normalize_text``.
* Chunking works on already-normalised text and never re-normalises.
"""

import unicodedata

from .document import ChunkSpan


def normalize_text(text: str | None) -> str:
    """Remove BOM markers, unify line endings and NFKC-normalise text.

    Args:
        text: Input text that may contain BOM or special characters.

    Returns:
        Cleaned text with surrounding whitespace stripped.
    """
    if not text:
        return ""

    cleaned = text.replace("\ufeff", "").replace("\ufffd", "")
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = unicodedata.normalize("NFKC", cleaned)
    return cleaned.strip()


def _find_break(text: str, marker: str, cursor: int, boundary: int, floor: int) -> int | None:
    """Return the cut just after the last ``marker`` in (floor, boundary)."""
    position = text.rfind(marker, cursor, boundary)
    if position > floor and position > cursor:
        return position + 1
    return None


def chunk_spans(
    text: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
) -> list[ChunkSpan]:
    """Split text into overlapping chunks and keep their source offsets.

    Each step proposes a cut at ``cursor + chunk_size``. Before the end of the
    text the cut moves back to just after the nearest ``.``, or failing that
    the nearest newline, provided it lies after ``cursor + chunk_size -
    chunk_overlap``. The next chunk starts ``chunk_overlap`` characters before
    the cut.

    The break search stops short of ``cursor + chunk_size``: a ``.`` sitting
    exactly there is not used, because cutting after it would make the chunk
    one character longer than ``chunk_size``. Chunks therefore never exceed
    ``chunk_size`` characters.

    Args:
        text: Text to chunk.
        chunk_size: Maximum size of each chunk in characters (must be positive).
        chunk_overlap: Characters shared by consecutive chunks (must be less
            than chunk_size).

    Returns:
        Chunk spans in text order. Whitespace-only slices are dropped.

    Raises:
        ValueError: If chunk_overlap >= chunk_size or parameters are invalid.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if chunk_overlap < 0:
        raise ValueError("chunk_overlap must be non-negative")
    if chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be less than chunk_size to avoid infinite loop")

    spans: list[ChunkSpan] = []
    length = len(text)
    cursor = 0

    while cursor < length:
        cut = min(cursor + chunk_size, length)
        if cut < length:
            floor = cursor + chunk_size - chunk_overlap
            cut = (
                _find_break(text, ".", cursor, cut, floor)
                or _find_break(text, "\n", cursor, cut, floor)
                or cut
            )

        raw = text[cursor:cut]
        content = raw.strip()
        if content:
            start = cursor + (len(raw) - len(raw.lstrip()))
            spans.append(ChunkSpan(content=content, start=start, end=start + len(content)))

        if cut >= length:
            break
        # Always move forward, even when the accepted break sits inside the overlap
        cursor = max(cut - chunk_overlap, cursor + 1)

    return spans


def chunk_text(
    text: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
) -> list[str]:
    """Split text into overlapping chunks for embedding and search.

    See ``chunk_spans`` for the splitting rules.

    Returns:
        List of non-empty text chunks.
    """
    return [span.content for span in chunk_spans(text, chunk_size, chunk_overlap)]
