import pytest

from src.core.domain import ExtractedText
from src.core.domain.utils import chunk_spans, chunk_text, normalize_text


class TestChunkText:
    """Unit tests for the shared chunk_text helper."""

    @pytest.mark.unit
    def test_short_text_returns_single_chunk(self):
        """Texts shorter than chunk_size should not be split."""
        text = "Short text"
        assert chunk_text(text, chunk_size=50, chunk_overlap=10) == [text]

    @pytest.mark.unit
    def test_empty_text_returns_empty_list(self):
        """Empty input should return an empty list."""
        assert chunk_text("", chunk_size=50, chunk_overlap=10) == []

    @pytest.mark.unit
    def test_whitespace_only_text_returns_empty_list(self):
        """Slices that are blank after trimming are dropped."""
        assert chunk_text("   \n\n  ", chunk_size=50, chunk_overlap=10) == []

    @pytest.mark.unit
    def test_overlap_equal_or_exceeds_chunk_size_raises(self):
        """Invalid overlap that prevents progress should raise an error."""
        with pytest.raises(ValueError):
            chunk_text("content", chunk_size=100, chunk_overlap=100)

        with pytest.raises(ValueError):
            chunk_text("content", chunk_size=50, chunk_overlap=75)

    @pytest.mark.unit
    def test_negative_or_zero_chunk_size_raises(self):
        """chunk_size must be positive."""
        with pytest.raises(ValueError):
            chunk_text("content", chunk_size=0, chunk_overlap=10)

        with pytest.raises(ValueError):
            chunk_text("content", chunk_size=-10, chunk_overlap=1)

    @pytest.mark.unit
    def test_negative_overlap_raises(self):
        """chunk_overlap cannot be negative."""
        with pytest.raises(ValueError):
            chunk_text("content", chunk_size=10, chunk_overlap=-1)

    @pytest.mark.unit
    def test_fixed_windows_without_terminators(self):
        """Without '.' or newline the text is cut at chunk_size and overlaps."""
        chunks = chunk_text("abcdefghij", chunk_size=4, chunk_overlap=1)
        assert chunks == ["abcd", "defg", "ghij"]

    @pytest.mark.unit
    def test_prefers_sentence_boundary(self):
        """A period past the overlap window ends the chunk."""
        text = "First sentence. Second sentence here."
        chunks = chunk_text(text, chunk_size=20, chunk_overlap=10)
        assert chunks[0] == "First sentence."

    @pytest.mark.unit
    def test_falls_back_to_newline(self):
        """Without an acceptable period, a newline ends the chunk."""
        chunks = chunk_text("line one\nline two continues", chunk_size=12, chunk_overlap=6)
        assert chunks[0] == "line one"

    @pytest.mark.unit
    def test_ignores_terminator_inside_overlap_window(self):
        """A period too early in the window does not shorten the chunk."""
        chunks = chunk_text("ab.cdefghijkl", chunk_size=10, chunk_overlap=3)
        assert chunks[0] == "ab.cdefghi"

    @pytest.mark.unit
    def test_dense_terminators_always_make_progress(self):
        """Chunking terminates and respects chunk_size with terminators everywhere."""
        text = "a." * 500
        chunks = chunk_text(text, chunk_size=10, chunk_overlap=8)
        assert chunks
        assert len(chunks) < len(text)
        assert all(len(chunk) <= 10 for chunk in chunks)
        assert chunks[-1].endswith("a.")

    @pytest.mark.unit
    def test_chunks_never_exceed_chunk_size(self, sample_policy_text):
        chunks = chunk_text(sample_policy_text, chunk_size=60, chunk_overlap=10)
        assert len(chunks) > 1
        assert all(len(chunk) <= 60 for chunk in chunks)


class TestChunkSpans:
    """Offsets recorded alongside chunk contents."""

    @pytest.mark.unit
    def test_span_offsets_skip_leading_whitespace(self):
        spans = chunk_spans("  hello", chunk_size=100, chunk_overlap=10)
        assert len(spans) == 1
        assert spans[0].content == "hello"
        assert (spans[0].start, spans[0].end) == (2, 7)

    @pytest.mark.unit
    def test_span_content_matches_source_slice(self, sample_policy_text):
        for span in chunk_spans(sample_policy_text, chunk_size=50, chunk_overlap=5):
            assert sample_policy_text[span.start : span.end] == span.content

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "chunk_size,chunk_overlap",
        [(40, 0), (50, 5), (60, 30), (25, 24), (10, 9)],
    )
    def test_spans_reconstruct_text_without_gaps(
        self, sample_policy_text, chunk_size, chunk_overlap
    ):
        """Dropping overlaps and joining spans gives back the text, whitespace aside."""
        for text in (sample_policy_text, "a." * 120 + "\nend of line\n" + "word " * 40):
            spans = chunk_spans(text, chunk_size=chunk_size, chunk_overlap=chunk_overlap)

            pieces = []
            covered_to = 0
            for span in spans:
                pieces.append(text[max(covered_to, span.start) : span.end])
                covered_to = max(covered_to, span.end)
            rebuilt = "".join(pieces)

            assert "".join(rebuilt.split()) == "".join(text.split())


class TestNormalizeText:
    """Boundary normalisation of extracted text and queries."""

    @pytest.mark.unit
    def test_strips_bom_and_whitespace(self):
        assert normalize_text("\ufeff  Article 1  ") == "Article 1"

    @pytest.mark.unit
    def test_unifies_line_endings(self):
        assert normalize_text("a\r\nb\rc") == "a\nb\nc"

    @pytest.mark.unit
    def test_nfkc_normalisation(self):
        assert normalize_text("\ufb01le") == "file"

    @pytest.mark.unit
    def test_none_and_empty(self):
        assert normalize_text(None) == ""
        assert normalize_text("") == ""


class TestPageForOffset:
    """Page lookup from recorded page start offsets."""

    @pytest.mark.unit
    def test_offsets_map_to_pages(self):
        extracted = ExtractedText(text="x" * 400, page_offsets=[0, 100, 250])
        assert extracted.page_for_offset(0) == 1
        assert extracted.page_for_offset(99) == 1
        assert extracted.page_for_offset(100) == 2
        assert extracted.page_for_offset(399) == 3

    @pytest.mark.unit
    def test_no_pages(self):
        assert ExtractedText(text="plain").page_for_offset(3) is None
