"""Unit tests for DocumentTextExtractor."""

import io
from email.message import EmailMessage
from unittest.mock import MagicMock

import pytest
from docx import Document as DocxDocument

from src.adapters.outbound.parsers.text_extractor import (
    DOCX,
    DocumentTextExtractor,
    html_to_text,
)
from src.core.domain.exceptions import ParseError

pytestmark = pytest.mark.unit


@pytest.fixture
def extractor():
    return DocumentTextExtractor()


def test_plain_text_is_normalised(extractor):
    result = extractor.extract_text("\ufeffWaiting period: 24 months\r\n".encode(), "text/plain")

    assert result.text == "Waiting period: 24 months"
    assert result.page_offsets == []


def test_content_type_parameters_are_ignored(extractor):
    result = extractor.extract_text(b"hello", "Text/Plain; charset=utf-8")
    assert result.text == "hello"


def test_html_drops_scripts_and_styles(extractor):
    markup = (
        b"<html><head><style>p {color: red}</style><script>var x = 1;</script></head>"
        b"<body><h1>Policy</h1><p>Knee surgery is covered.</p></body></html>"
    )

    result = extractor.extract_text(markup, "text/html")

    assert result.text == "Policy\nKnee surgery is covered."


def test_html_to_text_helper():
    assert html_to_text("<p>a</p><p>b</p>") == "a\nb"


def test_docx_paragraphs_and_tables(extractor):
    document = DocxDocument()
    document.add_paragraph("Section 1. Coverage")
    document.add_paragraph("Knee surgery is covered.")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Waiting period"
    table.rows[0].cells[1].text = "24 months"
    buffer = io.BytesIO()
    document.save(buffer)

    result = extractor.extract_text(buffer.getvalue(), DOCX)

    assert result.text == (
        "Section 1. Coverage\n\nKnee surgery is covered.\n\nWaiting period | 24 months"
    )


class TestEmail:
    def test_prefers_plain_body(self, extractor):
        message = EmailMessage()
        message["Subject"] = "Claim"
        message.set_content("Claims must be submitted within 30 days.")
        message.add_alternative("<p>HTML version</p>", subtype="html")

        result = extractor.extract_text(message.as_bytes(), "message/rfc822")

        assert result.text == "Claims must be submitted within 30 days."

    def test_html_only_body(self, extractor):
        message = EmailMessage()
        message.set_content("<p>Only <b>HTML</b> here</p>", subtype="html")

        result = extractor.extract_text(message.as_bytes(), "message/rfc822")

        assert "Only" in result.text
        assert "<p>" not in result.text


class TestOcr:
    def test_images_go_to_ocr(self):
        ocr = MagicMock()
        ocr.extract_image_text.return_value = "  Scanned claim form  "

        result = DocumentTextExtractor(ocr=ocr).extract_text(b"\x89PNG", "image/png")

        ocr.extract_image_text.assert_called_once_with(b"\x89PNG", "image/png")
        assert result.text == "Scanned claim form"

    def test_unknown_types_fall_back_to_ocr(self):
        ocr = MagicMock()
        ocr.extract_image_text.return_value = "text"

        result = DocumentTextExtractor(ocr=ocr).extract_text(b"\x00", "application/x-unknown")

        assert result.text == "text"

    def test_without_ocr_engine_raises(self, extractor):
        with pytest.raises(ParseError) as exc_info:
            extractor.extract_text(b"\x89PNG", "image/png")
        assert exc_info.value.extra_context["content_type"] == "image/png"

    def test_ocr_failure_is_wrapped(self):
        ocr = MagicMock()
        ocr.extract_image_text.side_effect = RuntimeError("model unavailable")

        with pytest.raises(ParseError) as exc_info:
            DocumentTextExtractor(ocr=ocr).extract_text(b"\x89PNG", "image/png")
        assert isinstance(exc_info.value.cause, RuntimeError)


def test_corrupt_pdf_raises_parse_error(extractor):
    with pytest.raises(ParseError) as exc_info:
        extractor.extract_text(b"not a pdf", "application/pdf")
    assert exc_info.value.extra_context["content_type"] == "application/pdf"
