"""Text extraction for PDF, Word, e-mail, HTML, plain text and images."""

import io
import logging
from email import policy
from email.parser import BytesParser

from bs4 import BeautifulSoup
from docx import Document as DocxDocument
from pypdf import PdfReader

from ....core.domain import ExtractedText
from ....core.domain.exceptions import ParseError
from ....core.domain.utils import normalize_text
from ....core.ports.extractor_port import OCRPort, TextExtractorPort

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC = "application/msword"
EML = "message/rfc822"
HTML = "text/html"

PART_SEPARATOR = "\n\n"


def _join_parts(parts: list[str]) -> str:
    return PART_SEPARATOR.join(part for part in parts if part)


def html_to_text(markup: str) -> str:
    """Visible text of an HTML document, one block per line."""
    soup = BeautifulSoup(markup, "lxml")
    for element in soup(["script", "style", "noscript"]):
        element.decompose()
    return soup.get_text(separator="\n", strip=True)


class DocumentTextExtractor(TextExtractorPort):
    """Extracts normalised text from document bytes by content type."""

    def __init__(self, ocr: OCRPort | None = None) -> None:
        """Initialize the extractor.

        Args:
            ocr: Reads text out of images. Without it, images and unknown
                content types cannot be parsed.
        """
        self.ocr = ocr

    def extract_text(self, content: bytes, content_type: str) -> ExtractedText:
        """Extract text according to ``content_type``.

        Raises:
            ParseError: Extraction failed; the content type is in the context.
        """
        content_type = (content_type or "").split(";")[0].strip().lower()
        logger.info("Attempting to parse file of type: %s", content_type)

        try:
            if content_type == PDF:
                return self._parse_pdf(content)
            if content_type in (DOCX, DOC):
                return ExtractedText(text=self._parse_docx(content))
            if content_type == EML:
                return ExtractedText(text=self._parse_eml(content))
            if content_type == HTML:
                return ExtractedText(text=normalize_text(html_to_text(self._decode(content))))
            if content_type.startswith("text/"):
                return ExtractedText(text=normalize_text(self._decode(content)))
            if not content_type.startswith("image/"):
                logger.warning(
                    "Unsupported file type: %s. Attempting OCR as a fallback.", content_type
                )
            return ExtractedText(text=self._perform_ocr(content, content_type))
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(
                f"Failed to parse document: {e}",
                cause=e,
                context={"content_type": content_type},
            ) from e

    @staticmethod
    def _decode(content: bytes) -> str:
        return content.decode("utf-8", errors="replace")

    def _parse_pdf(self, content: bytes) -> ExtractedText:
        reader = PdfReader(io.BytesIO(content))
        parts: list[str] = []
        page_offsets: list[int] = []
        offset = 0

        for page in reader.pages:
            text = normalize_text(page.extract_text() or "")
            page_offsets.append(offset)
            if text:
                parts.append(text)
                offset += len(text) + len(PART_SEPARATOR)

        full_text = _join_parts(parts)
        logger.info(
            "Extracted %d characters from PDF (%d pages)", len(full_text), len(reader.pages)
        )
        return ExtractedText(text=full_text, page_offsets=page_offsets)

    def _parse_docx(self, content: bytes) -> str:
        document = DocxDocument(io.BytesIO(content))
        parts = [normalize_text(paragraph.text) for paragraph in document.paragraphs]

        for table in document.tables:
            for row in table.rows:
                row_text = " | ".join(cell.text.strip() for cell in row.cells)
                parts.append(normalize_text(row_text.strip(" |")))

        full_text = _join_parts(parts)
        logger.info(
            "Extracted %d characters from DOCX (%d paragraphs)",
            len(full_text),
            len(document.paragraphs),
        )
        return full_text

    def _parse_eml(self, content: bytes) -> str:
        message = BytesParser(policy=policy.default).parsebytes(content)

        plain = message.get_body(preferencelist=("plain",))
        if plain is not None:
            text = plain.get_content()
            if text.strip():
                return normalize_text(text)

        html = message.get_body(preferencelist=("html",))
        if html is not None:
            return normalize_text(html_to_text(html.get_content()))
        return ""

    def _perform_ocr(self, content: bytes, content_type: str) -> str:
        if self.ocr is None:
            raise ParseError(
                "No OCR engine configured for this content type",
                context={"content_type": content_type},
            )
        logger.info("Attempting OCR on document...")
        text = normalize_text(self.ocr.extract_image_text(content, content_type))
        logger.info("OCR completed successfully.")
        return text
