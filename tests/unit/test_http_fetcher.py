"""Unit tests for HttpDocumentFetcher."""

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.adapters.outbound.fetch.http_fetcher import (
    DEFAULT_CONTENT_TYPE,
    HttpDocumentFetcher,
    guess_content_type,
    is_local_locator,
)
from src.core.domain.exceptions import FetchError, LocalFileAccessError

pytestmark = pytest.mark.unit


@pytest.fixture
def fetcher():
    with HttpDocumentFetcher(timeout=5) as instance:
        yield instance


@pytest.fixture
def local_fetcher():
    with HttpDocumentFetcher(timeout=5, allow_local_files=True) as instance:
        yield instance


def _response(content=b"%PDF-1.7", content_type="application/pdf"):
    response = MagicMock()
    response.content = content
    response.headers = {"Content-Type": content_type} if content_type else {}
    response.raise_for_status.return_value = None
    return response


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("policy.PDF", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("mail.eml", "message/rfc822"),
        ("scan.jpeg", "image/jpeg"),
        ("archive.zip", DEFAULT_CONTENT_TYPE),
        ("noextension", DEFAULT_CONTENT_TYPE),
    ],
)
def test_guess_content_type(filename, expected):
    assert guess_content_type(filename) == expected


class TestHttp:
    def test_uses_header_content_type(self, fetcher):
        with patch.object(fetcher.session, "get", return_value=_response()) as get:
            result = fetcher.fetch("https://example.com/docs/policy.pdf?sig=abc")

        get.assert_called_once_with("https://example.com/docs/policy.pdf?sig=abc", timeout=5)
        assert result.content == b"%PDF-1.7"
        assert result.content_type == "application/pdf"
        assert result.filename == "policy.pdf"
        assert result.source_url == "https://example.com/docs/policy.pdf?sig=abc"

    def test_strips_header_parameters(self, fetcher):
        response = _response(b"hi", "text/html; charset=utf-8")
        with patch.object(fetcher.session, "get", return_value=response):
            result = fetcher.fetch("https://example.com/page.html")

        assert result.content_type == "text/html"

    def test_generic_header_falls_back_to_extension(self, fetcher):
        response = _response(b"x", "application/octet-stream")
        with patch.object(fetcher.session, "get", return_value=response):
            result = fetcher.fetch("https://example.com/contract.docx")

        assert result.content_type == guess_content_type("contract.docx")

    def test_url_without_path_gets_generated_name(self, fetcher):
        with patch.object(fetcher.session, "get", return_value=_response()):
            result = fetcher.fetch("https://example.com")

        assert result.filename.startswith("document_")

    def test_http_error_raises_fetch_error(self, fetcher):
        response = _response()
        response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")
        with patch.object(fetcher.session, "get", return_value=response):
            with pytest.raises(FetchError) as exc_info:
                fetcher.fetch("https://example.com/missing.pdf")

        assert exc_info.value.extra_context["url"] == "https://example.com/missing.pdf"

    def test_connection_error_raises_fetch_error(self, fetcher):
        with patch.object(fetcher.session, "get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(FetchError):
                fetcher.fetch("http://localhost:1/x.pdf")


class TestDataUri:
    def test_base64_payload(self, fetcher):
        payload = base64.b64encode(b"Knee surgery is covered.").decode()

        result = fetcher.fetch(f"data:text/plain;base64,{payload}")

        assert result.content == b"Knee surgery is covered."
        assert result.content_type == "text/plain"
        assert result.source_url is None

    def test_percent_encoded_payload(self, fetcher):
        result = fetcher.fetch("data:,Hello%2C%20world")

        assert result.content == b"Hello, world"
        assert result.content_type == "text/plain"

    def test_malformed_uri(self, fetcher):
        with pytest.raises(FetchError):
            fetcher.fetch("data:text/plain;base64")

    def test_invalid_base64(self, fetcher):
        with pytest.raises(FetchError):
            fetcher.fetch("data:text/plain;base64,@@@")


class TestFiles:
    def test_plain_path(self, local_fetcher, tmp_path):
        path = tmp_path / "policy.txt"
        path.write_bytes(b"Section 1.")

        result = local_fetcher.fetch(str(path))

        assert result.content == b"Section 1."
        assert result.content_type == "text/plain"
        assert result.filename == "policy.txt"
        assert result.source_url is None

    def test_file_url(self, local_fetcher, tmp_path):
        path = tmp_path / "policy.html"
        path.write_bytes(b"<p>x</p>")

        result = local_fetcher.fetch(path.as_uri())

        assert result.content == b"<p>x</p>"
        assert result.content_type == "text/html"
        assert result.source_url == path.as_uri()

    def test_missing_file(self, local_fetcher, tmp_path):
        with pytest.raises(FetchError):
            local_fetcher.fetch(str(tmp_path / "absent.pdf"))

    def test_local_files_rejected_by_default(self, fetcher, tmp_path):
        path = tmp_path / "secret.txt"
        path.write_bytes(b"top secret")

        for locator in (str(path), path.as_uri()):
            with pytest.raises(LocalFileAccessError):
                fetcher.fetch(locator)


@pytest.mark.parametrize(
    "locator,expected",
    [
        ("/etc/passwd", True),
        ("relative/policy.pdf", True),
        ("file:///etc/passwd", True),
        ("C:\\docs\\policy.pdf", True),
        ("https://example.com/policy.pdf", False),
        ("data:text/plain,hi", False),
    ],
)
def test_is_local_locator(locator, expected):
    assert is_local_locator(locator) is expected


@pytest.mark.parametrize("locator", ["", "   "])
def test_empty_locator(fetcher, locator):
    with pytest.raises(FetchError):
        fetcher.fetch(locator)


def test_unsupported_scheme(fetcher):
    with pytest.raises(FetchError):
        fetcher.fetch("ftp://example.com/policy.pdf")
