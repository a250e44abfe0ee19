"""Document fetcher for HTTP(S) URLs, data: URIs and local files."""

import base64
import logging
import time
from pathlib import Path
from typing import Any
from urllib.parse import unquote, unquote_to_bytes, urlparse

import requests

from ....core.domain import FetchedDocument
from ....core.domain.exceptions import FetchError, LocalFileAccessError
from ....core.ports.fetcher_port import DocumentFetcherPort

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".eml": "message/rfc822",
    ".html": "text/html",
    ".htm": "text/html",
    ".txt": "text/plain",
    ".md": "text/plain",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


def guess_content_type(filename: str) -> str:
    """Content type for ``filename`` based on its extension."""
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), DEFAULT_CONTENT_TYPE)


def is_local_locator(locator: str) -> bool:
    """Whether ``locator`` names a file on this machine rather than a remote source."""
    scheme = urlparse(locator.strip()).scheme.lower()
    # A one-letter scheme is a Windows drive letter
    return scheme == "file" or len(scheme) <= 1


def _bare_content_type(header: str | None) -> str:
    return (header or "").split(";")[0].strip().lower()


class HttpDocumentFetcher(DocumentFetcherPort):
    """Fetches raw document bytes from a locator."""

    def __init__(self, timeout: float = REQUEST_TIMEOUT, allow_local_files: bool = False) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Timeout for HTTP requests, in seconds.
            allow_local_files: Accept ``file://`` URLs and filesystem paths.
                Only trusted callers such as the CLI enable this.
        """
        self.timeout = timeout
        self.allow_local_files = allow_local_files
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "docqa/1.0"})

    def __enter__(self) -> "HttpDocumentFetcher":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close session."""
        self.close()

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()

    def fetch(self, locator: str) -> FetchedDocument:
        """Fetch the document at ``locator``.

        Supports ``http(s)://`` URLs and ``data:`` URIs, plus ``file://`` URLs
        and plain filesystem paths when local files are allowed.

        Raises:
            FetchError: The document could not be retrieved.
            LocalFileAccessError: A local locator was given while local files
                are not allowed.
        """
        if not locator or not locator.strip():
            raise FetchError("Document locator cannot be empty")

        locator = locator.strip()
        scheme = urlparse(locator).scheme.lower()

        if scheme in ("http", "https"):
            return self._fetch_http(locator)
        if scheme == "data":
            return self._fetch_data_uri(locator)
        if scheme != "file" and len(scheme) > 1:
            raise FetchError(f"Unsupported URL scheme: {scheme}", context={"locator": locator})
        if not self.allow_local_files:
            raise LocalFileAccessError(
                "Local file locators are not accepted", context={"locator": locator}
            )
        if scheme == "file":
            return self._fetch_file(Path(unquote(urlparse(locator).path)), locator)
        return self._fetch_file(Path(locator), None)

    def _fetch_http(self, url: str) -> FetchedDocument:
        logger.info("Downloading document from %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(
                f"Failed to download document: {exc}", cause=exc, context={"url": url}
            ) from exc

        filename = Path(unquote(urlparse(url).path)).name or f"document_{int(time.time() * 1000)}"
        content_type = _bare_content_type(response.headers.get("Content-Type"))
        if not content_type or content_type == DEFAULT_CONTENT_TYPE:
            content_type = guess_content_type(filename)

        logger.info("Downloaded %d bytes (%s) from %s", len(response.content), content_type, url)
        return FetchedDocument(
            content=response.content,
            content_type=content_type,
            filename=filename,
            source_url=url,
        )

    def _fetch_data_uri(self, uri: str) -> FetchedDocument:
        header, separator, payload = uri[len("data:") :].partition(",")
        if not separator:
            raise FetchError("Malformed data URI: missing ','", context={"locator": uri[:64]})

        params = header.split(";")
        is_base64 = "base64" in (param.strip().lower() for param in params[1:])
        content_type = params[0].strip().lower() or "text/plain"

        try:
            content = base64.b64decode(payload, validate=True) if is_base64 else unquote_to_bytes(payload)
        except ValueError as exc:
            raise FetchError(
                f"Malformed data URI payload: {exc}", cause=exc, context={"locator": uri[:64]}
            ) from exc

        return FetchedDocument(
            content=content,
            content_type=content_type,
            filename=f"document_{int(time.time() * 1000)}",
            source_url=None,
        )

    def _fetch_file(self, path: Path, source_url: str | None) -> FetchedDocument:
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FetchError(
                f"Failed to read document file: {exc}", cause=exc, context={"path": str(path)}
            ) from exc

        return FetchedDocument(
            content=content,
            content_type=guess_content_type(path.name),
            filename=path.name,
            source_url=source_url,
        )
