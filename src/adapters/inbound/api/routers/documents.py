"""Document ingestion and status endpoints."""

import json
import logging

from fastapi import APIRouter, File, Form, UploadFile, status

from .....adapters.outbound.fetch.http_fetcher import DEFAULT_CONTENT_TYPE, guess_content_type
from .....core.domain import Document
from .....core.domain.exceptions import DocumentNotFoundError, InvalidMetadataError
from ..deps import get_ingestion_pipeline, get_store
from ..models import DocumentIngestRequest, DocumentResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/documents", tags=["documents"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    422: {"model": ErrorResponse, "description": "Document could not be parsed"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def _to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(**document.to_dict())


def _parse_metadata(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidMetadataError(
            f"metadata must be a JSON object: {e}", cause=e, context={"metadata": raw[:200]}
        ) from e


@router.post(
    "/upload",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def upload_document(
    file: UploadFile = File(..., description="Document to ingest"),
    metadata: str | None = Form(None, description="JSON object of domain tags"),
) -> DocumentResponse:
    """Upload a document and index it.

    Args:
        file: The uploaded file.
        metadata: Optional JSON object string with domain tags.

    Returns:
        DocumentResponse with the document id and final status.
    """
    filename = file.filename or "upload"
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if not content_type or content_type == DEFAULT_CONTENT_TYPE:
        content_type = guess_content_type(filename)

    content = file.file.read()
    logger.info("Received upload %s (%s, %d bytes)", filename, content_type, len(content))

    document = get_ingestion_pipeline().ingest_upload(
        content, content_type, filename, _parse_metadata(metadata)
    )
    return _to_response(document)


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**ERROR_RESPONSES, 502: {"model": ErrorResponse, "description": "Fetch failed"}},
)
def ingest_document(request: DocumentIngestRequest) -> DocumentResponse:
    """Fetch a document from a URL and index it."""
    document = get_ingestion_pipeline().ingest(request.url, request.metadata)
    return _to_response(document)


@router.get(
    "/{doc_id}",
    response_model=DocumentResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown document"}},
)
def get_document(doc_id: str) -> DocumentResponse:
    """Look up the status of a document."""
    document = get_store().find_document(doc_id)
    if document is None:
        raise DocumentNotFoundError(
            f"Document not found: {doc_id}", context={"document_id": doc_id}
        )
    return _to_response(document)
