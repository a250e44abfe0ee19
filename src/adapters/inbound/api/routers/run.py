"""Batch run endpoint: ingest one document and answer several questions."""

import logging

from fastapi import APIRouter, Depends

from ..deps import get_batch_service, require_api_key
from ..models import ErrorResponse, RunRequest, RunResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["run"], dependencies=[Depends(require_api_key)])


@router.post(
    "/run",
    response_model=RunResponse,
    responses={
        401: {"description": "Missing or invalid API key"},
        422: {"model": ErrorResponse, "description": "Document could not be parsed"},
        500: {"model": ErrorResponse, "description": "Document could not be indexed"},
        502: {"model": ErrorResponse, "description": "Document could not be fetched"},
    },
)
def run_batch(request: RunRequest) -> RunResponse:
    """Ingest ``documents`` and answer every question against it."""
    answers = get_batch_service().run(request.documents, request.questions)
    return RunResponse(answers=answers)
