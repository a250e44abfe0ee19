"""Query endpoint for asking questions over indexed documents."""

import logging

from fastapi import APIRouter, Depends

from ..deps import get_query_service, require_api_key
from ..models import ErrorResponse, QueryRequest, QueryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["query"], dependencies=[Depends(require_api_key)])


@router.post(
    "/query",
    response_model=QueryResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"description": "Missing or invalid API key"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        502: {"model": ErrorResponse, "description": "Model returned unusable output"},
    },
)
def ask_query(request: QueryRequest) -> QueryResponse:
    """Answer a question from the indexed documents.

    Args:
        request: The question, optional document scope and metadata filters.

    Returns:
        QueryResponse with the answer, reasoning, conditions and citations.
    """
    result = get_query_service().handle_query(
        request.query,
        document_id=request.document_id,
        metadata_filters=request.metadata_filters,
    )
    return QueryResponse(**result.to_dict())
