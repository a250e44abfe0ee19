"""FastAPI dependencies for the docqa API."""

import logging
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ....composition.container import (
    get_batch_service,
    get_ingestion_pipeline,
    get_query_service,
    get_store,
)
from ....config.settings import settings
from ....core.domain.exceptions import MissingAPIKeyError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = [
    "get_batch_service",
    "get_ingestion_pipeline",
    "get_query_service",
    "get_store",
    "require_api_key",
]


def require_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    """Require ``Authorization: Bearer <api_key>`` on protected routes.

    Raises:
        MissingAPIKeyError: The server has no API key configured (500).
        HTTPException: The client key is missing or wrong (401).
    """
    if not settings.api_key:
        logger.error("API_KEY is not configured; refusing protected request")
        raise MissingAPIKeyError(
            "API key is not configured on the server.", context={"setting": "api_key"}
        )

    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), settings.api_key.encode()
    ):
        logger.warning("Rejected request with missing or invalid API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API Key",
            headers={"WWW-Authenticate": "Bearer"},
        )
