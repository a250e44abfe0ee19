"""Gemini embedding adapter using the google-genai SDK."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from google import genai

from ....core.domain.exceptions import (
    EmbeddingAPIError,
    EmbeddingRateLimitError,
    MissingAPIKeyError,
)
from ....core.ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)

DOCUMENT_TASK = "RETRIEVAL_DOCUMENT"
QUERY_TASK = "RETRIEVAL_QUERY"


class GeminiEmbeddingAdapter(EmbeddingPort):
    """Embeds one text per call with a Gemini embedding model.

    Retries are left to ``EmbeddingClient``.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-embedding-001",
        task_type: str = DOCUMENT_TASK,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: Google AI API key.
            model_name: Embedding model.
            task_type: ``RETRIEVAL_DOCUMENT`` for chunks, ``RETRIEVAL_QUERY`` for queries.
        """
        self.api_key = api_key
        self.model_name = model_name
        self.task_type = task_type
        self._client = None

    def _get_client(self) -> "genai.Client":
        """Get or create the genai client."""
        if self._client is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "Google API key not set. Set GOOGLE_API_KEY in your .env file.",
                    context={"setting": "google_api_key"},
                )

            from google import genai

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def embed(self, text: str) -> list[float]:
        client = self._get_client()

        try:
            result = client.models.embed_content(
                model=self.model_name,
                contents=[text],
                config={"task_type": self.task_type},
            )
        except Exception as e:
            error_msg = str(e).lower()
            if "quota" in error_msg or "rate" in error_msg or "429" in error_msg:
                raise EmbeddingRateLimitError(
                    f"Embedding rate limit reached: {e}", cause=e, context={"model": self.model_name}
                ) from e
            raise EmbeddingAPIError(
                f"Embedding request failed: {e}", cause=e, context={"model": self.model_name}
            ) from e

        if not result or not result.embeddings or not result.embeddings[0].values:
            raise EmbeddingAPIError(
                "Embedding API returned no vector", context={"model": self.model_name}
            )
        return list(result.embeddings[0].values)
