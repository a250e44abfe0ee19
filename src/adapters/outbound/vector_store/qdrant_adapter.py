"""Qdrant vector index for production deployment.

Only vectors and filterable payload live in Qdrant; chunk contents stay in
the chunk store and are loaded by id after fusion.
"""

import logging
import uuid
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from qdrant_client import QdrantClient

from ....core.domain import Chunk, Metadata, RankedResult
from ....core.domain.exceptions import VectorStoreConnectionError, VectorStoreQueryError
from ....core.ports.search_port import VectorIndexPort

logger = logging.getLogger(__name__)

# Constants
UPSERT_BATCH_SIZE = 100
EMBEDDING_DIMENSION = 3072  # gemini-embedding-001 default dimension


def _point_id(chunk_id: str) -> str:
    """Qdrant point ids must be UUIDs or unsigned integers."""
    return str(uuid.UUID(hex=chunk_id)) if len(chunk_id) == 32 else str(uuid.UUID(chunk_id))


class QdrantAdapter(VectorIndexPort):
    """Qdrant-based vector index for document chunks."""

    def __init__(
        self,
        url: str,
        api_key: str,
        collection_name: str = "document_chunks",
        dimension: int = EMBEDDING_DIMENSION,
    ) -> None:
        """Initialize the Qdrant vector index.

        Args:
            url: Qdrant cluster URL.
            api_key: Qdrant API key.
            collection_name: Collection holding the chunk vectors.
            dimension: Embedding vector length.
        """
        self.url = url
        self.api_key = api_key
        self.collection_name = collection_name
        self.dimension = dimension
        self._client: QdrantClient | None = None

    def _get_client(self) -> "QdrantClient":
        """Get or create Qdrant client connection."""
        if not self._client:
            try:
                from qdrant_client import QdrantClient

                self._client = QdrantClient(
                    url=self.url,
                    api_key=self.api_key or None,
                )
                logger.info("Connected to Qdrant at: %s", self.url)

                self._ensure_collection(self._client)
            except Exception as e:
                self._client = None
                raise VectorStoreConnectionError(
                    f"Failed to connect to Qdrant at {self.url}",
                    cause=e,
                    context={"url": self.url},
                ) from e

        return self._client

    def _ensure_collection(self, client: "QdrantClient") -> None:
        """Ensure the chunk collection and its payload indexes exist."""
        from qdrant_client.http import models

        existing = {c.name for c in client.get_collections().collections}
        if self.collection_name not in existing:
            logger.info(f"Creating collection {self.collection_name}")
            client.create_collection(
                collection_name=self.collection_name,
                vectors_config=models.VectorParams(
                    size=self.dimension,
                    distance=models.Distance.COSINE,
                ),
            )

        # 'document_id' scopes queries to a single document
        client.create_payload_index(
            collection_name=self.collection_name,
            field_name="document_id",
            field_schema=models.PayloadSchemaType.KEYWORD,
        )

    def index_chunks(self, chunks: list[Chunk]) -> None:
        """Upsert chunk vectors with their document id and metadata as payload."""
        if not chunks:
            return

        from qdrant_client.models import PointStruct

        client = self._get_client()

        points = [
            PointStruct(
                id=_point_id(chunk.chunk_id),
                vector=chunk.embedding,
                payload={
                    **chunk.metadata,
                    "chunk_id": chunk.chunk_id,
                    "document_id": chunk.document_id,
                    "chunk_number": chunk.chunk_number,
                },
            )
            for chunk in chunks
        ]

        try:
            for i in range(0, len(points), UPSERT_BATCH_SIZE):
                client.upsert(
                    collection_name=self.collection_name,
                    points=points[i : i + UPSERT_BATCH_SIZE],
                )
        except Exception as e:
            raise VectorStoreQueryError(
                f"Failed to upsert chunks into {self.collection_name}: {e}",
                cause=e,
                context={"collection": self.collection_name, "count": len(points)},
            ) from e

        logger.info("Added %d chunks to %s", len(points), self.collection_name)

    @staticmethod
    def _build_filter(filters: Metadata | None) -> Any:
        from qdrant_client.models import (
            FieldCondition,
            Filter,
            IsNullCondition,
            MatchValue,
            PayloadField,
            Range,
        )

        if not filters:
            return None

        conditions: list[Any] = []
        for key, value in filters.items():
            if value is None:
                conditions.append(IsNullCondition(is_null=PayloadField(key=key)))
            elif isinstance(value, float):
                conditions.append(FieldCondition(key=key, range=Range(gte=value, lte=value)))
            else:
                conditions.append(FieldCondition(key=key, match=MatchValue(value=value)))
        return Filter(must=conditions)

    def vector_search(
        self,
        vector: list[float],
        filters: Metadata | None = None,
        top_k: int = 10,
    ) -> list[RankedResult]:
        """Search for the chunks nearest to ``vector``.

        Args:
            vector: Query embedding.
            filters: Metadata equality filters combined with AND.
            top_k: Number of results to return.

        Returns:
            Ranked chunk ids, best first.
        """
        client = self._get_client()

        try:
            # query_points (qdrant-client 1.10+ API)
            results = client.query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=top_k,
                query_filter=self._build_filter(filters),
                with_payload=["chunk_id"],
            )
        except Exception as e:
            raise VectorStoreQueryError(
                f"Qdrant query failed: {e}",
                cause=e,
                context={"collection": self.collection_name},
            ) from e

        ranked = []
        for hit in results.points:
            payload = hit.payload or {}
            chunk_id = payload.get("chunk_id") or uuid.UUID(str(hit.id)).hex
            ranked.append(RankedResult(item_id=chunk_id, rank=len(ranked) + 1, score=hit.score))
        return ranked
