"""Unit tests for QdrantAdapter.

The Qdrant client is replaced by a mock so no cluster is needed.
"""

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from qdrant_client.models import FieldCondition, Filter, IsNullCondition

from src.adapters.outbound.vector_store.qdrant_adapter import (
    UPSERT_BATCH_SIZE,
    QdrantAdapter,
    _point_id,
)
from src.core.domain import Chunk
from src.core.domain.exceptions import VectorStoreQueryError


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def adapter(client):
    store = QdrantAdapter(url="https://qdrant.example.com", api_key="key", dimension=2)
    store._client = client
    return store


@pytest.mark.unit
def test_point_id_accepts_hex_and_dashed_ids():
    value = uuid.uuid4()
    assert _point_id(value.hex) == str(value)
    assert _point_id(str(value)) == str(value)


class TestBuildFilter:
    @pytest.mark.unit
    def test_no_filters(self):
        assert QdrantAdapter._build_filter(None) is None
        assert QdrantAdapter._build_filter({}) is None

    @pytest.mark.unit
    def test_conditions_are_anded(self):
        result = QdrantAdapter._build_filter(
            {"document_id": "doc-1", "year": 2024, "score": 0.5, "region": None}
        )

        assert isinstance(result, Filter)
        assert len(result.must) == 4
        document, year, score, region = result.must
        assert isinstance(document, FieldCondition)
        assert document.match.value == "doc-1"
        assert year.match.value == 2024
        assert score.range.gte == score.range.lte == 0.5
        assert isinstance(region, IsNullCondition)


class TestIndexChunks:
    @pytest.mark.unit
    def test_upserts_in_batches_with_payload(self, adapter, client):
        chunks = [
            Chunk(
                document_id="doc-1",
                chunk_number=n,
                content="text",
                embedding=[0.1, 0.2],
                metadata={"domain": "insurance"},
            )
            for n in range(1, UPSERT_BATCH_SIZE + 2)
        ]

        adapter.index_chunks(chunks)

        assert client.upsert.call_count == 2
        first_batch = client.upsert.call_args_list[0].kwargs["points"]
        assert len(first_batch) == UPSERT_BATCH_SIZE
        assert first_batch[0].payload == {
            "domain": "insurance",
            "chunk_id": chunks[0].chunk_id,
            "document_id": "doc-1",
            "chunk_number": 1,
        }

    @pytest.mark.unit
    def test_empty_chunks_do_nothing(self, adapter, client):
        adapter.index_chunks([])
        client.upsert.assert_not_called()

    @pytest.mark.unit
    def test_upsert_failure_raises(self, adapter, client):
        client.upsert.side_effect = RuntimeError("timeout")
        chunk = Chunk(document_id="d", chunk_number=1, content="x", embedding=[0.1, 0.2])

        with pytest.raises(VectorStoreQueryError):
            adapter.index_chunks([chunk])


class TestVectorSearch:
    @pytest.mark.unit
    def test_ranks_hits_in_order(self, adapter, client):
        client.query_points.return_value = SimpleNamespace(
            points=[
                SimpleNamespace(id=str(uuid.uuid4()), payload={"chunk_id": "c1"}, score=0.9),
                SimpleNamespace(id=str(uuid.uuid4()), payload={"chunk_id": "c2"}, score=0.7),
            ]
        )

        results = adapter.vector_search([0.1, 0.2], {"document_id": "doc-1"}, top_k=2)

        assert [(r.item_id, r.rank, r.score) for r in results] == [
            ("c1", 1, 0.9),
            ("c2", 2, 0.7),
        ]
        kwargs = client.query_points.call_args.kwargs
        assert kwargs["limit"] == 2
        assert kwargs["query_filter"].must[0].match.value == "doc-1"

    @pytest.mark.unit
    def test_query_failure_raises(self, adapter, client):
        client.query_points.side_effect = RuntimeError("bad request")

        with pytest.raises(VectorStoreQueryError):
            adapter.vector_search([0.1, 0.2])
