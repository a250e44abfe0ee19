"""
Pytest configuration and shared fixtures.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from src.core.domain import Chunk, Document, ExtractedText, RankedResult
from src.core.ports.embedding_port import EmbeddingPort
from src.core.ports.extractor_port import TextExtractorPort
from src.core.ports.store_port import ChunkStorePort, DocumentStorePort


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (API wiring, no network)")
    config.addinivalue_line("markers", "slow: Slow tests (network, large data)")


class InMemoryDocumentStore(DocumentStorePort):
    """Document store that records every persisted status."""

    def __init__(self):
        self.documents: dict[str, Document] = {}
        self.status_history: dict[str, list[str]] = {}

    def create_document(self, document):
        self.documents[document.doc_id] = document
        self.status_history[document.doc_id] = [document.status.value]

    def update_status(self, document):
        self.documents[document.doc_id] = document
        self.status_history[document.doc_id].append(document.status.value)

    def find_document(self, doc_id):
        return self.documents.get(doc_id)


class InMemoryChunkStore(ChunkStorePort):
    """Chunk store keeping chunks in insertion order."""

    def __init__(self):
        self.chunks: dict[str, Chunk] = {}
        self.insert_calls = 0

    def insert_chunks(self, chunks):
        self.insert_calls += 1
        for chunk in chunks:
            self.chunks[chunk.chunk_id] = chunk
        return len(chunks)

    def find_chunks(self, chunk_ids):
        return [self.chunks[chunk_id] for chunk_id in chunk_ids if chunk_id in self.chunks]

    def delete_chunks(self, document_id):
        doomed = [cid for cid, chunk in self.chunks.items() if chunk.document_id == document_id]
        for chunk_id in doomed:
            del self.chunks[chunk_id]
        return len(doomed)


class StaticExtractor(TextExtractorPort):
    """Extractor returning a fixed text."""

    def __init__(self, text, page_offsets=None):
        self.result = ExtractedText(text=text, page_offsets=page_offsets or [])

    def extract_text(self, content, content_type):
        return self.result


class FakeEmbedder(EmbeddingPort):
    """Deterministic embedder; texts containing a marker always fail."""

    def __init__(self, fail_marker=None, dimension=4):
        self.fail_marker = fail_marker
        self.dimension = dimension
        self.calls: list[str] = []

    def embed(self, text):
        self.calls.append(text)
        if self.fail_marker and self.fail_marker in text:
            raise RuntimeError("embedding backend unavailable")
        return [float(len(text) % 7 + 1)] + [0.5] * (self.dimension - 1)


@pytest.fixture
def document_store():
    return InMemoryDocumentStore()


@pytest.fixture
def chunk_store():
    return InMemoryChunkStore()


@pytest.fixture
def static_extractor():
    """Factory for extractors returning a fixed text."""
    return StaticExtractor


@pytest.fixture
def fake_embedder():
    """Factory for deterministic embedders."""
    return FakeEmbedder


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    delays: list[float] = []

    def sleep(seconds):
        delays.append(seconds)

    sleep.delays = delays
    return sleep


@pytest.fixture
def make_chunk():
    """Factory for chunks with sensible defaults."""

    def factory(chunk_id, document_id="doc-1", content="text", page_number=None, **metadata):
        return Chunk(
            chunk_id=chunk_id,
            document_id=document_id,
            chunk_number=1,
            content=content,
            embedding=[0.1, 0.2],
            page_number=page_number,
            metadata=metadata,
        )

    return factory


@pytest.fixture
def ranked():
    """Build a ranked list from ids, ranks 1..n."""

    def factory(*ids):
        return [RankedResult(item_id=item_id, rank=rank) for rank, item_id in enumerate(ids, 1)]

    return factory


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test data."""
    dir_path = Path(tempfile.mkdtemp(prefix="docqa_test_"))
    yield dir_path
    if dir_path.exists():
        shutil.rmtree(dir_path)


@pytest.fixture
def sample_policy_text():
    """A short insurance policy excerpt."""
    return (
        "Section 1. Coverage.\n"
        "The policy covers knee surgery after a waiting period of 24 months. "
        "Pre-existing conditions are excluded during the first 36 months.\n"
        "Section 2. Claims.\n"
        "Claims must be submitted within 30 days of discharge."
    )
