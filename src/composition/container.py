"""Composition root wiring adapters to the application services."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..adapters.outbound.embedding.gemini_embedding import (
    DOCUMENT_TASK,
    QUERY_TASK,
    GeminiEmbeddingAdapter,
)
from ..adapters.outbound.fetch.http_fetcher import HttpDocumentFetcher
from ..adapters.outbound.llm.gemini_adapter import GeminiAdapter
from ..adapters.outbound.parsers.text_extractor import DocumentTextExtractor
from ..adapters.outbound.sqlite_adapter import SQLiteAdapter
from ..adapters.outbound.vector_store.qdrant_adapter import QdrantAdapter
from ..config.settings import settings
from ..core.ports.search_port import VectorIndexPort
from ..core.services.answer_service import AnswerSynthesizer
from ..core.services.batch_service import BatchRunService
from ..core.services.embedding_service import EmbeddingClient
from ..core.services.ingestion_service import IngestionPipeline
from ..core.services.query_service import QueryService
from ..core.services.retrieval_service import HybridRetriever

logger = logging.getLogger(__name__)


@lru_cache
def get_store() -> SQLiteAdapter:
    logger.info("Initializing SQLiteAdapter at %s...", settings.database_path)
    settings.ensure_directories()
    return SQLiteAdapter(settings.database_path)


@lru_cache
def get_vector_index() -> VectorIndexPort:
    if settings.use_qdrant:
        logger.info("Initializing QdrantAdapter (collection %s)...", settings.qdrant_collection)
        return QdrantAdapter(
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key,
            collection_name=settings.qdrant_collection,
            dimension=settings.embedding_dimension,
        )
    return get_store()


@lru_cache
def get_llm() -> GeminiAdapter:
    logger.info("Initializing GeminiAdapter...")
    return GeminiAdapter(api_key=settings.google_api_key, model=settings.llm_model)


def _embedding_client(task_type: str) -> EmbeddingClient:
    embedder = GeminiEmbeddingAdapter(
        api_key=settings.google_api_key,
        model_name=settings.embedding_model,
        task_type=task_type,
    )
    return EmbeddingClient(
        embedder,
        retries=settings.embedding_retries,
        base_delay=settings.embedding_retry_delay,
    )


@lru_cache
def get_document_embedding_client() -> EmbeddingClient:
    return _embedding_client(DOCUMENT_TASK)


@lru_cache
def get_query_embedding_client() -> EmbeddingClient:
    return _embedding_client(QUERY_TASK)


@lru_cache
def get_ingestion_pipeline(allow_local_files: bool = False) -> IngestionPipeline:
    """Pipeline for ingestion; only the CLI may let it read local files."""
    logger.info("Initializing IngestionPipeline (local files: %s)...", allow_local_files)
    store = get_store()
    vector_index = get_vector_index()
    return IngestionPipeline(
        fetcher=HttpDocumentFetcher(
            timeout=settings.fetch_timeout, allow_local_files=allow_local_files
        ),
        extractor=DocumentTextExtractor(ocr=get_llm()),
        embedding_client=get_document_embedding_client(),
        document_store=store,
        chunk_store=store,
        vector_index=None if vector_index is store else vector_index,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
    )


@lru_cache
def get_retriever() -> HybridRetriever:
    logger.info("Initializing HybridRetriever...")
    store = get_store()
    return HybridRetriever(
        vector_index=get_vector_index(),
        lexical_index=store,
        chunk_store=store,
        rrf_k=settings.rrf_k,
    )


@lru_cache
def get_query_service() -> QueryService:
    logger.info("Initializing QueryService...")
    return QueryService(
        embedding_client=get_query_embedding_client(),
        retriever=get_retriever(),
        synthesizer=AnswerSynthesizer(get_llm(), temperature=settings.generation_temperature),
        max_query_length=settings.max_query_length,
        top_per_signal=settings.top_per_signal,
        top_fused=settings.top_fused,
    )


@lru_cache
def get_batch_service(allow_local_files: bool = False) -> BatchRunService:
    logger.info("Initializing BatchRunService...")
    return BatchRunService(get_ingestion_pipeline(allow_local_files), get_query_service())
