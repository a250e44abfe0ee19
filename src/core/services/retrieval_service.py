"""Hybrid chunk retrieval: semantic and lexical search fused with RRF."""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from ...common.exception_handler import log_exception
from ..domain import Chunk, Metadata, RankedResult
from ..domain.exceptions import RetrievalSignalError
from ..ports.search_port import LexicalIndexPort, VectorIndexPort
from ..ports.store_port import ChunkStorePort
from .rank_fusion import DEFAULT_RRF_K, fuse_ranks

logger = logging.getLogger(__name__)


class HybridRetriever:
    """Retrieves chunks relevant to a query from two independent signals."""

    def __init__(
        self,
        vector_index: VectorIndexPort,
        lexical_index: LexicalIndexPort,
        chunk_store: ChunkStorePort,
        rrf_k: int = DEFAULT_RRF_K,
    ) -> None:
        """Initialize the retriever.

        Args:
            vector_index: Semantic (embedding) search.
            lexical_index: Keyword / full-text search.
            chunk_store: Loads chunk contents for fused ids.
            rrf_k: Reciprocal Rank Fusion constant.
        """
        self.vector_index = vector_index
        self.lexical_index = lexical_index
        self.chunk_store = chunk_store
        self.rrf_k = rrf_k

    def search(
        self,
        query_text: str,
        query_vector: list[float] | None,
        filters: Metadata | None = None,
        top_per_signal: int = 10,
        top_fused: int = 10,
    ) -> list[str]:
        """Return fused chunk ids, best first.

        Args:
            query_text: Text for the lexical signal.
            query_vector: Embedding for the semantic signal. ``None`` skips it.
            filters: Metadata equality filters applied by both signals.
            top_per_signal: Results requested from each signal.
            top_fused: Maximum number of fused ids returned.

        Returns:
            At most ``top_fused`` chunk ids, ordered by descending RRF score.
            Empty when both signals return nothing.
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            semantic = (
                executor.submit(
                    self._run_signal,
                    "semantic",
                    lambda: self.vector_index.vector_search(query_vector, filters, top_per_signal),
                )
                if query_vector is not None
                else None
            )
            lexical = executor.submit(
                self._run_signal,
                "lexical",
                lambda: self.lexical_index.lexical_search(query_text, filters, top_per_signal),
            )
            semantic_results = semantic.result() if semantic is not None else []
            lexical_results = lexical.result()

        logger.info(
            "Retrieved %d semantic and %d lexical results",
            len(semantic_results),
            len(lexical_results),
        )

        fused = fuse_ranks([semantic_results, lexical_results], k=self.rrf_k)
        return [entry.item_id for entry in fused[:top_fused]]

    def retrieve(
        self,
        query_text: str,
        query_vector: list[float] | None,
        filters: Metadata | None = None,
        top_per_signal: int = 10,
        top_fused: int = 10,
    ) -> list[Chunk]:
        """Return the fused chunks themselves, in fused order.

        Ids the chunk store no longer knows are skipped.
        """
        chunk_ids = self.search(query_text, query_vector, filters, top_per_signal, top_fused)
        if not chunk_ids:
            return []

        by_id = {chunk.chunk_id: chunk for chunk in self.chunk_store.find_chunks(chunk_ids)}
        ordered = [by_id[chunk_id] for chunk_id in chunk_ids if chunk_id in by_id]
        if len(ordered) < len(chunk_ids):
            logger.warning(
                "%d retrieved chunk ids were not found in the chunk store",
                len(chunk_ids) - len(ordered),
            )
        return ordered

    def _run_signal(
        self, name: str, search: Callable[[], list[RankedResult]]
    ) -> list[RankedResult]:
        try:
            return search()
        except Exception as e:
            error = RetrievalSignalError(
                f"{name.capitalize()} search failed: {e}", cause=e, context={"signal": name}
            )
            log_exception(error, logger, level=logging.WARNING)
            return []
