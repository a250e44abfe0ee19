"""Query entry point: validate, retrieve, answer."""

import logging

from ..domain import Metadata, StructuredAnswer, validate_metadata
from ..domain.exceptions import EmbeddingError, EmptyQueryError, QueryTooLongError
from ..domain.utils import normalize_text
from .answer_service import AnswerSynthesizer
from .embedding_service import EmbeddingClient
from .retrieval_service import HybridRetriever

logger = logging.getLogger(__name__)

DOCUMENT_ID_FILTER = "document_id"


class QueryService:
    """Answers questions over the indexed documents."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        retriever: HybridRetriever,
        synthesizer: AnswerSynthesizer,
        max_query_length: int = 1000,
        top_per_signal: int = 10,
        top_fused: int = 10,
    ) -> None:
        self.embedding_client = embedding_client
        self.retriever = retriever
        self.synthesizer = synthesizer
        self.max_query_length = max_query_length
        self.top_per_signal = top_per_signal
        self.top_fused = top_fused

    def handle_query(
        self,
        query: str,
        document_id: str | None = None,
        metadata_filters: Metadata | None = None,
    ) -> StructuredAnswer:
        """Answer ``query``, optionally scoped to one document and to metadata.

        Args:
            query: The user question.
            document_id: Restrict retrieval to this document.
            metadata_filters: Equality filters on chunk metadata, combined with AND.

        Returns:
            The structured answer.

        Raises:
            EmptyQueryError: The query is blank.
            QueryTooLongError: The query exceeds ``max_query_length``.
            InvalidMetadataError: A filter value is not a scalar.
            GenerationFormatError: The model output could not be parsed.
        """
        clean_query = normalize_text(query)
        if not clean_query:
            raise EmptyQueryError("Query cannot be empty")
        if len(clean_query) > self.max_query_length:
            raise QueryTooLongError(
                f"Query exceeds {self.max_query_length} characters",
                context={"length": len(clean_query), "max_length": self.max_query_length},
            )

        filters = validate_metadata(metadata_filters, what="metadata_filters")
        if document_id:
            filters[DOCUMENT_ID_FILTER] = document_id

        logger.info("Starting query for %r (document: %s)", clean_query, document_id or "any")

        try:
            query_vector = self.embedding_client.embed(clean_query)
        except EmbeddingError as e:
            logger.warning("Query embedding failed, continuing with lexical search only: %s", e)
            query_vector = None

        chunks = self.retriever.retrieve(
            clean_query,
            query_vector,
            filters or None,
            top_per_signal=self.top_per_signal,
            top_fused=self.top_fused,
        )
        result = self.synthesizer.answer(clean_query, chunks)
        logger.info("Query completed for %r", clean_query)
        return result
