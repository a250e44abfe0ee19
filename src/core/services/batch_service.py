"""Batch runs: ingest one document, then answer a list of questions about it."""

import logging

from ..domain import DocumentStatus
from ..domain.exceptions import PipelineError
from .ingestion_service import IngestionPipeline
from .query_service import QueryService

logger = logging.getLogger(__name__)


class BatchRunService:
    """Answers several questions against a freshly ingested document."""

    def __init__(self, ingestion: IngestionPipeline, query_service: QueryService) -> None:
        self.ingestion = ingestion
        self.query_service = query_service

    def run(self, document_url: str, questions: list[str]) -> list[str]:
        """Ingest ``document_url`` and answer each question scoped to it.

        Args:
            document_url: Locator of the document to ingest.
            questions: Questions to answer, in order.

        Returns:
            One answer per question, in the same order. A question that fails
            yields ``"Error answering question: <message>"`` in its slot.

        Raises:
            FetchError: The document could not be fetched.
            PipelineError: The document did not reach ``indexed``.
        """
        logger.info("Starting batch run for document URL: %s", document_url)
        document = self.ingestion.ingest(document_url)

        if document.status is not DocumentStatus.INDEXED:
            raise PipelineError(
                f"Document processing failed or is incomplete for URL: {document_url}. "
                f"Current status: {document.status.value}",
                context={"document_id": document.doc_id, "stage": document.status.value},
            )
        logger.info(
            "Document %s indexed. Answering %d questions.", document.doc_id, len(questions)
        )

        answers: list[str] = []
        for question in questions:
            try:
                result = self.query_service.handle_query(question, document_id=document.doc_id)
                answers.append(result.answer)
            except Exception as e:
                logger.error(
                    "Failed to answer question %r for document %s: %s",
                    question,
                    document.doc_id,
                    e,
                )
                answers.append(f"Error answering question: {e}")

        logger.info("All questions processed for batch run on document %s", document.doc_id)
        return answers
