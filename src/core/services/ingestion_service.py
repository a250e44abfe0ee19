"""Document ingestion pipeline: fetch, parse, chunk, embed, persist.

The document status is persisted before every stage runs, so a crash in the
middle of a run leaves a status that names the stage that was in progress.
"""

import logging

from ..domain import (
    Chunk,
    ChunkSpan,
    Document,
    DocumentStatus,
    ExtractedText,
    FetchedDocument,
    Metadata,
    validate_metadata,
)
from ..domain.exceptions import EmbeddingError, FetchError, ParseError, PipelineError
from ..domain.utils import chunk_spans
from ..ports.extractor_port import TextExtractorPort
from ..ports.fetcher_port import DocumentFetcherPort
from ..ports.search_port import VectorIndexPort
from ..ports.store_port import ChunkStorePort, DocumentStorePort
from .embedding_service import EmbeddingClient

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Drives a document through the ingestion status lifecycle."""

    def __init__(
        self,
        fetcher: DocumentFetcherPort,
        extractor: TextExtractorPort,
        embedding_client: EmbeddingClient,
        document_store: DocumentStorePort,
        chunk_store: ChunkStorePort,
        vector_index: VectorIndexPort | None = None,
        chunk_size: int = 1000,
        chunk_overlap: int = 100,
    ) -> None:
        """Initialize the pipeline.

        Args:
            fetcher: Retrieves raw bytes for a source locator.
            extractor: Turns bytes into text.
            embedding_client: Embeds chunk contents with retries.
            document_store: Persists documents and status changes.
            chunk_store: Persists embedded chunks.
            vector_index: Receives the persisted chunks when the vector index
                lives outside the chunk store.
            chunk_size: Maximum chunk size in characters.
            chunk_overlap: Characters shared by consecutive chunks.
        """
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError("chunk_size must be greater than chunk_overlap >= 0")
        self.fetcher = fetcher
        self.extractor = extractor
        self.embedding_client = embedding_client
        self.document_store = document_store
        self.chunk_store = chunk_store
        self.vector_index = vector_index
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def ingest(self, locator: str, metadata: Metadata | None = None) -> Document:
        """Fetch a document from ``locator`` and index it.

        Args:
            locator: URL, ``data:`` URI or local path of the document.
            metadata: Domain tags stored on the document and its chunks.

        Returns:
            The document in status ``indexed``.

        Raises:
            FetchError: The source could not be fetched; no document was created.
            ParseError: Text extraction failed; the document is ``failed``.
            PipelineError: Any other stage failed; the document is ``failed``.
        """
        clean_metadata = validate_metadata(metadata)

        logger.info("Fetching document from %s", locator)
        try:
            fetched = self.fetcher.fetch(locator)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(
                f"Failed to fetch document: {e}", cause=e, context={"locator": locator}
            ) from e

        return self._process(fetched, clean_metadata)

    def ingest_upload(
        self,
        content: bytes,
        content_type: str,
        filename: str,
        metadata: Metadata | None = None,
    ) -> Document:
        """Index a document whose bytes were uploaded directly.

        Behaves like ``ingest`` without the fetch step.
        """
        fetched = FetchedDocument(content=content, content_type=content_type, filename=filename)
        return self._process(fetched, validate_metadata(metadata))

    def _process(self, fetched: FetchedDocument, metadata: Metadata) -> Document:
        document = Document(
            filename=fetched.filename,
            content_type=fetched.content_type,
            source_url=fetched.source_url,
            metadata=metadata,
        )
        self.document_store.create_document(document)
        logger.info(
            "Document metadata saved (ID: %s). Starting processing pipeline.", document.doc_id
        )

        try:
            extracted = self._parse(document, fetched.content)
            spans = self._chunk(document, extracted)
            chunks = self._embed(document, spans, extracted)
            self._persist(document, chunks)
        except Exception as e:
            stage = document.status.value
            logger.error(
                "Failed to process document %s during '%s': %s", document.doc_id, stage, e
            )
            self._discard_chunks(document)
            self._mark_failed(document)
            if isinstance(e, PipelineError):
                e.extra_context.setdefault("document_id", document.doc_id)
                e.extra_context.setdefault("stage", stage)
                raise
            raise PipelineError(
                f"Failed to process document: {e}",
                cause=e,
                context={"document_id": document.doc_id, "stage": stage},
            ) from e

        logger.info("Document %s successfully processed and indexed.", document.doc_id)
        return document

    def _advance(self, document: Document, status: DocumentStatus) -> None:
        previous = document.status
        document.transition(status)
        try:
            self.document_store.update_status(document)
        except Exception:
            document.status = previous
            raise

    def _parse(self, document: Document, content: bytes) -> ExtractedText:
        self._advance(document, DocumentStatus.PARSING)
        try:
            extracted = self.extractor.extract_text(content, document.content_type)
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(
                f"Failed to parse document: {e}",
                cause=e,
                context={"content_type": document.content_type},
            ) from e
        logger.info("Document %s parsed. Text length: %d", document.doc_id, len(extracted.text))
        return extracted

    def _chunk(self, document: Document, extracted: ExtractedText) -> list[ChunkSpan]:
        self._advance(document, DocumentStatus.CHUNKING)
        spans = chunk_spans(extracted.text, self.chunk_size, self.chunk_overlap)
        logger.info("Document %s chunked into %d pieces.", document.doc_id, len(spans))
        return spans

    def _embed(
        self,
        document: Document,
        spans: list[ChunkSpan],
        extracted: ExtractedText,
    ) -> list[Chunk]:
        self._advance(document, DocumentStatus.EMBEDDING)

        # Sequential, in extraction order: chunk numbers must be reproducible
        chunks: list[Chunk] = []
        for number, span in enumerate(spans, start=1):
            try:
                embedding = self.embedding_client.embed(span.content)
            except EmbeddingError as e:
                logger.error(
                    "Failed to get embedding for chunk %d of document %s: %s",
                    number,
                    document.doc_id,
                    e,
                )
                continue

            chunks.append(
                Chunk(
                    document_id=document.doc_id,
                    chunk_number=number,
                    content=span.content,
                    embedding=embedding,
                    page_number=extracted.page_for_offset(span.start),
                    metadata=dict(document.metadata),
                )
            )

        skipped = len(spans) - len(chunks)
        if skipped:
            logger.warning(
                "Skipped %d of %d chunks of document %s after embedding failures",
                skipped,
                len(spans),
                document.doc_id,
            )
        return chunks

    def _persist(self, document: Document, chunks: list[Chunk]) -> None:
        if chunks:
            stored = self.chunk_store.insert_chunks(chunks)
            if self.vector_index is not None:
                self.vector_index.index_chunks(chunks)
            logger.info(
                "Successfully indexed %d chunks for document %s.", stored, document.doc_id
            )
        else:
            # Still indexed: an empty document simply yields no retrieval results
            logger.warning(
                "No chunks were successfully embedded and indexed for document: %s.",
                document.doc_id,
            )

        document.chunk_count = len(chunks)
        self._advance(document, DocumentStatus.INDEXED)

    def _discard_chunks(self, document: Document) -> None:
        # A failed document must not leave searchable chunks behind
        try:
            removed = self.chunk_store.delete_chunks(document.doc_id)
        except Exception as e:
            logger.error("Could not remove chunks of failed document %s: %s", document.doc_id, e)
            return
        if removed:
            logger.info("Removed %d chunks of failed document %s", removed, document.doc_id)

    def _mark_failed(self, document: Document) -> None:
        if document.status.is_terminal:
            return
        document.transition(DocumentStatus.FAILED)
        try:
            self.document_store.update_status(document)
        except Exception as e:
            logger.error("Could not persist failed status for document %s: %s", document.doc_id, e)
