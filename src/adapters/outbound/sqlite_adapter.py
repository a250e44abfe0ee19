"""SQLite adapter for documents, chunks, full-text and vector search."""

import json
import logging
import re
import sqlite3
from pathlib import Path
from typing import Any

import numpy as np

from ...core.domain import Chunk, Document, DocumentStatus, Metadata, RankedResult
from ...core.domain.exceptions import InvalidMetadataError, StorageError
from ...core.ports.search_port import LexicalIndexPort, VectorIndexPort
from ...core.ports.store_port import ChunkStorePort, DocumentStorePort

logger = logging.getLogger(__name__)

DOCUMENT_ID_FILTER = "document_id"

# Metadata keys are embedded in a JSON path, so quotes and backslashes are refused
_SAFE_METADATA_KEY = re.compile(r'^[^"\\]+$')
_SEARCH_TERM = re.compile(r"\w+", re.UNICODE)

_CHUNK_COLUMNS = (
    "chunk_id, document_id, chunk_number, content, embedding, page_number, section_title, metadata"
)


def _fts_query(text: str) -> str | None:
    """Turn free text into an FTS5 query matching any of its terms."""
    terms = dict.fromkeys(term.lower() for term in _SEARCH_TERM.findall(text))
    if not terms:
        return None
    return " OR ".join(f'"{term}"' for term in terms)


def _filter_clause(filters: Metadata | None, alias: str = "c") -> tuple[str, list[Any]]:
    """Build an AND-ed equality WHERE fragment for chunk filters."""
    clauses: list[str] = []
    params: list[Any] = []

    for key, value in (filters or {}).items():
        if key == DOCUMENT_ID_FILTER:
            clauses.append(f"{alias}.document_id = ?")
            params.append(value)
            continue
        if not _SAFE_METADATA_KEY.match(key):
            raise InvalidMetadataError(
                f"Unsupported metadata filter key: {key!r}", context={"key": key}
            )
        path = f'$."{key}"'
        if value is None:
            clauses.append(f"json_type({alias}.metadata, ?) = 'null'")
            params.append(path)
        else:
            clauses.append(f"json_extract({alias}.metadata, ?) = ?")
            params.extend([path, value])

    return (" AND ".join(clauses), params)


class SQLiteAdapter(DocumentStorePort, ChunkStorePort, VectorIndexPort, LexicalIndexPort):
    """SQLite-backed store and search index.

    Embeddings are kept in the chunk rows and searched by brute-force cosine
    similarity. Full-text search uses an FTS5 table ranked by bm25.
    """

    def __init__(self, db_path: str | Path = "data/docqa.db") -> None:
        """Initialize the SQLite adapter.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_db()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Initialize the database schema."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS documents (
                        doc_id TEXT PRIMARY KEY,
                        filename TEXT NOT NULL,
                        content_type TEXT NOT NULL,
                        source_url TEXT,
                        metadata TEXT NOT NULL DEFAULT '{}',
                        status TEXT NOT NULL,
                        chunk_count INTEGER NOT NULL DEFAULT 0,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)

                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS chunks (
                        chunk_id TEXT PRIMARY KEY,
                        document_id TEXT NOT NULL REFERENCES documents(doc_id),
                        chunk_number INTEGER NOT NULL,
                        content TEXT NOT NULL,
                        embedding BLOB NOT NULL,
                        page_number INTEGER,
                        section_title TEXT,
                        metadata TEXT NOT NULL DEFAULT '{}'
                    )
                """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_chunks_document
                    ON chunks(document_id, chunk_number)
                """)

                cursor.execute("""
                    CREATE VIRTUAL TABLE IF NOT EXISTS chunks_fts
                    USING fts5(content, chunk_id UNINDEXED)
                """)

                conn.commit()

        except sqlite3.Error as e:
            logger.error(f"Failed to initialize database: {e}")
            raise StorageError(
                f"Failed to initialize database: {e}", cause=e, context={"path": str(self.db_path)}
            ) from e

    def ping(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            with self._connect() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    # Document store

    def create_document(self, document: Document) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO documents (doc_id, filename, content_type, source_url, metadata,
                                           status, chunk_count, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        document.doc_id,
                        document.filename,
                        document.content_type,
                        document.source_url,
                        json.dumps(document.metadata),
                        document.status.value,
                        document.chunk_count,
                        document.created_at,
                        document.updated_at,
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to insert document {document.doc_id}: {e}")
            raise StorageError(
                f"Failed to insert document: {e}", cause=e, context={"document_id": document.doc_id}
            ) from e

    def update_status(self, document: Document) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    UPDATE documents SET status = ?, chunk_count = ?, updated_at = ?
                    WHERE doc_id = ?
                    """,
                    (
                        document.status.value,
                        document.chunk_count,
                        document.updated_at,
                        document.doc_id,
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to update status of document {document.doc_id}: {e}")
            raise StorageError(
                f"Failed to update document status: {e}",
                cause=e,
                context={"document_id": document.doc_id, "status": document.status.value},
            ) from e

    def find_document(self, doc_id: str) -> Document | None:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT * FROM documents WHERE doc_id = ?", (doc_id,)).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to load document {doc_id}: {e}")
            raise StorageError(
                f"Failed to load document: {e}", cause=e, context={"document_id": doc_id}
            ) from e

        if row is None:
            return None
        return Document(
            doc_id=row["doc_id"],
            filename=row["filename"],
            content_type=row["content_type"],
            source_url=row["source_url"],
            metadata=json.loads(row["metadata"]),
            status=DocumentStatus(row["status"]),
            chunk_count=row["chunk_count"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # Chunk store

    def insert_chunks(self, chunks: list[Chunk]) -> int:
        if not chunks:
            return 0

        rows = [
            (
                chunk.chunk_id,
                chunk.document_id,
                chunk.chunk_number,
                chunk.content,
                np.asarray(chunk.embedding, dtype=np.float32).tobytes(),
                chunk.page_number,
                chunk.section_title,
                json.dumps(chunk.metadata),
            )
            for chunk in chunks
        ]
        try:
            with self._connect() as conn:
                conn.executemany(
                    f"INSERT INTO chunks ({_CHUNK_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)", rows
                )
                conn.executemany(
                    "INSERT INTO chunks_fts (content, chunk_id) VALUES (?, ?)",
                    [(chunk.content, chunk.chunk_id) for chunk in chunks],
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to insert {len(chunks)} chunks: {e}")
            raise StorageError(
                f"Failed to insert chunks: {e}",
                cause=e,
                context={"document_id": chunks[0].document_id, "count": len(chunks)},
            ) from e
        return len(rows)

    def find_chunks(self, chunk_ids: list[str]) -> list[Chunk]:
        if not chunk_ids:
            return []

        placeholders = ", ".join("?" for _ in chunk_ids)
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    f"SELECT {_CHUNK_COLUMNS} FROM chunks WHERE chunk_id IN ({placeholders})",
                    list(chunk_ids),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to load chunks: {e}")
            raise StorageError(f"Failed to load chunks: {e}", cause=e) from e

        return [
            Chunk(
                chunk_id=row["chunk_id"],
                document_id=row["document_id"],
                chunk_number=row["chunk_number"],
                content=row["content"],
                embedding=np.frombuffer(row["embedding"], dtype=np.float32).tolist(),
                page_number=row["page_number"],
                section_title=row["section_title"],
                metadata=json.loads(row["metadata"]),
            )
            for row in rows
        ]

    def delete_chunks(self, document_id: str) -> int:
        try:
            with self._connect() as conn:
                conn.execute(
                    "DELETE FROM chunks_fts WHERE chunk_id IN "
                    "(SELECT chunk_id FROM chunks WHERE document_id = ?)",
                    (document_id,),
                )
                removed = conn.execute(
                    "DELETE FROM chunks WHERE document_id = ?", (document_id,)
                ).rowcount
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to delete chunks of document {document_id}: {e}")
            raise StorageError(
                f"Failed to delete chunks: {e}", cause=e, context={"document_id": document_id}
            ) from e
        return removed

    # Vector index

    def index_chunks(self, chunks: list[Chunk]) -> None:
        # Embeddings are already stored in the chunk rows by insert_chunks
        return None

    def vector_search(
        self,
        vector: list[float],
        filters: Metadata | None = None,
        top_k: int = 10,
    ) -> list[RankedResult]:
        where, params = _filter_clause(filters)
        sql = "SELECT c.chunk_id, c.embedding FROM chunks c"
        if where:
            sql += f" WHERE {where}"

        try:
            with self._connect() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Vector search failed: {e}")
            raise StorageError(f"Vector search failed: {e}", cause=e) from e

        query = np.asarray(vector, dtype=np.float32)
        query_norm = np.linalg.norm(query)
        if not rows or query_norm == 0:
            return []

        ids: list[str] = []
        vectors: list[np.ndarray] = []
        for row in rows:
            embedding = np.frombuffer(row["embedding"], dtype=np.float32)
            if embedding.shape != query.shape:
                logger.warning(
                    f"Skipping chunk {row['chunk_id']}: embedding dimension "
                    f"{embedding.shape[0]} != {query.shape[0]}"
                )
                continue
            ids.append(row["chunk_id"])
            vectors.append(embedding)

        if not vectors:
            return []

        matrix = np.vstack(vectors)
        norms = np.linalg.norm(matrix, axis=1)
        norms[norms == 0] = 1.0
        scores = (matrix @ query) / (norms * query_norm)

        # Stable sort keeps insertion order for equal scores
        order = np.argsort(-scores, kind="stable")[:top_k]
        return [
            RankedResult(item_id=ids[index], rank=rank, score=float(scores[index]))
            for rank, index in enumerate(order, start=1)
        ]

    # Lexical index

    def lexical_search(
        self,
        text: str,
        filters: Metadata | None = None,
        top_k: int = 10,
    ) -> list[RankedResult]:
        match = _fts_query(text)
        if match is None:
            return []

        where, params = _filter_clause(filters)
        sql = """
            SELECT c.chunk_id, bm25(chunks_fts) AS score
            FROM chunks_fts JOIN chunks c ON c.chunk_id = chunks_fts.chunk_id
            WHERE chunks_fts MATCH ?
        """
        if where:
            sql += f" AND {where}"
        sql += " ORDER BY score LIMIT ?"

        try:
            with self._connect() as conn:
                rows = conn.execute(sql, [match, *params, top_k]).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Full-text search failed: {e}")
            raise StorageError(f"Full-text search failed: {e}", cause=e) from e

        # bm25() is lower-is-better; flip the sign so larger scores rank higher
        return [
            RankedResult(item_id=row["chunk_id"], rank=rank, score=-float(row["score"]))
            for rank, row in enumerate(rows, start=1)
        ]
