"""SQLite-backed vector store gateway.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IVectorStoreProvider).
# Pattern: Adapter pattern; wraps SQLite behind the IVectorStoreProvider
#          ABC so the backing store can be swapped without touching the
#          ingestion or retrieval services.
#
# Database: ``data/ragchat.db`` by default (``SQLITE_DB_PATH``).
#
# Tables:
#   - ``documents``          one row per ingested text
#   - ``document_sections``  one row per embedded section, foreign key to
#                            ``documents`` with ON DELETE CASCADE
#
# Similarity search: the ``cosine_similarity`` SQL function is registered
# on the connection (computed with numpy) and the ``match_document_sections``
# query ranks every section against the query vector.  Embeddings are
# stored as JSON arrays.
#
# Uses ``aiosqlite`` for async I/O.  One connection is opened lazily and
# reused for the lifetime of the gateway; ``connect()`` is guarded by an
# asyncio.Lock so concurrent first use still opens exactly one.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path

import aiosqlite
import numpy as np
import structlog

from ragchat.interfaces.vector_store_provider import (
    DEFAULT_MATCH_COUNT,
    DEFAULT_MATCH_THRESHOLD,
    IVectorStoreProvider,
)
from ragchat.models.rag import Document, DocumentSummary, NewSection, QueryMatch, SetupStatus
from ragchat.utils.errors import (
    AmbiguousNameError,
    NotFoundError,
    StoreReadError,
    StoreSearchError,
    StoreWriteError,
)

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/ragchat.db")
_PROVIDER_NAME = "sqlite"

_SIMILARITY_FUNCTION = "cosine_similarity"
_REQUIRED_TABLES = ("documents", "document_sections")

_INTEGER_RE = re.compile(r"^\s*[+-]?\d+\s*$")

# ── Schema DDL ────────────────────────────────────────────────────────

_SETUP_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL CHECK (length(trim(name)) > 0),
    content     TEXT    NOT NULL,
    created_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE TABLE IF NOT EXISTS document_sections (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id  INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    content      TEXT    NOT NULL,
    embedding    TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_documents_name ON documents(name);
CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);
CREATE INDEX IF NOT EXISTS idx_sections_document ON document_sections(document_id);
"""

# ── DML ───────────────────────────────────────────────────────────────

_TABLES_SQL = "SELECT name FROM sqlite_master WHERE type = 'table' AND name IN (?, ?);"

_PROBE_FUNCTION_SQL = f"SELECT {_SIMILARITY_FUNCTION}('[1.0]', '[1.0]');"

_INSERT_DOCUMENT_SQL = "INSERT INTO documents (name, content) VALUES (?, ?);"

_INSERT_SECTION_SQL = """\
INSERT INTO document_sections (document_id, content, embedding)
VALUES (?, ?, ?);
"""

_STORED_DIMENSION_SQL = (
    "SELECT json_array_length(embedding) FROM document_sections LIMIT 1;"
)

_MATCH_DOCUMENT_SECTIONS_SQL = f"""\
SELECT document_id, content, similarity
FROM (
    SELECT id, document_id, content,
           {_SIMILARITY_FUNCTION}(embedding, ?) AS similarity
    FROM document_sections
)
WHERE similarity >= ?
ORDER BY similarity DESC, id ASC
LIMIT ?;
"""

_SELECT_DOCUMENT_SQL = "SELECT id, name, content, created_at FROM documents WHERE id = ?;"

_DOCUMENT_EXISTS_SQL = "SELECT 1 FROM documents WHERE id = ? LIMIT 1;"

_SELECT_IDS_BY_NAME_SQL = "SELECT id FROM documents WHERE name = ? ORDER BY id;"

_LIST_DOCUMENTS_SQL = """\
SELECT d.id, d.name, d.created_at, COUNT(s.id) AS section_count
FROM documents d
LEFT JOIN document_sections s ON s.document_id = d.id
GROUP BY d.id
ORDER BY d.created_at DESC, d.id DESC;
"""

_DELETE_DOCUMENT_SQL = "DELETE FROM documents WHERE id = ?;"


def _cosine_similarity(stored: str, query: str) -> float:
    """SQL function: cosine similarity of two JSON-encoded vectors.

    Raises ``ValueError`` on a dimension mismatch, which SQLite surfaces as
    an ``OperationalError`` for the calling statement.
    """
    a = np.asarray(json.loads(stored), dtype=np.float64)
    b = np.asarray(json.loads(query), dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"dimension mismatch: {a.shape[0]} != {b.shape[0]}")
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


class SQLiteVectorStore(IVectorStoreProvider):
    """Document/section store with cosine-similarity search on SQLite.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file, or ``":memory:"``.
    """

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = str(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._connect_lock = asyncio.Lock()

    async def __aenter__(self) -> SQLiteVectorStore:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the shared connection once; later calls are no-ops."""
        await self._connection()

    async def close(self) -> None:
        async with self._connect_lock:
            if self._conn is not None:
                await self._conn.close()
                self._conn = None
                logger.debug("sqlite_store_closed", path=self._db_path)

    async def _connection(self) -> aiosqlite.Connection:
        if self._conn is not None:
            return self._conn
        async with self._connect_lock:
            if self._conn is None:
                self._conn = await self._open()
        return self._conn

    async def _open(self) -> aiosqlite.Connection:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = await aiosqlite.connect(self._db_path)
            conn.row_factory = aiosqlite.Row
            # Cascade deletes depend on this; SQLite defaults it off per connection.
            await conn.execute("PRAGMA foreign_keys = ON;")
            await conn.create_function(
                _SIMILARITY_FUNCTION, 2, _cosine_similarity, deterministic=True
            )
        except (aiosqlite.Error, OSError) as exc:
            raise StoreReadError(
                message=f"Could not open database at {self._db_path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        logger.info("sqlite_store_connected", path=self._db_path)
        return conn

    async def check_setup(self) -> SetupStatus:
        """Report missing tables and an unregistered similarity function."""
        conn = await self._connection()
        missing: list[str] = []
        try:
            async with conn.execute(_TABLES_SQL, _REQUIRED_TABLES) as cursor:
                present = {row["name"] for row in await cursor.fetchall()}
        except aiosqlite.Error as exc:
            raise StoreReadError(
                message=f"Failed to inspect database schema: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        for table in _REQUIRED_TABLES:
            if table not in present:
                missing.append(f"{table} table")

        try:
            async with conn.execute(_PROBE_FUNCTION_SQL) as cursor:
                await cursor.fetchone()
        except aiosqlite.OperationalError:
            missing.append(f"{_SIMILARITY_FUNCTION} function")

        status = SetupStatus(missing=missing)
        logger.info("sqlite_setup_checked", missing=missing, path=self._db_path)
        return status

    async def setup(self) -> None:
        conn = await self._connection()
        try:
            await conn.executescript(_SETUP_SQL)
            await conn.commit()
        except aiosqlite.Error as exc:
            raise StoreWriteError(
                message=f"Failed to create database schema: {exc}",
                provider_name=_PROVIDER_NAME,
                stage="setup",
            ) from exc
        logger.info("sqlite_schema_ready", path=self._db_path)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert_document(self, name: str, content: str) -> int:
        if not name or not name.strip():
            raise StoreWriteError(
                message="Document name must not be empty",
                provider_name=_PROVIDER_NAME,
                stage="metadata_insert",
            )
        conn = await self._connection()
        try:
            cursor = await conn.execute(_INSERT_DOCUMENT_SQL, (name, content))
            document_id = cursor.lastrowid
            await cursor.close()
            await conn.commit()
        except aiosqlite.Error as exc:
            await self._rollback(conn)
            raise StoreWriteError(
                message=f"Failed to insert document metadata: {exc}",
                provider_name=_PROVIDER_NAME,
                stage="metadata_insert",
            ) from exc
        logger.info("document_inserted", document_id=document_id, name=name)
        return int(document_id)

    async def insert_sections(self, sections: list[NewSection]) -> None:
        if not sections:
            return

        document_id = sections[0].document_id
        dimensions = {len(s.embedding) for s in sections}
        if len(dimensions) > 1:
            raise StoreWriteError(
                message=f"Sections carry mixed embedding dimensions: {sorted(dimensions)}",
                provider_name=_PROVIDER_NAME,
                stage="bulk_insert",
                document_id=document_id,
            )
        dimension = dimensions.pop()

        conn = await self._connection()
        try:
            stored_dimension = await self._stored_dimension(conn)
        except aiosqlite.Error as exc:
            raise StoreWriteError(
                message=f"Failed to read stored embedding dimension: {exc}",
                provider_name=_PROVIDER_NAME,
                stage="bulk_insert",
                document_id=document_id,
            ) from exc
        if stored_dimension is not None and stored_dimension != dimension:
            raise StoreWriteError(
                message=(
                    f"Embedding dimension mismatch: store holds {stored_dimension}-dim "
                    f"vectors, sections carry {dimension}-dim vectors"
                ),
                provider_name=_PROVIDER_NAME,
                stage="bulk_insert",
                document_id=document_id,
            )

        rows = [(s.document_id, s.content, json.dumps(s.embedding)) for s in sections]
        try:
            await conn.executemany(_INSERT_SECTION_SQL, rows)
            await conn.commit()
        except aiosqlite.Error as exc:
            await self._rollback(conn)
            raise StoreWriteError(
                message=f"Failed to insert document sections: {exc}",
                provider_name=_PROVIDER_NAME,
                stage="bulk_insert",
                document_id=document_id,
            ) from exc
        logger.info(
            "sections_inserted",
            document_id=document_id,
            count=len(rows),
            dimension=dimension,
        )

    async def delete_document(self, document_id: int) -> None:
        conn = await self._connection()
        try:
            cursor = await conn.execute(_DELETE_DOCUMENT_SQL, (document_id,))
            deleted = cursor.rowcount
            await cursor.close()
            await conn.commit()
        except aiosqlite.Error as exc:
            await self._rollback(conn)
            raise StoreWriteError(
                message=f"Failed to delete document ID {document_id}: {exc}",
                provider_name=_PROVIDER_NAME,
                stage="delete",
                document_id=document_id,
            ) from exc
        logger.info("document_deleted", document_id=document_id, rows=deleted)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def search(
        self,
        query_embedding: list[float],
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        limit: int = DEFAULT_MATCH_COUNT,
    ) -> list[QueryMatch]:
        """Run the ``match_document_sections`` query."""
        if limit <= 0:
            return []
        if not query_embedding:
            raise StoreSearchError(
                message="Query embedding is empty",
                provider_name=_PROVIDER_NAME,
            )

        conn = await self._connection()
        try:
            stored_dimension = await self._stored_dimension(conn)
            if stored_dimension is not None and stored_dimension != len(query_embedding):
                raise StoreSearchError(
                    message=(
                        f"Embedding dimension mismatch: store holds {stored_dimension}-dim "
                        f"vectors, query has {len(query_embedding)} dims"
                    ),
                    provider_name=_PROVIDER_NAME,
                )
            async with conn.execute(
                _MATCH_DOCUMENT_SECTIONS_SQL,
                (json.dumps(list(query_embedding)), threshold, limit),
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreSearchError(
                message=f"Failed to search document sections: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        matches = [
            QueryMatch(
                document_id=row["document_id"],
                content=row["content"],
                similarity=row["similarity"],
            )
            for row in rows
        ]
        logger.debug(
            "search_complete",
            threshold=threshold,
            limit=limit,
            results=len(matches),
        )
        return matches

    async def get_document(self, document_id: int) -> Document:
        conn = await self._connection()
        try:
            async with conn.execute(_SELECT_DOCUMENT_SQL, (document_id,)) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreReadError(
                message=f"Failed to fetch document details for ID {document_id}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if row is None:
            raise NotFoundError(document_id, provider_name=_PROVIDER_NAME)
        return Document(
            id=row["id"],
            name=row["name"],
            content=row["content"],
            created_at=row["created_at"],
        )

    async def list_documents(self) -> list[DocumentSummary]:
        conn = await self._connection()
        try:
            async with conn.execute(_LIST_DOCUMENTS_SQL) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreReadError(
                message=f"Failed to list documents: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        return [
            DocumentSummary(
                id=row["id"],
                name=row["name"],
                created_at=row["created_at"],
                section_count=row["section_count"],
            )
            for row in rows
        ]

    async def find_by_name_or_id(self, identifier: str) -> int:
        conn = await self._connection()

        if _INTEGER_RE.match(identifier):
            document_id = int(identifier)
            try:
                async with conn.execute(_DOCUMENT_EXISTS_SQL, (document_id,)) as cursor:
                    row = await cursor.fetchone()
            except aiosqlite.Error as exc:
                raise StoreReadError(
                    message=f"Error verifying document ID {document_id}: {exc}",
                    provider_name=_PROVIDER_NAME,
                ) from exc
            if row is None:
                raise NotFoundError(document_id, provider_name=_PROVIDER_NAME)
            return document_id

        try:
            async with conn.execute(_SELECT_IDS_BY_NAME_SQL, (identifier,)) as cursor:
                ids = [row["id"] for row in await cursor.fetchall()]
        except aiosqlite.Error as exc:
            raise StoreReadError(
                message=f'Error searching for document by name "{identifier}": {exc}',
                provider_name=_PROVIDER_NAME,
            ) from exc
        if not ids:
            raise NotFoundError(identifier, provider_name=_PROVIDER_NAME)
        if len(ids) > 1:
            raise AmbiguousNameError(identifier, ids, provider_name=_PROVIDER_NAME)
        return ids[0]

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _stored_dimension(conn: aiosqlite.Connection) -> int | None:
        async with conn.execute(_STORED_DIMENSION_SQL) as cursor:
            row = await cursor.fetchone()
        return None if row is None else int(row[0])

    @staticmethod
    async def _rollback(conn: aiosqlite.Connection) -> None:
        try:
            await conn.rollback()
        except aiosqlite.Error as exc:
            logger.warning("sqlite_rollback_failed", error=str(exc))
