from collections.abc import Callable, Iterable
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Any

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from legalflow.config.settings import Settings
from legalflow.logging.logger import Log
from legalflow.sessions.base import BaseSessionStore, check_merge_fields
from legalflow.sessions.exceptions import SessionExistsError
from legalflow.sessions.models import DocumentMetadata, Session, SessionStatus, utcnow

_COLUMNS = (
    "id",
    "file_name",
    "file_size",
    "uploaded_at",
    "status",
    "mime_type",
    "file_path",
    "extracted_text",
    "document_metadata",
    "analysis_result",
    "extraction_time_ms",
    "last_error",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS legal_sessions (
    id TEXT PRIMARY KEY,
    file_name TEXT NOT NULL,
    file_size BIGINT NOT NULL,
    uploaded_at TIMESTAMPTZ NOT NULL,
    status TEXT NOT NULL,
    mime_type TEXT NOT NULL DEFAULT '',
    file_path TEXT,
    extracted_text TEXT,
    document_metadata JSONB,
    analysis_result JSONB,
    extraction_time_ms INTEGER,
    last_error TEXT
)
"""


def build_conninfo(settings: Settings) -> str:
    """Build a libpq connection string from settings."""
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


def _to_db(column: str, value: Any) -> Any:
    if value is None:
        return None
    if column == "status":
        return SessionStatus(value).value
    if column == "document_metadata":
        return Jsonb(asdict(value))
    if column == "analysis_result":
        return Jsonb(value)
    return value


def _from_row(row: dict[str, Any]) -> Session:
    metadata = row["document_metadata"]
    return Session(
        id=row["id"],
        file_name=row["file_name"],
        file_size=row["file_size"],
        uploaded_at=row["uploaded_at"],
        status=SessionStatus(row["status"]),
        mime_type=row["mime_type"],
        file_path=row["file_path"],
        extracted_text=row["extracted_text"],
        document_metadata=DocumentMetadata(**metadata) if metadata else None,
        analysis_result=row["analysis_result"],
        extraction_time_ms=row["extraction_time_ms"],
        last_error=row["last_error"],
    )


class PostgresSessionStore(BaseSessionStore):
    """Session store backed by one ``legal_sessions`` row per session."""

    def __init__(
        self,
        pool: AsyncConnectionPool,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._pool = pool
        self._clock = clock

    @classmethod
    async def open(cls, settings: Settings) -> "PostgresSessionStore":
        """Open a connection pool and make sure the table exists."""
        pool = AsyncConnectionPool(
            build_conninfo(settings), min_size=1, max_size=10, open=False
        )
        await pool.open()
        store = cls(pool)
        await store.ensure_schema()
        return store

    async def ensure_schema(self) -> None:
        async with self._pool.connection() as conn:
            await conn.execute(_SCHEMA)

    async def close(self) -> None:
        await self._pool.close()

    async def create(self, session: Session) -> Session:
        values = [_to_db(column, getattr(session, column)) for column in _COLUMNS]
        query = sql.SQL(
            "INSERT INTO legal_sessions ({columns}) VALUES ({values}) "
            "ON CONFLICT (id) DO NOTHING RETURNING id"
        ).format(
            columns=sql.SQL(", ").join(map(sql.Identifier, _COLUMNS)),
            values=sql.SQL(", ").join(sql.Placeholder() * len(_COLUMNS)),
        )
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, values)
                row = await cur.fetchone()
        if row is None:
            raise SessionExistsError(f"Session {session.id} already exists")
        return session

    async def get(self, session_id: str) -> Session | None:
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    "SELECT * FROM legal_sessions WHERE id = %s", (session_id,)
                )
                row = await cur.fetchone()
        return _from_row(row) if row is not None else None

    async def merge(self, session_id: str, **updates: Any) -> Session | None:
        check_merge_fields(updates)
        if not updates:
            return await self.get(session_id)
        return await self._update(session_id, updates, expected=None)

    async def transition(
        self,
        session_id: str,
        expected: Iterable[SessionStatus],
        new_status: SessionStatus,
        **updates: Any,
    ) -> Session | None:
        check_merge_fields(updates)
        return await self._update(
            session_id,
            {**updates, "status": new_status},
            expected=[status.value for status in expected],
        )

    async def _update(
        self,
        session_id: str,
        updates: dict[str, Any],
        expected: list[str] | None,
    ) -> Session | None:
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in updates
        )
        params: list[Any] = [_to_db(column, value) for column, value in updates.items()]
        params.append(session_id)
        condition = sql.SQL("id = %s")
        if expected is not None:
            condition = sql.SQL("id = %s AND status = ANY(%s)")
            params.append(expected)
        query = sql.SQL("UPDATE legal_sessions SET {} WHERE {} RETURNING *").format(
            assignments, condition
        )
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
        return _from_row(row) if row is not None else None

    async def delete(self, session_id: str) -> bool:
        async with self._pool.connection() as conn:
            cur = await conn.execute(
                "DELETE FROM legal_sessions WHERE id = %s", (session_id,)
            )
            return cur.rowcount > 0

    async def list_ids(self) -> list[str]:
        async with self._pool.connection() as conn:
            cur = await conn.execute("SELECT id FROM legal_sessions")
            rows = await cur.fetchall()
        return [row[0] for row in rows]

    async def count(self) -> int:
        async with self._pool.connection() as conn:
            cur = await conn.execute("SELECT count(*) FROM legal_sessions")
            row = await cur.fetchone()
        return int(row[0]) if row else 0

    async def evict_older_than(self, max_age_seconds: float) -> int:
        cutoff = self._clock() - timedelta(seconds=max_age_seconds)
        async with self._pool.connection() as conn:
            cur = await conn.execute(
                "DELETE FROM legal_sessions WHERE uploaded_at < %s", (cutoff,)
            )
            evicted = cur.rowcount
        if evicted:
            Log.info(f"Evicted {evicted} sessions older than {max_age_seconds}s")
        return evicted
