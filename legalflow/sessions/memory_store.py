from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from legalflow.logging.logger import Log
from legalflow.sessions.base import BaseSessionStore, check_merge_fields
from legalflow.sessions.exceptions import SessionExistsError
from legalflow.sessions.models import Session, SessionStatus, utcnow


class InMemorySessionStore(BaseSessionStore):
    """Process-local session store.

    Every method body runs without awaiting, so each operation is atomic with
    respect to other coroutines on the same event loop.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._sessions: dict[str, Session] = {}
        self._clock = clock

    async def create(self, session: Session) -> Session:
        if session.id in self._sessions:
            raise SessionExistsError(f"Session {session.id} already exists")
        self._sessions[session.id] = session
        return session

    async def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def merge(self, session_id: str, **updates: Any) -> Session | None:
        check_merge_fields(updates)
        current = self._sessions.get(session_id)
        if current is None:
            return None
        updated = replace(current, **updates)
        self._sessions[session_id] = updated
        return updated

    async def transition(
        self,
        session_id: str,
        expected: Iterable[SessionStatus],
        new_status: SessionStatus,
        **updates: Any,
    ) -> Session | None:
        check_merge_fields(updates)
        current = self._sessions.get(session_id)
        if current is None or current.status not in set(expected):
            return None
        updated = replace(current, status=new_status, **updates)
        self._sessions[session_id] = updated
        return updated

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def list_ids(self) -> list[str]:
        return list(self._sessions)

    async def count(self) -> int:
        return len(self._sessions)

    async def evict_older_than(self, max_age_seconds: float) -> int:
        now = self._clock()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if (now - session.uploaded_at).total_seconds() > max_age_seconds
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            Log.info(f"Evicted {len(expired)} sessions older than {max_age_seconds}s")
        return len(expired)
