from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import fields
from typing import Any

from legalflow.sessions.exceptions import UnknownSessionFieldError
from legalflow.sessions.models import Session, SessionStatus

_MUTABLE_FIELDS = frozenset(f.name for f in fields(Session)) - {"id"}


def check_merge_fields(updates: dict[str, Any]) -> None:
    """Reject partial updates that touch the id or unknown fields."""
    unknown = set(updates) - _MUTABLE_FIELDS
    if unknown:
        raise UnknownSessionFieldError(
            f"Cannot merge unknown or immutable session fields: {sorted(unknown)}"
        )


class BaseSessionStore(ABC):
    """Contract for session storage backends.

    Absence is never an exception: lookups and merges on unknown ids
    return ``None``.
    """

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Insert a new session.

        Raises:
            SessionExistsError: if a session with the same id is stored.
        """

    @abstractmethod
    async def get(self, session_id: str) -> Session | None:
        """Return the session or ``None`` when absent."""

    @abstractmethod
    async def merge(self, session_id: str, **updates: Any) -> Session | None:
        """Shallow field-level overwrite; untouched fields are preserved.

        Returns the updated session, or ``None`` (no-op) when absent.

        Raises:
            UnknownSessionFieldError: if ``updates`` names an unknown field or ``id``.
        """

    @abstractmethod
    async def transition(
        self,
        session_id: str,
        expected: Iterable[SessionStatus],
        new_status: SessionStatus,
        **updates: Any,
    ) -> Session | None:
        """Atomically set ``status`` only if the current status is in ``expected``.

        Returns the updated session, or ``None`` if the session is absent or
        its status did not match.
        """

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Remove a session. Returns ``True`` if something was removed."""

    @abstractmethod
    async def list_ids(self) -> list[str]:
        """Snapshot of stored ids; order is not guaranteed."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored sessions."""

    @abstractmethod
    async def evict_older_than(self, max_age_seconds: float) -> int:
        """Remove sessions whose age strictly exceeds ``max_age_seconds``.

        Returns the number of sessions removed.
        """

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
