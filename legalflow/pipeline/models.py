from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from legalflow.sessions.models import SessionStatus

T = TypeVar("T")


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    PENDING = "pending"


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Result of a query that may legitimately find nothing yet."""

    status: LookupStatus
    value: T | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


@dataclass(frozen=True)
class UploadReceipt:
    session_id: str
    file_name: str
    file_size: int


@dataclass(frozen=True)
class AnalysisAck:
    """``started`` is ``False`` when an analysis was already running or finished."""

    session_id: str
    status: SessionStatus
    started: bool


@dataclass(frozen=True)
class QuestionAck:
    session_id: str
    question: str


@dataclass(frozen=True)
class CleanupReport:
    cleaned: int
    remaining: int
