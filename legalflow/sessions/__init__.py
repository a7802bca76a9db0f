from legalflow.sessions.base import BaseSessionStore
from legalflow.sessions.factory import SessionStoreFactory
from legalflow.sessions.memory_store import InMemorySessionStore
from legalflow.sessions.models import DocumentMetadata, Session, SessionStatus

__all__ = [
    "BaseSessionStore",
    "DocumentMetadata",
    "InMemorySessionStore",
    "Session",
    "SessionStatus",
    "SessionStoreFactory",
]
