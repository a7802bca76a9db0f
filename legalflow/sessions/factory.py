from legalflow.config.settings import Settings
from legalflow.sessions.base import BaseSessionStore
from legalflow.sessions.memory_store import InMemorySessionStore
from legalflow.sessions.postgres_store import PostgresSessionStore


class SessionStoreFactory:
    """Creates the session store selected in settings."""

    BACKENDS = ("memory", "postgres")

    @classmethod
    async def create(cls, settings: Settings) -> BaseSessionStore:
        backend = settings.session_store.lower()
        if backend == "memory":
            return InMemorySessionStore()
        if backend == "postgres":
            return await PostgresSessionStore.open(settings)
        raise ValueError(
            f"Unknown session store '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
