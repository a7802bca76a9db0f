import os
from collections.abc import Callable
from pathlib import Path

import psycopg
import pytest

from legalflow.analysis.client_base import BaseCompletionClient
from legalflow.config.settings import Settings
from legalflow.events.broadcaster import ProgressBroadcaster
from legalflow.extraction.factory import DocumentExtractorFactory
from legalflow.pipeline.file_cleanup import DelayedFileRemover
from legalflow.pipeline.orchestrator import PipelineOrchestrator
from legalflow.service import DocumentService
from legalflow.sessions.memory_store import InMemorySessionStore
from legalflow.sessions.postgres_store import build_conninfo


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "legalflow_test")
    return Settings()


@pytest.fixture(scope="session")
def postgres_settings() -> Settings:
    settings = _test_settings()
    try:
        with psycopg.connect(build_conninfo(settings), connect_timeout=3):
            pass
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    return settings


@pytest.fixture
def make_service(tmp_path: Path, make_engine) -> Callable[..., DocumentService]:
    """Wire a DocumentService around an in-memory store and the given client."""

    def _make(client: BaseCompletionClient, **overrides: object) -> DocumentService:
        settings = Settings(upload_dir=tmp_path / "uploads", **overrides)  # type: ignore[arg-type]
        store = InMemorySessionStore()
        broadcaster = ProgressBroadcaster(queue_size=settings.subscriber_queue_size)
        file_remover = DelayedFileRemover(settings.upload_cleanup_delay_seconds)
        orchestrator = PipelineOrchestrator(
            store=store,
            broadcaster=broadcaster,
            extractor=DocumentExtractorFactory.create(settings),
            engine=make_engine(client),
            file_remover=file_remover,
        )
        return DocumentService(
            settings=settings,
            store=store,
            broadcaster=broadcaster,
            orchestrator=orchestrator,
            file_remover=file_remover,
        )

    return _make
