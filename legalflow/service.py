"""Operations exposed to the transport layer.

Every trigger returns as soon as its work is scheduled; results arrive as
progress events or through the polling queries.
"""

import asyncio
import uuid
from pathlib import Path
from typing import Any

from legalflow.analysis.factory import AnalysisEngineFactory
from legalflow.config.settings import Settings
from legalflow.events.broadcaster import ProgressBroadcaster, Subscription
from legalflow.events.models import ProgressStage
from legalflow.extraction.factory import DocumentExtractorFactory
from legalflow.logging.logger import Log
from legalflow.pipeline.exceptions import ValidationError
from legalflow.pipeline.file_cleanup import DelayedFileRemover, delete_file
from legalflow.pipeline.models import (
    AnalysisAck,
    CleanupReport,
    Lookup,
    LookupStatus,
    QuestionAck,
    UploadReceipt,
)
from legalflow.pipeline.orchestrator import PipelineOrchestrator
from legalflow.pipeline.tasks import BackgroundTasks
from legalflow.pipeline.validation import file_extension, validate_question, validate_upload
from legalflow.sessions.base import BaseSessionStore
from legalflow.sessions.factory import SessionStoreFactory
from legalflow.sessions.models import Session


def _write_upload(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class DocumentService:
    """Session-scoped document processing: upload, extract, analyze, ask."""

    def __init__(
        self,
        *,
        settings: Settings,
        store: BaseSessionStore,
        broadcaster: ProgressBroadcaster,
        orchestrator: PipelineOrchestrator,
        file_remover: DelayedFileRemover,
    ) -> None:
        self._settings = settings
        self._store = store
        self._broadcaster = broadcaster
        self._orchestrator = orchestrator
        self._file_remover = file_remover
        self._tasks = BackgroundTasks()

    async def start_upload(
        self,
        file_bytes: bytes,
        file_name: str,
        mime_type: str = "",
    ) -> UploadReceipt:
        """Store the upload, create its session and schedule extraction.

        Raises:
            ValidationError: missing file, unsupported type or oversized upload.
        """
        validate_upload(
            file_bytes,
            file_name,
            allowed_extensions=self._settings.allowed_extensions,
            max_bytes=self._settings.max_upload_bytes,
        )
        session_id = str(uuid.uuid4())
        file_path = self._settings.upload_dir / f"{session_id}.{file_extension(file_name)}"
        await asyncio.to_thread(_write_upload, file_path, file_bytes)

        await self._store.create(
            Session(
                id=session_id,
                file_name=file_name,
                file_size=len(file_bytes),
                mime_type=mime_type,
                file_path=str(file_path),
            )
        )
        Log.info(f"Session {session_id} created for {file_name} ({len(file_bytes)} bytes)")
        self._orchestrator.emit(ProgressStage.UPLOAD, 100, session_id)
        self._tasks.spawn(
            self._orchestrator.run_extraction(session_id), name=f"extract-{session_id}"
        )
        return UploadReceipt(session_id=session_id, file_name=file_name, file_size=len(file_bytes))

    async def get_session_status(self, session_id: str) -> dict[str, Any] | None:
        session = await self._store.get(session_id)
        return session.to_status_dict() if session is not None else None

    async def get_session_text(self, session_id: str) -> Lookup[str]:
        session = await self._store.get(session_id)
        if session is None:
            return Lookup(LookupStatus.NOT_FOUND)
        if session.extracted_text is None:
            return Lookup(LookupStatus.PENDING)
        return Lookup(LookupStatus.FOUND, session.extracted_text)

    async def start_analysis(self, session_id: str) -> AnalysisAck:
        """Schedule the analysis pipeline unless one already ran or is running.

        Raises:
            ValidationError: unknown session or text not yet extracted.
        """
        session, claimed = await self._orchestrator.claim_analysis(session_id)
        if claimed:
            self._tasks.spawn(
                self._orchestrator.run_analysis(session_id), name=f"analyze-{session_id}"
            )
        return AnalysisAck(session_id=session_id, status=session.status, started=claimed)

    async def get_analysis_result(self, session_id: str) -> Lookup[dict[str, Any]]:
        session = await self._store.get(session_id)
        if session is None:
            return Lookup(LookupStatus.NOT_FOUND)
        if session.analysis_result is None:
            return Lookup(LookupStatus.PENDING)
        return Lookup(LookupStatus.FOUND, session.analysis_result)

    async def ask_question(
        self,
        session_id: str,
        question: str,
        language: str = "English",
    ) -> QuestionAck:
        """Schedule one Q&A call; the answer arrives as a ``question_answered`` event.

        Raises:
            ValidationError: missing question, unknown session or no extracted text.
        """
        validate_question(session_id, question)
        session = await self._store.get(session_id)
        if session is None or not session.extracted_text:
            raise ValidationError("Document not found or not extracted")
        self._tasks.spawn(
            self._orchestrator.run_question(
                session_id, session.extracted_text, question, language
            ),
            name=f"question-{session_id}",
        )
        return QuestionAck(session_id=session_id, question=question)

    def subscribe(self, session_id: str | None = None) -> Subscription:
        return self._broadcaster.subscribe(session_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        self._broadcaster.unsubscribe(subscription)

    async def list_sessions(self) -> list[dict[str, Any]]:
        summaries = []
        for session_id in await self._store.list_ids():
            session = await self._store.get(session_id)
            if session is not None:
                summaries.append(session.to_summary_dict())
        return summaries

    async def cleanup(self, max_age_seconds: float | None = None) -> CleanupReport:
        max_age = (
            max_age_seconds
            if max_age_seconds is not None
            else self._settings.session_max_age_seconds
        )
        cleaned = await self._store.evict_older_than(max_age)
        return CleanupReport(cleaned=cleaned, remaining=await self._store.count())

    async def delete_session(self, session_id: str) -> bool:
        session = await self._store.get(session_id)
        if session is not None and session.file_path is not None:
            await asyncio.to_thread(delete_file, Path(session.file_path))
        return await self._store.delete(session_id)

    async def wait_idle(self) -> None:
        """Wait for every scheduled extraction, analysis and Q&A task."""
        await self._tasks.join()

    async def aclose(self) -> None:
        await self._tasks.cancel_all()
        await self._file_remover.close()
        self._broadcaster.close()
        await self._store.close()


async def build_service(settings: Settings) -> DocumentService:
    """Build a DocumentService with all required adapters."""
    store = await SessionStoreFactory.create(settings)
    broadcaster = ProgressBroadcaster(queue_size=settings.subscriber_queue_size)
    file_remover = DelayedFileRemover(settings.upload_cleanup_delay_seconds)
    orchestrator = PipelineOrchestrator(
        store=store,
        broadcaster=broadcaster,
        extractor=DocumentExtractorFactory.create(settings),
        engine=AnalysisEngineFactory.create(settings),
        file_remover=file_remover,
    )
    return DocumentService(
        settings=settings,
        store=store,
        broadcaster=broadcaster,
        orchestrator=orchestrator,
        file_remover=file_remover,
    )
