"""Per-session state machine driving extraction, analysis and Q&A.

uploaded -> extracting -> extracted -> analyzing -> analysis_complete.
In-flight markers are claimed with an atomic status transition, so duplicate
triggers for the same stage are no-ops. A failed stage publishes one ``error``
event and restores the status the session had before the stage started.
"""

import asyncio
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from legalflow.analysis.engine import AnalysisEngine
from legalflow.analysis.models import AnalysisResult
from legalflow.events.broadcaster import ProgressBroadcaster
from legalflow.events.models import ProgressEvent, ProgressStage
from legalflow.extraction.document_extractor import DocumentExtractor
from legalflow.logging.logger import Log
from legalflow.pipeline.exceptions import StepFailedError, ValidationError
from legalflow.pipeline.file_cleanup import DelayedFileRemover
from legalflow.pipeline.pipeline import AnalysisContext, AnalysisStep
from legalflow.pipeline.steps import default_analysis_steps
from legalflow.sessions.base import BaseSessionStore
from legalflow.sessions.models import DocumentMetadata, Session, SessionStatus


class PipelineOrchestrator:
    def __init__(
        self,
        *,
        store: BaseSessionStore,
        broadcaster: ProgressBroadcaster,
        extractor: DocumentExtractor,
        engine: AnalysisEngine,
        file_remover: DelayedFileRemover,
        steps: list[AnalysisStep] | None = None,
    ) -> None:
        self._store = store
        self._broadcaster = broadcaster
        self._extractor = extractor
        self._engine = engine
        self._file_remover = file_remover
        self._steps = steps if steps is not None else default_analysis_steps(engine)

    def emit(
        self,
        stage: ProgressStage,
        progress: int,
        session_id: str,
        **payload: Any,
    ) -> None:
        self._broadcaster.publish(
            ProgressEvent(stage=stage, progress=progress, session_id=session_id, payload=payload)
        )

    # Extraction

    async def run_extraction(self, session_id: str) -> Session | None:
        """Extract text for an uploaded session.

        Returns the updated session, or ``None`` when the session is gone,
        already extracted or being extracted by another run.
        """
        session = await self._store.transition(
            session_id,
            expected=[SessionStatus.UPLOADED],
            new_status=SessionStatus.EXTRACTING,
            last_error=None,
        )
        if session is None:
            Log.warning(f"Extraction for session {session_id} skipped: not awaiting extraction")
            return None
        if session.file_path is None:
            return await self._fail_extraction(session_id, "No uploaded file for session")

        file_path = Path(session.file_path)
        self.emit(ProgressStage.EXTRACTION, 10, session_id)
        Log.info(f"Extracting session {session_id} ({session.file_name})")
        started = time.perf_counter()
        try:
            document = await asyncio.to_thread(
                self._extractor.extract, file_path, session.mime_type
            )
        except Exception as exc:
            Log.error(f"Extraction error for {session_id}: {exc}")
            return await self._fail_extraction(session_id, str(exc))
        finally:
            self._file_remover.schedule(file_path)

        extraction_time_ms = int((time.perf_counter() - started) * 1000)
        updated = await self._store.merge(
            session_id,
            extracted_text=document.text,
            document_metadata=DocumentMetadata(
                page_count=document.page_count,
                word_count=document.word_count,
                char_count=document.char_count,
            ),
            status=SessionStatus.EXTRACTED,
            extraction_time_ms=extraction_time_ms,
        )
        self.emit(
            ProgressStage.EXTRACTION,
            100,
            session_id,
            pageCount=document.page_count,
            wordCount=document.word_count,
        )
        Log.info(
            f"Session {session_id} extracted: {document.word_count} words in "
            f"{extraction_time_ms} ms"
        )
        return updated

    async def _fail_extraction(self, session_id: str, message: str) -> None:
        await self._store.merge(session_id, status=SessionStatus.UPLOADED, last_error=message)
        self.emit(ProgressStage.ERROR, 0, session_id, error=message)
        return None

    # Analysis

    async def claim_analysis(self, session_id: str) -> tuple[Session, bool]:
        """Validate preconditions and set the in-progress marker.

        Returns the session and whether this caller claimed the run. A second
        caller gets ``False`` together with the current session.

        Raises:
            ValidationError: unknown session or no extracted text yet.
        """
        session = await self._store.get(session_id)
        if session is None or not session.has_text:
            raise ValidationError("Document not found or not extracted")

        claimed = await self._store.transition(
            session_id,
            expected=[SessionStatus.EXTRACTED],
            new_status=SessionStatus.ANALYZING,
            last_error=None,
        )
        if claimed is not None:
            return claimed, True

        current = await self._store.get(session_id)
        if current is None:
            raise ValidationError("Document not found or not extracted")
        Log.info(
            f"Analysis for session {session_id} not started: status is {current.status.value}"
        )
        return current, False

    async def run_analysis(self, session_id: str) -> AnalysisResult | None:
        """Run every analysis step in order for a session claimed via ``claim_analysis``.

        Returns the compiled result, or ``None`` if a step failed or the
        session was removed while the steps ran.
        """
        session = await self._store.get(session_id)
        if session is None or not session.extracted_text:
            Log.warning(f"Analysis for session {session_id} aborted: session or text missing")
            return None

        self.emit(ProgressStage.ANALYSIS_STARTED, 5, session_id)
        context = AnalysisContext(session_id=session_id, document_text=session.extracted_text)
        try:
            for step in self._steps:
                self.emit(step.stage, step.progress, session_id)
                context = await self._run_step(step, context)
            result = self._compile(context)
        except StepFailedError as exc:
            message = str(exc)
            Log.error(f"Analysis error for {session_id}: {message}")
            await self._store.merge(
                session_id, status=SessionStatus.EXTRACTED, last_error=message
            )
            self.emit(ProgressStage.ERROR, 0, session_id, error=message)
            return None

        payload = result.to_dict()
        stored = await self._store.merge(
            session_id,
            analysis_result=payload,
            status=SessionStatus.ANALYSIS_COMPLETE,
        )
        if stored is None:
            message = "Session was removed before analysis completed"
            Log.warning(f"Analysis result for {session_id} discarded: session removed")
            self.emit(ProgressStage.ERROR, 0, session_id, error=message)
            return None
        self.emit(ProgressStage.ANALYSIS_COMPLETE, 100, session_id, results=payload)
        Log.info(f"Analysis complete for session {session_id}")
        return result

    @staticmethod
    async def _run_step(step: AnalysisStep, context: AnalysisContext) -> AnalysisContext:
        try:
            return await step.run(context)
        except Exception as exc:
            raise StepFailedError(f"{step.failure_label}: {exc}") from exc

    @staticmethod
    def _compile(context: AnalysisContext) -> AnalysisResult:
        if (
            context.overview is None
            or context.risk_assessment is None
            or context.next_steps is None
        ):
            raise StepFailedError("Analysis compilation failed: incomplete step output")
        return AnalysisResult(
            session_id=context.session_id,
            overview=context.overview,
            clauses=list(context.clauses),
            risk_assessment=context.risk_assessment,
            next_steps=context.next_steps,
            completed_at=datetime.now(timezone.utc),
        )

    # Q&A

    async def run_question(
        self,
        session_id: str,
        document_text: str,
        question: str,
        language: str,
    ) -> str | None:
        """Answer one question and publish the answer. Does not touch session state."""
        try:
            answer = await self._engine.answer_question(document_text, question, language)
        except Exception as exc:
            Log.error(f"Question answering error for {session_id}: {exc}")
            self.emit(ProgressStage.ERROR, 0, session_id, error=str(exc))
            return None
        self.emit(
            ProgressStage.QUESTION_ANSWERED,
            100,
            session_id,
            question=question,
            answer=answer,
        )
        return answer
