from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SessionStatus(str, Enum):
    """Lifecycle status of a session.

    ``EXTRACTING`` and ``ANALYZING`` are in-flight markers; a failed stage
    reverts the session to the status it had before the stage started.
    """

    UPLOADED = "uploaded"
    EXTRACTING = "extracting"
    EXTRACTED = "extracted"
    ANALYZING = "analyzing"
    ANALYSIS_COMPLETE = "analysis_complete"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DocumentMetadata:
    """Counts captured at extraction time."""

    page_count: int
    word_count: int
    char_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "pageCount": self.page_count,
            "wordCount": self.word_count,
            "charCount": self.char_count,
        }


@dataclass(frozen=True)
class Session:
    """One uploaded document tracked through extraction and analysis.

    Records are immutable; stores replace them wholesale on ``merge``.
    ``analysis_result`` holds the compiled result as a JSON-ready dict.
    """

    id: str
    file_name: str
    file_size: int
    uploaded_at: datetime = field(default_factory=utcnow)
    status: SessionStatus = SessionStatus.UPLOADED
    mime_type: str = ""
    file_path: str | None = None
    extracted_text: str | None = None
    document_metadata: DocumentMetadata | None = None
    analysis_result: dict[str, Any] | None = None
    extraction_time_ms: int | None = None
    last_error: str | None = None

    @property
    def has_text(self) -> bool:
        return bool(self.extracted_text)

    def to_status_dict(self) -> dict[str, Any]:
        """Public view of the session; never includes the extracted text."""
        return {
            "id": self.id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "status": self.status.value,
            "documentMetadata": (
                self.document_metadata.to_dict() if self.document_metadata else None
            ),
            "uploadedAt": self.uploaded_at.isoformat(),
            "extractionTime": self.extraction_time_ms,
            "lastError": self.last_error,
        }

    def to_summary_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "status": self.status.value,
            "uploadedAt": self.uploaded_at.isoformat(),
        }
