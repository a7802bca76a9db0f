from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ProgressStage(str, Enum):
    UPLOAD = "upload"
    EXTRACTION = "extraction"
    ANALYSIS_STARTED = "analysis_started"
    AI_ANALYSIS = "ai_analysis"
    CLAUSE_DETECTION = "clause_detection"
    RISK_ASSESSMENT = "risk_assessment"
    NEXT_STEPS = "next_steps"
    ANALYSIS_COMPLETE = "analysis_complete"
    QUESTION_ANSWERED = "question_answered"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressEvent:
    """Transient notification about one session's progress. Never persisted."""

    stage: ProgressStage
    progress: int
    session_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not 0 <= self.progress <= 100:
            raise ValueError(f"progress must be within 0..100, got {self.progress}")

    def to_message(self) -> dict[str, Any]:
        """Wire shape pushed to observers."""
        return {
            "type": "processing_update",
            "stage": self.stage.value,
            "progress": self.progress,
            "timestamp": self.timestamp.isoformat(),
            "sessionId": self.session_id,
            **self.payload,
        }
