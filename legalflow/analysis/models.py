from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ClauseType(str, Enum):
    RISK = "risk"
    PAYMENT = "payment"
    OBLIGATION = "obligation"
    EXPIRY = "expiry"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class DocumentOverview:
    """Output of the summary/metadata step."""

    summary: str
    document_type: str = "Unknown"
    parties: list[str] = field(default_factory=list)
    effective_date: str | None = None
    expiry_date: str | None = None


@dataclass(frozen=True)
class Clause:
    """Classified excerpt of the source document.

    ``start_offset``/``end_offset`` locate the excerpt in the extracted text
    when it could be found there.
    """

    text: str
    type: ClauseType
    explanation: str = ""
    risk_level: RiskLevel | None = None
    start_offset: int | None = None
    end_offset: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "type": self.type.value,
            "riskLevel": self.risk_level.value if self.risk_level else None,
            "explanation": self.explanation,
            "startOffset": self.start_offset,
            "endOffset": self.end_offset,
        }


@dataclass(frozen=True)
class RiskAssessment:
    score: RiskLevel
    reasoning: str
    top_risks: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score.value,
            "reasoning": self.reasoning,
            "topRisks": list(self.top_risks),
        }


@dataclass(frozen=True)
class NextStep:
    action: str
    rationale: str


@dataclass(frozen=True)
class NextSteps:
    steps: list[NextStep]
    disclaimer: str = "Not legal advice"

    def to_dict(self) -> dict[str, Any]:
        return {
            "steps": [{"action": s.action, "rationale": s.rationale} for s in self.steps],
            "disclaimer": self.disclaimer,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Compiled output of a full analysis run. Written once, never mutated."""

    session_id: str
    overview: DocumentOverview
    clauses: list[Clause]
    risk_assessment: RiskAssessment
    next_steps: NextSteps
    completed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "summary": self.overview.summary,
            "documentType": self.overview.document_type,
            "parties": list(self.overview.parties),
            "effectiveDate": self.overview.effective_date,
            "expiryDate": self.overview.expiry_date,
            "clauses": [clause.to_dict() for clause in self.clauses],
            "riskAssessment": self.risk_assessment.to_dict(),
            "nextSteps": self.next_steps.to_dict(),
            "completedAt": self.completed_at.isoformat(),
        }
