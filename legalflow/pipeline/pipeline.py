from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar

from legalflow.analysis.models import Clause, DocumentOverview, NextSteps, RiskAssessment
from legalflow.events.models import ProgressStage


@dataclass(slots=True)
class AnalysisContext:
    """Accumulates step outputs in memory; nothing is persisted until all succeed."""

    session_id: str
    document_text: str
    overview: DocumentOverview | None = None
    clauses: list[Clause] = field(default_factory=list)
    risk_assessment: RiskAssessment | None = None
    next_steps: NextSteps | None = None


class AnalysisStep(ABC):
    """One gated analysis step.

    ``progress`` is emitted before the step runs; ``failure_label`` prefixes
    the error message when it fails.
    """

    stage: ClassVar[ProgressStage]
    progress: ClassVar[int]
    failure_label: ClassVar[str]

    @abstractmethod
    async def run(self, context: AnalysisContext) -> AnalysisContext:
        raise NotImplementedError
