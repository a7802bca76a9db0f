from legalflow.analysis.engine import AnalysisEngine
from legalflow.events.models import ProgressStage
from legalflow.logging.logger import Log
from legalflow.pipeline.pipeline import AnalysisContext, AnalysisStep


class AnalyzeDocumentStep(AnalysisStep):
    stage = ProgressStage.AI_ANALYSIS
    progress = 20
    failure_label = "AI Analysis failed"

    def __init__(self, engine: AnalysisEngine) -> None:
        self._engine = engine

    async def run(self, context: AnalysisContext) -> AnalysisContext:
        context.overview = await self._engine.analyze_document(context.document_text)
        Log.info(
            f"Session {context.session_id}: document type "
            f"'{context.overview.document_type}', {len(context.overview.parties)} parties"
        )
        return context


class DetectClausesStep(AnalysisStep):
    stage = ProgressStage.CLAUSE_DETECTION
    progress = 45
    failure_label = "Clause detection failed"

    def __init__(self, engine: AnalysisEngine) -> None:
        self._engine = engine

    async def run(self, context: AnalysisContext) -> AnalysisContext:
        context.clauses = await self._engine.detect_clauses(context.document_text)
        Log.info(f"Session {context.session_id}: {len(context.clauses)} clauses detected")
        return context


class RiskScoreStep(AnalysisStep):
    stage = ProgressStage.RISK_ASSESSMENT
    progress = 70
    failure_label = "Risk assessment failed"

    def __init__(self, engine: AnalysisEngine) -> None:
        self._engine = engine

    async def run(self, context: AnalysisContext) -> AnalysisContext:
        context.risk_assessment = await self._engine.calculate_risk_score(
            context.document_text, context.clauses
        )
        Log.info(
            f"Session {context.session_id}: risk score {context.risk_assessment.score.value}"
        )
        return context


class NextStepsStep(AnalysisStep):
    stage = ProgressStage.NEXT_STEPS
    progress = 85
    failure_label = "Next steps generation failed"

    def __init__(self, engine: AnalysisEngine) -> None:
        self._engine = engine

    async def run(self, context: AnalysisContext) -> AnalysisContext:
        if context.overview is None:
            raise ValueError("AnalysisContext.overview must be set before next steps")
        context.next_steps = await self._engine.generate_next_steps(
            context.document_text, context.overview.document_type or "Unknown"
        )
        Log.info(
            f"Session {context.session_id}: {len(context.next_steps.steps)} next steps"
        )
        return context


def default_analysis_steps(engine: AnalysisEngine) -> list[AnalysisStep]:
    """Summary -> clauses -> risk -> next steps."""
    return [
        AnalyzeDocumentStep(engine),
        DetectClausesStep(engine),
        RiskScoreStep(engine),
        NextStepsStep(engine),
    ]
