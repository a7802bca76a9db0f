from legalflow.analysis.engine import AnalysisEngine
from legalflow.analysis.factory import AnalysisEngineFactory
from legalflow.analysis.models import AnalysisResult

__all__ = ["AnalysisEngine", "AnalysisEngineFactory", "AnalysisResult"]
