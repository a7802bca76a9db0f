class AnalysisError(Exception):
    """Base exception for language-model analysis failures."""


class ProviderError(AnalysisError):
    """Raised when the AI provider call fails: network, API, quota or timeout."""


class MalformedOutputError(AnalysisError):
    """Raised when the model answered but the output does not parse as expected."""
