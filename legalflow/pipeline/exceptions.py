class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""


class ValidationError(PipelineError):
    """Raised at the boundary for requests that must never enter the pipeline."""


class StepFailedError(PipelineError):
    """Raised when an analysis step fails; the message carries the step label."""
