from pathlib import PurePath

from legalflow.pipeline.exceptions import ValidationError


def file_extension(file_name: str) -> str:
    return PurePath(file_name).suffix.lower().lstrip(".")


def validate_upload(
    file_bytes: bytes | None,
    file_name: str | None,
    *,
    allowed_extensions: list[str],
    max_bytes: int,
) -> None:
    """Reject uploads that must never enter the pipeline.

    Raises:
        ValidationError: missing file, unsupported type or oversized upload.
    """
    if not file_name or not file_bytes:
        raise ValidationError("No file uploaded")
    allowed = [ext.lower() for ext in allowed_extensions]
    if file_extension(file_name) not in allowed:
        names = ", ".join(ext.upper() for ext in allowed)
        raise ValidationError(f"Unsupported file type. Allowed: {names}")
    if len(file_bytes) > max_bytes:
        raise ValidationError(
            f"File too large: {len(file_bytes)} bytes (max {max_bytes})"
        )


def validate_question(session_id: str | None, question: str | None) -> None:
    if not session_id or not question or not question.strip():
        raise ValidationError("sessionId and question are required")
