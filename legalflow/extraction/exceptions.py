class ExtractionError(Exception):
    """Base exception for document text extraction failures."""


class UnsupportedFormatError(ExtractionError):
    """Raised when neither the file extension nor the MIME type is supported."""


class FileReadError(ExtractionError):
    """Raised when the uploaded file cannot be read from disk."""
