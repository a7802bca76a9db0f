"""Extraction collaborator: file on disk -> normalized text and counts."""

import math
import re
from pathlib import Path

from legalflow.extraction.base import BaseTextExtractor
from legalflow.extraction.exceptions import FileReadError, UnsupportedFormatError
from legalflow.extraction.models import DocumentFormat, ExtractedDocument
from legalflow.logging.logger import Log

AVG_CHARS_PER_PAGE = 2000

_TRAILING_SPACE_RE = re.compile(r"\s+\n")
_LEADING_SPACE_RE = re.compile(r"\n\s+")


def resolve_format(file_path: Path, mime_type: str) -> DocumentFormat:
    """Pick the format from the file extension, falling back to the MIME type.

    Raises:
        UnsupportedFormatError: if neither identifies a supported format.
    """
    suffix = file_path.suffix.lower().lstrip(".")
    for fmt in DocumentFormat:
        if suffix == fmt.value:
            return fmt

    mime = (mime_type or "").lower()
    if "pdf" in mime:
        return DocumentFormat.PDF
    if mime == "application/msword":
        return DocumentFormat.DOC
    if "wordprocessingml" in mime or "word" in mime:
        return DocumentFormat.DOCX
    raise UnsupportedFormatError(f"Unsupported file format: {mime_type or suffix or 'unknown'}")


def normalize_text(text: str) -> str:
    text = text.replace("\r\n", "\n")
    text = _TRAILING_SPACE_RE.sub("\n", text)
    text = _LEADING_SPACE_RE.sub("\n", text)
    return text.strip()


def estimate_page_count(text: str) -> int:
    return math.ceil(len(text) / AVG_CHARS_PER_PAGE)


def count_words(text: str) -> int:
    return len(text.split())


class DocumentExtractor:
    """Reads an uploaded file and dispatches to the matching format adapter."""

    def __init__(
        self,
        pdf_extractor: BaseTextExtractor,
        docx_extractor: BaseTextExtractor,
    ) -> None:
        self._adapters: dict[DocumentFormat, BaseTextExtractor] = {
            DocumentFormat.PDF: pdf_extractor,
            DocumentFormat.DOCX: docx_extractor,
            DocumentFormat.DOC: docx_extractor,
        }

    def extract(self, file_path: Path, mime_type: str) -> ExtractedDocument:
        """Extract normalized text from the file at ``file_path``.

        Raises:
            UnsupportedFormatError: for formats other than PDF/DOC/DOCX.
            FileReadError: if the file cannot be read.
            ExtractionError: if the adapter fails to parse the content.
        """
        fmt = resolve_format(file_path, mime_type)
        try:
            data = file_path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Cannot read {file_path.name}: {exc}") from exc

        pages = self._adapters[fmt].extract(data)
        text = normalize_text("\n".join(pages))
        page_count = len(pages) if fmt is DocumentFormat.PDF else estimate_page_count(text)
        Log.info(
            f"Extracted {len(text)} chars from {fmt.value} file {file_path.name} "
            f"({page_count} pages)"
        )
        return ExtractedDocument(
            text=text,
            page_count=page_count,
            word_count=count_words(text),
            char_count=len(text),
        )
