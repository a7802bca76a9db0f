from dataclasses import dataclass
from enum import Enum


class DocumentFormat(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"


@dataclass(frozen=True)
class ExtractedDocument:
    """Normalized text plus the counts reported to clients."""

    text: str
    page_count: int
    word_count: int
    char_count: int
