from legalflow.config.settings import Settings
from legalflow.extraction.base import BaseTextExtractor
from legalflow.extraction.document_extractor import DocumentExtractor
from legalflow.extraction.docx_adapter import DocxAdapter
from legalflow.extraction.pdfplumber_adapter import PdfPlumberAdapter
from legalflow.extraction.pymupdf_adapter import PyMuPdfAdapter


class DocumentExtractorFactory:
    """Creates the document extractor with the configured PDF engine."""

    PDF_ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> DocumentExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ADAPTERS)}"
            )
        return DocumentExtractor(pdf_extractor=adapter_cls(), docx_extractor=DocxAdapter())
