from legalflow.extraction.document_extractor import DocumentExtractor
from legalflow.extraction.factory import DocumentExtractorFactory
from legalflow.extraction.models import ExtractedDocument

__all__ = ["DocumentExtractor", "DocumentExtractorFactory", "ExtractedDocument"]
