import io
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from legalflow.extraction.base import BaseTextExtractor
from legalflow.extraction.exceptions import ExtractionError


class DocxAdapter(BaseTextExtractor):
    """Extracts raw paragraph and table text from Word documents using python-docx.

    Legacy binary ``.doc`` files are routed here as well and fail with an
    ``ExtractionError`` unless they are actually OOXML packages.
    """

    def extract(self, data: bytes) -> list[str]:
        try:
            document = Document(io.BytesIO(data))
        except (PackageNotFoundError, BadZipFile, KeyError, ValueError) as exc:
            raise ExtractionError(f"Not a readable Word document: {exc}") from exc

        lines = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                lines.append("\t".join(cell.text for cell in row.cells))
        return ["\n".join(lines)]
