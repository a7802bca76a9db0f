import asyncio
import io
import json
from collections.abc import Callable
from pathlib import Path

import pytest
from docx import Document
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from legalflow.analysis.client_base import BaseCompletionClient
from legalflow.analysis.engine import AnalysisEngine

LEGAL_TEXT_LINES = [
    "Name: Jane Doe",
    "Effective Date: 2024-01-15",
    "This agreement requires payment of $500 within 30 days.",
]

CANNED_RESPONSES: dict[str, object] = {
    "analyze_document": {
        "summary": "Jane Doe must pay $500 within 30 days.",
        "documentType": "Payment Agreement",
        "parties": ["Jane Doe"],
        "effectiveDate": "2024-01-15",
        "expiryDate": None,
    },
    "detect_clauses": [
        {
            "text": "This agreement requires payment of $500 within 30 days.",
            "type": "payment",
            "riskLevel": "medium",
            "explanation": "Payment obligation with a deadline.",
        }
    ],
    "risk_score": {
        "score": "low",
        "reasoning": "Single small payment.",
        "topRisks": ["Late payment"],
    },
    "next_steps": {
        "steps": [{"action": "Schedule the payment", "rationale": "Avoid default"}],
        "disclaimer": "Not legal advice",
    },
    "answer_question": "The fee is $100.",
}


class ScriptedClient(BaseCompletionClient):
    """Completion client returning scripted output per task.

    A scripted value may be a string (returned as-is), a JSON-able object
    (dumped), or an exception instance (raised).
    """

    def __init__(
        self,
        responses: dict[str, object] | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        self.responses = dict(CANNED_RESPONSES if responses is None else responses)
        self.delay_seconds = delay_seconds
        self.calls: list[dict[str, object]] = []

    @property
    def tasks(self) -> list[str]:
        return [str(call["task"]) for call in self.calls]

    async def complete(
        self,
        *,
        task: str,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        self.calls.append(
            {"task": task, "model": model, "temperature": temperature, "user_prompt": user_prompt}
        )
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        value = self.responses.get(task, "")
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, str):
            return value
        return json.dumps(value)


@pytest.fixture()
def scripted_client() -> Callable[..., ScriptedClient]:
    def _make(responses: dict[str, object] | None = None, **overrides: object) -> ScriptedClient:
        client = ScriptedClient(responses)
        client.responses.update(overrides)
        return client

    return _make


@pytest.fixture()
def make_engine() -> Callable[..., AnalysisEngine]:
    def _make(client: BaseCompletionClient, **kwargs: object) -> AnalysisEngine:
        return AnalysisEngine(client=client, model="test-model", **kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture()
def legal_text() -> str:
    return "\n".join(LEGAL_TEXT_LINES)


@pytest.fixture()
def legal_docx_bytes() -> bytes:
    """A Word document with one paragraph per line of the sample agreement."""
    document = Document()
    for line in LEGAL_TEXT_LINES:
        document.add_paragraph(line)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture()
def fee_docx_bytes() -> bytes:
    document = Document()
    document.add_paragraph("The fee is $100.")
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def write_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
