"""Language-model backed analysis calls.

Every call is a single prompt/response round-trip bounded by a timeout.
Structured calls recover from malformed output with a deterministic default
instead of failing; only provider failures propagate.
"""

import asyncio
from pathlib import Path

from legalflow.analysis.client_base import BaseCompletionClient
from legalflow.analysis.exceptions import MalformedOutputError, ProviderError
from legalflow.analysis.models import (
    Clause,
    ClauseType,
    DocumentOverview,
    NextStep,
    NextSteps,
    RiskAssessment,
    RiskLevel,
)
from legalflow.analysis.parsing import (
    build_clauses,
    build_next_steps,
    build_overview,
    build_risk_assessment,
    parse_json_output,
)
from legalflow.analysis.prompt_loader import load_prompt_templates
from legalflow.logging.logger import Log

ANALYZE_TEXT_LIMIT = 4000
CLAUSES_TEXT_LIMIT = 5000
RISK_TEXT_LIMIT = 3000
NEXT_STEPS_TEXT_LIMIT = 4000
QUESTION_TEXT_LIMIT = 6000

FALLBACK_SUMMARY_CHARS = 200
FALLBACK_CLAUSE_CHARS = 200
_SPAN_PREFIX_CHARS = 50


def fallback_risk_assessment() -> RiskAssessment:
    return RiskAssessment(
        score=RiskLevel.MEDIUM,
        reasoning="Unable to fully assess risk",
        top_risks=["Unable to assess"],
    )


def fallback_next_steps() -> NextSteps:
    return NextSteps(
        steps=[
            NextStep(
                action="Review document thoroughly",
                rationale="Ensure you understand all terms and conditions",
            )
        ],
        disclaimer="Not legal advice",
    )


def fallback_clauses(document_text: str) -> list[Clause]:
    if not document_text:
        return []
    excerpt = document_text[:FALLBACK_CLAUSE_CHARS]
    return [
        Clause(
            text=excerpt + "...",
            type=ClauseType.OBLIGATION,
            risk_level=RiskLevel.MEDIUM,
            explanation="Key clause identified in document",
            start_offset=0,
            end_offset=len(excerpt),
        )
    ]


def locate_clause(document_text: str, clause: Clause) -> Clause:
    """Attach the clause's character span in the source text when it can be found."""
    start = document_text.find(clause.text)
    matched = clause.text
    if start == -1:
        # Span covers only the matched prefix.
        matched = clause.text[:_SPAN_PREFIX_CHARS]
        start = document_text.find(matched) if matched else -1
    if start == -1:
        return clause
    end = start + len(matched)
    return Clause(
        text=clause.text,
        type=clause.type,
        explanation=clause.explanation,
        risk_level=clause.risk_level,
        start_offset=start,
        end_offset=end,
    )


def _format_clauses(clauses: list[Clause]) -> str:
    if not clauses:
        return "(none)"
    lines = []
    for clause in clauses:
        level = clause.risk_level.value if clause.risk_level else "unrated"
        lines.append(f"- [{clause.type.value}/{level}] {clause.text[:160]}")
    return "\n".join(lines)


class AnalysisEngine:
    """Stateless request/response analysis functions over one completion client."""

    def __init__(
        self,
        *,
        client: BaseCompletionClient,
        model: str,
        temperature: float = 0.0,
        timeout_seconds: float = 60,
        system_prompt: str = "",
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._timeout_seconds = timeout_seconds
        self._system_prompt = system_prompt
        self._prompts = load_prompt_templates(prompt_dir)

    async def analyze_document(self, document_text: str) -> DocumentOverview:
        """Summary, document type, parties and dates."""
        raw = await self._call(
            "analyze_document", document_text=document_text[:ANALYZE_TEXT_LIMIT]
        )
        try:
            return build_overview(parse_json_output(raw))
        except MalformedOutputError as exc:
            Log.warning(f"Document analysis output malformed, using fallback: {exc}")
            return DocumentOverview(summary=raw[:FALLBACK_SUMMARY_CHARS])

    async def detect_clauses(self, document_text: str) -> list[Clause]:
        raw = await self._call(
            "detect_clauses", document_text=document_text[:CLAUSES_TEXT_LIMIT]
        )
        try:
            clauses = build_clauses(parse_json_output(raw))
        except MalformedOutputError as exc:
            Log.warning(f"Clause detection output malformed, using fallback: {exc}")
            return fallback_clauses(document_text)
        return [locate_clause(document_text, clause) for clause in clauses]

    async def calculate_risk_score(
        self, document_text: str, clauses: list[Clause]
    ) -> RiskAssessment:
        raw = await self._call(
            "risk_score",
            document_text=document_text[:RISK_TEXT_LIMIT],
            clauses=_format_clauses(clauses),
        )
        try:
            return build_risk_assessment(parse_json_output(raw))
        except MalformedOutputError as exc:
            Log.warning(f"Risk assessment output malformed, using fallback: {exc}")
            return fallback_risk_assessment()

    async def generate_next_steps(self, document_text: str, document_type: str) -> NextSteps:
        raw = await self._call(
            "next_steps",
            document_text=document_text[:NEXT_STEPS_TEXT_LIMIT],
            document_type=document_type or "Unknown",
        )
        try:
            return build_next_steps(parse_json_output(raw))
        except MalformedOutputError as exc:
            Log.warning(f"Next steps output malformed, using fallback: {exc}")
            return fallback_next_steps()

    async def answer_question(
        self, document_text: str, question: str, language: str = "English"
    ) -> str:
        """Plain-text answer grounded only in ``document_text``."""
        return await self._call(
            "answer_question",
            document_text=document_text[:QUESTION_TEXT_LIMIT],
            question=question,
            language=language or "English",
        )

    async def translate(self, content: str, target_language: str) -> str:
        return await self._call(
            "translate", content=content, target_language=target_language
        )

    async def _call(self, task: str, **fields: str) -> str:
        prompt = self._prompts[task].format(**fields)
        Log.debug(f"{task} prompt:\n{prompt}")
        try:
            raw = await asyncio.wait_for(
                self._client.complete(
                    task=task,
                    model=self._model,
                    temperature=self._temperature,
                    system_prompt=self._system_prompt,
                    user_prompt=prompt,
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError(
                f"AI provider timed out after {self._timeout_seconds}s"
            ) from exc
        Log.debug(f"{task} raw response:\n{raw}")
        return raw
