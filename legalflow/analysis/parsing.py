"""Structured-output parsing with the recovery rules shared by every analysis call.

Order: strict JSON parse, then the first fenced code block, then the
caller's deterministic fallback (``MalformedOutputError`` signals the latter).
"""

import json
import re
from typing import Any

from legalflow.analysis.exceptions import MalformedOutputError
from legalflow.analysis.models import (
    Clause,
    ClauseType,
    DocumentOverview,
    NextStep,
    NextSteps,
    RiskAssessment,
    RiskLevel,
)

_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def parse_json_output(raw: str) -> Any:
    """Parse model output as JSON, retrying on a fenced code block.

    Raises:
        MalformedOutputError: if neither attempt yields valid JSON.
    """
    try:
        return json.loads(raw.strip())
    except json.JSONDecodeError:
        pass

    match = _FENCED_BLOCK_RE.search(raw)
    if match is None:
        raise MalformedOutputError("Response is not JSON and has no fenced code block")
    try:
        return json.loads(match.group(1).strip())
    except json.JSONDecodeError as exc:
        raise MalformedOutputError(f"Invalid JSON in fenced code block: {exc}") from exc


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedOutputError(f"{what} must be a JSON object")
    return data


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "null":
        return None
    return text


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _risk_level(value: Any) -> RiskLevel | None:
    try:
        return RiskLevel(str(value).strip().lower())
    except ValueError:
        return None


def build_overview(data: Any) -> DocumentOverview:
    obj = _require_object(data, "Document analysis")
    return DocumentOverview(
        summary=str(obj.get("summary") or ""),
        document_type=str(obj.get("documentType") or "Unknown"),
        parties=_str_list(obj.get("parties")),
        effective_date=_optional_str(obj.get("effectiveDate")),
        expiry_date=_optional_str(obj.get("expiryDate")),
    )


def build_clauses(data: Any) -> list[Clause]:
    """Keep only entries that carry both a text and a known clause type."""
    if not isinstance(data, list):
        raise MalformedOutputError("Clause detection result must be a JSON array")
    clauses: list[Clause] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        raw_type = item.get("type")
        if not text or not raw_type:
            continue
        try:
            clause_type = ClauseType(str(raw_type).strip().lower())
        except ValueError:
            continue
        clauses.append(
            Clause(
                text=str(text),
                type=clause_type,
                explanation=str(item.get("explanation") or ""),
                risk_level=_risk_level(item.get("riskLevel")),
            )
        )
    return clauses


def build_risk_assessment(data: Any) -> RiskAssessment:
    obj = _require_object(data, "Risk assessment")
    score = _risk_level(obj.get("score"))
    if score is None:
        raise MalformedOutputError(f"Unknown risk score: {obj.get('score')!r}")
    return RiskAssessment(
        score=score,
        reasoning=str(obj.get("reasoning") or ""),
        top_risks=_str_list(obj.get("topRisks")),
    )


def build_next_steps(data: Any) -> NextSteps:
    obj = _require_object(data, "Next steps")
    raw_steps = obj.get("steps")
    if not isinstance(raw_steps, list):
        raise MalformedOutputError("'steps' must be a list")
    steps = []
    for item in raw_steps:
        if not isinstance(item, dict):
            continue
        action = item.get("action") or item.get("step")
        if not action:
            continue
        steps.append(NextStep(action=str(action), rationale=str(item.get("rationale") or "")))
    return NextSteps(steps=steps, disclaimer=str(obj.get("disclaimer") or "Not legal advice"))
