"""Tests for AnalysisEngine: prompts, fallbacks and timeouts."""

from pathlib import Path
from unittest.mock import patch

import pytest

from legalflow.analysis.engine import (
    CLAUSES_TEXT_LIMIT,
    AnalysisEngine,
    fallback_next_steps,
    fallback_risk_assessment,
    locate_clause,
)
from legalflow.analysis.exceptions import AnalysisError, ProviderError
from legalflow.analysis.models import Clause, ClauseType, RiskLevel


class TestAnalyzeDocument:
    @pytest.mark.asyncio
    async def test_returns_overview(self, scripted_client, make_engine, legal_text: str) -> None:
        engine = make_engine(scripted_client())
        overview = await engine.analyze_document(legal_text)
        assert overview.document_type == "Payment Agreement"
        assert overview.parties == ["Jane Doe"]
        assert overview.effective_date == "2024-01-15"

    @pytest.mark.asyncio
    async def test_fallback_uses_raw_output_prefix(self, scripted_client, make_engine) -> None:
        raw = "Plain prose answer " * 30
        engine = make_engine(scripted_client(analyze_document=raw))
        overview = await engine.analyze_document("text")
        assert overview.summary == raw[:200]
        assert overview.document_type == "Unknown"
        assert overview.parties == []
        assert overview.effective_date is None

    @pytest.mark.asyncio
    async def test_prompt_contains_document_text(self, scripted_client, make_engine) -> None:
        client = scripted_client()
        await make_engine(client).analyze_document("clinical lease input")
        assert "clinical lease input" in str(client.calls[0]["user_prompt"])


class TestDetectClauses:
    @pytest.mark.asyncio
    async def test_attaches_source_span(self, scripted_client, make_engine, legal_text: str) -> None:
        clauses = await make_engine(scripted_client()).detect_clauses(legal_text)
        assert len(clauses) == 1
        clause = clauses[0]
        assert clause.start_offset is not None and clause.end_offset is not None
        assert legal_text[clause.start_offset : clause.end_offset] == clause.text

    @pytest.mark.asyncio
    async def test_fenced_output_is_recovered(self, scripted_client, make_engine) -> None:
        raw = '```json\n[{"text": "Fee", "type": "payment"}]\n```'
        clauses = await make_engine(scripted_client(detect_clauses=raw)).detect_clauses("Fee")
        assert [c.type for c in clauses] == [ClauseType.PAYMENT]

    @pytest.mark.asyncio
    async def test_fallback_clause_from_document_prefix(self, scripted_client, make_engine) -> None:
        text = "x" * 500
        clauses = await make_engine(scripted_client(detect_clauses="nope")).detect_clauses(text)
        assert len(clauses) == 1
        assert clauses[0].text == "x" * 200 + "..."
        assert clauses[0].type is ClauseType.OBLIGATION
        assert clauses[0].risk_level is RiskLevel.MEDIUM
        assert clauses[0].explanation == "Key clause identified in document"

    @pytest.mark.asyncio
    async def test_fallback_is_empty_for_empty_document(self, scripted_client, make_engine) -> None:
        clauses = await make_engine(scripted_client(detect_clauses="nope")).detect_clauses("")
        assert clauses == []

    @pytest.mark.asyncio
    async def test_prompt_truncates_document(self, scripted_client, make_engine) -> None:
        client = scripted_client()
        text = "a" * (CLAUSES_TEXT_LIMIT + 10) + "TAIL"
        await make_engine(client).detect_clauses(text)
        assert "TAIL" not in str(client.calls[0]["user_prompt"])


class TestRiskScore:
    @pytest.mark.asyncio
    async def test_unparsable_output_falls_back(self, scripted_client, make_engine) -> None:
        engine = make_engine(scripted_client(risk_score="not json"))
        risk = await engine.calculate_risk_score("text", [])
        assert risk == fallback_risk_assessment()
        assert risk.to_dict() == {
            "score": "medium",
            "reasoning": "Unable to fully assess risk",
            "topRisks": ["Unable to assess"],
        }

    @pytest.mark.asyncio
    async def test_prompt_lists_detected_clauses(self, scripted_client, make_engine) -> None:
        client = scripted_client()
        clause = Clause(text="Termination at will", type=ClauseType.RISK, risk_level=RiskLevel.HIGH)
        await make_engine(client).calculate_risk_score("text", [clause])
        assert "[risk/high] Termination at will" in str(client.calls[0]["user_prompt"])


class TestNextSteps:
    @pytest.mark.asyncio
    async def test_prompt_mentions_document_type(self, scripted_client, make_engine) -> None:
        client = scripted_client()
        await make_engine(client).generate_next_steps("text", "Lease")
        assert "reviewing this Lease" in str(client.calls[0]["user_prompt"])

    @pytest.mark.asyncio
    async def test_malformed_output_falls_back(self, scripted_client, make_engine) -> None:
        steps = await make_engine(scripted_client(next_steps="[]")).generate_next_steps("t", "")
        assert steps == fallback_next_steps()


class TestQuestionsAndTranslation:
    @pytest.mark.asyncio
    async def test_answer_is_returned_verbatim(self, scripted_client, make_engine) -> None:
        client = scripted_client()
        answer = await make_engine(client).answer_question(
            "The fee is $100.", "What is the fee?", "Spanish"
        )
        prompt = str(client.calls[0]["user_prompt"])
        assert answer == "The fee is $100."
        assert "What is the fee?" in prompt
        assert "Spanish" in prompt
        assert "not contained in the document" in prompt

    @pytest.mark.asyncio
    async def test_translate(self, scripted_client, make_engine) -> None:
        client = scripted_client(translate="Hola")
        assert await make_engine(client).translate("Hello", "Spanish") == "Hola"
        assert "Spanish" in str(client.calls[0]["user_prompt"])


class TestProviderFailures:
    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, scripted_client, make_engine) -> None:
        engine = make_engine(scripted_client(detect_clauses=ProviderError("quota")))
        with pytest.raises(ProviderError, match="quota"):
            await engine.detect_clauses("text")

    @pytest.mark.asyncio
    async def test_slow_call_times_out_as_provider_error(self, scripted_client, make_engine) -> None:
        client = scripted_client()
        client.delay_seconds = 1.0
        engine = make_engine(client, timeout_seconds=0.01)
        with pytest.raises(ProviderError, match="timed out"):
            await engine.analyze_document("text")


class TestEngineConfig:
    @pytest.mark.asyncio
    async def test_clamps_temperature(self, scripted_client, make_engine) -> None:
        client = scripted_client()
        await make_engine(client, temperature=0.9).analyze_document("t")
        assert client.calls[0]["temperature"] == 0.2

    def test_missing_prompt_dir_raises(self, scripted_client) -> None:
        with pytest.raises(AnalysisError, match="Failed to load prompt"):
            AnalysisEngine(client=scripted_client(), model="m", prompt_dir=Path("/nonexistent"))

    @pytest.mark.asyncio
    async def test_logs_prompt_in_debug(self, scripted_client, make_engine) -> None:
        engine = make_engine(scripted_client())
        with patch("legalflow.analysis.engine.Log") as mock_log:
            await engine.analyze_document("t")
        assert "prompt" in mock_log.debug.call_args_list[0].args[0].lower()


class TestLocateClause:
    def test_falls_back_to_prefix_match(self) -> None:
        text = "Intro. " + "The tenant shall pay rent monthly on the first day of each month." + " End"
        clause = Clause(
            text="The tenant shall pay rent monthly on the first day of each month, always.",
            type=ClauseType.PAYMENT,
        )
        located = locate_clause(text, clause)
        assert located.start_offset == 7
        assert located.end_offset == 7 + 50
        assert text[located.start_offset : located.end_offset] == clause.text[:50]

    def test_exact_match_spans_whole_clause(self) -> None:
        text = "Intro. Rent is due monthly. End"
        located = locate_clause(text, Clause(text="Rent is due monthly.", type=ClauseType.PAYMENT))
        assert (located.start_offset, located.end_offset) == (7, 27)

    def test_unmatched_clause_has_no_span(self) -> None:
        located = locate_clause("abc", Clause(text="zzz", type=ClauseType.RISK))
        assert located.start_offset is None
        assert located.end_offset is None
