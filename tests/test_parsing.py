"""Tests for JSON extraction and strict schema parsing of model output."""

from __future__ import annotations

import json

import pytest

from catcircle.assistant.parsing import extract_json, parse_structured
from catcircle.errors import AssistantResponseError
from catcircle.schemas.assistant import AdviceResponse, TriageCategory, TriageResult
from catcircle.schemas.feed import PostType, RiskLevel

ADVICE = {
    "risk_level": "High",
    "analysis": "Straining to urinate is an emergency.",
    "actionable_steps": ["Go to the emergency vet now."],
    "citations": ["Urinary Issues"],
    "recommended_product_ids": [],
    "community_summary": "A blocked male cat is an emergency.",
}


class TestExtractJson:
    def test_plain_object(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_with_whitespace(self) -> None:
        assert extract_json('\n\n  {"a": {"b": [1, 2]}}  \n') == {"a": {"b": [1, 2]}}

    def test_trailing_text(self) -> None:
        assert extract_json('{"a": 1}\n\nHope this helps!') == {"a": 1}

    def test_json_code_fence(self) -> None:
        text = 'Here you go:\n\n```json\n{"risk_level": "Low"}\n```\n'
        assert extract_json(text) == {"risk_level": "Low"}

    def test_plain_code_fence(self) -> None:
        assert extract_json('```\n{"ok": true}\n```') == {"ok": True}

    def test_object_after_prose(self) -> None:
        assert extract_json('Sure! The result is {"x": "y"} as requested.') == {"x": "y"}

    def test_first_of_multiple_objects(self) -> None:
        assert extract_json('{"first": 1}\n{"second": 2}') == {"first": 1}

    def test_prose_only_raises(self) -> None:
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("Your cat is probably fine.")

    def test_truncated_raises(self) -> None:
        with pytest.raises(ValueError):
            extract_json('{"risk_level": "Low", "analysis": "cut o')

    def test_top_level_array_rejected(self) -> None:
        with pytest.raises(ValueError):
            extract_json("[1, 2, 3]")


class TestParseStructured:
    def test_valid_advice(self) -> None:
        advice = parse_structured(json.dumps(ADVICE), AdviceResponse)
        assert advice.risk_level is RiskLevel.HIGH
        assert advice.citations == ["Urinary Issues"]

    def test_risk_level_case_is_normalized(self) -> None:
        advice = parse_structured(json.dumps({**ADVICE, "risk_level": "medium"}), AdviceResponse)
        assert advice.risk_level is RiskLevel.MEDIUM

    def test_unknown_risk_level_fails_closed(self) -> None:
        with pytest.raises(AssistantResponseError, match="failed validation"):
            parse_structured(json.dumps({**ADVICE, "risk_level": "Critical"}), AdviceResponse)

    def test_missing_field_fails_closed(self) -> None:
        data = {k: v for k, v in ADVICE.items() if k != "community_summary"}
        with pytest.raises(AssistantResponseError):
            parse_structured(json.dumps(data), AdviceResponse)

    def test_extra_field_fails_closed(self) -> None:
        with pytest.raises(AssistantResponseError):
            parse_structured(json.dumps({**ADVICE, "diagnosis": "UTI"}), AdviceResponse)

    def test_wrong_type_fails_closed(self) -> None:
        with pytest.raises(AssistantResponseError):
            parse_structured(json.dumps({**ADVICE, "actionable_steps": "rest"}), AdviceResponse)

    def test_not_json_fails_closed(self) -> None:
        with pytest.raises(AssistantResponseError, match="AdviceResponse"):
            parse_structured("I'm not sure, sorry.", AdviceResponse)

    def test_triage(self) -> None:
        raw = json.dumps({
            "category": "health",
            "risk_level": "High",
            "should_go_to_vet": True,
            "suggested_post_type": "PROBLEM",
            "reasoning": "Blood in urine.",
        })
        triage = parse_structured(raw, TriageResult)
        assert triage.category is TriageCategory.HEALTH
        assert triage.post_type is PostType.PROBLEM
        assert triage.needs_assistant

    def test_triage_rejects_daily_post_type(self) -> None:
        raw = json.dumps({
            "category": "BEHAVIOR",
            "risk_level": "Low",
            "should_go_to_vet": False,
            "suggested_post_type": "DAILY",
            "reasoning": "Just a nap.",
        })
        with pytest.raises(AssistantResponseError):
            parse_structured(raw, TriageResult)


class TestDeclaredSchema:
    def test_advice_schema_forbids_extra_keys(self) -> None:
        schema = AdviceResponse.model_json_schema()
        assert schema["additionalProperties"] is False
        assert set(schema["required"]) == set(ADVICE)
