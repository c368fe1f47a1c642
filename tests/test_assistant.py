"""Tests for CatAssistant — advice, fallback, sharing, triage and drafts."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from catcircle.assistant.agent import SHARED_ADVICE_TAGS, CatAssistant, format_catalog, format_history
from catcircle.assistant.knowledge import FALLBACK_CONTEXT
from catcircle.assistant.prompts import FALLBACK_MESSAGE, TRIAGE_WARNING
from catcircle.errors import AssistantResponseError
from catcircle.schemas.assistant import AdviceMetadata, AssistantMessage, TriageResult
from catcircle.schemas.config import AssistantSettings
from catcircle.schemas.feed import PostType, RiskLevel
from catcircle.schemas.profiles import OwnerProfile
from catcircle.shared import fixtures
from catcircle.shared.llm_client import DryRunClient

ADVICE_JSON = json.dumps({
    "risk_level": "Medium",
    "analysis": "Skipping meals for a day is worth watching closely.",
    "actionable_steps": ["Offer warmed wet food.", "Call the vet if it lasts 24h."],
    "citations": ["Loss of Appetite"],
    "recommended_product_ids": ["pr1", "pr_missing"],
    "community_summary": "Appetite loss over 24h needs a vet.",
})


def _triage_json(category: str, risk: str, post_type: str = "PROBLEM") -> str:
    return json.dumps({
        "category": category,
        "risk_level": risk,
        "should_go_to_vet": category == "HEALTH",
        "suggested_post_type": post_type,
        "reasoning": "test",
    })


def _client(structured: str | Exception = ADVICE_JSON, simple: str = "Polished! #cats"):
    structured_mock = (
        AsyncMock(side_effect=structured)
        if isinstance(structured, Exception)
        else AsyncMock(return_value=structured)
    )
    return SimpleNamespace(
        structured_completion=structured_mock,
        simple_completion=AsyncMock(return_value=simple),
    )


def _assistant(client=None) -> CatAssistant:
    return CatAssistant(client or _client(), fixtures.seed_products())


def _owner() -> OwnerProfile:
    return fixtures.seed_owners()[0]


class TestPromptBuilding:
    def test_catalog_lines(self) -> None:
        catalog = format_catalog(fixtures.seed_products())
        assert catalog.splitlines()[0].startswith("- ID: pr1, Name: Organic Salmon Bites, Price: 12.99USD")

    def test_history_window(self) -> None:
        history = [AssistantMessage(role="user", content=f"m{i}") for i in range(10)]
        rendered = format_history(history, 6)
        assert rendered.splitlines() == [f"user: m{i}" for i in range(4, 10)]

    def test_empty_history(self) -> None:
        assert format_history([], 6) == "(none)"

    def test_prompt_contains_context_catalog_and_query(self) -> None:
        prompt = _assistant().build_advice_prompt("xyz", [])
        assert FALLBACK_CONTEXT in prompt
        assert "ID: pr3" in prompt
        assert 'USER INQUIRY: "xyz"' in prompt

    def test_prompt_includes_matching_knowledge(self) -> None:
        prompt = _assistant().build_advice_prompt("my cat keeps vomiting", [])
        assert "[Source: Vomiting]" in prompt


class TestGetAdvice:
    @pytest.mark.asyncio
    async def test_parses_and_drops_unknown_products(self) -> None:
        client = _client()
        advice = await _assistant(client).get_advice("not eating")
        assert advice.risk_level is RiskLevel.MEDIUM
        assert advice.recommended_product_ids == ["pr1"]
        kwargs = client.structured_completion.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["output_model"].__name__ == "AdviceResponse"

    @pytest.mark.asyncio
    async def test_malformed_output_raises(self) -> None:
        with pytest.raises(AssistantResponseError):
            await _assistant(_client("not json")).get_advice("not eating")

    @pytest.mark.asyncio
    async def test_single_call(self) -> None:
        client = _client("{}")
        with pytest.raises(AssistantResponseError):
            await _assistant(client).get_advice("not eating")
        assert client.structured_completion.await_count == 1


class TestAsk:
    @pytest.mark.asyncio
    async def test_success_appends_user_and_reply(self) -> None:
        history: list[AssistantMessage] = []
        reply = await _assistant().ask("Mochi stopped eating", history)
        assert [m.role for m in history] == ["user", "assistant"]
        assert history[-1] is reply
        assert reply.content.startswith("Skipping meals")
        assert reply.metadata is not None
        assert reply.metadata.risk_level is RiskLevel.MEDIUM
        assert reply.metadata.citations == ["Loss of Appetite"]

    @pytest.mark.asyncio
    async def test_network_failure_gives_fallback(self) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = _client(openai.APIConnectionError(request=request))
        history: list[AssistantMessage] = []

        reply = await _assistant(client).ask("help", history)

        assert reply.id == "error"
        assert reply.content == FALLBACK_MESSAGE
        assert reply.metadata is None
        assert len(history) == 2
        assert client.structured_completion.await_count == 1

    @pytest.mark.asyncio
    async def test_malformed_output_gives_fallback(self) -> None:
        reply = await _assistant(_client('{"risk_level": "Low"}')).ask("help", [])
        assert reply.content == FALLBACK_MESSAGE
        assert reply.metadata is None

    @pytest.mark.asyncio
    async def test_prior_history_goes_into_prompt(self) -> None:
        client = _client()
        history = [
            AssistantMessage(role="user", content="first question"),
            AssistantMessage(role="assistant", content="first answer"),
        ]
        await _assistant(client).ask("second question", history)
        prompt = client.structured_completion.call_args.kwargs["user_message"]
        assert "user: first question" in prompt
        assert "assistant: first answer" in prompt
        assert "user: second question" not in prompt

    @pytest.mark.asyncio
    async def test_dry_run_client(self) -> None:
        reply = await CatAssistant(DryRunClient(), fixtures.seed_products()).ask("not eating", [])
        assert reply.metadata is not None
        assert reply.metadata.recommended_product_ids == ["pr1"]

    @pytest.mark.asyncio
    async def test_recommended_products(self) -> None:
        assistant = _assistant()
        reply = await assistant.ask("not eating", [])
        assert [p.id for p in assistant.recommended_products(reply)] == ["pr1"]


class TestShareSummary:
    def _reply(self) -> AssistantMessage:
        return AssistantMessage(
            role="assistant",
            content="Full analysis.",
            metadata=AdviceMetadata(
                risk_level=RiskLevel.LOW,
                actionable_steps=["Brush daily", "Check gums"],
                community_summary="Brushing keeps teeth healthy.",
            ),
        )

    def test_creates_care_tip_post(self) -> None:
        owner = _owner()
        post = _assistant().share_summary(self._reply(), owner)
        assert post.type is PostType.CARE_TIPS
        assert post.tags == SHARED_ADVICE_TAGS
        assert post.likes == 0
        assert post.tips == 0
        assert post.comments == []
        assert post.owner_id == owner.id
        assert post.cat_id == "cat_mochi"

    def test_content_has_summary_and_bullets(self) -> None:
        post = _assistant().share_summary(self._reply(), _owner())
        assert post.content == (
            "💡 AI Assistant Summary:\n"
            "Brushing keeps teeth healthy.\n"
            "\n"
            "Key Recommendations:\n"
            "• Brush daily\n"
            "• Check gums"
        )

    def test_falls_back_to_content_without_summary(self) -> None:
        reply = AssistantMessage(
            role="assistant",
            content="Full analysis.",
            metadata=AdviceMetadata(risk_level=RiskLevel.LOW),
        )
        post = _assistant().share_summary(reply, _owner())
        assert post.content == "💡 AI Assistant Summary:\nFull analysis."

    def test_owner_without_cat(self) -> None:
        owner = OwnerProfile(id="owner_x", account_name="X")
        assert _assistant().share_summary(self._reply(), owner).cat_id == "unknown"

    def test_requires_metadata(self) -> None:
        with pytest.raises(ValueError):
            _assistant().share_summary(AssistantMessage(role="assistant", content="hi"), _owner())

    def test_fresh_ids(self) -> None:
        assistant = _assistant()
        a = assistant.share_summary(self._reply(), _owner())
        b = assistant.share_summary(self._reply(), _owner())
        assert a.id != b.id


class TestTriageAndDraft:
    @pytest.mark.asyncio
    async def test_triage_uses_fast_model(self) -> None:
        client = _client(_triage_json("BEHAVIOR", "Low", "CARE_TIPS"))
        assistant = CatAssistant(client, [], settings=AssistantSettings(fast_model="mini"))
        result = await assistant.triage("scratching the sofa")
        assert isinstance(result, TriageResult)
        assert client.structured_completion.call_args.kwargs["model"] == "mini"

    @pytest.mark.asyncio
    async def test_draft_post_strips(self) -> None:
        client = _client(simple="  Purrfect day! #cats \n")
        text = await _assistant(client).draft_post("nap time", PostType.DAILY, "Witty")
        assert text == "Purrfect day! #cats"
        prompt = client.simple_completion.call_args.kwargs["user_message"]
        assert "sarcastic" in prompt
        assert "Post Category: DAILY" in prompt

    @pytest.mark.asyncio
    async def test_empty_draft_uses_placeholder(self) -> None:
        client = _client()
        await _assistant(client).draft_post("   ", PostType.DAILY)
        assert "A beautiful day in the cat circle" in client.simple_completion.call_args.kwargs["user_message"]

    @pytest.mark.asyncio
    async def test_daily_post_skips_triage(self) -> None:
        client = _client()
        outcome = await _assistant(client).draft_with_triage("sunbeam nap", PostType.DAILY)
        assert outcome.text == "Polished! #cats"
        assert outcome.triage is None
        client.structured_completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_health_problem_is_redirected(self) -> None:
        client = _client(_triage_json("HEALTH", "Medium"))
        outcome = await _assistant(client).draft_with_triage("blood in urine", PostType.PROBLEM)
        assert outcome.warning == TRIAGE_WARNING
        assert outcome.text is None
        client.simple_completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_high_risk_behavior_is_redirected(self) -> None:
        client = _client(_triage_json("BEHAVIOR", "High"))
        outcome = await _assistant(client).draft_with_triage("attacking everyone", PostType.PROBLEM)
        assert outcome.warning == TRIAGE_WARNING

    @pytest.mark.asyncio
    async def test_low_risk_problem_is_drafted(self) -> None:
        client = _client(_triage_json("BEHAVIOR", "Low"))
        outcome = await _assistant(client).draft_with_triage("won't use new bed", PostType.PROBLEM)
        assert outcome.text == "Polished! #cats"
        assert outcome.triage is not None
        assert outcome.triage.risk_level is RiskLevel.LOW
