"""CatCircle assistant — advice, triage and post drafting."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

from openai import OpenAIError
from pydantic import BaseModel

from catcircle.assistant import prompts
from catcircle.assistant.knowledge import VET_KNOWLEDGE_BASE, KnowledgeEntry, retrieve_context
from catcircle.assistant.parsing import parse_structured
from catcircle.errors import AssistantResponseError
from catcircle.output.render import render_advice_post
from catcircle.schemas.assistant import (
    AdviceMetadata,
    AdviceResponse,
    AssistantMessage,
    TriageResult,
)
from catcircle.schemas.base import new_id, now_ms
from catcircle.schemas.config import AssistantSettings
from catcircle.schemas.feed import Post, PostType
from catcircle.schemas.mall import Product
from catcircle.schemas.profiles import OwnerProfile
from catcircle.shared.llm_client import TokensCallback

logger = logging.getLogger(__name__)

DraftStyle = Literal["Cute", "Witty", "Pro", "Story"]

SHARED_ADVICE_TAGS = ["AIAssistant", "CatCare"]


class CompletionClient(Protocol):
    """What the assistant needs from LLMClient / DryRunClient."""

    async def structured_completion(
        self,
        *,
        system: str,
        user_message: str,
        output_model: type[BaseModel],
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> str: ...

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> str: ...


@dataclass
class DraftOutcome:
    """Result of ``draft_with_triage``: either a polished draft or a warning."""

    text: str | None = None
    warning: str | None = None
    triage: TriageResult | None = None


def format_catalog(products: list[Product]) -> str:
    return "\n".join(
        f"- ID: {p.id}, Name: {p.name}, Price: {p.usd_price}USD, Desc: {p.description}"
        for p in products
    )


def format_history(history: list[AssistantMessage], window: int) -> str:
    if window <= 0 or not history:
        return "(none)"
    return "\n".join(f"{m.role}: {m.content}" for m in history[-window:])


class CatAssistant:
    """Advice/triage flow over an injected completion client.

    ``get_advice`` and ``triage`` raise on failure; ``ask`` is the call site
    that turns any failure into the scripted fallback message.
    """

    def __init__(
        self,
        client: CompletionClient,
        products: list[Product],
        *,
        settings: AssistantSettings | None = None,
        knowledge: tuple[KnowledgeEntry, ...] = VET_KNOWLEDGE_BASE,
    ) -> None:
        self.client = client
        self.products = products
        self.settings = settings or AssistantSettings()
        self.knowledge = knowledge

    @property
    def name(self) -> str:
        return "CatCircle Assistant"

    def build_advice_prompt(self, query: str, history: list[AssistantMessage]) -> str:
        return prompts.ADVICE_USER_TEMPLATE.format(
            context=retrieve_context(query, self.knowledge),
            catalog=format_catalog(self.products) or "(empty)",
            history=format_history(history, self.settings.history_window),
            query=query,
        )

    async def get_advice(
        self,
        query: str,
        history: list[AssistantMessage] | None = None,
        *,
        on_tokens: TokensCallback | None = None,
    ) -> AdviceResponse:
        """One call to the generative API, validated against ``AdviceResponse``.

        Raises ``AssistantResponseError`` on malformed output; client errors propagate.
        """
        raw = await self.client.structured_completion(
            system=prompts.ADVICE_SYSTEM_PROMPT,
            user_message=self.build_advice_prompt(query, history or []),
            output_model=AdviceResponse,
            model=self.settings.advice_model,
            on_tokens=on_tokens,
        )
        logger.debug("%s raw advice:\n%s", self.name, raw[:500])
        advice = parse_structured(raw, AdviceResponse)

        known = {p.id for p in self.products}
        unknown = [pid for pid in advice.recommended_product_ids if pid not in known]
        if unknown:
            logger.warning("Dropping product ids not in the catalog: %s", unknown)
            advice.recommended_product_ids = [
                pid for pid in advice.recommended_product_ids if pid in known
            ]
        return advice

    async def ask(
        self,
        query: str,
        history: list[AssistantMessage],
        *,
        on_tokens: TokensCallback | None = None,
    ) -> AssistantMessage:
        """Append the user's message and the assistant's reply to ``history``.

        Network and parse failures become a single fallback message; there is
        no retry.
        """
        user_msg = AssistantMessage(role="user", content=query)
        prior = list(history)
        history.append(user_msg)
        try:
            advice = await self.get_advice(query, prior, on_tokens=on_tokens)
        except (OpenAIError, AssistantResponseError) as exc:
            logger.error("%s failed: %s", self.name, exc)
            reply = AssistantMessage(id="error", role="assistant", content=prompts.FALLBACK_MESSAGE)
        else:
            reply = AssistantMessage(
                role="assistant",
                content=advice.analysis,
                metadata=AdviceMetadata.from_advice(advice),
            )
        history.append(reply)
        return reply

    def recommended_products(self, message: AssistantMessage) -> list[Product]:
        if message.metadata is None:
            return []
        by_id = {p.id: p for p in self.products}
        return [by_id[pid] for pid in message.metadata.recommended_product_ids if pid in by_id]

    def share_summary(self, message: AssistantMessage, owner: OwnerProfile) -> Post:
        """Turn a past assistant reply into a fresh CARE_TIPS post by ``owner``."""
        if message.metadata is None:
            raise ValueError("Only assistant replies with advice metadata can be shared")
        meta = message.metadata
        cat = owner.primary_cat
        return Post(
            id=new_id(),
            cat_id=cat.id if cat else "unknown",
            owner_id=owner.id,
            type=PostType.CARE_TIPS,
            content=render_advice_post(
                summary=meta.community_summary or message.content,
                steps=meta.actionable_steps,
            ),
            timestamp=now_ms(),
            likes=0,
            tips=0,
            comments=[],
            tags=list(SHARED_ADVICE_TAGS),
        )

    async def triage(self, query: str, *, on_tokens: TokensCallback | None = None) -> TriageResult:
        raw = await self.client.structured_completion(
            system=prompts.TRIAGE_SYSTEM_PROMPT,
            user_message=prompts.TRIAGE_USER_TEMPLATE.format(query=query),
            output_model=TriageResult,
            model=self.settings.fast_model,
            on_tokens=on_tokens,
        )
        return parse_structured(raw, TriageResult)

    async def draft_post(
        self,
        raw_content: str,
        post_type: PostType,
        style: DraftStyle = "Cute",
        *,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        """Polish a post in one of the four styles. Returns plain text."""
        text = await self.client.simple_completion(
            system=prompts.DRAFT_SYSTEM_PROMPT,
            user_message=prompts.DRAFT_USER_TEMPLATE.format(
                content=raw_content.strip() or prompts.EMPTY_DRAFT_CONTENT,
                post_type=post_type.value,
                style_instruction=prompts.STYLE_INSTRUCTIONS.get(style, prompts.STYLE_INSTRUCTIONS["Cute"]),
            ),
            model=self.settings.fast_model,
            on_tokens=on_tokens,
        )
        return text.strip()

    async def draft_with_triage(
        self,
        raw_content: str,
        post_type: PostType,
        style: DraftStyle = "Cute",
    ) -> DraftOutcome:
        """Draft a post, but route PROBLEM posts that look medical to the assistant."""
        triage = None
        if post_type == PostType.PROBLEM:
            triage = await self.triage(raw_content)
            if triage.needs_assistant:
                logger.info("Draft flagged by triage: %s / %s", triage.category.value, triage.risk_level.value)
                return DraftOutcome(warning=prompts.TRIAGE_WARNING, triage=triage)
        text = await self.draft_post(raw_content, post_type, style)
        return DraftOutcome(text=text, triage=triage)
