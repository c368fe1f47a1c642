"""Async OpenAI wrapper for the assistant.

Every call is a single attempt: the SDK's own retries are disabled and
failures propagate to the caller, which decides what the user sees.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from openai import AsyncOpenAI, OpenAIError
from openai.lib._pydantic import to_strict_json_schema
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
MAX_TOKENS = 2_048

TokensCallback = Callable[[int, int], None]
"""Called with (input_tokens, output_tokens) when a completion finishes."""


def response_format_for(model: type[BaseModel]) -> dict[str, Any]:
    """Build an OpenAI ``json_schema`` response format from a pydantic model.

    Strict mode rejects ``$ref`` nodes with sibling keys and optional
    properties, so the schema goes through the SDK's own strict converter.
    """
    return {
        "type": "json_schema",
        "json_schema": {
            "name": model.__name__,
            "schema": to_strict_json_schema(model),
            "strict": True,
        },
    }


class LLMClient:
    """Thin async wrapper around the OpenAI SDK.

    Provides two methods:
    - ``structured_completion`` — response constrained to a declared JSON schema.
    - ``simple_completion`` — free-text response.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = MAX_TOKENS,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens

    async def _complete(self, *, on_tokens: TokensCallback | None = None, **kwargs: Any) -> str:
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            logger.warning("Completion failed (%s): %s", kwargs.get("model"), exc)
            raise
        usage = getattr(response, "usage", None)
        if on_tokens and usage:
            on_tokens(getattr(usage, "prompt_tokens", 0), getattr(usage, "completion_tokens", 0))
        return response.choices[0].message.content or ""

    async def structured_completion(
        self,
        *,
        system: str,
        user_message: str,
        output_model: type[BaseModel],
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        """Single request whose response must satisfy ``output_model``'s JSON schema.

        Returns the raw text; validating it is the caller's job.
        """
        return await self._complete(
            model=model or self.model,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user_message},
            ],
            response_format=response_format_for(output_model),
            on_tokens=on_tokens,
        )

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        """Single request/response returning plain text."""
        return await self._complete(
            model=model or self.model,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user_message},
            ],
            on_tokens=on_tokens,
        )


# ======================================================================
# Dry-run client: no API calls
# ======================================================================

_DRY_RUN_JSON: dict[str, str] = {
    "AdviceResponse": json.dumps({
        "risk_level": "Medium",
        "analysis": (
            "A short loss of appetite is common after changes at home, but cats that skip "
            "meals for more than a day risk fatty liver disease."
        ),
        "actionable_steps": [
            "Offer a small portion of a familiar, strong-smelling food.",
            "Track every meal for the next 24 hours.",
            "Book a vet visit if nothing is eaten within 24-48 hours.",
        ],
        "citations": ["Loss of Appetite"],
        "recommended_product_ids": ["pr1"],
        "community_summary": "Appetite dips happen, but a cat that stops eating for a day needs a vet.",
    }),
    "TriageResult": json.dumps({
        "category": "BEHAVIOR",
        "risk_level": "Low",
        "should_go_to_vet": False,
        "suggested_post_type": "CARE_TIPS",
        "reasoning": "Describes a routine habit with no medical symptoms.",
    }),
}

_DRY_RUN_DRAFT = (
    "Another purr-fect day in the circle! 🐾 Our little one spent the afternoon supervising "
    "the sunbeam and declared it a success. #CatCircle #DailyPurrs"
)


class DryRunClient:
    """Drop-in replacement for LLMClient that makes zero API calls."""

    async def structured_completion(
        self,
        *,
        system: str,
        user_message: str,
        output_model: type[BaseModel],
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        logger.info("[dry-run] structured completion: %s", output_model.__name__)
        return _DRY_RUN_JSON.get(output_model.__name__, "{}")

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        logger.info("[dry-run] simple completion")
        return _DRY_RUN_DRAFT
