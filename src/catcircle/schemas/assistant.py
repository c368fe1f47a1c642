"""Pydantic models for the AI assistant — model output and chat messages."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catcircle.schemas.base import CamelModel, new_id, now_ms
from catcircle.schemas.feed import PostType, RiskLevel


def _normalize_risk(v: object) -> object:
    # Models sometimes answer "high" or "HIGH"; anything else still fails validation.
    if isinstance(v, str):
        return v.strip().capitalize()
    return v


class AdviceResponse(BaseModel):
    """Structured advice the generative API must return.

    ``extra="forbid"`` puts ``additionalProperties: false`` in the declared
    schema and rejects unexpected keys on the way back in.
    """

    model_config = ConfigDict(extra="forbid")

    risk_level: RiskLevel = Field(description="Low, Medium, or High")
    analysis: str = Field(description="Detailed medical/behavioral advice.")
    actionable_steps: list[str] = Field(description="Specific steps to take.")
    citations: list[str] = Field(description="Sources or topics referenced.")
    recommended_product_ids: list[str] = Field(
        description="List of matching product IDs from catalog."
    )
    community_summary: str = Field(description="Short summary for social sharing.")

    @field_validator("risk_level", mode="before")
    @classmethod
    def coerce_risk(cls, v: object) -> object:
        return _normalize_risk(v)


class TriageCategory(str, Enum):
    HEALTH = "HEALTH"
    BEHAVIOR = "BEHAVIOR"


class TriageResult(BaseModel):
    """Classification of a post draft before the assistant polishes it."""

    model_config = ConfigDict(extra="forbid")

    category: TriageCategory = Field(description='"HEALTH" (medical risk) or "BEHAVIOR" (care/habit)')
    risk_level: RiskLevel = Field(description="Low, Medium, or High")
    should_go_to_vet: bool
    suggested_post_type: Literal["CARE_TIPS", "PROBLEM"] = Field(
        description='"CARE_TIPS" or "PROBLEM"'
    )
    reasoning: str = Field(description="Brief explanation.")

    @field_validator("risk_level", mode="before")
    @classmethod
    def coerce_risk(cls, v: object) -> object:
        return _normalize_risk(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @property
    def post_type(self) -> PostType:
        return PostType(self.suggested_post_type)

    @property
    def needs_assistant(self) -> bool:
        """True when a draft should be routed to the assistant instead."""
        return self.category == TriageCategory.HEALTH or self.risk_level == RiskLevel.HIGH


class AdviceMetadata(CamelModel):
    """Advice fields attached to an assistant-authored message."""

    risk_level: RiskLevel
    analysis: str | None = None
    actionable_steps: list[str] = []
    citations: list[str] = []
    follow_up_questions: list[str] = []
    community_summary: str | None = None
    recommended_product_ids: list[str] = []

    @classmethod
    def from_advice(cls, advice: AdviceResponse) -> "AdviceMetadata":
        return cls(
            risk_level=advice.risk_level,
            analysis=advice.analysis,
            actionable_steps=advice.actionable_steps,
            citations=advice.citations,
            community_summary=advice.community_summary,
            recommended_product_ids=advice.recommended_product_ids,
        )


class AssistantMessage(CamelModel):
    id: str = Field(default_factory=new_id)
    role: Literal["user", "assistant"]
    content: str
    timestamp: int = Field(default_factory=now_ms)
    metadata: AdviceMetadata | None = None
