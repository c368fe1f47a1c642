"""Configuration schema — validates catcircle.yml."""

from pydantic import BaseModel, Field, model_validator


class MatchingSettings(BaseModel):
    """Tuning values for the discover-tab scorer.

    score = base + shared_interests * interest_weight + randrange(jitter),
    clamped to ceiling.
    """

    base: int = 65
    interest_weight: int = 8
    jitter: int = Field(default=5, ge=0)  # exclusive upper bound; 0 disables jitter
    ceiling: int = Field(default=99, le=100)

    @model_validator(mode="after")
    def check_base_below_ceiling(self) -> "MatchingSettings":
        if self.base > self.ceiling:
            raise ValueError(f"base ({self.base}) must not exceed ceiling ({self.ceiling})")
        return self


class ApiSettings(BaseModel):
    """Backend connection. Empty ``base_url`` means local-only mode."""

    base_url: str = ""
    latency_seconds: float = Field(default=0.6, ge=0)
    timeout_seconds: float = Field(default=10.0, gt=0)


class AssistantSettings(BaseModel):
    advice_model: str = "gpt-4o"
    fast_model: str = "gpt-4o-mini"
    max_tokens: int = 2_048
    history_window: int = Field(default=6, ge=0)  # prior messages included in the prompt


class PaymentSettings(BaseModel):
    """Delays for the simulated checkout (details -> processing -> success)."""

    processing_seconds: float = Field(default=2.0, ge=0)
    success_seconds: float = Field(default=1.5, ge=0)


class RewardSettings(BaseModel):
    post_reward: int = 10
    signup_balance: int = 500


class AppConfig(BaseModel):
    """Top-level configuration loaded from catcircle.yml.

    Every section has defaults, so an empty file (or no file) is valid.
    """

    storage_path: str = "./.catcircle/storage.json"

    api: ApiSettings = ApiSettings()
    matching: MatchingSettings = MatchingSettings()
    assistant: AssistantSettings = AssistantSettings()
    payment: PaymentSettings = PaymentSettings()
    rewards: RewardSettings = RewardSettings()
