"""Shared test fixtures."""

from __future__ import annotations

import random
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from catcircle.matching import MatchScorer
from catcircle.schemas.config import ApiSettings, MatchingSettings, PaymentSettings
from catcircle.shared.api_client import ApiClient
from catcircle.shared.llm_client import LLMClient
from catcircle.shared.storage import LocalDB, MemoryStore


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    cfg = tmp_path / "catcircle.yml"
    cfg.write_text(
        """\
storage_path: "{storage}"
api:
  latency_seconds: 0
matching:
  jitter: 0
""".format(storage=str(tmp_path / "storage.json"))
    )
    return cfg


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def db(store: MemoryStore) -> LocalDB:
    """LocalDB over an in-memory store, seeded from fixtures."""
    local = LocalDB(store)
    local.init()
    return local


@pytest.fixture
def scorer() -> MatchScorer:
    return MatchScorer(MatchingSettings(), rng=random.Random(42))


@pytest.fixture
def api(db: LocalDB, scorer: MatchScorer) -> ApiClient:
    """Local-mode API client with no simulated latency."""
    return ApiClient(db, settings=ApiSettings(latency_seconds=0), scorer=scorer)


@pytest.fixture
def instant_payment() -> PaymentSettings:
    return PaymentSettings(processing_seconds=0, success_seconds=0)


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Return an LLMClient with a mocked OpenAI SDK underneath."""
    client = LLMClient.__new__(LLMClient)
    client._client = AsyncMock()
    client.model = "gpt-4o"
    client.max_tokens = 2048
    return client
