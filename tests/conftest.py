"""Shared test fixtures for daydigest."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from daydigest.core.config import DigestConfig
from daydigest.core.models import (
    AssistantSession,
    BrowserVisit,
    CollectedActivity,
    GitCommit,
    SearchQuery,
    ShellCommand,
)
from daydigest.llm.client import LLMResponse
from tests.helpers.factories import at

FIXTURES_DIR = Path(__file__).parent / "fixtures"

DAYDIGEST_ENV_VARS = (
    "DAYDIGEST_PRIVACY_TIER",
    "DAYDIGEST_DATA_DIR",
    "DAYDIGEST_SANITIZATION_LEVEL",
    "DAYDIGEST_LLM_PROVIDER",
    "DAYDIGEST_LLM_MODEL",
    "DAYDIGEST_LLM_BASE_URL",
    "DAYDIGEST_DEMO",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    for name in DAYDIGEST_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def config(data_dir):
    """Default config writing history and logs under a temp directory."""
    cfg = DigestConfig.from_dict({})
    cfg.data_dir = data_dir
    return cfg


@pytest.fixture
def activity_path():
    return FIXTURES_DIR / "activity.json"


@pytest.fixture
def sample_activity():
    """A small mixed day: dev browsing, a search, shell, an assistant prompt, a commit."""
    return CollectedActivity(
        visits=[
            BrowserVisit(
                url="https://github.com/pallets/click/issues/42",
                title="Option parsing bug · Issue #42 · pallets/click",
                time=at(9, 5),
            ),
            BrowserVisit(
                url="https://docs.python.org/3/library/dataclasses.html",
                title="dataclasses - Data Classes",
                time=at(9, 20),
            ),
            BrowserVisit(
                url="https://www.youtube.com/watch?v=abc123",
                title="Lofi beats to code to",
                time=at(10, 0),
            ),
        ],
        searches=[SearchQuery(query="python dataclass frozen vs slots", time=at(9, 15), engine="google")],
        shell=[ShellCommand(cmd="pytest -x tests/unit", time=at(9, 30))],
        assistant=[
            AssistantSession(
                prompt="Why does this test fail with a KeyError?", time=at(9, 40), project="daydigest",
            ),
        ],
        commits=[
            GitCommit(
                hash="a1b2c3d", message="fix(parser): handle empty option values",
                time=at(10, 15), repo="daydigest", insertions=12, deletions=3,
            ),
        ],
    )


@pytest.fixture
def mock_llm_client():
    """LLM client stand-in whose complete() returns a canned JSON reply."""
    client = MagicMock()
    client.complete.return_value = LLMResponse(
        content="[]", model="test-model", input_tokens=10, output_tokens=5,
    )
    return client
