"""Tests for configuration resolution."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from daydigest.core.config import (
    DigestConfig,
    LLMConfig,
    PatternConfig,
    SanitizeConfig,
    redact_api_key,
)
from daydigest.core.errors import ConfigError
from daydigest.core.models import PrivacyTier


class TestPrivacyTier:
    def test_parse_forms(self):
        assert PrivacyTier.parse("classified") is PrivacyTier.CLASSIFIED
        assert PrivacyTier.parse("DEIDENTIFIED") is PrivacyTier.DEIDENTIFIED
        assert PrivacyTier.parse("tier-2-rag") is PrivacyTier.RAG
        assert PrivacyTier.parse(PrivacyTier.STANDARD) is PrivacyTier.STANDARD

    def test_parse_unknown(self):
        with pytest.raises(ConfigError, match="Unknown privacy tier"):
            PrivacyTier.parse("secret")

    def test_strictness_order(self):
        assert PrivacyTier.DEIDENTIFIED.is_stricter_than(PrivacyTier.CLASSIFIED)
        assert PrivacyTier.CLASSIFIED.is_stricter_than(PrivacyTier.RAG)
        assert PrivacyTier.RAG.is_stricter_than(PrivacyTier.STANDARD)
        assert not PrivacyTier.STANDARD.is_stricter_than(PrivacyTier.STANDARD)


class TestLLMConfig:
    def test_defaults(self):
        config = LLMConfig()
        assert config.provider == "anthropic"
        assert config.temperature == 0.3
        assert config.api_key is None

    def test_env_then_explicit(self, monkeypatch):
        monkeypatch.setenv("DAYDIGEST_LLM_PROVIDER", "openai")
        monkeypatch.setenv("DAYDIGEST_LLM_MODEL", "gpt-4o-mini")
        config = LLMConfig.from_dict({"model": "gpt-4o"})
        assert config.provider == "openai"
        assert config.model == "gpt-4o"

    def test_unknown_provider(self):
        with pytest.raises(ConfigError, match="Unknown LLM provider"):
            LLMConfig.from_dict({"provider": "bedrock"})

    def test_resolve_api_key(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-anthropic")
        monkeypatch.setenv("OPENAI_API_KEY", "env-openai")
        assert LLMConfig(provider="anthropic").resolve_api_key() == "env-anthropic"
        assert LLMConfig(provider="openai").resolve_api_key() == "env-openai"
        assert LLMConfig(provider="openai", api_key="explicit").resolve_api_key() == "explicit"

    def test_redact_api_key(self):
        assert redact_api_key(None) is None
        assert redact_api_key("short") == "****"
        assert redact_api_key("sk-ant-abcdefgh1234") == "sk-a...1234"


class TestSectionConfigs:
    def test_sanitize_level_validated(self):
        with pytest.raises(ConfigError, match="sanitization level"):
            SanitizeConfig.from_dict({"level": "paranoid"})

    def test_sanitize_level_from_env(self, monkeypatch):
        monkeypatch.setenv("DAYDIGEST_SANITIZATION_LEVEL", "aggressive")
        assert SanitizeConfig.from_dict({}).level == "aggressive"
        assert SanitizeConfig.from_dict({"level": "standard"}).level == "standard"

    def test_pattern_defaults(self):
        config = PatternConfig.from_dict({})
        assert config.cooccurrence_window == 30
        assert config.min_cluster_size == 3
        assert config.track_recurrence is True


class TestDigestConfig:
    def test_defaults(self):
        config = DigestConfig.from_dict({})
        assert config.privacy_tier is PrivacyTier.STANDARD
        assert config.data_dir == Path("~/.daydigest").expanduser()
        assert config.history_path == config.data_dir / "topic-history.json"
        assert config.dedup.max_visits_per_domain == 5
        assert config.classify.use_llm is False

    def test_precedence_explicit_over_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DAYDIGEST_PRIVACY_TIER", "rag")
        monkeypatch.setenv("DAYDIGEST_DATA_DIR", str(tmp_path / "env"))
        assert DigestConfig.from_dict({}).privacy_tier is PrivacyTier.RAG
        config = DigestConfig.from_dict({"privacy_tier": "classified", "data_dir": str(tmp_path / "cfg")})
        assert config.privacy_tier is PrivacyTier.CLASSIFIED
        assert config.data_dir == tmp_path / "cfg"

    def test_nested_sections(self):
        config = DigestConfig.from_dict({
            "sanitize": {"excluded_domains": ["bank.com"]},
            "patterns": {"cooccurrence_window": 15},
            "classify": {"use_llm": True, "batch_size": 0, "llm": {"model": "m"}},
        })
        assert config.sanitize.excluded_domains == ["bank.com"]
        assert config.patterns.cooccurrence_window == 15
        assert config.classify.use_llm is True
        assert config.classify.batch_size == 1
        assert config.classify.llm.model == "m"

    def test_load_file(self, tmp_path):
        path = tmp_path / "daydigest.json"
        path.write_text(json.dumps({"privacy_tier": "deidentified", "profile": "backend engineer"}))
        config = DigestConfig.load(path)
        assert config.privacy_tier is PrivacyTier.DEIDENTIFIED
        assert config.profile == "backend engineer"

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Cannot read config file"):
            DigestConfig.load(path)

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ConfigError, match="JSON object"):
            DigestConfig.load(path)

    def test_load_none_is_defaults(self):
        assert DigestConfig.load(None).privacy_tier is PrivacyTier.STANDARD
