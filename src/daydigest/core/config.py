"""Configuration resolution: explicit values > env > defaults."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from daydigest.core.errors import ConfigError
from daydigest.core.models import PrivacyTier

SANITIZATION_LEVELS = ("standard", "aggressive")
LLM_PROVIDERS = ("anthropic", "openai", "openai-compatible")
SENSITIVITY_ACTIONS = ("exclude", "redact")

DEFAULT_DATA_DIR = "~/.daydigest"


def redact_api_key(key: str | None) -> str | None:
    """Redact an API key, showing only the first 4 and last 4 characters.

    Short keys (8 chars or fewer) are fully redacted as '****'.
    """
    if key is None:
        return None
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}...{key[-4:]}"


@dataclass
class LLMConfig:
    """Configuration for the optional LLM classification provider.

    Environment variables:
    - DAYDIGEST_LLM_PROVIDER: override provider
    - DAYDIGEST_LLM_MODEL: override model
    - DAYDIGEST_LLM_BASE_URL: override base_url (Ollama, vLLM, ...)
    - ANTHROPIC_API_KEY / OPENAI_API_KEY: provider credentials
    """

    provider: str = "anthropic"
    model: str = "claude-3-5-haiku-latest"
    temperature: float = 0.3
    max_tokens: int = 1500
    base_url: str | None = None
    api_key: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> LLMConfig:
        config = cls()

        env_provider = os.environ.get("DAYDIGEST_LLM_PROVIDER")
        if env_provider:
            config.provider = env_provider
        env_model = os.environ.get("DAYDIGEST_LLM_MODEL")
        if env_model:
            config.model = env_model
        env_base_url = os.environ.get("DAYDIGEST_LLM_BASE_URL")
        if env_base_url:
            config.base_url = env_base_url

        for key in ("provider", "model", "temperature", "max_tokens", "base_url", "api_key"):
            if key in data:
                setattr(config, key, data[key])

        if config.provider not in LLM_PROVIDERS:
            raise ConfigError(
                f"Unknown LLM provider: {config.provider!r}. Supported: {', '.join(LLM_PROVIDERS)}"
            )
        return config

    def resolve_api_key(self) -> str | None:
        """Resolve the API key: explicit > env var per provider."""
        if self.api_key:
            return self.api_key
        if self.provider == "anthropic":
            return os.environ.get("ANTHROPIC_API_KEY")
        return os.environ.get("OPENAI_API_KEY")


@dataclass
class DedupConfig:
    max_visits_per_domain: int = 5
    max_other_total: int = 20

    @classmethod
    def from_dict(cls, data: dict) -> DedupConfig:
        config = cls()
        if "max_visits_per_domain" in data:
            config.max_visits_per_domain = int(data["max_visits_per_domain"])
        if "max_other_total" in data:
            config.max_other_total = int(data["max_other_total"])
        return config


@dataclass
class SanitizeConfig:
    """Text and URL scrubbing options.

    ``level`` is ``standard`` (keep non-sensitive query params) or
    ``aggressive`` (reduce URLs to scheme://host/path).
    """

    enabled: bool = True
    level: str = "standard"
    redact_paths: bool = True
    scrub_emails: bool = True
    excluded_domains: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> SanitizeConfig:
        config = cls()
        env_level = os.environ.get("DAYDIGEST_SANITIZATION_LEVEL")
        if env_level:
            config.level = env_level
        for key in ("enabled", "level", "redact_paths", "scrub_emails"):
            if key in data:
                setattr(config, key, data[key])
        if "excluded_domains" in data:
            config.excluded_domains = [str(d) for d in data["excluded_domains"]]
        if config.level not in SANITIZATION_LEVELS:
            raise ConfigError(
                f"Unknown sanitization level {config.level!r}. "
                f"Expected one of: {', '.join(SANITIZATION_LEVELS)}"
            )
        return config


@dataclass
class SensitivityConfig:
    """Sensitive-domain filtering for visits and searches, off by default.

    ``categories`` name built-in domain lists (adult, gambling, dating,
    health, finance, ...); ``custom_domains`` adds hosts or host/path
    prefixes of your own. ``action`` is ``exclude`` (drop the record) or
    ``redact`` (keep it behind a category label).
    """

    enabled: bool = False
    categories: list[str] = field(default_factory=list)
    custom_domains: list[str] = field(default_factory=list)
    action: str = "exclude"

    @classmethod
    def from_dict(cls, data: dict) -> SensitivityConfig:
        from daydigest.filter.sensitivity import CATEGORY_REGISTRY

        config = cls()
        if "enabled" in data:
            config.enabled = bool(data["enabled"])
        if "categories" in data:
            config.categories = [str(c) for c in data["categories"]]
        if "custom_domains" in data:
            config.custom_domains = [str(d) for d in data["custom_domains"]]
        if "action" in data:
            config.action = str(data["action"])

        if config.action not in SENSITIVITY_ACTIONS:
            raise ConfigError(
                f"Unknown sensitivity action {config.action!r}. "
                f"Expected one of: {', '.join(SENSITIVITY_ACTIONS)}"
            )
        unknown = [c for c in config.categories if c not in CATEGORY_REGISTRY]
        if unknown:
            raise ConfigError(f"Unknown sensitivity category: {', '.join(unknown)}")
        return config


@dataclass
class PatternConfig:
    enabled: bool = True
    cooccurrence_window: int = 30  # minutes
    min_cluster_size: int = 3
    track_recurrence: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> PatternConfig:
        config = cls()
        for key in ("enabled", "cooccurrence_window", "min_cluster_size", "track_recurrence"):
            if key in data:
                setattr(config, key, data[key])
        return config


@dataclass
class ClassifyConfig:
    use_llm: bool = False
    batch_size: int = 8
    llm: LLMConfig = field(default_factory=LLMConfig)

    @classmethod
    def from_dict(cls, data: dict) -> ClassifyConfig:
        config = cls(llm=LLMConfig.from_dict(data.get("llm", {})))
        if "use_llm" in data:
            config.use_llm = bool(data["use_llm"])
        if "batch_size" in data:
            config.batch_size = max(1, int(data["batch_size"]))
        return config


@dataclass
class DigestConfig:
    """Top-level run configuration.

    Environment variables:
    - DAYDIGEST_PRIVACY_TIER: default tier for prompt construction
    - DAYDIGEST_DATA_DIR: where topic history and run logs live
    - DAYDIGEST_SANITIZATION_LEVEL: see SanitizeConfig
    """

    privacy_tier: PrivacyTier = PrivacyTier.STANDARD
    data_dir: Path = field(default_factory=lambda: Path(DEFAULT_DATA_DIR).expanduser())
    profile: str = ""
    prompts_dir: Path | None = None
    dedup: DedupConfig = field(default_factory=DedupConfig)
    sanitize: SanitizeConfig = field(default_factory=SanitizeConfig)
    sensitivity: SensitivityConfig = field(default_factory=SensitivityConfig)
    patterns: PatternConfig = field(default_factory=PatternConfig)
    classify: ClassifyConfig = field(default_factory=ClassifyConfig)

    @classmethod
    def from_dict(cls, data: dict) -> DigestConfig:
        config = cls(
            dedup=DedupConfig.from_dict(data.get("dedup", {})),
            sanitize=SanitizeConfig.from_dict(data.get("sanitize", {})),
            sensitivity=SensitivityConfig.from_dict(data.get("sensitivity", {})),
            patterns=PatternConfig.from_dict(data.get("patterns", {})),
            classify=ClassifyConfig.from_dict(data.get("classify", {})),
        )

        env_tier = os.environ.get("DAYDIGEST_PRIVACY_TIER")
        if env_tier:
            config.privacy_tier = PrivacyTier.parse(env_tier)
        env_data_dir = os.environ.get("DAYDIGEST_DATA_DIR")
        if env_data_dir:
            config.data_dir = Path(env_data_dir).expanduser()

        if "privacy_tier" in data:
            config.privacy_tier = PrivacyTier.parse(data["privacy_tier"])
        if "data_dir" in data:
            config.data_dir = Path(data["data_dir"]).expanduser()
        if "profile" in data:
            config.profile = str(data["profile"])
        if data.get("prompts_dir"):
            config.prompts_dir = Path(data["prompts_dir"]).expanduser()
        return config

    @classmethod
    def load(cls, path: Path | None) -> DigestConfig:
        """Load from a JSON file, or defaults + env when ``path`` is None."""
        if path is None:
            return cls.from_dict({})
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)

    @property
    def history_path(self) -> Path:
        return self.data_dir / "topic-history.json"
