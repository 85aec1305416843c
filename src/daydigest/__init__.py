"""daydigest - privacy-tiered digests of a day's personal activity.

Usage:
    from daydigest import DigestConfig, PrivacyTier, load_activity, run_digest

    config = DigestConfig.load(None)
    config.privacy_tier = PrivacyTier.CLASSIFIED
    result = run_digest(load_activity("activity.json"), config, today="2025-03-14")
    if not result.blocked:
        send(result.prompt)
"""

from daydigest.analyze.patterns import extract_patterns
from daydigest.core.config import DigestConfig
from daydigest.core.models import (
    CollectedActivity,
    LeakReport,
    PatternAnalysis,
    PrivacyTier,
    StructuredEvent,
    TopicHistory,
)
from daydigest.pipeline import DigestResult, run_digest
from daydigest.privacy.leaks import validate_leaks
from daydigest.sources.json_export import load_activity

__version__ = "0.1.0"

__all__ = [
    "CollectedActivity",
    "DigestConfig",
    "DigestResult",
    "LeakReport",
    "PatternAnalysis",
    "PrivacyTier",
    "StructuredEvent",
    "TopicHistory",
    "extract_patterns",
    "load_activity",
    "run_digest",
    "validate_leaks",
]
