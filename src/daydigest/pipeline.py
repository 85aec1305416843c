"""End-to-end digest run: filter, classify, analyze, build and check the tier prompt."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date as date_cls
from typing import Any

from daydigest.analyze.patterns import extract_patterns, today_topics
from daydigest.analyze.recurrence import empty_topic_history, update_topic_history
from daydigest.classify.classifier import classify_activity
from daydigest.classify.llm import LLM_TIERS
from daydigest.core.config import DigestConfig
from daydigest.core.errors import ConfigError, HistoryError
from daydigest.core.logging import DigestLogger, Verbosity
from daydigest.core.models import (
    BrowserVisit,
    ClassificationResult,
    CollectedActivity,
    LeakReport,
    PatternAnalysis,
    PrivacyTier,
)
from daydigest.filter.categorize import Categorizer, RuleCategorizer, categorize_visits
from daydigest.filter.dedup import dedup_visits
from daydigest.filter.sanitize import filter_excluded_domains, sanitize_activity
from daydigest.filter.sensitivity import filter_sensitive_searches, filter_sensitive_visits
from daydigest.history.store import HistoryStore
from daydigest.privacy.leaks import validate_leaks
from daydigest.prompts.builders import build_tier_prompt
from daydigest.prompts.templates import template_id

logger = logging.getLogger(__name__)


@dataclass
class DigestResult:
    """Everything one run produced.

    ``prompt`` is only safe to hand off when ``blocked`` is False.
    """

    date: str
    tier: PrivacyTier
    record_count: int = 0
    sensitive_count: int = 0
    sensitive_by_category: dict[str, int] = field(default_factory=dict)
    excluded_count: int = 0
    collapsed_count: int = 0
    categorized: dict[str, list[BrowserVisit]] = field(default_factory=dict)
    classification: ClassificationResult = field(default_factory=ClassificationResult)
    patterns: PatternAnalysis = field(default_factory=PatternAnalysis)
    prompt: str = ""
    prompt_id: str = ""
    leak_report: LeakReport | None = None
    history_topics: int = 0
    history_error: str | None = None
    total_time: float = 0.0
    run_log: dict = field(default_factory=dict)

    @property
    def blocked(self) -> bool:
        return self.leak_report is None or not self.leak_report.passed

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "tier": self.tier.value,
            "record_count": self.record_count,
            "sensitive_count": self.sensitive_count,
            "sensitive_by_category": self.sensitive_by_category,
            "excluded_count": self.excluded_count,
            "collapsed_count": self.collapsed_count,
            "categories": {c: len(v) for c, v in self.categorized.items()},
            "classification": {
                "total_processed": self.classification.total_processed,
                "llm_classified": self.classification.llm_classified,
                "rule_classified": self.classification.rule_classified,
                "processing_time_ms": self.classification.processing_time_ms,
            },
            "events": [e.to_dict() for e in self.classification.events],
            "patterns": self.patterns.to_dict(),
            "prompt": self.prompt,
            "prompt_id": self.prompt_id,
            "blocked": self.blocked,
            "leak_report": self.leak_report.to_dict() if self.leak_report else None,
            "history_topics": self.history_topics,
            "history_error": self.history_error,
            "total_time": self.total_time,
            "run_log": self.run_log,
        }


def parse_day(value: str | None) -> str:
    """Normalize a digest day to ``YYYY-MM-DD``; the local date when None.

    Raises:
        ConfigError: ``value`` is not an ISO calendar date.
    """
    if value is None:
        return date_cls.today().isoformat()
    try:
        return date_cls.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise ConfigError(f"Invalid digest date {value!r}. Expected YYYY-MM-DD") from None


def _make_llm_client(config: DigestConfig):
    from daydigest.llm.client import LLMClient

    return LLMClient(config.classify.llm)


def run_digest(
    activity: CollectedActivity,
    config: DigestConfig | None = None,
    today: str | None = None,
    categorizer: Categorizer | None = None,
    llm_client=None,
    run_logger: DigestLogger | None = None,
    use_history: bool = True,
    verbosity: int = 0,
) -> DigestResult:
    """Run the full stage sequence over one day of activity.

    Stages: sensitivity filter, domain exclusion, dedup, sanitize,
    categorize, classify, pattern extraction (with topic history), tier
    prompt, leak check.

    An unreadable topic history is logged and replaced by an empty one.
    A failed history write raises :class:`HistoryError`; a ``today`` that
    is not a ``YYYY-MM-DD`` date raises :class:`ConfigError` before any
    stage runs.

    Args:
        activity: Raw collected records for the day.
        config: Run configuration; defaults plus environment when omitted.
        today: ``YYYY-MM-DD`` of the digest day; the local date when omitted.
        categorizer: Domain categorizer; the built-in rule table when omitted.
        llm_client: Client for LLM classification. Created from config when
            ``config.classify.use_llm`` is set and none is given. Only
            consulted for the ``standard`` and ``rag`` tiers.
        run_logger: Structured run logger; one writing under the data dir
            is created when omitted.
        use_history: Read and write the persisted topic history.
        verbosity: Console verbosity for a logger created here.
    """
    start_time = time.time()
    config = config or DigestConfig.load(None)
    today = parse_day(today)
    categorizer = categorizer or RuleCategorizer()
    tier = config.privacy_tier
    owns_logger = run_logger is None
    if run_logger is None:
        run_logger = DigestLogger(
            verbosity=Verbosity(min(verbosity, Verbosity.DEBUG)),
            data_dir=config.data_dir,
        )

    result = DigestResult(date=today, tier=tier, record_count=activity.total)
    run_logger.run_start(today, activity.total, tier.value)

    try:
        run_logger.stage_start("sensitivity", len(activity.visits) + len(activity.searches))
        visits, result.sensitive_by_category = filter_sensitive_visits(
            activity.visits, config.sensitivity,
        )
        searches, sensitive_searches = filter_sensitive_searches(
            activity.searches, config.sensitivity,
        )
        result.sensitive_count = sum(result.sensitive_by_category.values()) + sensitive_searches
        run_logger.stage_finish("sensitivity", len(visits) + len(searches))

        # Domain exclusion runs before dedup so excluded hosts never count.
        run_logger.stage_start("exclude", len(visits))
        visits, result.excluded_count = filter_excluded_domains(
            visits, config.sanitize.excluded_domains,
        )
        run_logger.stage_finish("exclude", len(visits))

        run_logger.stage_start("dedup", len(visits))
        deduped = dedup_visits(visits, config.dedup)
        result.collapsed_count = deduped.collapsed_count
        run_logger.stage_finish("dedup", len(deduped.visits))

        run_logger.stage_start("sanitize", activity.total)
        staged = CollectedActivity(
            visits=deduped.visits,
            searches=searches,
            shell=activity.shell,
            assistant=activity.assistant,
            commits=activity.commits,
        )
        sanitized, _ = sanitize_activity(staged, config.sanitize)
        run_logger.stage_finish("sanitize", sanitized.total)

        run_logger.stage_start("categorize", len(sanitized.visits))
        result.categorized = categorize_visits(
            sanitized.visits, categorizer, config.dedup.max_other_total,
        )
        run_logger.stage_finish("categorize", sum(len(v) for v in result.categorized.values()))

        if config.classify.use_llm and llm_client is None and tier in LLM_TIERS:
            llm_client = _make_llm_client(config)

        run_logger.stage_start("classify", sanitized.total)
        result.classification = classify_activity(
            sanitized,
            categorized=result.categorized,
            categorizer=categorizer,
            config=config.classify,
            llm_client=llm_client,
            run_logger=run_logger,
            tier=tier,
        )
        run_logger.stage_finish("classify", len(result.classification.events))

        store = HistoryStore(config.history_path)
        history = empty_topic_history()
        tracking = use_history and config.patterns.track_recurrence
        if tracking:
            try:
                history = store.load()
                run_logger.history_loaded(len(history.topics))
            except HistoryError as exc:
                logger.warning("Proceeding with empty topic history: %s", exc)
                result.history_error = str(exc)
                run_logger.history_loaded(0, error=str(exc))

        events = result.classification.events
        run_logger.stage_start("patterns", len(events))
        result.patterns = extract_patterns(events, config.patterns, history, today)
        run_logger.stage_finish("patterns", len(result.patterns.temporal_clusters))

        if tracking and config.patterns.enabled:
            updated = update_topic_history(history, today_topics(events), today)
            store.save(updated)
            result.history_topics = len(updated.topics)
            run_logger.history_saved(len(updated.topics), store.path)

        run_logger.stage_start("prompt", len(events))
        result.prompt = build_tier_prompt(
            tier,
            today,
            categorized=result.categorized,
            activity=sanitized,
            classification=result.classification,
            patterns=result.patterns,
            profile=config.profile,
            prompts_dir=config.prompts_dir,
        )
        result.prompt_id = template_id(tier, config.prompts_dir)
        run_logger.stage_finish("prompt", len(result.prompt))

        report = validate_leaks(result.prompt, tier)
        result.leak_report = report
        run_logger.leak_check(
            tier.value, report.passed, len(report.violations), len(report.secrets_found),
        )
        if not report.passed:
            logger.warning(
                "Prompt for tier %s blocked: %d violation(s), %d secret(s)",
                tier.value, len(report.violations), len(report.secrets_found),
            )
    finally:
        result.total_time = time.time() - start_time
        if owns_logger:
            run_logger.run_finish(result.total_time)
        result.run_log = run_logger.run_log.to_dict()

    return result
