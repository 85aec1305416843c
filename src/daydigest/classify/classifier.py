"""Classification entry point: one StructuredEvent per sanitized record."""

from __future__ import annotations

import logging
import time

from daydigest.classify.llm import LLM_TIERS, LLMClassifier
from daydigest.classify.rules import classify_record
from daydigest.core.config import ClassifyConfig
from daydigest.core.logging import DigestLogger
from daydigest.core.models import (
    ActivityRecord,
    BrowserVisit,
    ClassificationResult,
    CollectedActivity,
    PrivacyTier,
)
from daydigest.filter.categorize import Categorizer, RuleCategorizer, category_lookup
from daydigest.filter.urls import hostname_of

logger = logging.getLogger(__name__)


def _visit_category(
    visit: BrowserVisit, lookup: dict[str, str], categorizer: Categorizer,
) -> str:
    domain = visit.domain or hostname_of(visit.url)
    if not domain:
        return "other"
    return lookup.get(domain) or categorizer.categorize(domain)


def classify_activity(
    activity: CollectedActivity,
    categorized: dict[str, list[BrowserVisit]] | None = None,
    categorizer: Categorizer | None = None,
    config: ClassifyConfig | None = None,
    llm_client=None,
    run_logger: DigestLogger | None = None,
    tier: PrivacyTier = PrivacyTier.STANDARD,
) -> ClassificationResult:
    """Classify every record in ``activity``.

    Browser categories come from ``categorized`` when the visit's domain is
    there, otherwise from ``categorizer``. The LLM path is used only when
    ``config.use_llm`` is set, a client is supplied and ``tier`` is
    ``standard`` or ``rag``.
    """
    config = config or ClassifyConfig()
    categorizer = categorizer or RuleCategorizer()
    lookup = category_lookup(categorized or {})
    start = time.perf_counter()

    items: list[tuple[ActivityRecord, str | None]] = [
        (visit, _visit_category(visit, lookup, categorizer)) for visit in activity.visits
    ]
    items.extend(
        (record, None)
        for group in (activity.searches, activity.shell, activity.assistant, activity.commits)
        for record in group
    )

    use_llm = config.use_llm and llm_client is not None
    if use_llm and tier not in LLM_TIERS:
        logger.warning("LLM classification is not allowed for tier %s; using rules", tier.value)
        use_llm = False

    if use_llm:
        classifier = LLMClassifier(llm_client, config.batch_size, run_logger, tier=tier)
        events, llm_count = classifier.classify(items)
    else:
        events = [classify_record(record, category) for record, category in items]
        llm_count = 0

    return ClassificationResult(
        events=events,
        total_processed=len(items),
        llm_classified=llm_count,
        rule_classified=len(items) - llm_count,
        processing_time_ms=(time.perf_counter() - start) * 1000,
    )
