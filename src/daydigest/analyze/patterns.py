"""Pattern extraction entry point."""

from __future__ import annotations

from daydigest.analyze.cooccurrence import (
    extract_entity_relations,
    extract_topic_cooccurrences,
    gate_events,
)
from daydigest.analyze.focus import (
    compute_activity_concentration,
    compute_activity_distribution,
    compute_focus_score,
    compute_peak_hours,
)
from daydigest.analyze.recurrence import (
    compute_knowledge_delta,
    compute_recurrence_signals,
    empty_topic_history,
)
from daydigest.analyze.temporal import extract_temporal_clusters
from daydigest.core.config import PatternConfig
from daydigest.core.models import PatternAnalysis, StructuredEvent, TopicHistory


def today_topics(events: list[StructuredEvent]) -> list[str]:
    """Distinct topics of the category-gated events, in first-seen order."""
    return list(dict.fromkeys(t for e in gate_events(events) for t in e.topics))


def extract_patterns(
    events: list[StructuredEvent],
    config: PatternConfig | None = None,
    history: TopicHistory | None = None,
    today: str = "",
) -> PatternAnalysis:
    """Run every extractor over one day's events.

    Temporal clusters, focus and the distributions see every event. The
    topic graph, entity relations, recurrence and knowledge delta only see
    events from entity-bearing categories.
    """
    config = config or PatternConfig()
    if not config.enabled:
        return PatternAnalysis()
    history = history or empty_topic_history()

    gated = gate_events(events)
    cooccurrences = extract_topic_cooccurrences(gated, config.cooccurrence_window)
    topics = list(dict.fromkeys(t for e in gated for t in e.topics))
    entities = list(dict.fromkeys(x for e in gated for x in e.entities))

    signals = (
        compute_recurrence_signals(topics, today, history)
        if config.track_recurrence and today
        else []
    )

    return PatternAnalysis(
        temporal_clusters=extract_temporal_clusters(events, config.min_cluster_size),
        topic_cooccurrences=cooccurrences,
        entity_relations=extract_entity_relations(gated),
        recurrence_signals=signals,
        knowledge_delta=compute_knowledge_delta(entities, signals, cooccurrences),
        focus_score=compute_focus_score(events),
        activity_concentration_score=compute_activity_concentration(events),
        top_activity_types=compute_activity_distribution(events),
        peak_hours=compute_peak_hours(events),
    )
