"""Temporal clustering of classified events by hour and activity type."""

from __future__ import annotations

import re
from collections import Counter, defaultdict

from daydigest.core.models import StructuredEvent, TemporalCluster

MAX_CLUSTER_TOPICS = 5
MAX_CLUSTER_ENTITIES = 5
LABEL_TOPICS = 3

LEADING_NOISE = frozenset({
    "the", "a", "an", "this", "that", "these", "those",
    "my", "our", "your", "his", "her", "its", "their",
    "some", "any", "all", "each", "every",
})

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "is", "are", "was", "were", "be", "been",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "can", "may", "might", "shall", "must",
    "this", "that", "these", "those", "it", "its",
    "i", "we", "you", "he", "she", "they", "me", "us", "him", "her", "them",
    "my", "our", "your", "his", "their",
    "what", "which", "who", "whom", "where", "when", "how", "why",
    "not", "no", "so", "if", "then", "than", "just", "also", "very",
    "about", "up", "out", "into", "over", "after", "before",
    "some", "any", "all", "each", "every", "few", "more", "most",
    "other", "last", "first", "next", "new", "old", "same",
    "thing", "things", "stuff", "way", "lot",
})

URL_CHARS = re.compile(r"[/\\?=&]")


def format_hour(hour: int) -> str:
    """0 -> 12am, 13 -> 1pm, 24 -> 12am."""
    hour %= 24
    if hour == 0:
        return "12am"
    if hour < 12:
        return f"{hour}am"
    if hour == 12:
        return "12pm"
    return f"{hour - 12}pm"


def clean_topic(raw: str) -> str:
    """Strip leading articles, demonstratives and possessives."""
    words = raw.split()
    start = 0
    while start < len(words) and words[start].lower() in LEADING_NOISE:
        start += 1
    return " ".join(words[start:])


def stopword_ratio(topic: str) -> float:
    words = topic.lower().split()
    if not words:
        return 1.0
    return sum(1 for w in words if w in STOPWORDS) / len(words)


def filter_cluster_topics(topics: list[str]) -> list[str]:
    """Drop topics unfit for a cluster label.

    Rejected: anything with a dot or URL characters, multi-word ProperCase
    fragments (all-caps acronym runs are allowed), topics under two
    characters once cleaned, and topics that are half stopwords or more.
    """
    result: list[str] = []
    for raw in topics:
        if "." in raw or URL_CHARS.search(raw):
            continue
        words = raw.split()
        if (
            len(words) >= 2
            and all(w[:1].isupper() for w in words)
            and any(re.match(r"^[A-Z][a-z]", w) for w in words)
        ):
            continue
        cleaned = clean_topic(raw)
        if len(cleaned) < 2 or stopword_ratio(cleaned) >= 0.5:
            continue
        if cleaned not in result:
            result.append(cleaned)
    return result


def _build_cluster(
    hour_start: int, hour_end: int, activity_type: str, events: list[StructuredEvent],
) -> TemporalCluster:
    topic_counts = Counter(t for e in events for t in e.topics)
    topics = filter_cluster_topics([t for t, _ in topic_counts.most_common()])
    entity_counts = Counter(x for e in events for x in e.entities)
    entities = [x for x, _ in entity_counts.most_common(MAX_CLUSTER_ENTITIES)]

    span = hour_end - hour_start + 1
    label = f"{activity_type} {format_hour(hour_start)}-{format_hour(hour_end + 1)}"
    if topics:
        label += f": {', '.join(topics[:LABEL_TOPICS])}"

    return TemporalCluster(
        hour_start=hour_start,
        hour_end=hour_end,
        activity_type=activity_type,
        event_count=len(events),
        topics=topics[:MAX_CLUSTER_TOPICS],
        entities=entities,
        intensity=len(events) / span,
        label=label,
    )


def extract_temporal_clusters(
    events: list[StructuredEvent], min_cluster_size: int = 3,
) -> list[TemporalCluster]:
    """Group same-type events in the same or adjacent hours.

    Events without a usable timestamp are skipped. Clusters smaller than
    ``min_cluster_size`` are discarded. Result is ordered by event count,
    largest first.
    """
    by_type: dict[str, dict[int, list[StructuredEvent]]] = defaultdict(lambda: defaultdict(list))
    for event in events:
        when = event.parsed_time()
        if when is None:
            continue
        by_type[event.activity_type][when.hour].append(event)

    clusters: list[TemporalCluster] = []
    for activity_type, hours in by_type.items():
        ordered = sorted(hours)
        start = prev = ordered[0]
        members = list(hours[start])
        for hour in ordered[1:]:
            if hour - prev <= 1:
                members.extend(hours[hour])
            else:
                if len(members) >= min_cluster_size:
                    clusters.append(_build_cluster(start, prev, activity_type, members))
                start = hour
                members = list(hours[hour])
            prev = hour
        if len(members) >= min_cluster_size:
            clusters.append(_build_cluster(start, prev, activity_type, members))

    clusters.sort(key=lambda c: (-c.event_count, c.hour_start))
    return clusters
