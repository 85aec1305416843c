"""Topic co-occurrence and entity relation extraction."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from itertools import combinations

from daydigest.analyze.temporal import format_hour
from daydigest.classify.vocab import ENTITY_BEARING_CATEGORIES
from daydigest.core.models import EntityRelation, StructuredEvent, TopicCooccurrence

MAX_COOCCURRENCES = 20
MAX_RELATIONS = 15
MIN_RELATION_COUNT = 3


def gate_events(events: list[StructuredEvent]) -> list[StructuredEvent]:
    """Zero topics and entities of events outside the entity-bearing categories.

    Gated events still count for temporal and focus analysis; they just
    stop feeding the knowledge graph.
    """
    return [
        e if (e.category or "other") in ENTITY_BEARING_CATEGORIES
        else replace(e, topics=(), entities=())
        for e in events
    ]


def _timed(events: list[StructuredEvent]) -> list[tuple[datetime, StructuredEvent]]:
    timed = [(e.parsed_time(), e) for e in events]
    pairs = [(t, e) for t, e in timed if t is not None]
    pairs.sort(key=lambda pair: pair[0].timestamp())
    return pairs


def time_windows(
    events: list[StructuredEvent], window_minutes: int,
) -> list[tuple[datetime, list[StructuredEvent]]]:
    """Split timed events into windows of ``window_minutes``.

    A window opens at its first event and takes every following event up
    to ``window_minutes`` later; the next event after that opens a new one.
    """
    windows: list[tuple[datetime, list[StructuredEvent]]] = []
    limit = window_minutes * 60
    for when, event in _timed(events):
        if windows and when.timestamp() - windows[-1][0].timestamp() <= limit:
            windows[-1][1].append(event)
        else:
            windows.append((when, [event]))
    return windows


def extract_topic_cooccurrences(
    events: list[StructuredEvent], window_minutes: int = 30,
) -> list[TopicCooccurrence]:
    """Count unordered distinct-topic pairs per time window.

    ``strength`` is each pair's count divided by the largest pair count.
    The window label is the hour the pair was first seen.
    """
    counts: dict[tuple[str, str], int] = {}
    first_window: dict[tuple[str, str], str] = {}

    for opened, members in time_windows(events, window_minutes):
        topics: list[str] = []
        for event in members:
            for topic in event.topics:
                if topic not in topics:
                    topics.append(topic)
        for a, b in combinations(topics, 2):
            key = (a, b) if a <= b else (b, a)
            counts[key] = counts.get(key, 0) + 1
            first_window.setdefault(key, format_hour(opened.hour))

    if not counts:
        return []
    max_count = max(counts.values())

    result = [
        TopicCooccurrence(
            topic_a=a,
            topic_b=b,
            strength=count / max_count,
            shared_events=count,
            window=first_window[(a, b)],
        )
        for (a, b), count in counts.items()
    ]
    result.sort(key=lambda c: (-c.strength, c.topic_a, c.topic_b))
    return result[:MAX_COOCCURRENCES]


def extract_entity_relations(events: list[StructuredEvent]) -> list[EntityRelation]:
    """Entity pairs seen together in at least three events.

    Callers pass category-gated events. A pair whose every context is
    ``unknown`` is dropped.
    """
    counts: dict[tuple[str, str], int] = {}
    contexts: dict[tuple[str, str], list[str]] = {}

    for event in events:
        entities = list(dict.fromkeys(event.entities))
        for a, b in combinations(entities, 2):
            key = (a, b) if a <= b else (b, a)
            counts[key] = counts.get(key, 0) + 1
            seen = contexts.setdefault(key, [])
            if event.activity_type not in seen:
                seen.append(event.activity_type)

    result = [
        EntityRelation(entity_a=a, entity_b=b, cooccurrences=count, contexts=contexts[(a, b)])
        for (a, b), count in counts.items()
        if count >= MIN_RELATION_COUNT
        and not all(c == "unknown" for c in contexts[(a, b)])
    ]
    result.sort(key=lambda r: (-r.cooccurrences, r.entity_a, r.entity_b))
    return result[:MAX_RELATIONS]
