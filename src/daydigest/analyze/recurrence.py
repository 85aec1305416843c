"""Cross-day topic recurrence and the knowledge delta.

History handling is pure: :func:`update_topic_history` returns a new
snapshot and never touches the one it was given. Reading and writing the
snapshot lives in :mod:`daydigest.history.store`.
"""

from __future__ import annotations

import copy
from datetime import date, timedelta

from daydigest.core.models import (
    KnowledgeDelta,
    RecurrenceSignal,
    TopicCooccurrence,
    TopicHistory,
    TopicRecord,
)

TREND_ORDER = {"new": 0, "returning": 1, "rising": 2, "stable": 3, "declining": 4}

RETURNING_AFTER_DAYS = 7
STABLE_WINDOW_DAYS = 14
STABLE_MIN_DAYS = 6
RISING_WINDOW_DAYS = 7
RISING_MIN_DAYS = 2
MAX_RECENT_DAYS = 30

CONNECTION_STRENGTH_THRESHOLD = 0.5
MAX_NOVEL_ENTITIES = 10
MAX_CONNECTIONS = 8


def empty_topic_history() -> TopicHistory:
    return TopicHistory(version=1, topics={})


def _parse_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


def _normalize(topic: str) -> str:
    return topic.strip().lower()


def _unique_topics(topics: list[str]) -> list[str]:
    """First spelling of each topic, compared case-insensitively."""
    seen: set[str] = set()
    result = []
    for topic in topics:
        key = _normalize(topic)
        if key and key not in seen:
            seen.add(key)
            result.append(topic)
    return result


def _days_within(record: TopicRecord, today: date, window: int) -> int:
    """Distinct tracked days in the ``window`` days before ``today``."""
    start = today - timedelta(days=window)
    days = {d for d in (_parse_day(s) for s in record.recent_days) if d is not None}
    return sum(1 for d in days if start <= d < today)


def _trend(record: TopicRecord, today: date) -> str:
    last_seen = _parse_day(record.last_seen)
    if last_seen is not None and last_seen < today:
        if (today - last_seen).days > RETURNING_AFTER_DAYS:
            return "returning"
    if _days_within(record, today, STABLE_WINDOW_DAYS) >= STABLE_MIN_DAYS:
        return "stable"
    if _days_within(record, today, RISING_WINDOW_DAYS) >= RISING_MIN_DAYS:
        return "rising"
    return "declining"


def compute_recurrence_signals(
    today_topics: list[str], today: str, history: TopicHistory,
) -> list[RecurrenceSignal]:
    """One signal per distinct topic seen today.

    Trend rules, checked in order for a topic already in history:

    - last seen more than 7 days ago: ``returning``
    - tracked on 6 or more of the previous 14 days: ``stable``
    - tracked on 2 or more of the previous 7 days: ``rising``
    - otherwise: ``declining``

    A topic already recorded for ``today`` (a same-day rerun) keeps its
    day count instead of counting today twice, and one first recorded
    today stays ``new``.
    """
    today_date = _parse_day(today)
    signals: list[RecurrenceSignal] = []

    for topic in _unique_topics(today_topics):
        record = history.topics.get(_normalize(topic))
        # A topic first recorded today is still new on a same-day rerun.
        if record is None or today_date is None or record.first_seen == today:
            signals.append(RecurrenceSignal(
                topic=topic, frequency=1, trend="new", day_count=1,
                first_seen=today, last_seen=today,
            ))
            continue

        day_count = record.day_count if record.last_seen == today else record.day_count + 1
        signals.append(RecurrenceSignal(
            topic=topic,
            frequency=day_count,
            trend=_trend(record, today_date),
            day_count=day_count,
            first_seen=record.first_seen,
            last_seen=today,
        ))

    signals.sort(key=lambda s: (TREND_ORDER[s.trend], -s.frequency))
    return signals


def update_topic_history(
    history: TopicHistory, today_topics: list[str], today: str,
) -> TopicHistory:
    """Return a new snapshot with today's topics recorded."""
    updated = copy.deepcopy(history)

    for topic in _unique_topics(today_topics):
        key = _normalize(topic)
        record = updated.topics.get(key)
        if record is None:
            updated.topics[key] = TopicRecord(
                first_seen=today, last_seen=today, day_count=1, recent_days=[today],
            )
            continue
        if record.last_seen == today and today in record.recent_days:
            continue
        record.day_count += 1
        record.last_seen = today
        if today not in record.recent_days:
            record.recent_days.append(today)
        record.recent_days = record.recent_days[-MAX_RECENT_DAYS:]

    return updated


def compute_knowledge_delta(
    today_entities: list[str],
    signals: list[RecurrenceSignal],
    cooccurrences: list[TopicCooccurrence],
) -> KnowledgeDelta:
    new_topics = [s.topic for s in signals if s.trend == "new"]
    recurring = [s.topic for s in signals if s.trend != "new"]

    # Without per-entity history, an entity is novel unless a recurring topic names it.
    recurring_lower = [t.lower() for t in recurring]
    novel = [
        e for e in dict.fromkeys(today_entities)
        if not any(e.lower() in t for t in recurring_lower)
    ]

    connections = [
        f"{c.topic_a} ↔ {c.topic_b}"
        for c in cooccurrences
        if c.strength >= CONNECTION_STRENGTH_THRESHOLD
    ]

    return KnowledgeDelta(
        new_topics=new_topics,
        recurring_topics=recurring,
        novel_entities=novel[:MAX_NOVEL_ENTITIES],
        connections=connections[:MAX_CONNECTIONS],
    )
