"""Focus scoring and simple distribution statistics over events."""

from __future__ import annotations

import math
from collections import Counter

from daydigest.core.models import ActivityShare, PeakHour, StructuredEvent

MAX_PEAK_HOURS = 5


def normalized_concentration(counts: Counter) -> float:
    """``1 - H / Hmax`` for a frequency table, clamped to [0, 1].

    ``Hmax`` is ``log2`` of the number of distinct keys, floored at two keys
    so a single-key table scores 1 rather than dividing by zero. An empty
    table scores 0.
    """
    total = sum(counts.values())
    if total == 0:
        return 0.0

    entropy = 0.0
    for count in counts.values():
        p = count / total
        if p > 0:
            entropy -= p * math.log2(p)

    max_entropy = math.log2(max(2, len(counts)))
    return max(0.0, min(1.0, 1 - entropy / max_entropy))


def topic_distribution(events: list[StructuredEvent]) -> Counter:
    return Counter(t.lower() for e in events for t in e.topics)


def compute_focus_score(events: list[StructuredEvent]) -> float:
    """How concentrated today's topics were. 0 when there is nothing to measure."""
    if not events:
        return 0.0
    return normalized_concentration(topic_distribution(events))


def compute_activity_concentration(events: list[StructuredEvent]) -> float:
    if not events:
        return 0.0
    return normalized_concentration(Counter(e.activity_type for e in events))


def compute_peak_hours(events: list[StructuredEvent]) -> list[PeakHour]:
    hours = Counter()
    for event in events:
        when = event.parsed_time()
        if when is not None:
            hours[when.hour] += 1
    ranked = sorted(hours.items(), key=lambda item: (-item[1], item[0]))
    return [PeakHour(hour=h, count=c) for h, c in ranked[:MAX_PEAK_HOURS]]


def compute_activity_distribution(events: list[StructuredEvent]) -> list[ActivityShare]:
    counts = Counter(e.activity_type for e in events)
    total = len(events) or 1
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [
        ActivityShare(activity_type=t, count=c, pct=round(c / total * 100))
        for t, c in ranked
    ]
