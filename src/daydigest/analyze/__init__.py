"""Pattern extraction over classified events."""

from daydigest.analyze.patterns import extract_patterns, today_topics
from daydigest.analyze.recurrence import (
    compute_knowledge_delta,
    compute_recurrence_signals,
    empty_topic_history,
    update_topic_history,
)

__all__ = [
    "compute_knowledge_delta",
    "compute_recurrence_signals",
    "empty_topic_history",
    "extract_patterns",
    "today_topics",
    "update_topic_history",
]
