"""Classifier: sanitized activity records to StructuredEvents."""

from daydigest.classify.classifier import classify_activity
from daydigest.classify.entities import extract_entities
from daydigest.classify.rules import (
    classify_assistant_task,
    classify_record,
    extract_assistant_topics,
    extract_search_topics,
    parse_conventional_commit,
)

__all__ = [
    "classify_activity",
    "classify_assistant_task",
    "classify_record",
    "extract_assistant_topics",
    "extract_entities",
    "extract_search_topics",
    "parse_conventional_commit",
]
