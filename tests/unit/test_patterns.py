"""Tests for the pattern extraction entry point."""

from __future__ import annotations

from daydigest.analyze.patterns import extract_patterns, today_topics
from daydigest.analyze.recurrence import empty_topic_history
from daydigest.core.config import PatternConfig
from daydigest.core.models import PatternAnalysis, TopicHistory, TopicRecord
from tests.helpers.factories import DAY, make_event


def _day_of_events():
    return (
        [make_event(9, m, topics=("testing", "api-design"), entities=("Pytest", "Httpx")) for m in (0, 10, 20)]
        + [make_event(13, m, activity_type="browsing", topics=("online shopping",),
                      entities=("Amazon",), category="shopping") for m in (0, 5, 10)]
    )


class TestTodayTopics:
    def test_gated_distinct_topics(self):
        assert today_topics(_day_of_events()) == ["testing", "api-design"]


class TestExtractPatterns:
    def test_disabled_returns_empty(self):
        result = extract_patterns(_day_of_events(), PatternConfig(enabled=False), today=DAY)
        assert result == PatternAnalysis()

    def test_full_analysis(self):
        result = extract_patterns(_day_of_events(), today=DAY)

        assert {c.activity_type for c in result.temporal_clusters} == {"implementation", "browsing"}
        assert [(c.topic_a, c.topic_b) for c in result.topic_cooccurrences] == [("api-design", "testing")]
        assert [(r.entity_a, r.entity_b) for r in result.entity_relations] == [("Httpx", "Pytest")]
        assert {s.topic for s in result.recurrence_signals} == {"testing", "api-design"}
        assert all(s.trend == "new" for s in result.recurrence_signals)
        assert result.knowledge_delta.new_topics == ["testing", "api-design"]
        assert result.knowledge_delta.connections == ["api-design ↔ testing"]
        assert "Amazon" not in result.knowledge_delta.novel_entities

    def test_gated_events_still_count_for_focus_and_distribution(self):
        result = extract_patterns(_day_of_events(), today=DAY)
        assert {a.activity_type for a in result.top_activity_types} == {"implementation", "browsing"}
        # testing, api-design and online shopping each appear 3 times
        assert result.focus_score < 0.05
        assert [p.hour for p in result.peak_hours] == [9, 13]

    def test_recurrence_uses_history(self):
        history = TopicHistory(topics={
            "testing": TopicRecord(
                first_seen="2025-03-01", last_seen="2025-03-13", day_count=2,
                recent_days=["2025-03-12", "2025-03-13"],
            ),
        })
        result = extract_patterns(_day_of_events(), history=history, today=DAY)
        trends = {s.topic: s.trend for s in result.recurrence_signals}
        assert trends == {"api-design": "new", "testing": "rising"}
        assert result.knowledge_delta.recurring_topics == ["testing"]

    def test_recurrence_off_without_date(self):
        result = extract_patterns(_day_of_events(), history=empty_topic_history())
        assert result.recurrence_signals == []

    def test_recurrence_off_by_config(self):
        result = extract_patterns(_day_of_events(), PatternConfig(track_recurrence=False), today=DAY)
        assert result.recurrence_signals == []
        assert result.topic_cooccurrences

    def test_empty_day(self):
        result = extract_patterns([], today=DAY)
        assert result.focus_score == 0
        assert result.temporal_clusters == []
        assert result.recurrence_signals == []
