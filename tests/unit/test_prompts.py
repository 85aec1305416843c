"""Tests for prompt templates, the rag chunker and the tier prompt builders."""

from __future__ import annotations

import pytest

from daydigest.core.models import (
    ActivityShare,
    BrowserVisit,
    ClassificationResult,
    CollectedActivity,
    GitCommit,
    KnowledgeDelta,
    PatternAnalysis,
    PeakHour,
    PrivacyTier,
    RecurrenceSignal,
    SearchQuery,
    ShellCommand,
    TemporalCluster,
    TopicCooccurrence,
)
from daydigest.privacy.leaks import validate_leaks
from daydigest.prompts.builders import (
    aggregate_safe,
    build_tier_prompt,
    display_date,
    focus_label,
)
from daydigest.prompts.chunker import (
    ActivityChunk,
    chunk_activity,
    estimate_tokens,
    merge_small_chunks,
    select_chunks,
)
from daydigest.prompts.templates import fill_template, load_template, template_id
from tests.helpers.factories import DAY, at, make_event


class TestTemplates:
    @pytest.mark.parametrize("tier", list(PrivacyTier))
    def test_builtin_templates_exist(self, tier):
        assert "{{dateStr}}" in load_template(tier)

    def test_override_wins(self, tmp_path):
        (tmp_path / "standard.txt").write_text("custom {{dateStr}}")
        assert load_template(PrivacyTier.STANDARD, tmp_path) == "custom {{dateStr}}"
        # tiers without an override fall back to the built-in
        assert load_template(PrivacyTier.RAG, tmp_path) == load_template(PrivacyTier.RAG)

    def test_fill_leaves_unknown_placeholders(self):
        assert fill_template("{{a}} and {{b}}", {"a": "x"}) == "x and {{b}}"

    def test_template_id_tracks_content(self, tmp_path):
        builtin = template_id(PrivacyTier.CLASSIFIED)
        assert builtin.startswith("classified_v")
        assert len(builtin) == len("classified_v") + 8
        (tmp_path / "classified.txt").write_text("something else")
        assert template_id(PrivacyTier.CLASSIFIED, tmp_path) != builtin


class TestChunker:
    def test_estimate_tokens_rounds_up(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_small_chunks_merge_into_misc(self):
        activity = CollectedActivity(
            searches=[SearchQuery("sqlite wal mode", at(9), engine="duckduckgo")],
            commits=[GitCommit("a1", "fix parser", at(11), repo="daydigest", insertions=3)],
        )
        categorized = {"dev": [BrowserVisit("https://docs.python.org/3/", "Python docs", at(10), "docs.python.org")]}
        chunks = chunk_activity(DAY, categorized, activity)

        assert len(chunks) == 1
        misc = chunks[0]
        assert misc.chunk_id == f"{DAY}:misc"
        assert misc.item_count == 3
        assert "Dev & Engineering Browser Activity (1 visits)" in misc.text
        assert "Queries: sqlite wal mode" in misc.text
        assert "Commits - daydigest (1 commits, 3 lines changed)" in misc.text

    def test_lone_small_chunk_kept(self):
        chunk = ActivityChunk("d:search", DAY, "search", "short", 1)
        assert merge_small_chunks([chunk], DAY) == [chunk]

    def test_shell_batches(self):
        activity = CollectedActivity(shell=[ShellCommand(f"make target{i}", at(9)) for i in range(45)])
        chunks = chunk_activity(DAY, {}, activity)
        assert [c.chunk_id for c in chunks] == [f"{DAY}:shell:1", f"{DAY}:shell:2"]
        assert [c.item_count for c in chunks] == [40, 5]
        assert "Time range: 09:00 - 09:00" in chunks[0].text

    def test_select_keeps_largest_in_order(self):
        chunks = [ActivityChunk(f"c{i}", DAY, "misc", "x", n) for i, n in enumerate([5, 1, 9, 3])]
        assert [c.chunk_id for c in select_chunks(chunks, 2)] == ["c0", "c2"]


class TestBuilderHelpers:
    def test_display_date(self):
        assert display_date("2025-03-14") == "Friday, March 14, 2025"
        assert display_date("yesterday") == "yesterday"

    @pytest.mark.parametrize(
        "score, label",
        [(0.9, "highly focused"), (0.7, "highly focused"), (0.55, "moderately focused"),
         (0.3, "varied"), (0.1, "widely scattered")],
    )
    def test_focus_label(self, score, label):
        assert focus_label(score) == label

    def test_aggregate_safe(self):
        assert aggregate_safe("testing")
        assert not aggregate_safe("github actions")
        assert not aggregate_safe("https://example.com")


class TestTierPrompts:
    def test_standard_groups_sanitized_activity(self):
        activity = CollectedActivity(
            searches=[SearchQuery("rust lifetimes", at(9))],
            shell=[ShellCommand("pytest -x", at(9)), ShellCommand("pytest -k api", at(10))],
        )
        categorized = {"dev": [BrowserVisit("https://docs.rs", "docs.rs", at(9), "docs.rs")]}
        prompt = build_tier_prompt(PrivacyTier.STANDARD, DAY, categorized=categorized, activity=activity)

        assert "Date: Friday, March 14, 2025" in prompt
        assert "[Dev & Engineering] domains: docs.rs" in prompt
        assert "  - rust lifetimes" in prompt
        assert "  - pytest (2)" in prompt
        assert "{{" not in prompt

    def test_rag_uses_chunks(self):
        activity = CollectedActivity(searches=[SearchQuery("rust lifetimes", at(9))])
        prompt = build_tier_prompt(PrivacyTier.RAG, DAY, activity=activity)
        assert "--- Activity Block 1 (search) ---" in prompt

    def test_classified_sees_events_only(self):
        events = [
            make_event(9, topics=("testing",), entities=("Pytest",)),
            make_event(10, activity_type="research", topics=("rust",)),
        ]
        classification = ClassificationResult(events=events, total_processed=2, rule_classified=2)
        activity = CollectedActivity(searches=[SearchQuery("secret raw query", at(9))])
        prompt = build_tier_prompt(
            PrivacyTier.CLASSIFIED, DAY, activity=activity, classification=classification,
            patterns=PatternAnalysis(focus_score=0.8),
        )

        assert "### implementation (1 events)" in prompt
        assert "All topics: testing, rust" in prompt
        assert "Estimated focus score: 80% (highly focused)" in prompt
        assert "secret raw query" not in prompt

    def test_deidentified_drops_unsafe_labels(self):
        patterns = PatternAnalysis(
            temporal_clusters=[TemporalCluster(9, 10, "implementation", 6, topics=["testing", "github actions"],
                                               intensity=3.0)],
            topic_cooccurrences=[
                TopicCooccurrence("api-design", "testing", 0.8, 2, "9am"),
                TopicCooccurrence("docker", "testing", 0.9, 2, "9am"),
            ],
            recurrence_signals=[
                RecurrenceSignal("testing", 3, "rising", 3),
                RecurrenceSignal("slack bots", 1, "new", 1),
            ],
            knowledge_delta=KnowledgeDelta(
                new_topics=["slack bots"], recurring_topics=["testing"],
                novel_entities=["Pytest", "Redis"], connections=["api-design ↔ testing"],
            ),
            focus_score=0.42,
            top_activity_types=[ActivityShare("implementation", 6, 100)],
            peak_hours=[PeakHour(9, 4)],
        )
        prompt = build_tier_prompt(
            PrivacyTier.DEIDENTIFIED, DAY, patterns=patterns, profile="see https://me.example",
        )

        assert "implementation 9am-11am: testing (6 events, intensity 3.0 per hour)" in prompt
        assert "api-design ↔ testing (strength 0.80)" in prompt
        assert "Trending up: testing" in prompt
        assert "New entities: 2" in prompt
        assert "Focus score: 42% (varied)" in prompt
        for leaked in ("github", "docker", "slack", "Redis", "Pytest", "https://"):
            assert leaked not in prompt
        assert validate_leaks(prompt, PrivacyTier.DEIDENTIFIED).passed
