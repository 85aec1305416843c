"""Tests for the activity export parser."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from daydigest.core.errors import DigestError
from daydigest.sources.json_export import load_activity, parse_activity, parse_time


class TestParseTime:
    def test_naive_iso(self):
        assert parse_time("2025-03-14T09:05:00") == datetime(2025, 3, 14, 9, 5)

    def test_aware_iso_becomes_local_naive(self):
        parsed = parse_time("2025-03-14T09:05:00Z")
        assert parsed.tzinfo is None

    def test_epoch_millis(self):
        assert parse_time(1_741_943_100_000) == datetime.fromtimestamp(1_741_943_100)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, [1, 2]])
    def test_unusable(self, value):
        assert parse_time(value) is None


class TestParseActivity:
    def test_all_sources(self):
        activity = parse_activity({
            "visits": [{"url": "https://docs.python.org/3/", "title": "Python", "time": "2025-03-14T09:00:00"}],
            "searches": [{"query": "asyncio timeouts", "engine": "google"}],
            "shell": [{"cmd": "make test"}],
            "assistant": [{"prompt": "explain this error", "project": "daydigest"}],
            "commits": [{"hash": "abc", "message": "fix", "repo": "daydigest", "insertions": "4"}],
        })
        assert activity.total == 5
        assert activity.visits[0].domain is None
        assert activity.searches[0].engine == "google"
        assert activity.commits[0].insertions == 4
        assert activity.commits[0].deletions == 0

    def test_records_missing_text_skipped(self):
        activity = parse_activity({
            "visits": [{"title": "no url"}, "not a dict"],
            "searches": [{"query": "   "}],
            "shell": [{"cmd": 42}],
        })
        assert activity.total == 0

    def test_bad_time_keeps_record(self):
        activity = parse_activity({"shell": [{"cmd": "ls", "time": "garbage"}]})
        assert activity.shell[0].time is None

    def test_non_list_section_ignored(self):
        assert parse_activity({"visits": {"url": "x"}}).total == 0

    def test_records_order(self):
        activity = parse_activity({
            "commits": [{"message": "c"}],
            "visits": [{"url": "https://a.example"}],
        })
        assert [type(r).__name__ for r in activity.records()] == ["BrowserVisit", "GitCommit"]


class TestLoadActivity:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "activity.json"
        path.write_text(json.dumps({"shell": [{"cmd": "ls"}]}))
        assert load_activity(path).shell[0].cmd == "ls"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DigestError, match="Cannot read activity export"):
            load_activity(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "activity.json"
        path.write_text("{")
        with pytest.raises(DigestError):
            load_activity(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "activity.json"
        path.write_text("[]")
        with pytest.raises(DigestError, match="must contain a JSON object"):
            load_activity(path)

    def test_fixture_file(self, activity_path):
        activity = load_activity(activity_path)
        assert activity.total > 0
