"""Integration test: full digest runs over the fixture export."""

from __future__ import annotations

import json

import pytest

from daydigest.core.config import DigestConfig
from daydigest.core.logging import DigestLogger
from daydigest.core.models import PrivacyTier
from daydigest.history.store import HistoryStore
from daydigest.pipeline import run_digest
from daydigest.privacy.leaks import validate_leaks
from daydigest.sources.json_export import load_activity

pytestmark = pytest.mark.integration

DAY = "2025-03-14"


@pytest.fixture
def activity(activity_path):
    return load_activity(activity_path)


def config_for(data_dir, tier: PrivacyTier) -> DigestConfig:
    config = DigestConfig.from_dict({"privacy_tier": tier.value})
    config.data_dir = data_dir
    return config


class TestAllTiers:
    @pytest.mark.parametrize("tier", list(PrivacyTier))
    def test_prompt_passes_its_own_tier(self, activity, data_dir, tier):
        result = run_digest(activity, config_for(data_dir, tier), today=DAY)

        assert result.tier is tier
        assert result.leak_report is not None
        assert result.leak_report.passed, result.leak_report.violations
        assert not result.blocked
        assert result.prompt_id.startswith(f"{tier.value}_v")
        assert "{{" not in result.prompt

    def test_stricter_tiers_see_less(self, activity, data_dir):
        prompts = {
            tier: run_digest(activity, config_for(data_dir, tier), today=DAY, use_history=False).prompt
            for tier in PrivacyTier
        }
        assert "click nested group default values" in prompts[PrivacyTier.STANDARD]
        assert "pytest -x tests/unit" in prompts[PrivacyTier.RAG]
        for tier in (PrivacyTier.CLASSIFIED, PrivacyTier.DEIDENTIFIED):
            assert "click nested group default values" not in prompts[tier]
            assert "pytest -x" not in prompts[tier]
        assert not validate_leaks(prompts[PrivacyTier.STANDARD], PrivacyTier.DEIDENTIFIED).passed


class TestRunStages:
    def test_counts_and_run_log(self, activity, config):
        result = run_digest(activity, config, today=DAY)

        assert result.record_count == 19
        assert result.classification.total_processed == len(result.classification.events)
        assert set(result.run_log["stages"]) == {
            "sensitivity", "exclude", "dedup", "sanitize",
            "categorize", "classify", "patterns", "prompt",
        }
        assert result.run_log["leak_check"] == {"tier": "standard", "passed": True}
        logs = list((config.data_dir / "logs").glob("*.jsonl"))
        assert len(logs) == 1
        events = [json.loads(line)["event"] for line in logs[0].read_text().splitlines()]
        assert events[0] == "run_start"
        assert events[-1] == "run_finish"

    def test_excluded_domains_never_counted(self, activity, config):
        config.sanitize.excluded_domains = ["amazon.com"]
        result = run_digest(activity, config, today=DAY)
        assert result.excluded_count == 1
        assert "shopping" not in result.categorized

    def test_run_log_holds_no_record_text(self, activity, config):
        result = run_digest(activity, config, today=DAY)
        dumped = json.dumps(result.run_log)
        assert "nested group" not in dumped
        assert "github.com" not in dumped

    def test_injected_logger_left_open(self, activity, config):
        run_logger = DigestLogger(data_dir=None)
        run_digest(activity, config, today=DAY, run_logger=run_logger)
        assert run_logger.run_log.stages["prompt"].items_out > 0


class TestHistoryAcrossDays:
    def test_second_day_sees_recurring_topics(self, activity, config):
        first = run_digest(activity, config, today="2025-03-13")
        assert first.patterns.recurrence_signals
        assert {s.trend for s in first.patterns.recurrence_signals} == {"new"}

        second = run_digest(activity, config, today=DAY)
        trends = {s.trend for s in second.patterns.recurrence_signals}
        assert "new" not in trends
        assert second.patterns.knowledge_delta.recurring_topics
        assert second.history_topics == first.history_topics

    def test_same_day_rerun_is_stable(self, activity, config):
        run_digest(activity, config, today=DAY)
        snapshot = HistoryStore(config.history_path).load()
        again = run_digest(activity, config, today=DAY)

        assert HistoryStore(config.history_path).load() == snapshot
        assert {s.trend for s in again.patterns.recurrence_signals} == {"new"}

    def test_corrupt_history_does_not_abort(self, activity, config):
        config.history_path.write_text("not json")
        result = run_digest(activity, config, today=DAY)

        assert result.history_error is not None
        assert result.leak_report.passed
        # the run rewrites a valid snapshot
        assert HistoryStore(config.history_path).load().topics

    def test_no_history_leaves_disk_alone(self, activity, config):
        result = run_digest(activity, config, today=DAY, use_history=False)
        assert not config.history_path.exists()
        assert result.history_topics == 0
        # without stored history every topic reads as new
        assert {s.trend for s in result.patterns.recurrence_signals} <= {"new"}


class TestSensitivityFilter:
    def test_redacted_visits_reach_no_prompt(self, activity, data_dir):
        for tier in PrivacyTier:
            config = config_for(data_dir, tier)
            config.sensitivity.enabled = True
            config.sensitivity.custom_domains = ["youtube.com"]
            config.sensitivity.action = "redact"

            result = run_digest(activity, config, today=DAY, use_history=False)

            assert result.sensitive_by_category == {"custom": 1}
            assert "youtube" not in result.prompt.lower()
            assert result.leak_report.passed, result.leak_report.violations

    def test_exclude_counts_before_domain_exclusion(self, activity, config):
        config.sensitivity.enabled = True
        config.sensitivity.custom_domains = ["amazon.com"]
        config.sanitize.excluded_domains = ["amazon.com"]

        result = run_digest(activity, config, today=DAY)

        assert result.sensitive_count == 1
        assert result.excluded_count == 0
