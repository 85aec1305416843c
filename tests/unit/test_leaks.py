"""Tests for tier leak validation."""

from __future__ import annotations

import pytest

from daydigest.core.errors import ConfigError
from daydigest.core.models import PrivacyTier
from daydigest.privacy.leaks import has_absolute_path, mentions_tool, validate_leaks

TIERS = list(PrivacyTier)


class TestSecrets:
    def test_real_looking_key_fails_every_tier(self):
        text = "key is sk-ant-REDACTED"
        for tier in TIERS:
            report = validate_leaks(text, tier)
            assert report.passed is False
            assert report.secrets_found[0].startswith("Anthropic API key: sk-ant-")

    def test_synthetic_secrets_allowed(self):
        text = "sk-ant-REDACTED and sk_test_abcdefghijklmnopqrstuv"
        report = validate_leaks(text, PrivacyTier.STANDARD)
        assert report.secrets_found == []
        assert report.passed

    def test_email_and_ip(self):
        report = validate_leaks("ping alice@corp.io at 10.1.2.3", "standard")
        labels = [s.split(":")[0] for s in report.secrets_found]
        assert labels == ["Email address", "IP address"]

    def test_empty_input_passes(self):
        assert validate_leaks("", PrivacyTier.DEIDENTIFIED).passed


class TestClassified:
    def test_raw_command(self):
        report = validate_leaks("ran git commit -m wip then docker build .", PrivacyTier.CLASSIFIED)
        assert report.passed is False
        assert report.violations == ["classified: raw command found, use abstractions only"]
        assert report.commands_found == ["git commit"]

    def test_absolute_path(self):
        report = validate_leaks("edited /home/dev/project/main.py", PrivacyTier.CLASSIFIED)
        assert report.violations == ["classified: absolute file path found, use abstractions only"]

    def test_urls_allowed(self):
        assert validate_leaks("read https://example.com/a/b", PrivacyTier.CLASSIFIED).passed


class TestDeidentified:
    def test_url_and_tool_names(self):
        report = validate_leaks("Visited https://github.com/x and used npm install", "deidentified")
        assert report.passed is False
        assert report.urls_found == ["https://github.com/x"]
        assert "deidentified: found 1 URL(s), only aggregates are allowed" in report.violations
        assert any(v.startswith("deidentified: found tool name(s) github, npm") for v in report.violations)

    def test_aggregate_text_passes(self):
        text = "implementation 9am-11am: testing, api-design (12 events)"
        assert validate_leaks(text, PrivacyTier.DEIDENTIFIED).passed

    def test_tool_names_whole_words_only(self):
        assert mentions_tool("Used Docker-Compose today")
        assert not mentions_tool("digitally gitless")


class TestTierOrdering:
    SAMPLES = [
        "plain text about testing",
        "ran npm install in /home/dev/app",
        "read https://example.com/guide",
        "used slack and jira",
        "token ghp_abcdefghijklmnopqrstuvwx1234",
    ]

    @pytest.mark.parametrize("text", SAMPLES)
    def test_stricter_tiers_never_pass_more(self, text):
        passed = [validate_leaks(text, tier).passed for tier in TIERS]
        # once a tier rejects, every stricter tier rejects too
        for looser, stricter in zip(passed, passed[1:]):
            assert looser or not stricter

    def test_tier_strictness_order(self):
        assert [t.value for t in sorted(TIERS, key=lambda t: t.strictness)] == [
            "standard", "rag", "classified", "deidentified",
        ]
        assert PrivacyTier.DEIDENTIFIED.is_stricter_than(PrivacyTier.CLASSIFIED)


class TestTierParsing:
    @pytest.mark.parametrize("value", ["classified", "CLASSIFIED", "tier-3-classified"])
    def test_aliases(self, value):
        assert PrivacyTier.parse(value) is PrivacyTier.CLASSIFIED

    def test_unknown_tier_raises(self):
        with pytest.raises(ConfigError, match="Unknown privacy tier"):
            validate_leaks("text", "secret")


class TestPathDetection:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("/usr/local/bin", True),
            ("C:\\Users\\dev\\file.txt", True),
            ("https://example.com/a/b", False),
            ("~/notes/today.md", False),
            ("and/or", False),
        ],
    )
    def test_has_absolute_path(self, text, expected):
        assert has_absolute_path(text) is expected
