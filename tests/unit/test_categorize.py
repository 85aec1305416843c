"""Tests for domain categorization."""

from __future__ import annotations

import pytest

from daydigest.core.models import BrowserVisit
from daydigest.filter.categorize import (
    CATEGORIES,
    CATEGORY_LABELS,
    Categorizer,
    RuleCategorizer,
    categorize_visits,
    category_lookup,
)
from tests.helpers.factories import at


class FixedCategorizer(Categorizer):
    def __init__(self, category: str):
        self.category = category

    def categorize(self, domain: str) -> str:
        return self.category


class TestRuleCategorizer:
    @pytest.mark.parametrize(
        "domain, expected",
        [
            ("github.com", "dev"),
            ("gist.github.com", "dev"),
            ("docs.python.org", "dev"),
            ("www.nytimes.com", "news"),
            ("en.wikipedia.org", "research"),
            ("claude.ai", "ai_tools"),
            ("www.youtube.com", "media"),
            ("mail.google.com", "work"),
            ("unknown-site.example", "other"),
        ],
    )
    def test_known_domains(self, domain, expected):
        assert RuleCategorizer().categorize(domain) == expected

    def test_suffix_match_needs_label_boundary(self):
        # "notgithub.com" is not a subdomain of github.com
        assert RuleCategorizer().categorize("notgithub.com") == "other"

    def test_first_category_wins(self):
        rules = {"work": ["example.com"], "dev": ["example.com"]}
        assert RuleCategorizer(rules).categorize("example.com") == "work"

    def test_unknown_category_in_rules_rejected(self):
        with pytest.raises(ValueError, match="Unknown categories"):
            RuleCategorizer({"hobbies": ["example.com"]})

    def test_every_category_has_a_label(self):
        assert set(CATEGORY_LABELS) == set(CATEGORIES)


class TestCategorizeVisits:
    def test_groups_in_category_order(self):
        visits = [
            BrowserVisit(url="https://www.youtube.com/watch", time=at(9)),
            BrowserVisit(url="https://github.com/a", time=at(10)),
        ]
        grouped = categorize_visits(visits, RuleCategorizer())
        assert list(grouped) == ["dev", "media"]

    def test_empty_categories_omitted(self):
        grouped = categorize_visits([BrowserVisit(url="https://github.com/a")], RuleCategorizer())
        assert list(grouped) == ["dev"]

    def test_unresolvable_host_skipped(self):
        grouped = categorize_visits([BrowserVisit(url="[INVALID_URL]")], RuleCategorizer())
        assert grouped == {}

    def test_other_capped_to_most_recent(self):
        visits = [
            BrowserVisit(url=f"https://site{i}.example/", time=at(8, i)) for i in range(25)
        ]
        grouped = categorize_visits(visits, RuleCategorizer(), max_other_total=20)
        assert len(grouped["other"]) == 20
        assert grouped["other"][0].url == "https://site24.example/"

    def test_categorizer_is_injectable(self):
        visits = [BrowserVisit(url="https://github.com/a"), BrowserVisit(url="https://b.com")]
        grouped = categorize_visits(visits, FixedCategorizer("research"))
        assert list(grouped) == ["research"]
        assert len(grouped["research"]) == 2

    def test_invalid_category_from_categorizer_goes_to_other(self):
        grouped = categorize_visits([BrowserVisit(url="https://a.com")], FixedCategorizer("bogus"))
        assert list(grouped) == ["other"]

    def test_domain_field_preferred(self):
        visit = BrowserVisit(url="https://redirect.example/x", domain="github.com")
        assert list(categorize_visits([visit], RuleCategorizer())) == ["dev"]

    def test_category_lookup(self):
        grouped = {"dev": [BrowserVisit(url="https://www.github.com/a")]}
        assert category_lookup(grouped) == {"github.com": "dev"}
