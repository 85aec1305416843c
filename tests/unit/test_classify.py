"""Tests for rule-based classification and entity extraction."""

from __future__ import annotations

import pytest

from daydigest.classify.classifier import classify_activity
from daydigest.classify.entities import domain_entity, extract_entities
from daydigest.classify.rules import (
    classify_assistant,
    classify_assistant_task,
    classify_commit,
    classify_record,
    classify_search,
    classify_shell,
    classify_shell_command,
    classify_visit,
    commit_type,
    extract_search_topics,
    parse_conventional_commit,
)
from daydigest.classify.vocab import ACTIVITY_TYPES, INTENT_TYPES, RULE_CONFIDENCE
from daydigest.core.config import ClassifyConfig
from daydigest.core.models import (
    AssistantSession,
    BrowserVisit,
    CollectedActivity,
    GitCommit,
    SearchQuery,
    ShellCommand,
)
from daydigest.filter.categorize import RuleCategorizer
from tests.helpers.factories import at


class TestEntities:
    def test_domain_entity(self):
        assert domain_entity("github.com") == "Github"
        assert domain_entity("docs.python.org") == "Python"
        assert domain_entity("x.com") is None

    def test_capitalized_words_and_stopwords(self):
        assert extract_entities("How to use Django with Postgres") == ["Django", "Postgres"]

    def test_kebab_case_tools(self):
        assert "react-query" in extract_entities("caching with react-query hooks")

    def test_short_kebab_dropped(self):
        assert extract_entities("a-b c-d") == []

    def test_skip_domains(self):
        assert extract_entities("Blue Bottle Coffee", "maps.google.com") == []

    def test_capped_at_five(self):
        text = "Alpha Bravo Charlie Delta Echo Foxtrot Golf"
        assert len(extract_entities(text)) == 5

    def test_placeholders_are_not_entities(self):
        assert extract_entities("sent to [EMAIL] with [REDACTED]") == []


class TestBrowserRules:
    def test_summary_and_topics_from_category(self):
        visit = BrowserVisit(
            url="https://github.com/acme/secret-project", title="acme/secret-project: Internal roadmap",
            domain="github.com", time=at(9),
        )
        event = classify_visit(visit, "dev")
        assert event.source == "browser"
        assert event.activity_type == "implementation"
        assert event.topics == ("software development",)
        assert event.summary == "Browsing development resources"
        assert "roadmap" not in event.summary.lower()
        assert event.confidence == RULE_CONFIDENCE
        assert event.category == "dev"
        assert event.timestamp == at(9).isoformat()

    def test_unknown_category_treated_as_other(self):
        event = classify_visit(BrowserVisit(url="https://a.com"), "not-a-category")
        assert event.category == "other"
        assert event.activity_type == "unknown"
        assert event.topics == ()

    def test_missing_time_gives_empty_timestamp(self):
        assert classify_visit(BrowserVisit(url="https://a.com")).timestamp == ""


class TestSearchRules:
    @pytest.mark.parametrize(
        "query, topic",
        [
            ("coffee near me", "navigation"),
            ("senior engineer salary", "job-search"),
            ("cheap flights to lisbon", "travel"),
            ("oauth refresh token rotation", "authentication"),
            ("zebra stripes documentary", "information"),
        ],
    )
    def test_topics(self, query, topic):
        assert extract_search_topics(query) == [topic]

    def test_query_text_not_in_summary(self):
        event = classify_search(SearchQuery(query="best pizza dough recipe"))
        assert event.summary == "Searched for food"
        assert event.activity_type == "research"
        assert event.intent == "evaluate"

    def test_fallback_summary(self):
        assert classify_search(SearchQuery(query="zebra")).summary == "Performed online search"


class TestShellRules:
    @pytest.mark.parametrize(
        "cmd, activity, topic",
        [
            ("git push origin main", "implementation", "version control"),
            ("git diff HEAD~1", "debugging", "version control"),
            ("pip install rich", "infrastructure", "package management"),
            ("pytest -x", "debugging", "testing"),
            ("kubectl get pods", "infrastructure", "containers and deployment"),
            ("xyzzy", "implementation", "command line"),
        ],
    )
    def test_command_table(self, cmd, activity, topic):
        assert classify_shell_command(cmd) == (activity, topic)

    def test_command_text_never_copied(self):
        event = classify_shell(ShellCommand(cmd="git push origin feature/top-secret"))
        assert event.summary == "Ran version control commands"
        assert event.entities == ()
        assert "top-secret" not in " ".join(event.topics)


class TestAssistantRules:
    @pytest.mark.parametrize(
        "prompt, task",
        [
            ("why does this crash on startup", "debugging"),
            ("review my migration script", "review"),
            ("explain how generators work", "learning"),
            ("should i split this service", "architecture"),
            ("add a retry to the client", "implementation"),
            ("hello there", "implementation"),
        ],
    )
    def test_task_type(self, prompt, task):
        assert classify_assistant_task(prompt) == task

    def test_event(self):
        event = classify_assistant(AssistantSession(prompt="Fix the failing pytest fixture"))
        assert event.activity_type == "debugging"
        assert event.intent == "troubleshoot"
        assert event.topics == ("testing",)
        assert event.summary == "Debugging with an AI assistant: testing"
        assert event.category == "ai_tools"


class TestCommitRules:
    def test_parse_conventional(self):
        parsed = parse_conventional_commit("feat(api)!: drop v1 endpoints\n\nBody text")
        assert parsed.type == "feat"
        assert parsed.scope == "api"
        assert parsed.breaking is True
        assert parsed.description == "drop v1 endpoints"

    def test_parse_non_conventional(self):
        assert parse_conventional_commit("Fixed the thing") is None
        assert parse_conventional_commit("") is None

    def test_verb_inference(self):
        assert commit_type("Fixed the login redirect") == "fix"
        assert commit_type("Add dark mode") == "feat"
        assert commit_type("WIP") is None

    def test_description_not_copied(self):
        event = classify_commit(GitCommit(hash="1", message="fix(auth): leak of customer ACME data"))
        assert event.activity_type == "debugging"
        assert event.topics == ("bug fixing",)
        assert event.summary == "Committed bug fixing"
        assert "ACME" not in event.summary

    def test_breaking_marker(self):
        event = classify_commit(GitCommit(hash="1", message="refactor!: rename config keys"))
        assert event.summary == "Committed code restructuring (breaking change)"

    def test_fallback(self):
        event = classify_commit(GitCommit(hash="1", message="WIP"))
        assert event.topics == ("code changes",)


class TestClassifyRecord:
    def test_dispatch(self):
        assert classify_record(ShellCommand(cmd="ls")).source == "shell"
        assert classify_record(GitCommit(hash="1", message="docs: readme")).source == "git"

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            classify_record("not a record")

    def test_labels_in_closed_sets(self, sample_activity):
        for record in sample_activity.records():
            event = classify_record(record, "dev")
            assert event.activity_type in ACTIVITY_TYPES
            assert event.intent in INTENT_TYPES
            assert 0.0 <= event.confidence <= 1.0


class TestClassifyActivity:
    def test_one_event_per_record(self, sample_activity):
        result = classify_activity(sample_activity)
        assert len(result.events) == sample_activity.total
        assert result.total_processed == sample_activity.total
        assert result.rule_classified == sample_activity.total
        assert result.llm_classified == 0

    def test_order_is_visits_then_other_sources(self, sample_activity):
        sources = [e.source for e in classify_activity(sample_activity).events]
        assert sources == ["browser", "browser", "browser", "search", "shell", "assistant", "git"]

    def test_categorized_map_wins_over_categorizer(self):
        visit = BrowserVisit(url="https://github.com/a", domain="github.com")
        activity = CollectedActivity(visits=[visit])
        result = classify_activity(activity, categorized={"research": [visit]}, categorizer=RuleCategorizer())
        assert result.events[0].category == "research"

    def test_llm_ignored_without_flag(self, sample_activity, mock_llm_client):
        result = classify_activity(sample_activity, config=ClassifyConfig(use_llm=False), llm_client=mock_llm_client)
        mock_llm_client.complete.assert_not_called()
        assert result.llm_classified == 0
