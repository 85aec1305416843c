"""Rule-based classification of sanitized activity records.

Each ``classify_*`` function turns one record into a
:class:`~daydigest.core.models.StructuredEvent` built only from table
labels and filtered entity fragments. None of them copies the title,
query, command, prompt or commit description into ``summary`` or
``topics``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from daydigest.classify.entities import extract_entities
from daydigest.classify.vocab import (
    ASSISTANT_TASK_ACTIVITY,
    ASSISTANT_TASK_INTENT,
    ASSISTANT_TASK_PATTERNS,
    ASSISTANT_TOPIC_VOCABULARY,
    CATEGORY_SUMMARIES,
    CATEGORY_TO_ACTIVITY,
    CATEGORY_TOPIC_LABELS,
    COMMIT_TYPE_ACTIVITY,
    COMMIT_TYPE_TOPICS,
    COMMIT_VERB_TYPES,
    CONVENTIONAL_COMMIT_PATTERN,
    FALLBACK_ASSISTANT_TOPIC,
    FALLBACK_COMMIT_TOPIC,
    FALLBACK_SEARCH_TOPIC,
    FALLBACK_SHELL_TOPIC,
    RULE_CONFIDENCE,
    SEARCH_INTENT_PATTERNS,
    SEARCH_TOPIC_VOCABULARY,
    SHELL_ACTIVITY_PATTERNS,
)
from daydigest.core.models import (
    ActivityRecord,
    AssistantSession,
    BrowserVisit,
    GitCommit,
    SearchQuery,
    ShellCommand,
    StructuredEvent,
)
from daydigest.filter.urls import hostname_of

TITLE_LIMIT = 80

ASSISTANT_TASK_VERBS = {
    "debugging": "Debugging",
    "review": "Reviewing code",
    "learning": "Learning",
    "architecture": "Designing",
    "implementation": "Implementing",
}


def _iso(time: datetime | None) -> str:
    return time.isoformat() if time is not None else ""


def infer_intent(text: str, default: str = "explore") -> str:
    for pattern, intent in SEARCH_INTENT_PATTERNS:
        if pattern.search(text):
            return intent
    return default


# ── Browser ────────────────────────────────────────────────


def classify_visit(visit: BrowserVisit, category: str = "other") -> StructuredEvent:
    if category not in CATEGORY_TO_ACTIVITY:
        category = "other"
    domain = visit.domain or hostname_of(visit.url)
    title = (visit.title or "")[:TITLE_LIMIT]
    return StructuredEvent(
        timestamp=_iso(visit.time),
        source="browser",
        activity_type=CATEGORY_TO_ACTIVITY[category],
        topics=tuple(CATEGORY_TOPIC_LABELS[category]),
        entities=tuple(extract_entities(title, domain)),
        intent=infer_intent(title),
        confidence=RULE_CONFIDENCE,
        summary=CATEGORY_SUMMARIES[category],
        category=category,
    )


# ── Search ─────────────────────────────────────────────────


def extract_search_topics(query: str) -> list[str]:
    """Map a query onto one controlled-vocabulary label.

    Everyday vocabulary is tried before software topics; a query that
    matches neither is ``information``.
    """
    for pattern, label in SEARCH_TOPIC_VOCABULARY:
        if pattern.search(query):
            return [label]
    for pattern, label in ASSISTANT_TOPIC_VOCABULARY:
        if pattern.search(query):
            return [label]
    return [FALLBACK_SEARCH_TOPIC]


def classify_search(search: SearchQuery) -> StructuredEvent:
    topics = extract_search_topics(search.query)
    topic = topics[0]
    summary = "Performed online search" if topic == FALLBACK_SEARCH_TOPIC else f"Searched for {topic}"
    return StructuredEvent(
        timestamp=_iso(search.time),
        source="search",
        activity_type="research",
        topics=tuple(topics),
        entities=tuple(extract_entities(search.query)),
        intent=infer_intent(search.query),
        confidence=RULE_CONFIDENCE,
        summary=summary,
        category="research",
    )


# ── Shell ──────────────────────────────────────────────────


def classify_shell_command(cmd: str) -> tuple[str, str]:
    """Return ``(activity_type, topic)`` for a command line."""
    for pattern, activity, topic in SHELL_ACTIVITY_PATTERNS:
        if pattern.search(cmd):
            return activity, topic
    return "implementation", FALLBACK_SHELL_TOPIC


def classify_shell(command: ShellCommand) -> StructuredEvent:
    activity, topic = classify_shell_command(command.cmd)
    return StructuredEvent(
        timestamp=_iso(command.time),
        source="shell",
        activity_type=activity,
        topics=(topic,),
        entities=(),
        intent="configure" if topic == "package management" else "implement",
        confidence=RULE_CONFIDENCE,
        summary=f"Ran {topic} commands",
        category="dev",
    )


# ── Assistant sessions ─────────────────────────────────────


def classify_assistant_task(prompt: str) -> str:
    """Task type of a prompt; ``implementation`` when nothing matches."""
    for pattern, task in ASSISTANT_TASK_PATTERNS:
        if pattern.search(prompt):
            return task
    return "implementation"


def extract_assistant_topics(prompt: str) -> list[str]:
    for pattern, label in ASSISTANT_TOPIC_VOCABULARY:
        if pattern.search(prompt):
            return [label]
    return [FALLBACK_ASSISTANT_TOPIC]


def classify_assistant(session: AssistantSession) -> StructuredEvent:
    task = classify_assistant_task(session.prompt)
    topics = extract_assistant_topics(session.prompt)
    return StructuredEvent(
        timestamp=_iso(session.time),
        source="assistant",
        activity_type=ASSISTANT_TASK_ACTIVITY[task],
        topics=tuple(topics),
        entities=tuple(extract_entities(session.prompt)),
        intent=ASSISTANT_TASK_INTENT[task],
        confidence=RULE_CONFIDENCE,
        summary=f"{ASSISTANT_TASK_VERBS[task]} with an AI assistant: {topics[0]}",
        category="ai_tools",
    )


# ── Git commits ────────────────────────────────────────────


@dataclass
class ConventionalCommit:
    type: str
    scope: str | None
    breaking: bool
    description: str


def parse_conventional_commit(message: str) -> ConventionalCommit | None:
    """Parse ``type(scope)!: description`` from the first line of a message."""
    first_line = message.strip().splitlines()[0] if message.strip() else ""
    match = CONVENTIONAL_COMMIT_PATTERN.match(first_line)
    if match is None:
        return None
    return ConventionalCommit(
        type=match.group(1).lower(),
        scope=match.group(2),
        breaking=match.group(3) is not None,
        description=match.group(4).strip(),
    )


def commit_type(message: str) -> str | None:
    """Conventional type, or one inferred from the leading verb."""
    parsed = parse_conventional_commit(message)
    if parsed is not None:
        return parsed.type
    first_line = message.strip().splitlines()[0] if message.strip() else ""
    for pattern, kind in COMMIT_VERB_TYPES:
        if pattern.match(first_line):
            return kind
    return None


def classify_commit(commit: GitCommit) -> StructuredEvent:
    parsed = parse_conventional_commit(commit.message)
    kind = commit_type(commit.message)

    if kind is None:
        activity, topic = "implementation", FALLBACK_COMMIT_TOPIC
    else:
        activity, topic = COMMIT_TYPE_ACTIVITY[kind], COMMIT_TYPE_TOPICS[kind]

    summary = f"Committed {topic}"
    if parsed is not None and parsed.breaking:
        summary += " (breaking change)"

    return StructuredEvent(
        timestamp=_iso(commit.time),
        source="git",
        activity_type=activity,
        topics=(topic,),
        entities=(),
        intent="troubleshoot" if kind == "fix" else "implement",
        confidence=RULE_CONFIDENCE,
        summary=summary,
        category="dev",
    )


def classify_record(record: ActivityRecord, category: str | None = None) -> StructuredEvent:
    """Dispatch on record type. ``category`` only applies to browser visits."""
    if isinstance(record, BrowserVisit):
        return classify_visit(record, category or "other")
    if isinstance(record, SearchQuery):
        return classify_search(record)
    if isinstance(record, ShellCommand):
        return classify_shell(record)
    if isinstance(record, AssistantSession):
        return classify_assistant(record)
    if isinstance(record, GitCommit):
        return classify_commit(record)
    raise TypeError(f"Unsupported activity record: {type(record).__name__}")
