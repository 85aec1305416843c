"""Core data models for daydigest."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Union

from daydigest.core.errors import ConfigError

# ---------------------------------------------------------------------------
# Raw activity records
# ---------------------------------------------------------------------------


@dataclass
class BrowserVisit:
    """A single page load from browser history."""

    url: str
    title: str = ""
    time: datetime | None = None
    domain: str | None = None


@dataclass
class SearchQuery:
    """A query typed into a search engine."""

    query: str
    time: datetime | None = None
    engine: str = ""


@dataclass
class ShellCommand:
    cmd: str
    time: datetime | None = None


@dataclass
class AssistantSession:
    """One prompt sent to an AI coding assistant."""

    prompt: str
    time: datetime | None = None
    project: str = ""


@dataclass
class GitCommit:
    hash: str
    message: str
    time: datetime | None = None
    repo: str = ""
    insertions: int = 0
    deletions: int = 0


ActivityRecord = Union[BrowserVisit, SearchQuery, ShellCommand, AssistantSession, GitCommit]


@dataclass
class CollectedActivity:
    """Everything the collectors produced for one collection window."""

    visits: list[BrowserVisit] = field(default_factory=list)
    searches: list[SearchQuery] = field(default_factory=list)
    shell: list[ShellCommand] = field(default_factory=list)
    assistant: list[AssistantSession] = field(default_factory=list)
    commits: list[GitCommit] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (
            len(self.visits) + len(self.searches) + len(self.shell)
            + len(self.assistant) + len(self.commits)
        )

    def records(self) -> Iterator[ActivityRecord]:
        """Yield every record, browser visits first."""
        yield from self.visits
        yield from self.searches
        yield from self.shell
        yield from self.assistant
        yield from self.commits


# ---------------------------------------------------------------------------
# Classification output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StructuredEvent:
    """Privacy-safe semantic abstraction of one activity record.

    ``topics``, ``entities`` and ``summary`` only ever hold derived labels,
    never the raw title, query, command or prompt text.
    """

    timestamp: str  # ISO-8601, or "" when the record had no usable time
    source: str  # "browser", "search", "shell", "assistant", "git"
    activity_type: str
    topics: tuple[str, ...] = ()
    entities: tuple[str, ...] = ()
    intent: str = "explore"
    confidence: float = 0.3
    summary: str = ""
    category: str | None = None

    def parsed_time(self) -> datetime | None:
        """Parse ``timestamp``; None when empty or malformed."""
        if not self.timestamp:
            return None
        try:
            return datetime.fromisoformat(self.timestamp)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "source": self.source,
            "activity_type": self.activity_type,
            "topics": list(self.topics),
            "entities": list(self.entities),
            "intent": self.intent,
            "confidence": self.confidence,
            "summary": self.summary,
            "category": self.category,
        }


@dataclass
class ClassificationResult:
    events: list[StructuredEvent] = field(default_factory=list)
    total_processed: int = 0
    llm_classified: int = 0
    rule_classified: int = 0
    processing_time_ms: float = 0.0


# ---------------------------------------------------------------------------
# Pattern analysis
# ---------------------------------------------------------------------------


@dataclass
class TemporalCluster:
    hour_start: int
    hour_end: int
    activity_type: str
    event_count: int
    topics: list[str] = field(default_factory=list)
    entities: list[str] = field(default_factory=list)
    intensity: float = 0.0  # events per hour of span
    label: str = ""


@dataclass
class TopicCooccurrence:
    """Undirected edge between two topics seen in the same time window."""

    topic_a: str
    topic_b: str
    strength: float
    shared_events: int
    window: str


@dataclass
class EntityRelation:
    entity_a: str
    entity_b: str
    cooccurrences: int
    contexts: list[str] = field(default_factory=list)


@dataclass
class RecurrenceSignal:
    topic: str
    frequency: int
    trend: str  # "new", "returning", "rising", "stable", "declining"
    day_count: int
    first_seen: str | None = None
    last_seen: str | None = None


@dataclass
class TopicRecord:
    """Persisted history for one lower-cased topic."""

    first_seen: str
    last_seen: str
    day_count: int
    recent_days: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstSeen": self.first_seen,
            "lastSeen": self.last_seen,
            "dayCount": self.day_count,
            "recentDays": list(self.recent_days),
        }

    @classmethod
    def from_dict(cls, data: dict) -> TopicRecord:
        return cls(
            first_seen=str(data["firstSeen"]),
            last_seen=str(data["lastSeen"]),
            day_count=int(data["dayCount"]),
            recent_days=[str(d) for d in data.get("recentDays", [])],
        )


@dataclass
class TopicHistory:
    """Versioned snapshot of cross-day topic state."""

    version: int = 1
    topics: dict[str, TopicRecord] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "topics": {name: rec.to_dict() for name, rec in sorted(self.topics.items())},
        }

    @classmethod
    def from_dict(cls, data: dict) -> TopicHistory:
        topics = data.get("topics", {})
        if not isinstance(topics, dict):
            raise ValueError("topic history 'topics' must be an object")
        return cls(
            version=int(data.get("version", 1)),
            topics={name: TopicRecord.from_dict(rec) for name, rec in topics.items()},
        )


@dataclass
class KnowledgeDelta:
    new_topics: list[str] = field(default_factory=list)
    recurring_topics: list[str] = field(default_factory=list)
    novel_entities: list[str] = field(default_factory=list)
    connections: list[str] = field(default_factory=list)


@dataclass
class ActivityShare:
    activity_type: str
    count: int
    pct: int


@dataclass
class PeakHour:
    hour: int
    count: int


@dataclass
class PatternAnalysis:
    """Aggregate root for one day's extracted patterns."""

    temporal_clusters: list[TemporalCluster] = field(default_factory=list)
    topic_cooccurrences: list[TopicCooccurrence] = field(default_factory=list)
    entity_relations: list[EntityRelation] = field(default_factory=list)
    recurrence_signals: list[RecurrenceSignal] = field(default_factory=list)
    knowledge_delta: KnowledgeDelta = field(default_factory=KnowledgeDelta)
    focus_score: float = 0.0
    activity_concentration_score: float = 0.0
    top_activity_types: list[ActivityShare] = field(default_factory=list)
    peak_hours: list[PeakHour] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        from dataclasses import asdict

        return asdict(self)


# ---------------------------------------------------------------------------
# Privacy
# ---------------------------------------------------------------------------


class PrivacyTier(str, Enum):
    """Output destinations, ordered from least to most strict."""

    STANDARD = "standard"
    RAG = "rag"
    CLASSIFIED = "classified"
    DEIDENTIFIED = "deidentified"

    @property
    def strictness(self) -> int:
        return _TIER_ORDER.index(self)

    def is_stricter_than(self, other: PrivacyTier) -> bool:
        return self.strictness > other.strictness

    @classmethod
    def parse(cls, value: str | PrivacyTier) -> PrivacyTier:
        """Accept ``classified``, ``CLASSIFIED`` or the long ``tier-3-classified`` form."""
        if isinstance(value, PrivacyTier):
            return value
        key = str(value).strip().lower()
        if key.startswith("tier-"):
            key = key.split("-", 2)[-1]
        try:
            return cls(key)
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            raise ConfigError(f"Unknown privacy tier {value!r}. Expected one of: {allowed}") from None


_TIER_ORDER = [
    PrivacyTier.STANDARD,
    PrivacyTier.RAG,
    PrivacyTier.CLASSIFIED,
    PrivacyTier.DEIDENTIFIED,
]


@dataclass
class LeakReport:
    """Result of scanning tier-bound text for forbidden content."""

    tier: PrivacyTier
    passed: bool = True
    violations: list[str] = field(default_factory=list)
    secrets_found: list[str] = field(default_factory=list)
    urls_found: list[str] = field(default_factory=list)
    commands_found: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier.value,
            "passed": self.passed,
            "violations": list(self.violations),
            "secrets_found": list(self.secrets_found),
            "urls_found": list(self.urls_found),
            "commands_found": list(self.commands_found),
        }
