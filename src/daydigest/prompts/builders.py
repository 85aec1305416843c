"""Tier-specific prompt construction.

Each tier sees less than the one below it:

- ``standard``: sanitized activity, grouped by source.
- ``rag``: a selection of sanitized activity chunks.
- ``classified``: structured events only (types, topics, entities, summaries).
- ``deidentified``: :class:`PatternAnalysis` aggregates only. Every label
  that reaches this prompt must itself pass the deidentified leak rules,
  and entity names are reduced to counts.
"""

from __future__ import annotations

from collections import Counter
from datetime import date as date_cls
from pathlib import Path

from daydigest.analyze.temporal import format_hour
from daydigest.core.models import (
    BrowserVisit,
    ClassificationResult,
    CollectedActivity,
    PatternAnalysis,
    PrivacyTier,
    StructuredEvent,
)
from daydigest.filter.categorize import CATEGORY_LABELS
from daydigest.privacy.leaks import validate_leaks
from daydigest.prompts.chunker import ActivityChunk, chunk_activity, select_chunks
from daydigest.prompts.templates import fill_template, load_template

NONE = "  (none)"


def display_date(day: str) -> str:
    """``2025-03-14`` -> ``Friday, March 14, 2025``. Unparsable input is returned as-is."""
    try:
        d = date_cls.fromisoformat(day)
    except ValueError:
        return day
    return f"{d:%A, %B} {d.day}, {d.year}"


def focus_label(score: float) -> str:
    if score >= 0.7:
        return "highly focused"
    if score >= 0.5:
        return "moderately focused"
    if score >= 0.3:
        return "varied"
    return "widely scattered"


def _context_hint(profile: str) -> str:
    return f"\nUser profile context: {profile}" if profile else ""


def _focus_hint(score: float | None) -> str:
    if score is None:
        return ""
    return f"\nEstimated focus score: {round(score * 100)}% ({focus_label(score)})"


def _bullets(items: list[str]) -> str:
    return "\n".join(f"  - {item}" for item in items) if items else NONE


# ---------------------------------------------------------------------------
# standard
# ---------------------------------------------------------------------------


def build_standard_prompt(
    day: str,
    categorized: dict[str, list[BrowserVisit]],
    activity: CollectedActivity,
    profile: str = "",
    prompts_dir: str | Path | None = None,
    focus_score: float | None = None,
) -> str:
    """Prompt over sanitized activity. Callers must pass sanitized records."""
    browser_lines = []
    for category, visits in categorized.items():
        label = CATEGORY_LABELS.get(category, category)
        domains = list(dict.fromkeys(v.domain or "" for v in visits))[:8]
        titles = [v.title[:60] for v in visits[:5] if v.title]
        line = f"  [{label}] domains: {', '.join(domains)}"
        if titles:
            line += f" | sample titles: {'; '.join(titles)}"
        browser_lines.append(line)

    shell_counts = Counter(c.cmd.split()[0] for c in activity.shell if c.cmd.split())
    commits = [
        f"[{c.repo or 'unknown'}] {c.message.strip().splitlines()[0][:80]}"
        for c in activity.commits[:20]
        if c.message.strip()
    ]

    variables = {
        "dateStr": display_date(day),
        "contextHint": _context_hint(profile),
        "focusHint": _focus_hint(focus_score),
        "browserActivity": "\n".join(browser_lines) or NONE,
        "searches": _bullets([s.query for s in activity.searches[:20]]),
        "assistantPrompts": _bullets([s.prompt[:120] for s in activity.assistant[:10]]),
        "shellActivity": _bullets([f"{cmd} ({n})" for cmd, n in shell_counts.most_common(8)]),
        "commits": _bullets(commits),
    }
    return fill_template(load_template(PrivacyTier.STANDARD, prompts_dir), variables)


# ---------------------------------------------------------------------------
# rag
# ---------------------------------------------------------------------------


def build_rag_prompt(
    day: str,
    chunks: list[ActivityChunk],
    profile: str = "",
    prompts_dir: str | Path | None = None,
    focus_score: float | None = None,
) -> str:
    blocks = []
    for i, chunk in enumerate(chunks, start=1):
        kind = f"{chunk.source}: {chunk.category}" if chunk.category else chunk.source
        blocks.append(f"--- Activity Block {i} ({kind}) ---\n{chunk.text}")

    variables = {
        "dateStr": display_date(day),
        "contextHint": _context_hint(profile),
        "focusHint": _focus_hint(focus_score),
        "chunkTexts": "\n\n".join(blocks) or NONE,
    }
    return fill_template(load_template(PrivacyTier.RAG, prompts_dir), variables)


# ---------------------------------------------------------------------------
# classified
# ---------------------------------------------------------------------------


def build_classified_prompt(
    day: str,
    classification: ClassificationResult,
    profile: str = "",
    prompts_dir: str | Path | None = None,
    focus_score: float | None = None,
) -> str:
    by_type: dict[str, list[StructuredEvent]] = {}
    for event in classification.events:
        by_type.setdefault(event.activity_type, []).append(event)

    sections = []
    for activity_type, events in by_type.items():
        topics = list(dict.fromkeys(t for e in events for t in e.topics))
        entities = list(dict.fromkeys(x for e in events for x in e.entities))
        summaries = list(dict.fromkeys(e.summary for e in events if e.summary))
        sections.append(
            f"### {activity_type} ({len(events)} events)\n"
            f"Topics: {', '.join(topics) or 'none'}\n"
            f"Entities: {', '.join(entities) or 'none'}\n"
            f"Activities:\n{_bullets(summaries)}"
        )

    all_topics = list(dict.fromkeys(t for e in classification.events for t in e.topics))
    all_entities = list(dict.fromkeys(x for e in classification.events for x in e.entities))

    variables = {
        "dateStr": display_date(day),
        "contextHint": _context_hint(profile),
        "focusHint": _focus_hint(focus_score),
        "totalProcessed": str(classification.total_processed),
        "llmClassified": str(classification.llm_classified),
        "ruleClassified": str(classification.rule_classified),
        "allTopics": ", ".join(all_topics) or "none",
        "allEntities": ", ".join(all_entities) or "none",
        "activitySections": "\n\n".join(sections) or "(no classified events)",
    }
    return fill_template(load_template(PrivacyTier.CLASSIFIED, prompts_dir), variables)


# ---------------------------------------------------------------------------
# deidentified
# ---------------------------------------------------------------------------


def aggregate_safe(label: str) -> bool:
    """True when ``label`` may appear in a deidentified prompt."""
    return validate_leaks(label, PrivacyTier.DEIDENTIFIED).passed


def _safe(labels: list[str]) -> list[str]:
    return [label for label in labels if aggregate_safe(label)]


def build_deidentified_prompt(
    day: str,
    patterns: PatternAnalysis,
    profile: str = "",
    prompts_dir: str | Path | None = None,
) -> str:
    """Prompt built from aggregates alone; no per-event data reaches it."""
    activity_dist = "\n".join(
        f"  {a.activity_type}: {a.count} events ({a.pct}%)" for a in patterns.top_activity_types
    ) or "  (no activity data)"

    cluster_lines = []
    topic_weight: Counter = Counter()
    for cluster in patterns.temporal_clusters:
        topics = _safe(cluster.topics)
        for topic in topics:
            topic_weight[topic] += cluster.event_count
        if len(cluster_lines) < 6:
            span = f"{format_hour(cluster.hour_start)}-{format_hour(cluster.hour_end + 1)}"
            head = f"{cluster.activity_type} {span}"
            if topics:
                head += f": {', '.join(topics[:3])}"
            cluster_lines.append(
                f"  {head} ({cluster.event_count} events, intensity {cluster.intensity:.1f} per hour)"
            )
    temporal_shape = "\n".join(cluster_lines) or "  No significant clusters detected."
    top_topics = "\n".join(
        f"  {topic}: ~{count} events" for topic, count in topic_weight.most_common(12)
    ) or "  (no topics extracted)"

    connections = [
        f"  {c.topic_a} ↔ {c.topic_b} (strength {c.strength:.2f})"
        for c in patterns.topic_cooccurrences
        if c.strength >= 0.3 and aggregate_safe(c.topic_a) and aggregate_safe(c.topic_b)
    ][:8]
    topic_connections = "\n".join(connections) or "  No strong topic connections."

    relations = patterns.entity_relations
    if relations:
        contexts = list(dict.fromkeys(c for r in relations for c in r.contexts))
        entity_clusters = (
            f"  {len(relations)} recurring entity pairs, strongest seen together "
            f"{relations[0].cooccurrences} times, across: {', '.join(_safe(contexts)) or 'mixed'}"
        )
    else:
        entity_clusters = "  No entity co-occurrences detected."

    trend_lines = []
    for trend, heading in (
        ("new", "New explorations"),
        ("returning", "Returning interests"),
        ("rising", "Trending up"),
        ("stable", "Ongoing"),
    ):
        topics = _safe([s.topic for s in patterns.recurrence_signals if s.trend == trend])
        if topics:
            trend_lines.append(f"  {heading}: {', '.join(topics)}")
    recurrence = "\n".join(trend_lines) or "  No recurrence data available."

    delta = patterns.knowledge_delta
    delta_lines = []
    if _safe(delta.new_topics):
        delta_lines.append(f"  New topics: {', '.join(_safe(delta.new_topics))}")
    if _safe(delta.recurring_topics):
        delta_lines.append(f"  Recurring: {', '.join(_safe(delta.recurring_topics))}")
    if delta.novel_entities:
        delta_lines.append(f"  New entities: {len(delta.novel_entities)}")
    if _safe(delta.connections):
        delta_lines.append(f"  Cross-connections: {'; '.join(_safe(delta.connections))}")

    peak_hours = ", ".join(
        f"{format_hour(p.hour)} ({p.count})" for p in patterns.peak_hours[:3]
    ) or "unknown"

    variables = {
        "dateStr": display_date(day),
        "contextHint": _context_hint(profile if aggregate_safe(profile) else ""),
        "focusScore": f"{round(patterns.focus_score * 100)}% ({focus_label(patterns.focus_score)})",
        "concentrationScore": f"{round(patterns.activity_concentration_score * 100)}%",
        "peakHours": peak_hours,
        "activityDist": activity_dist,
        "temporalShape": temporal_shape,
        "topTopics": top_topics,
        "topicConnections": topic_connections,
        "entityClusters": entity_clusters,
        "recurrenceLines": recurrence,
        "knowledgeDeltaLines": "\n".join(delta_lines) or "  No knowledge delta data.",
    }
    return fill_template(load_template(PrivacyTier.DEIDENTIFIED, prompts_dir), variables)


# ---------------------------------------------------------------------------
# dispatch
# ---------------------------------------------------------------------------


def build_tier_prompt(
    tier: PrivacyTier,
    day: str,
    *,
    categorized: dict[str, list[BrowserVisit]] | None = None,
    activity: CollectedActivity | None = None,
    classification: ClassificationResult | None = None,
    patterns: PatternAnalysis | None = None,
    profile: str = "",
    prompts_dir: str | Path | None = None,
) -> str:
    """Build the prompt for ``tier`` from the inputs that tier is allowed to see."""
    categorized = categorized or {}
    activity = activity or CollectedActivity()
    classification = classification or ClassificationResult()
    patterns = patterns or PatternAnalysis()
    focus = patterns.focus_score if classification.events else None

    if tier is PrivacyTier.STANDARD:
        return build_standard_prompt(day, categorized, activity, profile, prompts_dir, focus)
    if tier is PrivacyTier.RAG:
        chunks = select_chunks(chunk_activity(day, categorized, activity))
        return build_rag_prompt(day, chunks, profile, prompts_dir, focus)
    if tier is PrivacyTier.CLASSIFIED:
        return build_classified_prompt(day, classification, profile, prompts_dir, focus)
    return build_deidentified_prompt(day, patterns, profile, prompts_dir)
