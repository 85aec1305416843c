"""Split sanitized activity into per-source text blocks for the rag tier."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from daydigest.core.models import BrowserVisit, CollectedActivity
from daydigest.filter.categorize import CATEGORY_LABELS

SEARCH_BATCH = 30
SHELL_BATCH = 40
MAX_ASSISTANT_PROMPTS = 15
MIN_CHUNK_TOKENS = 100


@dataclass
class ActivityChunk:
    """One retrievable block of sanitized activity text."""

    chunk_id: str
    date: str
    source: str  # "browser", "search", "shell", "assistant", "git", "misc"
    text: str
    item_count: int
    category: str | None = None
    time_range: tuple[str, str] | None = None
    labels: list[str] = field(default_factory=list)


def estimate_tokens(text: str) -> int:
    """Rough count at ~4 characters per token."""
    return -(-len(text) // 4)


def _time_range(times: list[datetime | None]) -> tuple[str, str] | None:
    known = sorted(t for t in times if t is not None)
    if not known:
        return None
    return known[0].strftime("%H:%M"), known[-1].strftime("%H:%M")


def _ranked(counts: Counter, limit: int) -> list[str]:
    return [f"{name} ({count})" for name, count in counts.most_common(limit)]


def _batches(items: list[str], size: int) -> list[list[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def _with_range(lines: list[str], time_range: tuple[str, str] | None) -> str:
    if time_range:
        lines.append(f"Time range: {time_range[0]} - {time_range[1]}")
    return "\n".join(lines)


def _slug(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_-]", "_", value)


def chunk_activity(
    date: str,
    categorized: dict[str, list[BrowserVisit]],
    activity: CollectedActivity,
) -> list[ActivityChunk]:
    """Build chunks: one per browser category, batched searches and shell
    commands, one per assistant project, one per commit repository.

    Chunks under ``MIN_CHUNK_TOKENS`` are folded into a single misc chunk.
    """
    chunks: list[ActivityChunk] = []

    for category, visits in categorized.items():
        if not visits:
            continue
        label = CATEGORY_LABELS.get(category, category)
        domains = Counter(v.domain or "unknown" for v in visits)
        titles = [v.title[:60] for v in visits[:8] if v.title]
        lines = [
            f"{label} Browser Activity ({len(visits)} visits)",
            f"Top domains: {', '.join(_ranked(domains, 8))}",
        ]
        if titles:
            lines.append(f"Sample pages: {' | '.join(titles)}")
        time_range = _time_range([v.time for v in visits])
        chunks.append(ActivityChunk(
            chunk_id=f"{date}:browser:{category}",
            date=date,
            source="browser",
            text=_with_range(lines, time_range),
            item_count=len(visits),
            category=category,
            time_range=time_range,
            labels=list(domains),
        ))

    if activity.searches:
        engines = Counter(s.engine or "unknown" for s in activity.searches)
        time_range = _time_range([s.time for s in activity.searches])
        batches = _batches([s.query for s in activity.searches], SEARCH_BATCH)
        for i, batch in enumerate(batches, start=1):
            suffix = f":{i}" if len(batches) > 1 else ""
            lines = [
                f"Search Queries ({len(batch)} queries)",
                f"Queries: {' | '.join(batch)}",
                f"Engines: {', '.join(_ranked(engines, 5))}",
            ]
            chunks.append(ActivityChunk(
                chunk_id=f"{date}:search{suffix}",
                date=date,
                source="search",
                text=_with_range(lines, time_range),
                item_count=len(batch),
                time_range=time_range,
            ))

    if activity.shell:
        bases = Counter(c.cmd.split()[0] for c in activity.shell if c.cmd.split())
        time_range = _time_range([c.time for c in activity.shell])
        batches = _batches([c.cmd.strip() for c in activity.shell], SHELL_BATCH)
        for i, batch in enumerate(batches, start=1):
            suffix = f":{i}" if len(batches) > 1 else ""
            lines = [
                f"Shell Commands ({len(batch)} commands)",
                f"Commands: {' | '.join(batch)}",
                f"Patterns: {', '.join(_ranked(bases, 6))}",
            ]
            chunks.append(ActivityChunk(
                chunk_id=f"{date}:shell{suffix}",
                date=date,
                source="shell",
                text=_with_range(lines, time_range),
                item_count=len(batch),
                time_range=time_range,
            ))

    by_project: dict[str, list] = {}
    for session in activity.assistant:
        by_project.setdefault(session.project or "general", []).append(session)
    for project, sessions in by_project.items():
        prompts = [s.prompt[:120] for s in sessions[:MAX_ASSISTANT_PROMPTS]]
        time_range = _time_range([s.time for s in sessions])
        lines = [
            f"AI Assistant Sessions - {project} ({len(sessions)} prompts)",
            f"Prompts: {' | '.join(prompts)}",
        ]
        chunks.append(ActivityChunk(
            chunk_id=f"{date}:assistant:{_slug(project)}",
            date=date,
            source="assistant",
            text=_with_range(lines, time_range),
            item_count=len(sessions),
            time_range=time_range,
            labels=[project],
        ))

    by_repo: dict[str, list] = {}
    for commit in activity.commits:
        by_repo.setdefault(commit.repo or "unknown", []).append(commit)
    for repo, commits in by_repo.items():
        subjects = [c.message.strip().splitlines()[0][:80] for c in commits if c.message.strip()]
        changed = sum(c.insertions + c.deletions for c in commits)
        time_range = _time_range([c.time for c in commits])
        lines = [
            f"Commits - {repo} ({len(commits)} commits, {changed} lines changed)",
            f"Messages: {' | '.join(subjects)}",
        ]
        chunks.append(ActivityChunk(
            chunk_id=f"{date}:git:{_slug(repo)}",
            date=date,
            source="git",
            text=_with_range(lines, time_range),
            item_count=len(commits),
            time_range=time_range,
            labels=[repo],
        ))

    return merge_small_chunks(chunks, date)


def merge_small_chunks(
    chunks: list[ActivityChunk], date: str, min_tokens: int = MIN_CHUNK_TOKENS,
) -> list[ActivityChunk]:
    keep = [c for c in chunks if estimate_tokens(c.text) >= min_tokens]
    small = [c for c in chunks if estimate_tokens(c.text) < min_tokens]

    # A lone small chunk stays as it is.
    if len(small) <= 1:
        return keep + small

    total = sum(c.item_count for c in small)
    merged = "\n\n".join(c.text for c in small)
    keep.append(ActivityChunk(
        chunk_id=f"{date}:misc",
        date=date,
        source="misc",
        text=f"Miscellaneous Activity ({total} items)\n\n{merged}",
        item_count=total,
        category="other",
    ))
    return keep


def select_chunks(chunks: list[ActivityChunk], max_chunks: int = 8) -> list[ActivityChunk]:
    """Pick the chunks carrying the most activity, keeping their original order."""
    ranked = sorted(range(len(chunks)), key=lambda i: -chunks[i].item_count)[:max_chunks]
    return [chunks[i] for i in sorted(ranked)]
