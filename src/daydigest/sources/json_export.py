"""Activity export parser: JSON -> CollectedActivity.

The export is one object with up to five arrays::

    {
      "visits":    [{"url", "title", "time", "domain"}],
      "searches":  [{"query", "time", "engine"}],
      "shell":     [{"cmd", "time"}],
      "assistant": [{"prompt", "time", "project"}],
      "commits":   [{"hash", "message", "time", "repo", "insertions", "deletions"}]
    }

``time`` is an ISO-8601 string or epoch milliseconds. Aware timestamps are
converted to local wall-clock time so hour bucketing follows the user's day.
A record missing its required text field is skipped; an unusable ``time``
becomes None and the record is kept.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from daydigest.core.errors import DigestError
from daydigest.core.models import (
    AssistantSession,
    BrowserVisit,
    CollectedActivity,
    GitCommit,
    SearchQuery,
    ShellCommand,
)

logger = logging.getLogger(__name__)


def parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000)
        if isinstance(value, str):
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if dt.tzinfo is not None:
                dt = dt.astimezone().replace(tzinfo=None)
            return dt
    except (ValueError, OSError, OverflowError):
        return None
    return None


def _text(entry: dict, key: str) -> str:
    value = entry.get(key)
    return value if isinstance(value, str) else ""


def _int(entry: dict, key: str) -> int:
    try:
        return int(entry.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def _entries(data: dict, key: str) -> list[dict]:
    items = data.get(key) or []
    if not isinstance(items, list):
        logger.warning("Ignoring %r: expected a list", key)
        return []
    return [item for item in items if isinstance(item, dict)]


def parse_activity(data: dict) -> CollectedActivity:
    activity = CollectedActivity()

    for entry in _entries(data, "visits"):
        url = _text(entry, "url")
        if not url:
            continue
        activity.visits.append(BrowserVisit(
            url=url,
            title=_text(entry, "title"),
            time=parse_time(entry.get("time")),
            domain=_text(entry, "domain") or None,
        ))

    for entry in _entries(data, "searches"):
        query = _text(entry, "query")
        if query.strip():
            activity.searches.append(SearchQuery(
                query=query, time=parse_time(entry.get("time")), engine=_text(entry, "engine"),
            ))

    for entry in _entries(data, "shell"):
        cmd = _text(entry, "cmd")
        if cmd.strip():
            activity.shell.append(ShellCommand(cmd=cmd, time=parse_time(entry.get("time"))))

    for entry in _entries(data, "assistant"):
        prompt = _text(entry, "prompt")
        if prompt.strip():
            activity.assistant.append(AssistantSession(
                prompt=prompt, time=parse_time(entry.get("time")), project=_text(entry, "project"),
            ))

    for entry in _entries(data, "commits"):
        message = _text(entry, "message")
        if message.strip():
            activity.commits.append(GitCommit(
                hash=_text(entry, "hash"),
                message=message,
                time=parse_time(entry.get("time")),
                repo=_text(entry, "repo"),
                insertions=_int(entry, "insertions"),
                deletions=_int(entry, "deletions"),
            ))

    return activity


def load_activity(filepath: str | Path) -> CollectedActivity:
    """Read an activity export file.

    Raises:
        DigestError: the file cannot be read or is not a JSON object.
    """
    filepath = Path(filepath)
    try:
        data = json.loads(filepath.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DigestError(f"Cannot read activity export {filepath}: {exc}") from exc
    if not isinstance(data, dict):
        raise DigestError(f"Activity export {filepath} must contain a JSON object")
    return parse_activity(data)
