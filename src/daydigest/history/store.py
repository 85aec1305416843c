"""Topic history persistence: one JSON snapshot, replaced wholesale each run."""

from __future__ import annotations

import json
from pathlib import Path

from daydigest.analyze.recurrence import empty_topic_history
from daydigest.core.errors import HistoryError, atomic_write
from daydigest.core.models import TopicHistory


class HistoryStore:
    """Filesystem-backed :class:`TopicHistory` snapshot.

    A missing file reads as an empty history. Unreadable or malformed
    content raises :class:`HistoryError` so the caller can decide whether
    to continue with an empty history.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> TopicHistory:
        if not self.path.exists():
            return empty_topic_history()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise HistoryError(f"Cannot read topic history at {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise HistoryError(f"Topic history at {self.path} is not a JSON object")
        try:
            return TopicHistory.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise HistoryError(f"Malformed topic history at {self.path}: {exc}") from exc

    def save(self, history: TopicHistory) -> None:
        try:
            atomic_write(self.path, json.dumps(history.to_dict(), indent=2, ensure_ascii=False))
        except OSError as exc:
            raise HistoryError(f"Cannot write topic history to {self.path}: {exc}") from exc

    def reset(self) -> bool:
        """Delete the snapshot. Returns False when there was nothing to delete."""
        if not self.path.exists():
            return False
        try:
            self.path.unlink()
        except OSError as exc:
            raise HistoryError(f"Cannot remove topic history at {self.path}: {exc}") from exc
        return True
