"""Structured logging and verbosity levels for digest runs."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any

from rich.console import Console


class Verbosity(IntEnum):
    """Verbosity levels for console output."""

    DEFAULT = 0   # Summary tables only
    VERBOSE = 1   # + per-stage counts
    DEBUG = 2     # + LLM batch details, timing


@dataclass
class StageLog:
    """Per-stage run statistics. Counts only, never record text."""

    name: str
    items_in: int = 0
    items_out: int = 0
    time_seconds: float = 0.0
    llm_calls: int = 0
    fallbacks: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "items_in": self.items_in,
            "items_out": self.items_out,
            "time_seconds": self.time_seconds,
            "llm_calls": self.llm_calls,
            "fallbacks": self.fallbacks,
        }


@dataclass
class RunLog:
    """Structured log of a complete digest run.

    The dict format is::

        {
            "run_id": "20250301T221500Z",
            "stages": {
                "dedup": {"items_in": 120, "items_out": 41, ...},
                ...
            },
            "total_time": 0.42,
            "total_llm_calls": 0,
            "leak_check": {"tier": "classified", "passed": true},
        }
    """

    run_id: str = ""
    stages: dict[str, StageLog] = field(default_factory=dict)
    total_time: float = 0.0
    total_llm_calls: int = 0
    leak_check: dict[str, Any] | None = None

    def get_or_create_stage(self, name: str) -> StageLog:
        if name not in self.stages:
            self.stages[name] = StageLog(name=name)
        return self.stages[name]

    def finalize(self) -> None:
        self.total_llm_calls = sum(s.llm_calls for s in self.stages.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "stages": {name: stage.to_dict() for name, stage in self.stages.items()},
            "total_time": self.total_time,
            "total_llm_calls": self.total_llm_calls,
            "leak_check": self.leak_check,
        }


class DigestLogger:
    """Structured logger for digest runs.

    Writes JSONL events to ``<data_dir>/logs/<run_id>.jsonl`` when a data
    directory is given, and echoes progress to the console via Rich
    according to the verbosity level.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.DEFAULT,
        data_dir: Path | None = None,
        console: Console | None = None,
    ):
        self.verbosity = verbosity
        self.data_dir = data_dir
        self.console = console or Console(stderr=True)
        self.run_log = RunLog(
            run_id=datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"),
        )
        self._log_file = None
        self._log_path: Path | None = None
        self._stage_start: float = 0.0

        if data_dir is not None:
            logs_dir = data_dir / "logs"
            logs_dir.mkdir(parents=True, exist_ok=True)
            self._log_path = logs_dir / f"{self.run_log.run_id}.jsonl"
            self._log_file = open(self._log_path, "a")

    @property
    def log_path(self) -> Path | None:
        return self._log_path

    def _write_event(self, event: dict[str, Any]) -> None:
        if self._log_file is not None:
            event["timestamp"] = datetime.now(timezone.utc).isoformat()
            self._log_file.write(json.dumps(event) + "\n")
            self._log_file.flush()

    def _console_print(self, message: str, min_verbosity: Verbosity) -> None:
        if self.verbosity >= min_verbosity:
            self.console.print(message)

    # -- Stage events --

    def stage_start(self, name: str, items_in: int) -> None:
        self._stage_start = time.time()
        stage = self.run_log.get_or_create_stage(name)
        stage.items_in = items_in

        self._write_event({"event": "stage_start", "stage": name, "items_in": items_in})
        self._console_print(f"  [bold]{name}[/bold]: {items_in} in", Verbosity.VERBOSE)

    def stage_finish(self, name: str, items_out: int) -> None:
        elapsed = time.time() - self._stage_start
        stage = self.run_log.get_or_create_stage(name)
        stage.items_out = items_out
        stage.time_seconds = elapsed

        self._write_event({
            "event": "stage_finish",
            "stage": name,
            "items_in": stage.items_in,
            "items_out": items_out,
            "time_seconds": round(elapsed, 3),
        })
        self._console_print(
            f"    {name}: {stage.items_in} -> {items_out} ({elapsed * 1000:.0f}ms)",
            Verbosity.VERBOSE,
        )

    # -- LLM batch events --

    def llm_batch(self, stage: str, batch_index: int, size: int, fell_back: bool) -> None:
        """Record one LLM classification batch and whether it fell back to rules."""
        log = self.run_log.get_or_create_stage(stage)
        log.llm_calls += 1
        if fell_back:
            log.fallbacks += 1

        self._write_event({
            "event": "llm_batch",
            "stage": stage,
            "batch": batch_index,
            "size": size,
            "fell_back": fell_back,
        })
        status = "[yellow]rule fallback[/yellow]" if fell_back else "[green]ok[/green]"
        self._console_print(
            f"        [dim]LLM batch {batch_index} ({size} events): {status}[/dim]",
            Verbosity.DEBUG,
        )

    # -- History events --

    def history_loaded(self, topic_count: int, error: str | None = None) -> None:
        event: dict[str, Any] = {"event": "history_loaded", "topics": topic_count}
        if error:
            event["error"] = error
            self._console_print(
                f"  [yellow]Topic history unreadable, starting empty:[/yellow] {error}",
                Verbosity.DEFAULT,
            )
        self._write_event(event)

    def history_saved(self, topic_count: int, path: Path) -> None:
        self._write_event({"event": "history_saved", "topics": topic_count, "path": str(path)})
        self._console_print(f"  Topic history saved ({topic_count} topics)", Verbosity.VERBOSE)

    # -- Privacy --

    def leak_check(self, tier: str, passed: bool, violation_count: int, secret_count: int) -> None:
        self.run_log.leak_check = {"tier": tier, "passed": passed}
        self._write_event({
            "event": "leak_check",
            "tier": tier,
            "passed": passed,
            "violations": violation_count,
            "secrets": secret_count,
        })
        if not passed:
            self._console_print(
                f"  [red]Leak check failed for tier {tier}:[/red] "
                f"{violation_count} violation(s), {secret_count} secret(s)",
                Verbosity.DEFAULT,
            )

    # -- Run lifecycle --

    def run_start(self, date: str, record_count: int, tier: str) -> None:
        self._write_event({
            "event": "run_start",
            "date": date,
            "records": record_count,
            "tier": tier,
        })

    def run_finish(self, total_time: float) -> None:
        self.run_log.total_time = total_time
        self.run_log.finalize()

        self._write_event({
            "event": "run_finish",
            "total_time": round(total_time, 3),
            "total_llm_calls": self.run_log.total_llm_calls,
        })
        self.close()

    def close(self) -> None:
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None
