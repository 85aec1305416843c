"""daydigest error types and utilities."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write(path: Path, content: str) -> None:
    """Write content to a file atomically using temp file + rename.

    The temporary file lives in the target's directory so the final
    ``os.replace`` never crosses a filesystem boundary. A reader sees
    either the previous snapshot or the new one, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    closed = False
    try:
        os.write(fd, content.encode("utf-8"))
        os.fsync(fd)
        os.close(fd)
        closed = True
        os.replace(tmp, str(path))
    except BaseException:
        if not closed:
            os.close(fd)
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class DigestError(Exception):
    """Base exception for daydigest."""


class ConfigError(DigestError):
    """Invalid configuration value (unknown tier, sanitization level, provider)."""


class HistoryError(DigestError):
    """Topic history could not be read or written."""


class ClassificationError(DigestError):
    """An LLM classification batch failed or returned unusable output."""


class LLMError(DigestError):
    """The LLM provider call failed after retries."""
