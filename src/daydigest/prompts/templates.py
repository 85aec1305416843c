"""Tier prompt templates: built-in defaults with per-install overrides."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from daydigest.core.models import PrivacyTier

TEMPLATES_DIR = Path(__file__).parent / "templates"

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def load_template(tier: PrivacyTier, prompts_dir: str | Path | None = None) -> str:
    """Load the template for ``tier``.

    ``<prompts_dir>/<tier>.txt`` wins when it exists; otherwise the
    built-in template shipped with the package is used.
    """
    name = f"{tier.value}.txt"
    if prompts_dir:
        override = Path(prompts_dir) / name
        if override.is_file():
            return override.read_text(encoding="utf-8")
    return (TEMPLATES_DIR / name).read_text(encoding="utf-8")


def fill_template(template: str, variables: dict[str, str]) -> str:
    """Replace ``{{name}}`` placeholders. Unknown names are left as-is."""
    return PLACEHOLDER_PATTERN.sub(lambda m: variables.get(m.group(1), m.group(0)), template)


def template_id(tier: PrivacyTier, prompts_dir: str | Path | None = None) -> str:
    """Versioned template ID from the template content hash."""
    content = load_template(tier, prompts_dir)
    hash_prefix = hashlib.sha256(content.encode()).hexdigest()[:8]
    return f"{tier.value}_v{hash_prefix}"
