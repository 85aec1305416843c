"""Tier prompt builders and templates."""

from daydigest.prompts.builders import build_tier_prompt
from daydigest.prompts.templates import fill_template, load_template

__all__ = ["build_tier_prompt", "fill_template", "load_template"]
