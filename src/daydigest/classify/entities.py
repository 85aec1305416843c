"""Conservative entity extraction from titles, queries and prompts."""

from __future__ import annotations

import re

from daydigest.classify.vocab import ENTITY_EXTRACTION_SKIP_DOMAINS, ENTITY_STOPWORDS, MAX_ENTITIES

CAPITALIZED_WORD = re.compile(r"\b[A-Z][a-zA-Z0-9]+(?:\.[a-zA-Z]+)?\b")
KEBAB_TOOL = re.compile(r"\b[a-z]+-[a-z]+(?:-[a-z]+)?\b")
TLD_SUFFIX = re.compile(r"\.\w{2,4}$")


def domain_entity(domain: str) -> str | None:
    """``github.com`` -> ``Github``; None for short or empty bases."""
    base = TLD_SUFFIX.sub("", domain).split(".")[-1]
    if len(base) <= 2:
        return None
    return base[0].upper() + base[1:]


def extract_entities(text: str, domain: str | None = None) -> list[str]:
    """Pull tool and project names out of ``text``.

    Capitalized tokens longer than two characters survive unless they are
    stopwords; kebab-case tokens longer than four characters are always
    kept. Titles from skip-listed domains yield nothing. At most
    five entities are returned, in order of appearance.
    """
    if domain and domain in ENTITY_EXTRACTION_SKIP_DOMAINS:
        return []

    entities: list[str] = []
    if domain:
        base = domain_entity(domain)
        if base:
            entities.append(base)

    for word in CAPITALIZED_WORD.findall(text):
        if len(word) > 2 and word not in ENTITY_STOPWORDS and word not in entities:
            entities.append(word)

    for tool in KEBAB_TOOL.findall(text):
        if len(tool) > 4 and tool not in entities:
            entities.append(tool)

    return entities[:MAX_ENTITIES]
