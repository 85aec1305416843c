"""Domain categorization for browser visits.

The classifier only depends on the :class:`Categorizer` interface, so a
stub returning fixed categories is enough to test it. :class:`RuleCategorizer`
is the built-in table-driven implementation.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from daydigest.core.models import BrowserVisit
from daydigest.filter.urls import hostname_of

CATEGORIES = (
    "work", "dev", "research", "news", "social", "media", "shopping", "finance",
    "ai_tools", "personal", "education", "gaming", "writing", "pkm", "other",
)

CATEGORY_LABELS = {
    "work": "Work",
    "dev": "Dev & Engineering",
    "research": "Research",
    "news": "News",
    "social": "Social",
    "media": "Media & Entertainment",
    "shopping": "Shopping",
    "finance": "Finance",
    "ai_tools": "AI Tools",
    "personal": "Personal",
    "education": "Education",
    "gaming": "Gaming",
    "writing": "Writing",
    "pkm": "PKM & Notes",
    "other": "Other",
}

# Patterns ending in "." match a leading host label ("docs." matches
# docs.python.org); all others match the host or any subdomain of it.
# First category wins, so order matters.
CATEGORY_RULES: dict[str, list[str]] = {
    "work": [
        "notion.so", "notion.site", "linear.app", "jira.", "confluence.", "asana.com",
        "monday.com", "clickup.com", "trello.com", "slack.com", "teams.microsoft.com",
        "zoom.us", "meet.google.com", "calendar.google.com", "mail.google.com",
        "outlook.live.com", "outlook.office.com", "loom.com", "figma.com", "miro.com",
        "airtable.com", "docs.google.com", "sheets.google.com", "drive.google.com",
        "dropbox.com", "sharepoint.com", "salesforce.com", "hubspot.com",
        "zendesk.com", "pagerduty.com", "datadog.com", "sentry.io", "calendly.com",
        "office.com",
    ],
    "dev": [
        "github.com", "gitlab.com", "bitbucket.org", "stackoverflow.com",
        "stackexchange.com", "npmjs.com", "pypi.org", "crates.io", "hub.docker.com",
        "vercel.com", "netlify.com", "fly.io", "heroku.com", "aws.amazon.com",
        "console.cloud.google.com", "portal.azure.com", "cloudflare.com",
        "rust-lang.org", "python.org", "typescriptlang.org", "replit.com",
        "codepen.io", "codesandbox.io", "huggingface.co", "regex101.com",
        "caniuse.com", "devdocs.io", "readthedocs.io", "supabase.com",
        "docs.", "developer.", "api.",
    ],
    "research": [
        "wikipedia.org", "arxiv.org", "scholar.google.com", "pubmed.ncbi.",
        "jstor.org", "researchgate.net", "semanticscholar.org", "wolframalpha.com",
        "britannica.com", "medium.com", "substack.com", "lesswrong.com", "hbr.org",
        "nature.com", "sciencedirect.com", "ssrn.com", "paperswithcode.com",
    ],
    "news": [
        "nytimes.com", "washingtonpost.com", "theguardian.com", "bbc.", "bbc.com",
        "reuters.com", "apnews.com", "bloomberg.com", "wsj.com", "ft.com",
        "economist.com", "theatlantic.com", "wired.com", "techcrunch.com",
        "theverge.com", "arstechnica.com", "news.ycombinator.com", "axios.com",
        "npr.org", "cnn.com",
    ],
    "social": [
        "twitter.com", "x.com", "reddit.com", "linkedin.com", "facebook.com",
        "instagram.com", "threads.net", "mastodon.", "discord.com", "bsky.app",
        "tumblr.com", "pinterest.com", "quora.com", "producthunt.com", "dev.to",
    ],
    "media": [
        "youtube.com", "netflix.com", "spotify.com", "twitch.tv", "hulu.com",
        "disneyplus.com", "max.com", "primevideo.com", "soundcloud.com",
        "vimeo.com", "tiktok.com", "podcasts.apple.com", "espn.com", "bandcamp.com",
    ],
    "shopping": [
        "amazon.com", "ebay.com", "etsy.com", "bestbuy.com", "walmart.com",
        "target.com", "costco.com", "newegg.com", "wayfair.com", "homedepot.com",
        "ikea.com", "nike.com", "aliexpress.com", "temu.com", "chewy.com",
    ],
    "finance": [
        "chase.com", "bankofamerica.com", "wellsfargo.com", "schwab.com",
        "fidelity.com", "vanguard.com", "robinhood.com", "coinbase.com", "ynab.com",
        "paypal.com", "stripe.com", "venmo.com", "capitalone.com", "nerdwallet.com",
    ],
    "ai_tools": [
        "claude.ai", "chat.openai.com", "chatgpt.com", "gemini.google.com",
        "perplexity.ai", "cursor.sh", "copilot.microsoft.com", "poe.com",
        "midjourney.com", "replicate.com", "mistral.ai", "groq.com", "ollama.com",
        "phind.com", "v0.dev",
    ],
    "personal": [
        "health.", "myfitnesspal.com", "strava.com", "garmin.com", "oura.com",
        "headspace.com", "fitbit.com", "alltrails.com", "goodreads.com",
    ],
    "education": [
        "coursera.org", "edx.org", "udemy.com", "khanacademy.org", "duolingo.com",
        "brilliant.org", "mit.edu", "stanford.edu", "canvas.", "instructure.com",
        "quizlet.com", "leetcode.com", "hackerrank.com", "codecademy.com",
        "freecodecamp.org", "datacamp.com", "deeplearning.ai",
    ],
    "gaming": [
        "store.steampowered.com", "epicgames.com", "gog.com", "itch.io",
        "xbox.com", "playstation.com", "nintendo.com", "ign.com", "polygon.com",
        "minecraft.net", "nexusmods.com",
    ],
    "writing": [
        "grammarly.com", "hemingwayapp.com", "overleaf.com", "ghost.org",
        "reedsy.com", "wattpad.com", "750words.com",
    ],
    "pkm": [
        "obsidian.md", "logseq.com", "roamresearch.com", "capacities.io", "tana.inc",
        "mem.ai", "readwise.io", "raindrop.io", "instapaper.com", "workflowy.com",
        "heptabase.com",
    ],
}


def _matches(domain: str, pattern: str) -> bool:
    if pattern.endswith("."):
        return domain.startswith(pattern) or f".{pattern}" in domain
    return domain == pattern or domain.endswith(f".{pattern}")


class Categorizer(ABC):
    """Maps a host name to exactly one of :data:`CATEGORIES`."""

    @abstractmethod
    def categorize(self, domain: str) -> str:
        ...


class RuleCategorizer(Categorizer):
    """Table-driven categorizer; unknown hosts fall into ``other``."""

    def __init__(self, rules: dict[str, list[str]] | None = None):
        self.rules = rules if rules is not None else CATEGORY_RULES
        unknown = set(self.rules) - set(CATEGORIES)
        if unknown:
            raise ValueError(f"Unknown categories in rules: {sorted(unknown)}")

    def categorize(self, domain: str) -> str:
        d = domain.lower()
        if d.startswith("www."):
            d = d[4:]
        for category, patterns in self.rules.items():
            if any(_matches(d, p) for p in patterns):
                return category
        return "other"


def categorize_visits(
    visits: list[BrowserVisit],
    categorizer: Categorizer,
    max_other_total: int = 20,
) -> dict[str, list[BrowserVisit]]:
    """Group visits by category, in :data:`CATEGORIES` order.

    Visits without a resolvable host are skipped. The ``other`` bucket is
    capped to its ``max_other_total`` most recent visits. Empty categories
    are omitted.
    """
    by_category: dict[str, list[BrowserVisit]] = {c: [] for c in CATEGORIES}
    for visit in visits:
        domain = visit.domain or hostname_of(visit.url)
        if not domain:
            continue
        category = categorizer.categorize(domain)
        if category not in by_category:
            category = "other"
        by_category[category].append(visit)

    other = by_category["other"]
    if len(other) > max_other_total:
        other.sort(key=lambda v: -v.time.timestamp() if v.time else math.inf)
        by_category["other"] = other[:max_other_total]

    return {c: vs for c, vs in by_category.items() if vs}


def category_lookup(categorized: dict[str, list[BrowserVisit]]) -> dict[str, str]:
    """Invert a categorized map into ``domain -> category``."""
    lookup: dict[str, str] = {}
    for category, visits in categorized.items():
        for visit in visits:
            domain = visit.domain or hostname_of(visit.url)
            if domain:
                lookup[domain] = category
    return lookup
