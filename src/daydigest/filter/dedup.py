"""Near-duplicate collapsing for browser visits.

Two phases: group visits by canonical URL and keep the best-titled
representative, then cap how many representatives a single host may
contribute.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from daydigest.core.config import DedupConfig
from daydigest.core.models import BrowserVisit
from daydigest.filter.urls import parse_url

MAP_HOSTS = ("maps.google.com", "google.com")


@dataclass
class DedupResult:
    visits: list[BrowserVisit] = field(default_factory=list)
    collapsed_count: int = 0


def _is_map_path(host: str, path: str) -> bool:
    if host == "maps.google.com":
        return True
    return host == "google.com" and path.startswith("/maps/")


def canonical_key(url: str) -> str:
    """Normalize a URL for duplicate detection.

    Host is lower-cased without ``www.``; query string, fragment and
    trailing slashes are dropped. Map place/direction URLs also lose their
    ``/@lat,lng,zoom`` viewport suffix. A URL that does not parse is its
    own key, unchanged.
    """
    parts = parse_url(url)
    if parts is None:
        return url

    host = (parts.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]

    path = parts.path
    if _is_map_path(host, path):
        viewport = path.find("/@")
        if viewport != -1:
            path = path[:viewport]
    path = path.rstrip("/") or "/"

    return f"https://{host}{path}"


def _host_bucket(visit: BrowserVisit) -> str:
    parts = parse_url(visit.url)
    if parts is None:
        # Unparsable URLs never share a per-host cap.
        return visit.url
    host = (parts.hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def _epoch(visit: BrowserVisit) -> float | None:
    return visit.time.timestamp() if visit.time is not None else None


def pick_best(group: list[BrowserVisit]) -> BrowserVisit:
    """Longest trimmed title wins; ties go to the earliest load."""

    def rank(visit: BrowserVisit) -> tuple[int, float]:
        ts = _epoch(visit)
        return (-len((visit.title or "").strip()), ts if ts is not None else math.inf)

    return min(group, key=rank)


def _newest_first(visit: BrowserVisit) -> float:
    ts = _epoch(visit)
    return -ts if ts is not None else math.inf


def dedup_visits(
    visits: list[BrowserVisit], config: DedupConfig | None = None,
) -> DedupResult:
    config = config or DedupConfig()

    groups: dict[str, list[BrowserVisit]] = {}
    for visit in visits:
        groups.setdefault(canonical_key(visit.url), []).append(visit)
    representatives = [pick_best(group) for group in groups.values()]

    by_host: dict[str, list[BrowserVisit]] = {}
    for visit in representatives:
        by_host.setdefault(_host_bucket(visit), []).append(visit)

    kept: list[BrowserVisit] = []
    for host_visits in by_host.values():
        host_visits.sort(key=_newest_first)
        kept.extend(host_visits[: config.max_visits_per_domain])

    kept.sort(key=_newest_first)
    return DedupResult(visits=kept, collapsed_count=len(visits) - len(kept))
