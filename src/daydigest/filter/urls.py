"""URL parsing helpers shared by the filter stages."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit


def parse_url(url: str) -> SplitResult | None:
    """Split ``url`` into parts, or return None when it is not an absolute URL.

    An absolute URL needs both a scheme and a host. Malformed ports and
    bracketed hosts make ``urlsplit`` raise, which is reported as None too.
    """
    try:
        parts = urlsplit(url.strip())
        _ = parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    return parts


def netloc_without_userinfo(parts: SplitResult) -> str:
    """Rebuild host[:port] with any ``user:password@`` prefix dropped."""
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return host


def hostname_of(url: str) -> str | None:
    """Lower-cased host with a leading ``www.`` removed; None if unparsable."""
    parts = parse_url(url)
    if parts is None:
        return None
    host = parts.hostname or ""
    return host[4:] if host.startswith("www.") else host
