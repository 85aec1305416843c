"""Secret, path, address and URL scrubbing for raw activity text.

Every free-text field passes through :func:`scrub_text` before any later
stage sees it. The transforms run in a fixed order: credential shapes,
IPv4 addresses, home-directory paths, email addresses.
"""

from __future__ import annotations

import re
from dataclasses import replace

from daydigest.core.config import SanitizeConfig
from daydigest.core.models import BrowserVisit, CollectedActivity
from daydigest.filter.urls import hostname_of, netloc_without_userinfo, parse_url

INVALID_URL = "[INVALID_URL]"
REDACTED = "[REDACTED]"

# Ordered: generic assignments first so ``API_KEY=sk-...`` keeps its name.
SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(
            r"(?:export\s+)?(\w*(?:password|passwd|secret|token|key|api_?key|auth|bearer|credential)\w*)"
            r"\s*=\s*\S+",
            re.IGNORECASE,
        ),
        r"\1=[REDACTED]",
    ),
    (re.compile(r"(authorization:\s*(?:bearer|basic|token)\s+)\S+", re.IGNORECASE), r"\1[REDACTED]"),
    (
        re.compile(r"((?:postgres|mysql|mongodb|redis)://[^:]+:)[^@]+(@)", re.IGNORECASE),
        r"\1[REDACTED]\2",
    ),
    (re.compile(r"AKIA[A-Z0-9]{16}"), "[AWS_KEY_REDACTED]"),
    (re.compile(r"ghp_[A-Za-z0-9_]{20,}"), "[GITHUB_TOKEN_REDACTED]"),
    (re.compile(r"github_pat_[A-Za-z0-9_]{22}_[A-Za-z0-9_]{59}"), "[GITHUB_TOKEN_REDACTED]"),
    (re.compile(r"gho_[A-Za-z0-9_]{36,}"), "[GITHUB_TOKEN_REDACTED]"),
    (re.compile(r"sk-ant-[A-Za-z0-9_-]{20,}"), "[ANTHROPIC_KEY_REDACTED]"),
    (re.compile(r"sk-proj-[A-Za-z0-9_-]{20,}"), "[OPENAI_KEY_REDACTED]"),
    (re.compile(r"sk-[A-Za-z0-9]{20,}"), "[OPENAI_KEY_REDACTED]"),
    (re.compile(r"xox[bpras]-[A-Za-z0-9-]{10,}"), "[SLACK_TOKEN_REDACTED]"),
    (re.compile(r"npm_[A-Za-z0-9]{36,}"), "[NPM_TOKEN_REDACTED]"),
    (re.compile(r"[sr]k_(?:live|test)_[A-Za-z0-9]{20,}"), "[STRIPE_KEY_REDACTED]"),
    (re.compile(r"pk_(?:live|test)_[A-Za-z0-9]{20,}"), "[STRIPE_KEY_REDACTED]"),
    (
        re.compile(r"eyJ[A-Za-z0-9_-]{10,}\.eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]+"),
        "[JWT_REDACTED]",
    ),
    (re.compile(r"SG\.[A-Za-z0-9_-]{22}\.[A-Za-z0-9_-]{43}"), "[SENDGRID_KEY_REDACTED]"),
    (
        re.compile(r"-----BEGIN\s+(?:RSA\s+|EC\s+|DSA\s+)?PRIVATE\s+KEY-----"),
        "[PRIVATE_KEY_REDACTED]",
    ),
    (re.compile(r"\b[0-9a-f]{40,}\b", re.IGNORECASE), "[HEX_TOKEN_REDACTED]"),
]

IPV4_PATTERN = re.compile(r"\b(?:(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\.){3}(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\b")
HOME_PATH_PATTERN = re.compile(r"(?:/Users/[^/\s]+|/home/[^/\s]+|[A-Za-z]:\\Users\\[^\\\s]+)")
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

ANSI_PATTERN = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
INJECTED_MARKUP_PATTERNS = [
    re.compile(r"<image>.*?</image>", re.DOTALL),
    re.compile(r"<turn_aborted\s*/?>"),
]

SENSITIVE_URL_PARAMS = frozenset({
    "token", "key", "secret", "auth", "access_token", "refresh_token", "code",
    "state", "nonce", "password", "jwt", "session", "sessionid", "session_id",
    "api_key", "apikey", "client_secret", "redirect_uri", "samlrequest",
    "samlresponse", "id_token", "csrf", "xsrf", "authorization", "bearer",
    "credential",
})
TOKEN_FRAGMENT_PATTERN = re.compile(r"(access_token|token|key|auth|secret)", re.IGNORECASE)


def scrub_secrets(text: str) -> str:
    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def scrub_ips(text: str) -> str:
    return IPV4_PATTERN.sub("[IP_REDACTED]", text)


def redact_paths(text: str) -> str:
    """Collapse ``/Users/<name>``, ``/home/<name>`` and ``C:\\Users\\<name>`` to ``~``."""
    return HOME_PATH_PATTERN.sub("~", text)


def scrub_emails(text: str) -> str:
    return EMAIL_PATTERN.sub("[EMAIL]", text)


def scrub_text(text: str, config: SanitizeConfig) -> str:
    result = scrub_secrets(text)
    result = scrub_ips(result)
    if config.redact_paths:
        result = redact_paths(result)
    if config.scrub_emails:
        result = scrub_emails(result)
    return result


def clean_assistant_prompt(text: str) -> str:
    """Drop pasted-image blocks, abort markers and terminal escapes."""
    for pattern in INJECTED_MARKUP_PATTERNS:
        text = pattern.sub("", text)
    return ANSI_PATTERN.sub("", text).strip()


def _redact_query(query: str) -> str:
    if not query:
        return ""
    parts = []
    for pair in query.split("&"):
        name = pair.split("=", 1)[0]
        if name.lower() in SENSITIVE_URL_PARAMS:
            parts.append(f"{name}={REDACTED}")
        else:
            parts.append(pair)
    return "&".join(parts)


def sanitize_url(url: str, level: str = "standard") -> str:
    """Strip credentials from a URL.

    Userinfo is always dropped. In ``standard`` mode sensitive query
    parameters are replaced with a placeholder and token-bearing fragments
    are removed; ``aggressive`` mode keeps only ``scheme://host/path``.
    Anything that does not parse as an absolute URL becomes
    ``[INVALID_URL]``.
    """
    parts = parse_url(url)
    if parts is None:
        return INVALID_URL

    netloc = netloc_without_userinfo(parts)
    if level == "aggressive":
        return f"{parts.scheme}://{netloc}{parts.path}"

    result = f"{parts.scheme}://{netloc}{parts.path}"
    query = _redact_query(parts.query)
    if query:
        result += f"?{query}"
    if parts.fragment and not TOKEN_FRAGMENT_PATTERN.search(parts.fragment):
        result += f"#{parts.fragment}"
    return result


def is_excluded_domain(domain: str, excluded_patterns: list[str]) -> bool:
    d = domain.lower()
    return any(pattern.lower() in d for pattern in excluded_patterns if pattern)


def filter_excluded_domains(
    visits: list[BrowserVisit], excluded_patterns: list[str],
) -> tuple[list[BrowserVisit], int]:
    """Drop visits whose host matches any excluded substring.

    Visits with unparsable URLs are kept; the URL sanitizer turns them into
    the invalid marker later.
    """
    if not excluded_patterns:
        return list(visits), 0

    kept: list[BrowserVisit] = []
    excluded = 0
    for visit in visits:
        host = hostname_of(visit.url)
        if host is not None and is_excluded_domain(host, excluded_patterns):
            excluded += 1
        else:
            kept.append(visit)
    return kept, excluded


def sanitize_activity(
    activity: CollectedActivity, config: SanitizeConfig,
) -> tuple[CollectedActivity, int]:
    """Apply domain exclusion then scrub every text field.

    Returns the sanitized copy and the number of visits dropped by domain
    exclusion. The input is not modified.
    """
    visits, excluded = filter_excluded_domains(activity.visits, config.excluded_domains)
    if not config.enabled:
        return replace(activity, visits=visits), excluded

    return CollectedActivity(
        visits=[
            replace(
                v,
                url=sanitize_url(v.url, config.level),
                title=scrub_text(v.title or "", config),
                domain=v.domain or hostname_of(v.url),
            )
            for v in visits
        ],
        searches=[
            replace(q, query=scrub_text(q.query, config)) for q in activity.searches
        ],
        shell=[replace(c, cmd=scrub_text(c.cmd, config)) for c in activity.shell],
        assistant=[
            replace(
                s,
                prompt=scrub_text(clean_assistant_prompt(s.prompt), config),
                project=scrub_text(s.project, config),
            )
            for s in activity.assistant
        ],
        # Commit messages get credential scrubbing only.
        commits=[replace(c, message=scrub_secrets(c.message)) for c in activity.commits],
    ), excluded
