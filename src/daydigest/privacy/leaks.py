"""Leak validation for tier-bound text.

:func:`validate_leaks` is the last check before a prompt leaves the
process. Given a :class:`PrivacyTier` it never raises, whatever the text;
the caller reads :attr:`LeakReport.passed`.

Secret detection runs for every tier. On top of that:

- ``standard`` and ``rag`` add nothing.
- ``classified`` forbids raw shell and VCS command invocations and
  absolute file paths.
- ``deidentified`` forbids everything ``classified`` does, plus any
  ``http(s)://`` URL and any mention of a known tool or product name.
"""

from __future__ import annotations

import re

from daydigest.core.models import LeakReport, PrivacyTier

# Matches containing "test" or "fake" are treated as synthetic fixtures.
SECRET_DETECTORS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"sk-ant-[A-Za-z0-9_-]{20,}"), "Anthropic API key"),
    (re.compile(r"sk-proj-[A-Za-z0-9_-]{20,}"), "OpenAI project key"),
    (re.compile(r"ghp_[A-Za-z0-9_]{20,}"), "GitHub token"),
    (re.compile(r"github_pat_[A-Za-z0-9_]{22}_[A-Za-z0-9_]{59}"), "GitHub token"),
    (re.compile(r"gho_[A-Za-z0-9_]{36,}"), "GitHub token"),
    (re.compile(r"AKIA[A-Z0-9]{16}"), "AWS access key"),
    (re.compile(r"xox[bpras]-[A-Za-z0-9_-]{10,}"), "Slack token"),
    (re.compile(r"npm_[A-Za-z0-9]{36,}"), "npm token"),
    (re.compile(r"[sr]k_(?:live|test)_[A-Za-z0-9]{20,}"), "Stripe key"),
    (re.compile(r"pk_(?:live|test)_[A-Za-z0-9]{20,}"), "Stripe key"),
    (re.compile(r"eyJ[A-Za-z0-9_-]{10,}\.eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]+"), "JWT token"),
    (re.compile(r"SG\.[A-Za-z0-9_-]{22}\.[A-Za-z0-9_-]{43}"), "SendGrid key"),
    (re.compile(r"-----BEGIN\s+(?:RSA\s+|EC\s+|DSA\s+)?PRIVATE\s+KEY-----"), "Private key"),
    (re.compile(r"\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b"), "Email address"),
    (
        re.compile(r"\b(?:(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\.){3}(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\b"),
        "IP address",
    ),
    (re.compile(r"\b(?:password|passwd|pwd)\s*=\s*[\"']?[^\"'\s,;]+", re.IGNORECASE), "Password assignment"),
    (re.compile(r"\b(?:api_?key|apikey)\s*=\s*[\"']?[^\"'\s,;]+", re.IGNORECASE), "API key assignment"),
]

SYNTHETIC_MARKERS = ("test", "fake")

COMMAND_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\bgit\s+(?:commit|push|pull|branch|checkout|merge|rebase)", re.IGNORECASE),
    re.compile(r"\bnpm\s+(?:run|install|start|test|build|publish)", re.IGNORECASE),
    re.compile(r"\bcurl\s+-", re.IGNORECASE),
    re.compile(r"\bsqlite3?\s+", re.IGNORECASE),
    re.compile(r"\bmysql\s+-", re.IGNORECASE),
    re.compile(r"\bdocker\s+(?:run|build|push|pull)", re.IGNORECASE),
    re.compile(r"\bkubectl\s+", re.IGNORECASE),
    re.compile(r"\brm\s+-rf?\b", re.IGNORECASE),
    re.compile(r"\bsudo\s+", re.IGNORECASE),
]

# Unix paths need at least two segments and must not sit inside a URL or a word.
ABSOLUTE_PATH_PATTERN = re.compile(
    r"(?<![\w:/.~-])/(?:[\w.@+-]+/)+[\w.@+-]*|\b[A-Za-z]:\\\S+"
)

URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)

TOOL_NAMES = (
    "github", "npm", "git", "slack", "aws", "docker", "kubernetes",
    "jenkins", "gitlab", "bitbucket", "jira", "notion", "asana",
    "postgresql", "mysql", "mongodb", "redis", "elasticsearch",
    "terraform", "ansible", "vagrant", "docker-compose",
)
# Longest first so "docker-compose" wins over "docker".
TOOL_NAME_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(n) for n in sorted(TOOL_NAMES, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)

MAX_REPORTED_URLS = 3
MAX_REPORTED_COMMANDS = 2


def mentions_tool(text: str) -> bool:
    return TOOL_NAME_PATTERN.search(text) is not None


def has_absolute_path(text: str) -> bool:
    return ABSOLUTE_PATH_PATTERN.search(text) is not None


def _detect_secrets(text: str, report: LeakReport) -> None:
    for pattern, label in SECRET_DETECTORS:
        for match in pattern.finditer(text):
            found = match.group(0)
            lowered = found.lower()
            if any(marker in lowered for marker in SYNTHETIC_MARKERS):
                continue
            report.secrets_found.append(f"{label}: {found[:30]}...")


def _check_commands_and_paths(text: str, report: LeakReport, tier_label: str) -> None:
    for pattern in COMMAND_PATTERNS:
        matches = [m.group(0) for m in pattern.finditer(text)]
        if matches:
            report.violations.append(f"{tier_label}: raw command found, use abstractions only")
            report.commands_found.extend(matches[:MAX_REPORTED_COMMANDS])
            break

    if has_absolute_path(text):
        report.violations.append(f"{tier_label}: absolute file path found, use abstractions only")


def _check_deidentified(text: str, report: LeakReport) -> None:
    urls = [m.group(0) for m in URL_PATTERN.finditer(text)]
    if urls:
        report.violations.append(
            f"deidentified: found {len(urls)} URL(s), only aggregates are allowed"
        )
        report.urls_found.extend(urls[:MAX_REPORTED_URLS])

    tools = list(dict.fromkeys(m.group(1).lower() for m in TOOL_NAME_PATTERN.finditer(text)))
    if tools:
        report.violations.append(
            f"deidentified: found tool name(s) {', '.join(tools[:3])}, only aggregates are allowed"
        )


def validate_leaks(text: str, tier: PrivacyTier | str) -> LeakReport:
    """Scan ``text`` against the rules of ``tier``.

    Empty or non-string input passes trivially.

    Raises:
        ConfigError: ``tier`` is a string naming no known tier. Text
            problems are always reported, never raised.
    """
    tier = PrivacyTier.parse(tier)
    report = LeakReport(tier=tier)
    if not isinstance(text, str) or not text:
        return report

    _detect_secrets(text, report)

    if tier is PrivacyTier.CLASSIFIED:
        _check_commands_and_paths(text, report, "classified")
    elif tier is PrivacyTier.DEIDENTIFIED:
        _check_commands_and_paths(text, report, "deidentified")
        _check_deidentified(text, report)

    report.passed = not report.violations and not report.secrets_found
    return report
