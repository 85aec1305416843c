"""Static rule tables for the classifier.

Every table here is plain data: ordered ``(pattern, label)`` lists where
first match wins, or dict lookups. Keeping them out of the classifier
functions lets each one be tested on its own.
"""

from __future__ import annotations

import re

ACTIVITY_TYPES = frozenset({
    "research", "debugging", "implementation", "infrastructure", "writing",
    "learning", "admin", "communication", "browsing", "planning",
    "architecture", "unknown",
})

INTENT_TYPES = frozenset({
    "compare", "implement", "evaluate", "read", "troubleshoot", "configure",
    "explore", "communicate",
})

RULE_CONFIDENCE = 0.3

# Categories whose events keep topics and entities for the knowledge graph.
ENTITY_BEARING_CATEGORIES = frozenset({
    "dev", "work", "research", "education", "ai_tools", "pkm", "writing",
})

# ── Browser ────────────────────────────────────────────────

CATEGORY_TO_ACTIVITY = {
    "dev": "implementation",
    "work": "admin",
    "research": "research",
    "news": "browsing",
    "social": "communication",
    "media": "browsing",
    "shopping": "browsing",
    "finance": "admin",
    "ai_tools": "implementation",
    "personal": "browsing",
    "education": "learning",
    "gaming": "browsing",
    "writing": "writing",
    "pkm": "writing",
    "other": "unknown",
}

CATEGORY_TOPIC_LABELS: dict[str, list[str]] = {
    "dev": ["software development"],
    "work": ["work coordination"],
    "research": ["research reading"],
    "news": ["current events"],
    "social": ["social networking"],
    "media": ["entertainment"],
    "shopping": ["online shopping"],
    "finance": ["personal finance"],
    "ai_tools": ["ai assistance"],
    "personal": ["health and lifestyle"],
    "education": ["online learning"],
    "gaming": ["gaming"],
    "writing": ["writing"],
    "pkm": ["knowledge management"],
    "other": [],
}

CATEGORY_SUMMARIES = {
    "dev": "Browsing development resources",
    "work": "Using work tools",
    "research": "Reading research material",
    "news": "Reading news",
    "social": "Browsing social media",
    "media": "Watching or listening to media",
    "shopping": "Shopping online",
    "finance": "Managing finances",
    "ai_tools": "Using AI tools",
    "personal": "Personal and health browsing",
    "education": "Studying course material",
    "gaming": "Browsing gaming sites",
    "writing": "Using writing tools",
    "pkm": "Working in note-taking tools",
    "other": "General web browsing",
}

# ── Entities ───────────────────────────────────────────────

# Hosts whose page titles are place names, listings, subjects or products.
ENTITY_EXTRACTION_SKIP_DOMAINS = frozenset({
    "google.com", "maps.google.com", "maps.apple.com",
    "airbnb.com", "booking.com", "vrbo.com", "expedia.com", "tripadvisor.com",
    "mail.google.com", "outlook.live.com", "outlook.office.com", "mail.yahoo.com",
    "amazon.com", "adobe.com", "app.hubspot.com", "app.salesforce.com",
})

ENTITY_STOPWORDS = frozenset({
    "The", "This", "That", "How", "What", "Why", "When",
    "From", "With", "Here", "There", "Your", "About", "After", "Before",
    "Into", "Over", "Just", "Also", "More", "Some", "Such", "Each",
    # git imperatives
    "Fix", "Add", "Remove", "Update", "Refactor", "Revert", "Merge", "Bump",
    "Move", "Rename", "Delete", "Change", "Enable", "Disable", "Clean",
    "Init", "Create", "Build", "Test", "Deploy", "Release", "Improve",
    "Handle", "Pull", "Push", "Commit", "Branch", "Issue", "Draft",
    "Review", "Resolve", "Conflict", "Sync",
    # notifications
    "Inbox", "Unread", "Reply", "Forward", "Sent", "Subject", "Thread",
    "Notification", "Alert",
    # UI chrome
    "Home", "Settings", "Profile", "Dashboard", "Overview", "Summary",
    "Details", "Results", "Loading", "Untitled",
    # generic acronyms
    "HTML", "CSS", "API", "URL", "SDK", "CLI", "GUI", "IDE",
    # placeholders left by the sanitizer
    "REDACTED", "EMAIL", "IP_REDACTED", "INVALID_URL",
})

MAX_ENTITIES = 5

# ── Search ─────────────────────────────────────────────────

SEARCH_TOPIC_VOCABULARY: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bnear\s+me\b|\bdirections?\b|\bopen\s+now\b|\bhow\s+far\b", re.I), "navigation"),
    (re.compile(r"\b(jobs?|salary|salaries|hiring|resume|interview|careers?|recruit\w*|job\s+search)\b", re.I), "job-search"),
    (re.compile(r"\b(outfits?|dress(es)?|clothing|fashion|shoes|sneakers|jacket|wardrobe)\b", re.I), "fashion"),
    (re.compile(r"\b(events?|concerts?|tickets|festival|wedding|party|rsvp|venue)\b", re.I), "event-planning"),
    (re.compile(r"\b(flights?|hotels?|airbnb|travel|trips?|vacation|itinerary|visa)\b", re.I), "travel"),
    (re.compile(r"\b(restaurants?|recipes?|food|cafe|coffee|dinner|lunch|brunch|menu|bakery)\b", re.I), "food"),
    (re.compile(r"\b(buy|price|cheap|deal|discount|coupon|sale)s?\b", re.I), "shopping"),
    (re.compile(r"\b(symptoms?|doctor|health|workout|fitness|diet|sleep|vitamin)\b", re.I), "health"),
    (re.compile(r"\b(stocks?|invest\w*|tax(es)?|mortgage|budget|loan|crypto|401k|ira)\b", re.I), "finance"),
    (re.compile(r"\b(weather|forecast|rain|temperature)\b", re.I), "weather"),
]

SEARCH_INTENT_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bvs\b|\bcompare\b|\bdifference\b|\bversus\b|\balternative", re.I), "compare"),
    (re.compile(r"\bhow\s+to\b|\bexample\b|\btutorial\b|\bguide\b", re.I), "implement"),
    (re.compile(r"\bbest\b|\breview\b|\brecommend\b|\bpros\b|\bcons\b", re.I), "evaluate"),
    (re.compile(r"\bwhat\s+is\b|\bwho\s+is\b|\bdefin", re.I), "read"),
    (re.compile(r"\berror\b|\bfix\b|\bdebug\b|\bnot\s+work", re.I), "troubleshoot"),
    (re.compile(r"\bconfig\b|\bsetup\b|\binstall\b|\benable\b|\bconfigure\b", re.I), "configure"),
]

FALLBACK_SEARCH_TOPIC = "information"

# ── Assistant sessions ─────────────────────────────────────

ASSISTANT_TASK_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(fix|debug|why\s+(does|is)|not\s+work\w*|error|crash\w*|bug|broken|fail\w*)\b", re.I), "debugging"),
    (re.compile(r"\b(review|check|audit|is\s+this\s+correct|critique|look\s+at)\b", re.I), "review"),
    (re.compile(r"\b(explain|describe|what\s+(is|are)|how\s+does|help\s+me\s+understand|teach|clarify)\b", re.I), "learning"),
    (re.compile(r"\b(design|plan|should\s+i|what\s+approach|architecture|structure)\b", re.I), "architecture"),
    (re.compile(r"\b(add|build|create|implement|write|refactor|update|generate|set\s+up|migrate)\b", re.I), "implementation"),
]

ASSISTANT_TASK_ACTIVITY = {
    "debugging": "debugging",
    "review": "implementation",
    "learning": "learning",
    "architecture": "architecture",
    "implementation": "implementation",
}

ASSISTANT_TASK_INTENT = {
    "debugging": "troubleshoot",
    "review": "evaluate",
    "learning": "read",
    "architecture": "evaluate",
    "implementation": "implement",
}

ASSISTANT_TOPIC_VOCABULARY: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(oauth|auth|jwt|token|session|login|password|credential|permission|role|access)\b", re.I), "authentication"),
    (re.compile(r"\b(react|vue|angular|svelte|next\.?js|remix|component|hook|state|props|jsx|tsx)\b", re.I), "frontend"),
    (re.compile(r"\b(api|rest|graphql|endpoint|route|http|request|response|fetch|axios|webhook)\b", re.I), "api-design"),
    (re.compile(r"\b(docker|kubernetes|k8s|terraform|aws|cloud|deploy|ci|cd|pipeline|helm|ecs)\b", re.I), "infrastructure"),
    (re.compile(r"\b(test|tests|spec|mock|pytest|vitest|jest|coverage|unit|integration|e2e|assert|expect)\b", re.I), "testing"),
    (re.compile(r"\b(sql|database|postgres|mysql|sqlite|query|schema|migration|index|orm|prisma)\b", re.I), "database"),
    (re.compile(r"\b(typescript|type|interface|generic|infer|narrowing|zod|validation)\b", re.I), "typescript"),
    (re.compile(r"\b(performance|optimize|slow|latency|memory|cache|cdn|bundle|profil\w*)\b", re.I), "performance"),
    (re.compile(r"\b(security|vuln\w*|xss|csrf|injection|sanitize|escape|encrypt|hash)\b", re.I), "security"),
    (re.compile(r"\b(git|commit|branch|merge|rebase|conflict|pr|pull\s+request|review)\b", re.I), "version-control"),
    (re.compile(r"\b(algorithm|data\s+structure|complexity|sort|search|tree|graph|dynamic\s+programming)\b", re.I), "algorithms"),
    (re.compile(r"\b(machine\s+learning|llm|ai|model|embedding|vector|neural|gpt|claude|anthropic)\b", re.I), "ai-ml"),
    (re.compile(r"\b(refactor|clean|solid|pattern|architecture|design|monolith|microservice|domain)\b", re.I), "software-design"),
    (re.compile(r"\b(error|exception|crash|stack\s+trace|debug|log|monitor|alert|incident)\b", re.I), "debugging"),
    (re.compile(r"\b(doc|docs|readme|comment|docstring|api\s+spec|openapi|swagger|markdown)\b", re.I), "documentation"),
]

FALLBACK_ASSISTANT_TOPIC = "general assistance"

# ── Git commits ────────────────────────────────────────────

CONVENTIONAL_COMMIT_PATTERN = re.compile(
    r"^(feat|fix|refactor|docs|test|chore|build|ci|perf|revert|style)(?:\(([^)]+)\))?(!)?\s*:\s*(.+)$",
    re.IGNORECASE,
)

COMMIT_TYPE_ACTIVITY = {
    "feat": "implementation",
    "fix": "debugging",
    "refactor": "implementation",
    "docs": "writing",
    "test": "implementation",
    "chore": "infrastructure",
    "build": "infrastructure",
    "ci": "infrastructure",
    "perf": "implementation",
    "revert": "implementation",
    "style": "implementation",
}

COMMIT_TYPE_TOPICS = {
    "feat": "feature development",
    "fix": "bug fixing",
    "refactor": "code restructuring",
    "docs": "documentation",
    "test": "testing",
    "chore": "maintenance",
    "build": "build tooling",
    "ci": "continuous integration",
    "perf": "performance",
    "revert": "reverted changes",
    "style": "code style",
}

# Leading verbs of non-conventional messages, matched on the first word only.
COMMIT_VERB_TYPES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^(fix|fixes|fixed|hotfix|patch)\b", re.I), "fix"),
    (re.compile(r"^(add|adds|added|implement\w*|introduce\w*|create\w*|support)\b", re.I), "feat"),
    (re.compile(r"^(refactor\w*|restructure\w*|rename\w*|move\w*|extract\w*|simplif\w*|clean\w*)\b", re.I), "refactor"),
    (re.compile(r"^(doc|docs|document\w*|readme)\b", re.I), "docs"),
    (re.compile(r"^(test|tests|testing)\b", re.I), "test"),
    (re.compile(r"^(bump|upgrade|update\s+dep\w*|chore)\b", re.I), "chore"),
    (re.compile(r"^(revert\w*)\b", re.I), "revert"),
]

FALLBACK_COMMIT_TOPIC = "code changes"

# ── Shell ──────────────────────────────────────────────────

SHELL_ACTIVITY_PATTERNS: list[tuple[re.Pattern[str], str, str]] = [
    (re.compile(r"\bgit\s+(clone|pull|push|merge|rebase|checkout|switch|branch|commit|add|stash)\b", re.I), "implementation", "version control"),
    (re.compile(r"\bgit\s+(log|diff|status|show|blame|bisect)\b", re.I), "debugging", "version control"),
    (re.compile(r"\b(npm\s+(install|i|add)|yarn\s+add|pnpm\s+add|pip\s+install|uv\s+(add|pip)|poetry\s+add|brew\s+install|cargo\s+add|apt(-get)?\s+install)\b", re.I), "infrastructure", "package management"),
    (re.compile(r"\b(npm\s+(run|test)|yarn\s+(test|build)|pytest|jest|vitest|tox|cargo\s+test|go\s+test|make\s+test)\b", re.I), "debugging", "testing"),
    (re.compile(r"\b(docker|docker-compose|kubectl|terraform|ansible|helm|podman)\b", re.I), "infrastructure", "containers and deployment"),
    (re.compile(r"\b(ssh|scp|rsync|curl|wget|ping|dig|nslookup)\b", re.I), "infrastructure", "networking"),
    (re.compile(r"\b(vim|nvim|nano|code|subl|emacs)\b", re.I), "implementation", "editing"),
    (re.compile(r"\b(python3?|node|ruby|go\s+run|cargo\s+run|make)\b", re.I), "implementation", "running programs"),
    (re.compile(r"\b(cd|ls|cat|less|grep|rg|find|fd|awk|sed|head|tail|wc|tree)\b", re.I), "debugging", "file inspection"),
    (re.compile(r"\b(mkdir|rm|mv|cp|chmod|chown|ln|touch|tar|unzip)\b", re.I), "infrastructure", "file management"),
]

FALLBACK_SHELL_TOPIC = "command line"
