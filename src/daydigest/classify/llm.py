"""Optional LLM-assisted classification with per-batch rule fallback."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from typing import Any

from daydigest.classify.rules import classify_record
from daydigest.classify.vocab import ACTIVITY_TYPES, INTENT_TYPES
from daydigest.core.errors import ClassificationError, LLMError
from daydigest.core.logging import DigestLogger
from daydigest.core.models import (
    ActivityRecord,
    AssistantSession,
    BrowserVisit,
    GitCommit,
    PrivacyTier,
    SearchQuery,
    ShellCommand,
    StructuredEvent,
)
from daydigest.privacy.leaks import validate_leaks

logger = logging.getLogger(__name__)

DEFAULT_LLM_CONFIDENCE = 0.5
MAX_TOPICS = 3
MAX_ENTITIES = 5
MAX_SUMMARY = 120
# Raw fragments shorter than this are too generic to count as an echo.
MIN_ECHO_LENGTH = 8

# Tiers whose summarizer already sees sanitized record text.
LLM_TIERS = frozenset({PrivacyTier.STANDARD, PrivacyTier.RAG})

PROMPT_TEMPLATE = """Classify each activity. For each determine:
- activityType: {activity_types}
- topics: 1-3 short noun phrases describing what the activity is about
- entities: tools, libraries, companies, or technologies mentioned
- intent: {intents}
- confidence: 0.0-1.0 how confident you are in the classification
- summary: one sentence describing the activity, without quoting it, no URLs or file paths

Activities:
{lines}

Return ONLY a JSON array with one element per activity, in order. Each element must have:
activityType, topics, entities, intent, confidence, summary.
Example: [{{"activityType":"research","topics":["OAuth flows"],"entities":["GitHub"],"intent":"evaluate","confidence":0.8,"summary":"Researching authentication flows for a code hosting integration"}}]"""

FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def record_text(record: ActivityRecord) -> str:
    """Short sanitized text form of a record, as shown to the model."""
    if isinstance(record, BrowserVisit):
        return f"{record.domain or ''} - {(record.title or '')[:80]}"
    if isinstance(record, SearchQuery):
        return f'"{record.query}" ({record.engine})' if record.engine else f'"{record.query}"'
    if isinstance(record, ShellCommand):
        return record.cmd[:150]
    if isinstance(record, AssistantSession):
        return record.prompt[:150]
    if isinstance(record, GitCommit):
        return record.message.strip().splitlines()[0][:150] if record.message.strip() else ""
    raise TypeError(f"Unsupported activity record: {type(record).__name__}")


def _raw_fragment(record: ActivityRecord) -> str:
    if isinstance(record, BrowserVisit):
        return (record.title or "").strip()
    if isinstance(record, SearchQuery):
        return record.query.strip()
    if isinstance(record, ShellCommand):
        return record.cmd.strip()
    if isinstance(record, AssistantSession):
        return record.prompt.strip()
    return record.message.strip()


def echoes_raw(value: str, raw: str) -> bool:
    """True when ``value`` repeats the raw record text verbatim."""
    raw = raw.strip().lower()
    if len(raw) < MIN_ECHO_LENGTH:
        return False
    return raw in value.lower()


def batch_lines(batch: list[tuple[ActivityRecord, str | None]]) -> str:
    """The numbered record lines of a batch: the only record text sent out."""
    lines = []
    for i, (record, category) in enumerate(batch, start=1):
        source = classify_record(record, category).source
        suffix = f" ({category})" if category else ""
        lines.append(f"{i}. [{source}] {record_text(record)}{suffix}")
    return "\n".join(lines)


def build_classification_prompt(batch: list[tuple[ActivityRecord, str | None]]) -> str:
    return PROMPT_TEMPLATE.format(
        activity_types="|".join(sorted(ACTIVITY_TYPES - {"unknown"})),
        intents="|".join(sorted(INTENT_TYPES)),
        lines=batch_lines(batch),
    )


def _valid_item(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and isinstance(item.get("activityType"), str)
        and isinstance(item.get("topics"), list)
        and isinstance(item.get("entities"), list)
        and (item.get("intent") is None or isinstance(item.get("intent"), str))
        and (item.get("summary") is None or isinstance(item.get("summary"), str))
    )


def parse_llm_response(text: str, batch_size: int) -> list[dict | None]:
    """Parse a JSON array reply into per-item dicts, None for unusable items.

    Raises:
        ClassificationError: the reply is not JSON at all.
    """
    cleaned = FENCE_PATTERN.sub("", text.strip()).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ClassificationError(f"Unparsable classification reply: {exc}") from exc

    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        raise ClassificationError("Classification reply is not a JSON array")

    items: list[dict | None] = [item if _valid_item(item) else None for item in parsed[:batch_size]]
    items.extend([None] * (batch_size - len(items)))
    return items


def llm_to_event(
    record: ActivityRecord, category: str | None, item: dict,
) -> StructuredEvent:
    """Build an event from one model item, keeping rule labels where the model echoes raw text."""
    fallback = classify_record(record, category)
    raw = _raw_fragment(record)

    activity = item["activityType"] if item["activityType"] in ACTIVITY_TYPES else "unknown"
    intent = item.get("intent")
    if not isinstance(intent, str) or intent not in INTENT_TYPES:
        intent = "explore"
    confidence = item.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        confidence = max(0.0, min(1.0, float(confidence)))
    else:
        confidence = DEFAULT_LLM_CONFIDENCE

    topics = tuple(str(t) for t in item["topics"][:MAX_TOPICS] if not echoes_raw(str(t), raw))
    entities = tuple(str(e) for e in item["entities"][:MAX_ENTITIES] if not echoes_raw(str(e), raw))
    summary = str(item.get("summary") or "")[:MAX_SUMMARY]
    if not summary or echoes_raw(summary, raw):
        summary = fallback.summary

    return replace(
        fallback,
        activity_type=activity,
        topics=topics or fallback.topics,
        entities=entities,
        intent=intent,
        confidence=confidence,
        summary=summary,
    )


class LLMClassifier:
    """Classifies records in bounded batches through an :class:`LLMClient`.

    A failed call or unparsable reply sends the whole batch through the
    rule classifier; an invalid single item falls back on its own.

    Each batch's record lines are leak-checked against ``tier`` first. A
    batch that fails is classified by rules and never sent.
    """

    def __init__(
        self,
        client,
        batch_size: int = 8,
        run_logger: DigestLogger | None = None,
        tier: PrivacyTier = PrivacyTier.STANDARD,
    ):
        self.client = client
        self.batch_size = max(1, batch_size)
        self.run_logger = run_logger
        self.tier = tier

    def classify(
        self, items: list[tuple[ActivityRecord, str | None]],
    ) -> tuple[list[StructuredEvent], int]:
        """Return events in input order and how many came from the model."""
        events: list[StructuredEvent] = []
        llm_count = 0

        for index, start in enumerate(range(0, len(items), self.batch_size)):
            batch = items[start:start + self.batch_size]
            report = validate_leaks(batch_lines(batch), self.tier)
            if not report.passed:
                logger.warning(
                    "Classification batch %d withheld for tier %s: %d violation(s), %d secret(s)",
                    index, self.tier.value, len(report.violations), len(report.secrets_found),
                )
                events.extend(classify_record(record, category) for record, category in batch)
                continue

            fell_back = False
            try:
                response = self.client.complete(
                    [{"role": "user", "content": build_classification_prompt(batch)}],
                    desc=f"classification batch {index}",
                )
                parsed = parse_llm_response(response.content, len(batch))
            except (LLMError, ClassificationError) as exc:
                logger.warning("Classification batch %d fell back to rules: %s", index, exc)
                parsed = [None] * len(batch)
                fell_back = True

            for (record, category), item in zip(batch, parsed):
                event = None
                if item is not None:
                    try:
                        event = llm_to_event(record, category, item)
                    except (TypeError, ValueError, KeyError) as exc:
                        logger.warning("Unusable classification item in batch %d: %s", index, exc)
                if event is None:
                    events.append(classify_record(record, category))
                else:
                    events.append(event)
                    llm_count += 1

            if self.run_logger is not None:
                self.run_logger.llm_batch("classify", index, len(batch), fell_back)

        return events, llm_count
