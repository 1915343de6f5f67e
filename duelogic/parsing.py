"""Turn untrusted judge completions into typed results.

Parsers never raise. A completion that cannot be used comes back as a
``ParseFailure`` and the caller decides which fallback applies.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any

from duelogic.models import (
    HONESTY_SCORES,
    INTERRUPT_REASONS,
    QUALITY_LEVELS,
    FrameworkConsistency,
    IntellectualHonesty,
    InterruptReason,
    QualityAssessment,
    ResponseEvaluation,
)

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

REQUIRED_EVALUATION_FIELDS = ("adherenceScore", "steelManning", "selfCritique")
_FALLBACK_REASON: InterruptReason = "direct_challenge"


@dataclass
class ParseFailure:
    reason: str
    raw: str


@dataclass
class InterruptDecision:
    should_interrupt: bool
    interrupting_chair_position: str | None = None
    reason: InterruptReason = _FALLBACK_REASON
    trigger_content: str = ""
    urgency: float = 0.0
    suggested_opener: str | None = None


def extract_json_object(text: str) -> dict[str, Any] | ParseFailure:
    """Pull the outermost ``{...}`` block out of a completion and decode it."""
    match = _JSON_OBJECT.search(text)
    if not match:
        return ParseFailure("no JSON object found", text)
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        return ParseFailure(f"invalid JSON: {exc}", text)
    if not isinstance(parsed, dict):
        return ParseFailure("JSON is not an object", text)
    return parsed


def default_evaluation() -> ResponseEvaluation:
    """The neutral evaluation used when a judge answer cannot be read."""
    return ResponseEvaluation(
        adherence_score=50,
        steel_manning=QualityAssessment(attempted=False, quality="absent"),
        self_critique=QualityAssessment(attempted=False, quality="absent"),
        framework_consistency=FrameworkConsistency(consistent=True),
        intellectual_honesty=IntellectualHonesty(score="medium"),
        requires_interjection=False,
    )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _string_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(v) for v in value]


def _quality(raw: dict[str, Any]) -> QualityAssessment:
    quality = raw.get("quality")
    if quality not in QUALITY_LEVELS:
        quality = "absent"
    attempted = raw.get("attempted")
    if not isinstance(attempted, bool):
        attempted = quality != "absent"
    notes = raw.get("notes")
    return QualityAssessment(attempted=attempted, quality=quality, notes=str(notes) if notes else None)


def parse_evaluation(text: str) -> ResponseEvaluation | ParseFailure:
    """Parse a judge completion into a ResponseEvaluation.

    Required keys are ``adherenceScore`` (numeric) and the ``steelManning`` /
    ``selfCritique`` objects. Everything else is normalized: unknown quality
    levels become ``absent``, unknown honesty scores ``medium``, missing
    framework consistency counts as consistent.
    """
    parsed = extract_json_object(text)
    if isinstance(parsed, ParseFailure):
        return parsed

    missing = [key for key in REQUIRED_EVALUATION_FIELDS if key not in parsed]
    if missing:
        return ParseFailure(f"missing required fields: {', '.join(missing)}", text)

    score = _as_number(parsed["adherenceScore"])
    if score is None:
        return ParseFailure("adherenceScore is not a number", text)

    steel_raw = parsed["steelManning"]
    critique_raw = parsed["selfCritique"]
    if not isinstance(steel_raw, dict) or not isinstance(critique_raw, dict):
        return ParseFailure("steelManning and selfCritique must be objects", text)

    consistency_raw = parsed.get("frameworkConsistency")
    if not isinstance(consistency_raw, dict):
        consistency_raw = {}
    honesty_raw = parsed.get("intellectualHonesty")
    if not isinstance(honesty_raw, dict):
        honesty_raw = {}

    honesty_score = honesty_raw.get("score")
    if honesty_score not in HONESTY_SCORES:
        honesty_score = "medium"

    consistent = consistency_raw.get("consistent", True)
    if not isinstance(consistent, bool):
        consistent = True
    interjection_reason = parsed.get("interjectionReason")

    return ResponseEvaluation(
        adherence_score=int(round(_clamp(score, 0, 100))),
        steel_manning=_quality(steel_raw),
        self_critique=_quality(critique_raw),
        framework_consistency=FrameworkConsistency(
            consistent=consistent,
            violations=_string_list(consistency_raw.get("violations")),
        ),
        intellectual_honesty=IntellectualHonesty(
            score=honesty_score,
            issues=_string_list(honesty_raw.get("issues")),
        ),
        requires_interjection=parsed.get("requiresInterjection") is True,
        interjection_reason=str(interjection_reason) if interjection_reason else None,
    )


def parse_interrupt_decision(text: str) -> InterruptDecision | ParseFailure:
    """Parse a judge completion into an interrupt decision.

    ``shouldInterrupt`` must be a JSON boolean. An unknown reason falls back to
    ``direct_challenge`` and urgency is clamped to 0-1.
    """
    parsed = extract_json_object(text)
    if isinstance(parsed, ParseFailure):
        return parsed

    should_interrupt = parsed.get("shouldInterrupt")
    if not isinstance(should_interrupt, bool):
        return ParseFailure("shouldInterrupt missing or not a boolean", text)
    if not should_interrupt:
        return InterruptDecision(should_interrupt=False)

    reason = parsed.get("reason")
    if reason not in INTERRUPT_REASONS:
        logger.debug("Unknown interrupt reason %r, using %s", reason, _FALLBACK_REASON)
        reason = _FALLBACK_REASON

    urgency = _as_number(parsed.get("urgency")) or 0.0
    position = parsed.get("interruptingChairPosition")
    opener = parsed.get("suggestedOpener")

    return InterruptDecision(
        should_interrupt=True,
        interrupting_chair_position=str(position) if position else None,
        reason=reason,
        trigger_content=str(parsed.get("triggerContent") or ""),
        urgency=_clamp(urgency, 0.0, 1.0),
        suggested_opener=str(opener) if opener else None,
    )
