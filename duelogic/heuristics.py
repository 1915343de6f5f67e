"""Zero-cost pattern matchers for steel-manning, self-critique and interrupt triggers.

Everything here is a pure function of its input text so it can run before,
instead of, or as a fallback for a judge call.
"""

import re

from config.config_loader import FrameworkInfo
from duelogic.models import InterruptReason, QuickInterruptCheck

_APOS = "['’]"

_STEEL_MAN_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bI (appreciate|understand|see|acknowledge|recognize) (the|their|your|why|how|that|this|what|where)\b",
        r"\b(makes?|made) a (good|valid|fair|strong|compelling) (point|argument|case)\b",
        r"\bfrom (their|the \w+(?: \w+)?) perspective\b",
        rf"\bthey({_APOS}re| are) right (that|to|about)\b",
        r"\bI (agree|concede|grant) (that|with)\b",
        rf"\bthere({_APOS}s| is) (truth|merit|value) (in|to)\b",
        r"\b(strongest|best) (case|argument|point|version) (for|of)\b",
        r"\bcharitably (interpret|interpreted|understood|read)\b",
        r"\bgiving (them|this view) credit\b",
        r"\bat (its|their) (best|strongest)\b",
    )
)

# Any of these vetoes a steel-man match.
_DISMISSAL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bcompletely (wrong|mistaken|misguided)\b",
        r"\bterrible (argument|point|position|reasoning)\b",
        r"\bno valid (points?|arguments?)\b",
        r"\b(obviously|clearly) (wrong|false|mistaken)\b",
        r"\bno reasonable person\b",
    )
)

_SELF_CRITIQUE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bmy (framework|approach|position|view) (struggles?|fails?|has difficulty|falls short)\b",
        rf"\bI({_APOS}ll| must| have to)? (admit|acknowledge|concede)\b",
        r"\bthis is (where|a point where) .+ (struggles?|is weak|falls short)\b",
        r"\b(limitation|weakness|blind spot)s? (of|in) (my|this)\b",
        r"\bcritics (of|would|might|could)\b",
        rf"\b(I|we) (cannot|can{_APOS}t) fully (account|explain|address)\b",
        r"\bwhere (my|this) (framework|view|approach) (is|may be) (limited|insufficient)\b",
        r"\bhonest(ly)? (admit|acknowledge|recognize)\b",
        r"\bfair (criticism|objection|point) (of|against)\b",
    )
)

# Ordered: the first matching entry decides the reason.
_INTERRUPT_PATTERNS: tuple[tuple[re.Pattern[str], InterruptReason, float], ...] = tuple(
    (re.compile(p, re.IGNORECASE), reason, confidence)
    for p, reason, confidence in (
        (r"\bthey (just|only|simply) want\b", "straw_man_detected", 0.8),
        (rf"\bthat({_APOS}s| is) (ridiculous|absurd|naive|foolish)\b", "straw_man_detected", 0.7),
        (r"\btheir position is (just|merely|simply)\b", "straw_man_detected", 0.75),
        (r"\ball they care about is\b", "straw_man_detected", 0.8),
        (rf"\butilitarians? (don{_APOS}t|never|can{_APOS}t) care about\b", "factual_correction", 0.85),
        (rf"\bvirtue ethics (ignores?|has no|doesn{_APOS}t)\b", "factual_correction", 0.85),
        (r"\bdeontolog(ists?|ical) (never|always) say\b", "factual_correction", 0.8),
        (r"\blibertarians? believe everyone should\b", "factual_correction", 0.7),
        (r"\bthe (real|fundamental|core|central) (issue|question|problem|disagreement) is\b", "pivotal_point", 0.75),
        (r"\bthis is (exactly|precisely) (where|why|what)\b", "pivotal_point", 0.7),
        (rf"\bhere({_APOS}s| is) (the crux|where we differ|our fundamental)\b", "pivotal_point", 0.8),
        (
            r"\b(obviously|clearly|undeniably|certainly|unquestionably) (wrong|false|mistaken|incorrect)\b",
            "direct_challenge",
            0.85,
        ),
        (r"\bno reasonable person (would|could)\b", "direct_challenge", 0.9),
        (r"\banyone who (thinks|believes|claims)\b", "direct_challenge", 0.6),
        (rf"\bwhat (I mean|we{_APOS}re saying) is that\b", "clarification_needed", 0.5),
        (r"\bto put it (simply|another way|differently)\b", "clarification_needed", 0.4),
        (r"\bthis is (exactly|precisely) (right|correct|the point)\b", "strong_agreement", 0.7),
        (rf"\byou({_APOS}ve| have) (hit|touched|identified) (on )?something\b", "strong_agreement", 0.75),
    )
)

_CRITIQUE_PATTERN = re.compile(r"\b(but|however|wrong|disagree|problem)\b", re.IGNORECASE)
_UNMARKED_CRITIQUE_MIN_LENGTH = 100
_UNMARKED_CRITIQUE_CONFIDENCE = 0.5


def quick_steel_man_check(content: str) -> bool:
    """True if the text fairly restates or concedes something to an opponent.

    Dismissive phrasing overrides any acknowledgement elsewhere in the text.
    """
    if any(p.search(content) for p in _DISMISSAL_PATTERNS):
        return False
    return any(p.search(content) for p in _STEEL_MAN_PATTERNS)


def quick_self_critique_check(content: str) -> bool:
    """True if the text admits a limit of the speaker's own framework."""
    return any(p.search(content) for p in _SELF_CRITIQUE_PATTERNS)


def quick_interrupt_check(content: str) -> QuickInterruptCheck:
    """Classify a span as a likely interrupt trigger.

    A speaker who is steel-manning is never flagged. Otherwise the first
    matching trigger pattern wins; long critique-like text with no
    steel-manning at all is flagged as a possible straw man with low
    confidence.
    """
    if quick_steel_man_check(content):
        return QuickInterruptCheck(potential_trigger=False)

    for pattern, reason, confidence in _INTERRUPT_PATTERNS:
        if pattern.search(content):
            return QuickInterruptCheck(potential_trigger=True, likely_reason=reason, confidence=confidence)

    if len(content) > _UNMARKED_CRITIQUE_MIN_LENGTH and _CRITIQUE_PATTERN.search(content):
        return QuickInterruptCheck(
            potential_trigger=True,
            likely_reason="straw_man_detected",
            confidence=_UNMARKED_CRITIQUE_CONFIDENCE,
        )

    return QuickInterruptCheck(potential_trigger=False)


def mentions_framework(content: str, info: FrameworkInfo) -> bool:
    """True if the response uses its framework's name or core-question vocabulary."""
    text = content.lower()
    name = info.name.lower().removesuffix(" chair").strip()
    if name and name in text:
        return True
    core_words = [w.strip("?.,!'\"").lower() for w in info.core_question.split()]
    return any(len(w) > 4 and w in text for w in core_words)
