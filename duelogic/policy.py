"""Fixed policy tables: urgency thresholds, opener bank, violation precedence."""

import random
from collections.abc import Callable

from config.config_loader import FrameworkInfo
from duelogic.models import InterruptReason, ResponseEvaluation, ViolationType

# aggressiveness (1-5) -> minimum judge urgency for an interrupt to go ahead
URGENCY_THRESHOLDS: dict[int, float] = {
    1: 0.9,
    2: 0.8,
    3: 0.7,
    4: 0.6,
    5: 0.5,
}

AGGRESSIVENESS_GUIDANCE: dict[int, str] = {
    1: "(Very Conservative - only interrupt for major issues like blatant straw-manning or serious factual errors)",
    2: "(Conservative - interrupt for significant issues that meaningfully affect the debate)",
    3: "(Moderate - interrupt for meaningful moments that advance the discussion)",
    4: "(Aggressive - interrupt frequently when there are opportunities to engage)",
    5: "(Very Aggressive - interrupt liberally for any interesting point of contention)",
}

# Below this score a moderate arbiter acts on a judge-requested interjection.
MODERATE_INTERJECTION_THRESHOLD = 40
# Below this score a strict arbiter always interjects.
STRICT_INTERJECTION_THRESHOLD = 60

INTERRUPT_OPENERS: dict[InterruptReason, tuple[str, ...]] = {
    "factual_correction": (
        "Actually, that's a mischaracterization...",
        "I need to correct something there...",
        "That's not quite what my framework holds...",
        "Wait, that's not accurate...",
    ),
    "straw_man_detected": (
        "Hold on, you're attacking a position I never took...",
        "Wait, that's not the strongest version of my argument...",
        "Let me stop you there, I wouldn't actually claim that...",
        "You're not engaging with my actual position...",
    ),
    "direct_challenge": (
        "I have to push back on that...",
        "That's exactly where we disagree...",
        "I can't let that go unchallenged...",
        "No, and here's why...",
    ),
    "clarification_needed": (
        "Can you clarify what you mean by...",
        "I'm not sure I follow, are you saying...",
        "Wait, help me understand...",
        "What exactly do you mean when you say...",
    ),
    "strong_agreement": (
        "Yes, and this is crucial...",
        "Exactly right, and let me build on that...",
        "This is the key insight...",
        "You've hit on something important...",
    ),
    "pivotal_point": (
        "And this is exactly our core disagreement...",
        "This is where the real tension lies...",
        "Let's not gloss over this, this is the crux...",
        "Here's where our frameworks truly clash...",
    ),
}


def get_urgency_threshold(aggressiveness: int) -> float:
    """Look up the urgency floor for an aggressiveness level (1-5)."""
    try:
        return URGENCY_THRESHOLDS[aggressiveness]
    except KeyError:
        raise ValueError(f"Aggressiveness must be 1-5, got {aggressiveness}") from None


def random_interrupt_opener(reason: InterruptReason, rng: random.Random | None = None) -> str:
    """Pick a lead-in phrase for an interrupt of the given kind."""
    chooser = rng or random
    return chooser.choice(INTERRUPT_OPENERS[reason])


def _steel_manning_missing(evaluation: ResponseEvaluation) -> bool:
    sm = evaluation.steel_manning
    return not sm.attempted or sm.quality in ("absent", "weak")


def _self_critique_missing(evaluation: ResponseEvaluation) -> bool:
    sc = evaluation.self_critique
    return not sc.attempted or sc.quality == "absent"


def _framework_inconsistent(evaluation: ResponseEvaluation) -> bool:
    return not evaluation.framework_consistency.consistent


def _dishonest(evaluation: ResponseEvaluation) -> bool:
    return evaluation.intellectual_honesty.score == "low"


# Priority order: only the first matching rule is reported.
VIOLATION_RULES: tuple[tuple[ViolationType, Callable[[ResponseEvaluation], bool]], ...] = (
    ("straw_manning", _steel_manning_missing),
    ("missing_self_critique", _self_critique_missing),
    ("framework_inconsistency", _framework_inconsistent),
    ("rhetorical_evasion", _dishonest),
)


def classify_violation(evaluation: ResponseEvaluation) -> ViolationType | None:
    for violation, rule in VIOLATION_RULES:
        if rule(evaluation):
            return violation
    return None


def framework_info(frameworks: dict[str, FrameworkInfo], framework: str) -> FrameworkInfo:
    """Return configured info for a framework, or a bare placeholder built from its id."""
    info = frameworks.get(framework)
    if info is not None:
        return info
    title = framework.replace("_", " ").title()
    return FrameworkInfo(name=f"{title} Chair", description="", core_question="")
