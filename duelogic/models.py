"""Pure dataclasses for the Duelogic adjudication core. No logic, no deps."""

from dataclasses import dataclass, field
from typing import Literal

QualityLevel = Literal["strong", "adequate", "weak", "absent"]
HonestyScore = Literal["high", "medium", "low"]
AccountabilityLevel = Literal["relaxed", "moderate", "strict"]
EvaluationMethod = Literal["full", "quick", "cached"]
InterruptReason = Literal[
    "factual_correction",
    "straw_man_detected",
    "direct_challenge",
    "clarification_needed",
    "strong_agreement",
    "pivotal_point",
]
ViolationType = Literal[
    "straw_manning",
    "missing_self_critique",
    "framework_inconsistency",
    "rhetorical_evasion",
]

FRAMEWORKS: tuple[str, ...] = (
    "utilitarian",
    "virtue_ethics",
    "deontological",
    "pragmatic",
    "libertarian",
    "communitarian",
    "cosmopolitan",
    "precautionary",
    "autonomy_centered",
    "care_ethics",
)
QUALITY_LEVELS: tuple[str, ...] = ("strong", "adequate", "weak", "absent")
HONESTY_SCORES: tuple[str, ...] = ("high", "medium", "low")
ACCOUNTABILITY_LEVELS: tuple[str, ...] = ("relaxed", "moderate", "strict")
INTERRUPT_REASONS: tuple[str, ...] = (
    "factual_correction",
    "straw_man_detected",
    "direct_challenge",
    "clarification_needed",
    "strong_agreement",
    "pivotal_point",
)


@dataclass(frozen=True)
class Chair:
    position: str            # "chair_1", "chair_2", ...
    framework: str           # one of FRAMEWORKS
    model_id: str
    model_display_name: str | None = None

    @property
    def label(self) -> str:
        return self.model_display_name or self.model_id


@dataclass
class QualityAssessment:
    attempted: bool
    quality: QualityLevel
    notes: str | None = None


@dataclass
class FrameworkConsistency:
    consistent: bool
    violations: list[str] | None = None


@dataclass
class IntellectualHonesty:
    score: HonestyScore
    issues: list[str] | None = None


@dataclass
class ResponseEvaluation:
    adherence_score: int     # 0-100
    steel_manning: QualityAssessment
    self_critique: QualityAssessment
    framework_consistency: FrameworkConsistency
    intellectual_honesty: IntellectualHonesty
    requires_interjection: bool
    interjection_reason: str | None = None


@dataclass
class EvaluationContext:
    chair: Chair
    response_content: str
    debate_history: str = ""
    previous_speaker: Chair | None = None
    previous_content: str | None = None


@dataclass
class EvaluationResult:
    evaluation: ResponseEvaluation
    method: EvaluationMethod
    cached: bool = False
    duration_ms: float | None = None


@dataclass
class ChairInterruptCandidate:
    interrupting_chair: Chair
    interrupted_chair: Chair
    trigger_reason: InterruptReason
    trigger_content: str
    urgency: float           # 0-1
    suggested_opener: str | None = None


@dataclass
class InterruptEvaluationContext:
    current_speaker: Chair
    other_chairs: list[Chair]
    recent_content: str
    debate_so_far: str = ""
    topic: str = ""


@dataclass
class QuickInterruptCheck:
    potential_trigger: bool
    likely_reason: InterruptReason | None = None
    confidence: float | None = None


@dataclass
class InterruptStats:
    total_interrupts: int = 0
    by_chair: dict[str, int] = field(default_factory=dict)
    by_reason: dict[str, int] = field(default_factory=dict)


@dataclass
class InterruptionRecord:
    id: int
    debate_id: str
    interrupting_chair: str
    interrupted_chair: str
    trigger_reason: InterruptReason
    trigger_content: str
    urgency: float
    timestamp_ms: int
    response_given: bool = False


@dataclass
class EvaluationRecord:
    id: int
    debate_id: str
    utterance_id: int
    speaker: str
    evaluation: ResponseEvaluation
