"""Chair-to-chair interruptions.

Decides whether another chair should break into the current speaker's turn.
A cheap heuristic pass runs first; the judge model is only asked when the
heuristics flag something or the debate is configured to be aggressive.
Accepted interrupts start the interrupter's cooldown and are counted.
"""

import logging
import time
from collections.abc import Callable

from config.config_loader import DuelogicConfig, FrameworkInfo
from duelogic.cooldown import CooldownTracker
from duelogic.heuristics import quick_interrupt_check
from duelogic.models import (
    Chair,
    ChairInterruptCandidate,
    InterruptEvaluationContext,
    InterruptReason,
    InterruptStats,
    QuickInterruptCheck,
)
from duelogic.parsing import ParseFailure, parse_interrupt_decision
from duelogic.persistence import DebateStore
from duelogic.policy import AGGRESSIVENESS_GUIDANCE, framework_info, get_urgency_threshold, random_interrupt_opener
from duelogic.providers.base import ChatMessage, JudgeClient, JudgeError

logger = logging.getLogger(__name__)

_DEBATE_TAIL_CHARS = 800
_JUDGE_TEMPERATURE = 0.3
_JUDGE_MAX_TOKENS = 400
# Below this aggressiveness the judge is only consulted when a heuristic fires.
_JUDGE_WITHOUT_TRIGGER_MIN_AGGRESSIVENESS = 3


class ChairInterruptionEngine:
    """Evaluates interrupts for one debate.

    Cooldowns and per-chair counts are held in memory and owned by this
    instance. ``clock`` returns seconds; tests inject a fake one.
    """

    def __init__(
        self,
        judge: JudgeClient | None,
        config: DuelogicConfig,
        debate_id: str,
        *,
        store: DebateStore | None = None,
        enable_persistence: bool = True,
        frameworks: dict[str, FrameworkInfo] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        # Fails fast on an aggressiveness outside 1-5.
        get_urgency_threshold(config.interruptions.aggressiveness)

        self._judge = judge
        self._config = config
        self._debate_id = debate_id
        self._store = store
        self._enable_persistence = enable_persistence
        self._frameworks = frameworks or {}
        self._cooldowns = CooldownTracker(config.interruptions.cooldown_seconds, clock=clock)
        self._interrupt_counts: dict[str, int] = {}

        logger.info(
            "ChairInterruptionEngine initialized: debate=%s, enabled=%s, aggressiveness=%d, cooldown=%ss",
            debate_id,
            config.interruptions.enabled,
            config.interruptions.aggressiveness,
            config.interruptions.cooldown_seconds,
        )

    def quick_interrupt_check(self, content: str) -> QuickInterruptCheck:
        return quick_interrupt_check(content)

    def can_interrupt(self, chair_position: str) -> bool:
        return self._cooldowns.is_ready(chair_position)

    def get_cooldown_remaining(self, chair_position: str) -> int:
        """Seconds until the chair may interrupt again, rounded up; 0 when free."""
        return self._cooldowns.remaining_whole_seconds(chair_position)

    def get_urgency_threshold(self) -> float:
        return get_urgency_threshold(self._config.interruptions.aggressiveness)

    async def evaluate_interrupt(self, context: InterruptEvaluationContext) -> ChairInterruptCandidate | None:
        """Propose an interrupt of the current speaker, or return None.

        Returns:
            A candidate naming an eligible chair, already recorded against
            that chair's cooldown and count. None when interruptions are off,
            every other chair is cooling down, the judge declines, nominates
            an ineligible chair, answers below the urgency threshold, fails,
            or answers with something unparsable.
        """
        settings = self._config.interruptions
        if not settings.enabled:
            logger.debug("Interruptions disabled")
            return None
        if not settings.allow_chair_interruptions:
            logger.debug("Chair interruptions disabled")
            return None

        eligible = [chair for chair in context.other_chairs if self.can_interrupt(chair.position)]
        if not eligible:
            logger.debug("No eligible chairs, all on cooldown")
            return None

        quick = self.quick_interrupt_check(context.recent_content)
        if not quick.potential_trigger and settings.aggressiveness < _JUDGE_WITHOUT_TRIGGER_MIN_AGGRESSIVENESS:
            logger.debug("No heuristic trigger at aggressiveness %d, skipping judge", settings.aggressiveness)
            return None

        if self._judge is None:
            logger.debug("No judge configured, skipping interrupt evaluation")
            return None

        try:
            completion = await self._judge.chat(
                self._build_messages(context, eligible),
                temperature=_JUDGE_TEMPERATURE,
                max_tokens=_JUDGE_MAX_TOKENS,
            )
        except JudgeError as exc:
            logger.error("Failed to evaluate interrupt: %s", exc)
            return None
        except Exception as exc:
            logger.error("Unexpected error evaluating interrupt: %s", exc)
            return None

        decision = parse_interrupt_decision(completion)
        if isinstance(decision, ParseFailure):
            logger.warning("Unusable interrupt decision from judge (%s)", decision.reason)
            return None
        if not decision.should_interrupt:
            return None

        threshold = self.get_urgency_threshold()
        if decision.urgency < threshold:
            logger.debug("Urgency %.2f below threshold %.2f", decision.urgency, threshold)
            return None

        interrupter = next(
            (chair for chair in eligible if chair.position == decision.interrupting_chair_position),
            None,
        )
        if interrupter is None:
            logger.warning("Invalid interrupting chair position: %s", decision.interrupting_chair_position)
            return None

        candidate = ChairInterruptCandidate(
            interrupting_chair=interrupter,
            interrupted_chair=context.current_speaker,
            trigger_reason=decision.reason,
            trigger_content=decision.trigger_content,
            urgency=decision.urgency,
            suggested_opener=decision.suggested_opener or random_interrupt_opener(decision.reason),
        )
        await self._record_interrupt(candidate)

        logger.info(
            "Interrupt triggered: %s -> %s (%s, urgency=%.2f)",
            interrupter.position,
            context.current_speaker.position,
            candidate.trigger_reason,
            candidate.urgency,
        )
        return candidate

    async def trigger_manual_interrupt(
        self,
        interrupting_chair: Chair,
        interrupted_chair: Chair,
        reason: InterruptReason,
        trigger_content: str,
    ) -> ChairInterruptCandidate:
        """Record an already-decided interrupt, bypassing eligibility and thresholds."""
        candidate = ChairInterruptCandidate(
            interrupting_chair=interrupting_chair,
            interrupted_chair=interrupted_chair,
            trigger_reason=reason,
            trigger_content=trigger_content,
            urgency=1.0,
            suggested_opener=random_interrupt_opener(reason),
        )
        await self._record_interrupt(candidate)
        logger.info(
            "Manual interrupt: %s -> %s (%s)",
            interrupting_chair.position,
            interrupted_chair.position,
            reason,
        )
        return candidate

    def reset_cooldowns(self) -> None:
        self._cooldowns.reset()

    def reset_counts(self) -> None:
        self._interrupt_counts.clear()
        logger.debug("Interrupt counts reset")

    def get_interrupt_count(self, chair_position: str) -> int:
        return self._interrupt_counts.get(chair_position, 0)

    async def get_interrupt_stats(self, debate_id: str | None = None) -> InterruptStats:
        """Totals for the debate, read back from the store."""
        if self._store is None:
            return InterruptStats()
        counts = await self._store.get_interruption_counts(debate_id or self._debate_id)
        return InterruptStats(
            total_interrupts=sum(counts["made"].values()),
            by_chair=counts["made"],
            by_reason=counts["by_reason"],
        )

    async def get_detailed_interrupt_counts(self, debate_id: str | None = None) -> dict[str, dict[str, int]]:
        if self._store is None:
            return {"by_reason": {}, "made": {}, "received": {}}
        return await self._store.get_interruption_counts(debate_id or self._debate_id)

    async def mark_interrupt_responded(self, interruption_id: int) -> None:
        if self._store is None:
            return
        await self._store.mark_interruption_responded(interruption_id)

    async def _record_interrupt(self, candidate: ChairInterruptCandidate) -> None:
        position = candidate.interrupting_chair.position
        self._cooldowns.start(position)
        self._interrupt_counts[position] = self._interrupt_counts.get(position, 0) + 1

        if not self._enable_persistence or self._store is None:
            return
        try:
            await self._store.save_interruption(self._debate_id, candidate, int(time.time() * 1000))
        except Exception as exc:
            logger.error("Failed to persist interrupt from %s: %s", position, exc)

    def _build_messages(self, context: InterruptEvaluationContext, eligible: list[Chair]) -> list[ChatMessage]:
        speaker = context.current_speaker
        speaker_info = framework_info(self._frameworks, speaker.framework)
        chairs_list = "\n".join(
            f"- {chair.position}: {chair.label} ({framework_info(self._frameworks, chair.framework).name})"
            for chair in eligible
        )
        aggressiveness = self._config.interruptions.aggressiveness

        prompt = f"""You are monitoring a philosophical debate to decide whether another chair should interrupt the current speaker.

**CURRENT SPEAKER:** {speaker.label} ({speaker_info.name})
Framework: {speaker_info.description}

**OTHER CHAIRS WHO COULD INTERRUPT:**
{chairs_list}

**WHAT THEY JUST SAID:**
"{context.recent_content}"

**DEBATE TOPIC:** {context.topic}

**DEBATE SO FAR (recent):**
{context.debate_so_far[-_DEBATE_TAIL_CHARS:]}

---

**INTERRUPT REASONS:**
- factual_correction: the speaker misrepresents another chair's framework
- straw_man_detected: the speaker attacks a weak version of an opposing view
- direct_challenge: a claim that one framework must immediately contest
- clarification_needed: an ambiguous or undefined claim
- strong_agreement: a point another chair must build on right now
- pivotal_point: the crux where two frameworks diverge

**AGGRESSIVENESS LEVEL:** {aggressiveness}/5
{AGGRESSIVENESS_GUIDANCE[aggressiveness]}

---

**OUTPUT FORMAT (strict JSON):**
{{
  "shouldInterrupt": boolean,
  "interruptingChairPosition": "chair_N or null",
  "reason": "factual_correction|straw_man_detected|direct_challenge|clarification_needed|strong_agreement|pivotal_point",
  "triggerContent": "the exact phrase that triggered the interrupt",
  "urgency": <0.0-1.0>,
  "suggestedOpener": "how the interrupting chair would start"
}}

Only nominate one of the chairs listed above. Evaluate now:"""

        return [{"role": "user", "content": prompt}]


def create_chair_interruption_engine(
    config: DuelogicConfig,
    debate_id: str,
    judge: JudgeClient,
    store: DebateStore | None = None,
    frameworks: dict[str, FrameworkInfo] | None = None,
) -> ChairInterruptionEngine:
    """Engine for a live debate, persisting interrupts when a store is given."""
    return ChairInterruptionEngine(
        judge,
        config,
        debate_id,
        store=store,
        enable_persistence=store is not None,
        frameworks=frameworks,
    )


def create_test_interruption_engine(
    config: DuelogicConfig,
    debate_id: str,
    judge: JudgeClient | None = None,
) -> ChairInterruptionEngine:
    """Engine with persistence disabled, for dry runs and tests."""
    return ChairInterruptionEngine(judge, config, debate_id, enable_persistence=False)
