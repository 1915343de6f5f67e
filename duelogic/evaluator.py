"""Response evaluation: score a chair's turn for Duelogic adherence.

Four things are judged: steel-manning the opponent, self-critique of the
chair's own framework, staying inside that framework, and intellectual
honesty. Relaxed debates are scored by heuristics only; moderate and strict
debates ask the judge model and fall back to heuristics when it cannot be
reached.
"""

import asyncio
import dataclasses
import logging
import time

from config.config_loader import DuelogicConfig, FrameworkInfo
from duelogic.cache import EvaluationCache, cache_key
from duelogic.heuristics import mentions_framework, quick_self_critique_check, quick_steel_man_check
from duelogic.models import (
    ACCOUNTABILITY_LEVELS,
    AccountabilityLevel,
    EvaluationContext,
    EvaluationRecord,
    EvaluationResult,
    FrameworkConsistency,
    IntellectualHonesty,
    QualityAssessment,
    ResponseEvaluation,
    ViolationType,
)
from duelogic.parsing import ParseFailure, default_evaluation, parse_evaluation
from duelogic.persistence import DebateStore
from duelogic.policy import (
    MODERATE_INTERJECTION_THRESHOLD,
    STRICT_INTERJECTION_THRESHOLD,
    classify_violation,
    framework_info,
)
from duelogic.providers.base import ChatMessage, JudgeClient, JudgeError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_CONCURRENCY = 3

# Quick-mode score bands: neither behaviour -> 30-40, both -> 80-90.
_QUICK_BASE_SCORE = 30
_QUICK_STEEL_MAN_BONUS = 25
_QUICK_SELF_CRITIQUE_BONUS = 25
_QUICK_FRAMEWORK_BONUS = 10

_HISTORY_TAIL_CHARS = 1000
_JUDGE_TEMPERATURE = 0.3
_JUDGE_MAX_TOKENS = 600

_SYSTEM_PROMPT = (
    "You are a strict evaluator of philosophical debate responses. "
    "You judge adherence to Duelogic principles and answer with a single JSON object only."
)


def _check_level(level: str) -> AccountabilityLevel:
    if level not in ACCOUNTABILITY_LEVELS:
        raise ValueError(f"Unknown accountability level: {level!r}")
    return level  # type: ignore[return-value]


class ResponseEvaluator:
    """Evaluates chair responses; one instance per debate.

    Owns its evaluation cache. The judge and the store are injected; with
    ``enable_persistence=False`` nothing is written to the store.
    """

    def __init__(
        self,
        judge: JudgeClient | None = None,
        *,
        accountability_level: str = "moderate",
        debate_id: str | None = None,
        store: DebateStore | None = None,
        enable_persistence: bool = True,
        frameworks: dict[str, FrameworkInfo] | None = None,
    ) -> None:
        self._judge = judge
        self._accountability_level = _check_level(accountability_level)
        self._debate_id = debate_id
        self._store = store
        self._enable_persistence = enable_persistence
        self._frameworks = frameworks or {}
        self._cache = EvaluationCache()

        logger.info(
            "ResponseEvaluator initialized: judge=%s, accountability=%s, debate=%s, persistence=%s",
            judge.name() if judge else None,
            self._accountability_level,
            debate_id,
            enable_persistence,
        )

    @property
    def accountability_level(self) -> AccountabilityLevel:
        return self._accountability_level

    async def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        """Evaluate one response, consulting the cache first.

        Returns:
            EvaluationResult tagged ``cached``, ``quick`` or ``full``.
            Never raises on judge failure.
        """
        start = time.monotonic()
        key = cache_key(context.chair.position, context.response_content)

        entry = self._cache.get(key)
        if entry is not None:
            logger.debug("Returning cached evaluation for %s", key)
            return EvaluationResult(evaluation=entry.evaluation, method="cached", cached=True)

        if self._accountability_level == "relaxed":
            evaluation = self.perform_quick_evaluation(context)
            self._cache.put(key, evaluation, "quick")
            return EvaluationResult(evaluation=evaluation, method="quick", duration_ms=_elapsed_ms(start))

        if self._judge is None:
            logger.warning("No judge configured, scoring %s by heuristics", context.chair.position)
            return EvaluationResult(
                evaluation=self.perform_quick_evaluation(context),
                method="quick",
                duration_ms=_elapsed_ms(start),
            )

        try:
            completion = await self._judge.chat(
                self._build_messages(context),
                temperature=_JUDGE_TEMPERATURE,
                max_tokens=_JUDGE_MAX_TOKENS,
            )
        except JudgeError as exc:
            logger.warning("Judge failed for %s, using heuristics: %s", context.chair.position, exc)
            return EvaluationResult(
                evaluation=self.perform_quick_evaluation(context),
                method="quick",
                duration_ms=_elapsed_ms(start),
            )
        except Exception as exc:
            logger.warning("Unexpected judge error for %s, using heuristics: %s", context.chair.position, exc)
            return EvaluationResult(
                evaluation=self.perform_quick_evaluation(context),
                method="quick",
                duration_ms=_elapsed_ms(start),
            )

        parsed = parse_evaluation(completion)
        if isinstance(parsed, ParseFailure):
            logger.warning("Unusable judge evaluation for %s (%s)", context.chair.position, parsed.reason)
            evaluation = default_evaluation()
        else:
            evaluation = parsed
            _warn_if_inconsistent(evaluation, context.chair.position)

        evaluation = self._adjust_for_accountability(evaluation)
        self._cache.put(key, evaluation, "full")

        duration_ms = _elapsed_ms(start)
        logger.info(
            "Response evaluated: chair=%s score=%d interjection=%s (%.0fms)",
            context.chair.position,
            evaluation.adherence_score,
            evaluation.requires_interjection,
            duration_ms,
        )
        return EvaluationResult(evaluation=evaluation, method="full", duration_ms=duration_ms)

    async def evaluate_and_persist(
        self,
        context: EvaluationContext,
        utterance_id: int,
    ) -> tuple[ResponseEvaluation, int | None]:
        """Evaluate, then append the result to the store.

        Cache hits are not written again. A failing store is logged and
        reported as ``None``; the evaluation is still returned.
        """
        result = await self.evaluate(context)
        if not self._enable_persistence or self._store is None or result.cached:
            return result.evaluation, None

        try:
            evaluation_id = await self._store.save_evaluation(
                self._debate_id or "",
                utterance_id,
                context.chair.position,
                result.evaluation,
            )
        except Exception as exc:
            logger.error("Failed to persist evaluation for utterance %d: %s", utterance_id, exc)
            return result.evaluation, None

        logger.debug("Persisted evaluation %d for utterance %d", evaluation_id, utterance_id)
        return result.evaluation, evaluation_id

    def perform_quick_evaluation(self, context: EvaluationContext) -> ResponseEvaluation:
        """Heuristic-only evaluation. Never requests an interjection."""
        has_steel_man = quick_steel_man_check(context.response_content)
        has_self_critique = quick_self_critique_check(context.response_content)
        info = framework_info(self._frameworks, context.chair.framework)

        score = _QUICK_BASE_SCORE
        if has_steel_man:
            score += _QUICK_STEEL_MAN_BONUS
        if has_self_critique:
            score += _QUICK_SELF_CRITIQUE_BONUS
        if mentions_framework(context.response_content, info):
            score += _QUICK_FRAMEWORK_BONUS

        return ResponseEvaluation(
            adherence_score=min(score, 100),
            steel_manning=QualityAssessment(
                attempted=has_steel_man,
                quality="adequate" if has_steel_man else "absent",
            ),
            self_critique=QualityAssessment(
                attempted=has_self_critique,
                quality="adequate" if has_self_critique else "absent",
            ),
            framework_consistency=FrameworkConsistency(consistent=True),
            intellectual_honesty=IntellectualHonesty(score="medium"),
            requires_interjection=False,
        )

    async def batch_evaluate(
        self,
        contexts: list[EvaluationContext],
        *,
        use_quick_mode: bool = False,
        concurrency: int = DEFAULT_BATCH_CONCURRENCY,
    ) -> dict[str, EvaluationResult]:
        """Evaluate many responses with at most ``concurrency`` in flight.

        Returns:
            Results keyed by chair position, in input order.
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        logger.info(
            "Starting batch evaluation: %d responses, concurrency=%d, quick=%s",
            len(contexts),
            concurrency,
            use_quick_mode,
        )
        semaphore = asyncio.Semaphore(concurrency)

        async def _evaluate_one(context: EvaluationContext) -> EvaluationResult:
            if use_quick_mode:
                return EvaluationResult(evaluation=self.perform_quick_evaluation(context), method="quick")
            async with semaphore:
                return await self.evaluate(context)

        # Identical (chair, content) pairs share one judge call.
        unique: dict[str, EvaluationContext] = {}
        for context in contexts:
            unique.setdefault(cache_key(context.chair.position, context.response_content), context)

        results = await asyncio.gather(*(_evaluate_one(c) for c in unique.values()))
        by_key = dict(zip(unique, results))
        by_position = {
            context.chair.position: by_key[cache_key(context.chair.position, context.response_content)]
            for context in contexts
        }

        logger.info("Batch evaluation complete: %d results", len(by_position))
        return by_position

    def should_interject(self, evaluation: ResponseEvaluation, arbiter_interjections_allowed: bool = True) -> bool:
        """Whether the arbiter should interrupt for this evaluation."""
        if not arbiter_interjections_allowed or self._accountability_level == "relaxed":
            return False
        if self._accountability_level == "strict":
            return evaluation.requires_interjection or evaluation.adherence_score < STRICT_INTERJECTION_THRESHOLD
        return evaluation.requires_interjection and evaluation.adherence_score < MODERATE_INTERJECTION_THRESHOLD

    def determine_violation_type(self, evaluation: ResponseEvaluation) -> ViolationType | None:
        return classify_violation(evaluation)

    async def get_evaluations_for_debate(self, debate_id: str | None = None) -> list[EvaluationRecord]:
        if self._store is None:
            return []
        return await self._store.get_evaluations(debate_id or self._debate_id or "")

    async def get_evaluations_by_chair(self, debate_id: str | None = None) -> dict[str, list[ResponseEvaluation]]:
        if self._store is None:
            return {}
        return await self._store.get_evaluations_by_chair(debate_id or self._debate_id or "")

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> dict:
        return {"size": len(self._cache), "entries": self._cache.keys()}

    def set_accountability_level(self, level: str) -> None:
        """Change policy for later evaluations. Cached entries are kept."""
        self._accountability_level = _check_level(level)
        logger.debug("Accountability level updated: %s", level)

    def _adjust_for_accountability(self, evaluation: ResponseEvaluation) -> ResponseEvaluation:
        if self._accountability_level == "relaxed":
            return dataclasses.replace(evaluation, requires_interjection=False)
        if self._accountability_level == "strict":
            flagged = (
                evaluation.requires_interjection
                or evaluation.adherence_score < STRICT_INTERJECTION_THRESHOLD
                or not evaluation.steel_manning.attempted
                or not evaluation.self_critique.attempted
            )
            return dataclasses.replace(evaluation, requires_interjection=flagged)
        return evaluation

    def _build_messages(self, context: EvaluationContext) -> list[ChatMessage]:
        chair = context.chair
        info = framework_info(self._frameworks, chair.framework)
        blind_spots = "\n".join(f"   - {b}" for b in info.blind_spots) or "   - (none listed)"

        responding_to = ""
        if context.previous_speaker and context.previous_content:
            prev_info = framework_info(self._frameworks, context.previous_speaker.framework)
            responding_to = (
                "**WHAT THEY WERE RESPONDING TO:**\n"
                f'{context.previous_speaker.label} ({prev_info.name}) said:\n"{context.previous_content}"\n\n'
            )

        prompt = f"""**CHAIR BEING EVALUATED:**
{chair.label}
Framework: {info.name} - {info.description}
Core Question: {info.core_question}

**THEIR RESPONSE TO EVALUATE:**
"{context.response_content}"

{responding_to}**RECENT DEBATE CONTEXT:**
{context.debate_history[-_HISTORY_TAIL_CHARS:]}

---

**EVALUATION CRITERIA** (0-25 points each):

1. STEEL-MANNING: did they state the strongest version of the opponent's argument before critiquing it?
   25 = better than the opponent might themselves, 15 = adequate acknowledgment, 0-5 = absent or straw man.

2. SELF-CRITIQUE: did they acknowledge their own framework's limitations?
   Known blind spots for {info.name}:
{blind_spots}
   25 = genuine, nuanced admission, 15 = brief nod, 0-5 = absent or defensive.

3. FRAMEWORK CONSISTENCY: did they argue from within the {info.name} framework?
   List any departures as violations.

4. INTELLECTUAL HONESTY: did they engage in good faith?
   Watch for evasion, misrepresentation, cherry-picking, moving goalposts, false equivalences.

---

**OUTPUT FORMAT (strict JSON):**
{{
  "adherenceScore": <0-100>,
  "steelManning": {{ "attempted": boolean, "quality": "strong|adequate|weak|absent", "notes": "string" }},
  "selfCritique": {{ "attempted": boolean, "quality": "strong|adequate|weak|absent", "notes": "string" }},
  "frameworkConsistency": {{ "consistent": boolean, "violations": ["string"] }},
  "intellectualHonesty": {{ "score": "high|medium|low", "issues": ["string"] }},
  "requiresInterjection": boolean,
  "interjectionReason": "string or null"
}}

Set requiresInterjection to true if steel-manning is absent or weak, self-critique is completely absent,
the framework was abandoned, or there is significant intellectual dishonesty.

Evaluate now:"""

        return [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000


def _warn_if_inconsistent(evaluation: ResponseEvaluation, position: str) -> None:
    both_strong = evaluation.steel_manning.quality == "strong" and evaluation.self_critique.quality == "strong"
    if both_strong and evaluation.adherence_score < STRICT_INTERJECTION_THRESHOLD:
        logger.warning(
            "Judge scored %s at %d despite strong steel-manning and self-critique",
            position,
            evaluation.adherence_score,
        )


def create_response_evaluator(
    config: DuelogicConfig,
    judge: JudgeClient,
    debate_id: str | None = None,
    store: DebateStore | None = None,
    frameworks: dict[str, FrameworkInfo] | None = None,
) -> ResponseEvaluator:
    """Evaluator for a live debate, using the arbiter's accountability level."""
    return ResponseEvaluator(
        judge,
        accountability_level=config.arbiter.accountability_level,
        debate_id=debate_id,
        store=store,
        enable_persistence=store is not None,
        frameworks=frameworks,
    )


def create_quick_evaluator(frameworks: dict[str, FrameworkInfo] | None = None) -> ResponseEvaluator:
    """Heuristics-only evaluator: relaxed, no judge, no persistence."""
    return ResponseEvaluator(
        None,
        accountability_level="relaxed",
        enable_persistence=False,
        frameworks=frameworks,
    )
