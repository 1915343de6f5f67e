"""Debate persistence as consumed by the adjudicators.

The durable store lives outside this package; ``DebateStore`` is the narrow
surface the evaluator and interruption engine call. ``InMemoryDebateStore``
backs tests and CLI runs.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from collections import Counter

from duelogic.models import (
    ChairInterruptCandidate,
    EvaluationRecord,
    InterruptionRecord,
    ResponseEvaluation,
)

logger = logging.getLogger(__name__)


class DebateStore(ABC):
    """Append/query operations for evaluations and interruptions."""

    @abstractmethod
    async def save_evaluation(
        self,
        debate_id: str,
        utterance_id: int,
        speaker: str,
        evaluation: ResponseEvaluation,
    ) -> int:
        """Append one evaluation and return its id."""
        ...

    @abstractmethod
    async def save_interruption(
        self,
        debate_id: str,
        candidate: ChairInterruptCandidate,
        timestamp_ms: int,
    ) -> int:
        """Append one interruption and return its id."""
        ...

    @abstractmethod
    async def mark_interruption_responded(self, interruption_id: int) -> None:
        ...

    @abstractmethod
    async def get_interruptions(self, debate_id: str) -> list[InterruptionRecord]:
        """All interruptions for a debate, oldest first."""
        ...

    @abstractmethod
    async def get_evaluations(self, debate_id: str) -> list[EvaluationRecord]:
        """All evaluations for a debate, in insertion order."""
        ...

    async def get_evaluations_by_chair(self, debate_id: str) -> dict[str, list[ResponseEvaluation]]:
        grouped: dict[str, list[ResponseEvaluation]] = {}
        for record in await self.get_evaluations(debate_id):
            grouped.setdefault(record.speaker, []).append(record.evaluation)
        return grouped

    async def get_interruption_counts(self, debate_id: str) -> dict[str, dict[str, int]]:
        """Counts keyed ``by_reason``, ``made`` (per interrupter) and ``received``."""
        records = await self.get_interruptions(debate_id)
        return {
            "by_reason": dict(Counter(r.trigger_reason for r in records)),
            "made": dict(Counter(r.interrupting_chair for r in records)),
            "received": dict(Counter(r.interrupted_chair for r in records)),
        }


class InMemoryDebateStore(DebateStore):
    """Process-local store. Ids are assigned sequentially from 1."""

    def __init__(self) -> None:
        self._evaluations: list[EvaluationRecord] = []
        self._interruptions: list[InterruptionRecord] = []
        self._evaluation_ids = itertools.count(1)
        self._interruption_ids = itertools.count(1)

    async def save_evaluation(
        self,
        debate_id: str,
        utterance_id: int,
        speaker: str,
        evaluation: ResponseEvaluation,
    ) -> int:
        record = EvaluationRecord(
            id=next(self._evaluation_ids),
            debate_id=debate_id,
            utterance_id=utterance_id,
            speaker=speaker,
            evaluation=evaluation,
        )
        self._evaluations.append(record)
        logger.debug("Saved evaluation %d for utterance %d", record.id, utterance_id)
        return record.id

    async def save_interruption(
        self,
        debate_id: str,
        candidate: ChairInterruptCandidate,
        timestamp_ms: int,
    ) -> int:
        record = InterruptionRecord(
            id=next(self._interruption_ids),
            debate_id=debate_id,
            interrupting_chair=candidate.interrupting_chair.position,
            interrupted_chair=candidate.interrupted_chair.position,
            trigger_reason=candidate.trigger_reason,
            trigger_content=candidate.trigger_content,
            urgency=candidate.urgency,
            timestamp_ms=timestamp_ms,
        )
        self._interruptions.append(record)
        logger.info(
            "Saved chair interruption: %s -> %s (%s)",
            record.interrupting_chair,
            record.interrupted_chair,
            record.trigger_reason,
        )
        return record.id

    async def mark_interruption_responded(self, interruption_id: int) -> None:
        for record in self._interruptions:
            if record.id == interruption_id:
                record.response_given = True
                return
        logger.warning("Interruption %d not found", interruption_id)

    async def get_interruptions(self, debate_id: str) -> list[InterruptionRecord]:
        records = [r for r in self._interruptions if r.debate_id == debate_id]
        return sorted(records, key=lambda r: r.timestamp_ms)

    async def get_evaluations(self, debate_id: str) -> list[EvaluationRecord]:
        return [r for r in self._evaluations if r.debate_id == debate_id]
