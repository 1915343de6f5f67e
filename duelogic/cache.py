"""Per-evaluator cache of finished evaluations, keyed by (chair, response content)."""

import hashlib
import logging
from dataclasses import dataclass

from duelogic.models import EvaluationMethod, ResponseEvaluation

logger = logging.getLogger(__name__)


@dataclass
class EvaluationCacheEntry:
    evaluation: ResponseEvaluation
    method: EvaluationMethod


def cache_key(chair_position: str, response_content: str) -> str:
    """Stable identity for a response: chair position plus a digest of the full text."""
    digest = hashlib.sha256(response_content.encode("utf-8")).hexdigest()[:16]
    return f"{chair_position}:{digest}"


class EvaluationCache:
    """Process-local map of evaluations. No TTL; entries live until clear()."""

    def __init__(self) -> None:
        self._entries: dict[str, EvaluationCacheEntry] = {}

    def get(self, key: str) -> EvaluationCacheEntry | None:
        return self._entries.get(key)

    def put(self, key: str, evaluation: ResponseEvaluation, method: EvaluationMethod) -> None:
        self._entries[key] = EvaluationCacheEntry(evaluation=evaluation, method=method)

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Evaluation cache cleared")

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
