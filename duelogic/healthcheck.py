"""Judge health checks: ping each configured judge before adjudicating."""

import asyncio
import logging

from duelogic.providers.base import JudgeClient

logger = logging.getLogger(__name__)

_PING_MESSAGES = [{"role": "user", "content": "Reply with the word OK only."}]
_TIMEOUT_SEC = 15.0


async def _check_one(name: str, judge: JudgeClient) -> tuple[str, bool, str]:
    """Ping a single judge. Returns (name, ok, error_message)."""
    try:
        await asyncio.wait_for(
            judge.chat(_PING_MESSAGES, temperature=0.0, max_tokens=5),
            timeout=_TIMEOUT_SEC,
        )
        return name, True, ""
    except Exception as exc:
        logger.debug("Health check failed for %s: %s", name, exc)
        return name, False, str(exc) or type(exc).__name__


async def run_health_checks(
    judges: dict[str, JudgeClient],
) -> dict[str, tuple[bool, str]]:
    """Ping all judges in parallel.

    Returns:
        Dict mapping judge name -> (ok, error_message).
        error_message is "" when ok is True.
    """
    results = await asyncio.gather(*(_check_one(n, j) for n, j in judges.items()))
    return {name: (ok, err) for name, ok, err in results}
