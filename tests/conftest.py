"""Shared pytest fixtures."""

import json
from unittest.mock import AsyncMock

import pytest

from config.config_loader import (
    ArbiterConfig,
    AppConfig,
    DefaultsConfig,
    DuelogicConfig,
    FrameworkInfo,
    InterruptionConfig,
    ModelConfig,
)
from duelogic.models import Chair, EvaluationContext
from duelogic.providers.base import ChatMessage, JudgeClient


class FakeJudge(JudgeClient):
    """Test double JudgeClient returning a scripted completion."""

    def __init__(self, judge_name: str = "fake", reply: str = "{}") -> None:
        self._name = judge_name
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because chat is defined in the class body below.
        self.chat = AsyncMock(return_value=reply)  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "fake-judge-1"

    async def chat(  # type: ignore[override]
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        """Default implementation; replaced by AsyncMock in __init__."""
        return "{}"

    def reply_with(self, payload: dict | str) -> None:
        """Script the next completions as a JSON object (or raw text)."""
        text = payload if isinstance(payload, str) else json.dumps(payload)
        self.chat = AsyncMock(return_value=text)  # type: ignore[assignment]

    def fail_with(self, exc: Exception) -> None:
        self.chat = AsyncMock(side_effect=exc)  # type: ignore[assignment]


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def evaluation_payload(
    score: int = 75,
    steel: str = "strong",
    critique: str = "adequate",
    consistent: bool = True,
    honesty: str = "high",
    requires_interjection: bool = False,
    **extra,
) -> dict:
    """A judge evaluation reply in the wire format the evaluator asks for."""
    payload = {
        "adherenceScore": score,
        "steelManning": {"attempted": steel != "absent", "quality": steel},
        "selfCritique": {"attempted": critique != "absent", "quality": critique},
        "frameworkConsistency": {"consistent": consistent},
        "intellectualHonesty": {"score": honesty},
        "requiresInterjection": requires_interjection,
    }
    payload.update(extra)
    return payload


@pytest.fixture
def fake_judge() -> FakeJudge:
    return FakeJudge()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def utilitarian_chair() -> Chair:
    return Chair(position="chair_1", framework="utilitarian", model_id="anthropic/claude-3-haiku")


@pytest.fixture
def virtue_chair() -> Chair:
    return Chair(position="chair_2", framework="virtue_ethics", model_id="openai/gpt-4o-mini")


@pytest.fixture
def deontological_chair() -> Chair:
    return Chair(position="chair_3", framework="deontological", model_id="google/gemini-2.5-flash")


@pytest.fixture
def chairs(utilitarian_chair: Chair, virtue_chair: Chair, deontological_chair: Chair) -> list[Chair]:
    return [utilitarian_chair, virtue_chair, deontological_chair]


@pytest.fixture
def frameworks() -> dict[str, FrameworkInfo]:
    return {
        "utilitarian": FrameworkInfo(
            name="Utilitarian Chair",
            description="Evaluates actions by their consequences for overall well-being.",
            core_question="What produces the greatest good for the greatest number?",
            blind_spots=["Can justify harming minorities for majority benefit"],
        ),
        "virtue_ethics": FrameworkInfo(
            name="Virtue Ethics Chair",
            description="Focuses on character and what a virtuous person would do.",
            core_question="What would a person of good character do here?",
            blind_spots=["Can be vague about specific actions"],
        ),
        "deontological": FrameworkInfo(
            name="Deontological Chair",
            description="Judges actions by duties and rules, not outcomes.",
            core_question="What are our duties, regardless of consequences?",
            blind_spots=["Rules can conflict with no resolution"],
        ),
    }


@pytest.fixture
def duelogic_config(chairs: list[Chair]) -> DuelogicConfig:
    return DuelogicConfig(
        chairs=chairs,
        arbiter=ArbiterConfig(judge="claude", accountability_level="moderate"),
        interruptions=InterruptionConfig(aggressiveness=3, cooldown_seconds=60),
        topic="Should AI development be paused?",
    )


@pytest.fixture
def sample_app_config(duelogic_config: DuelogicConfig, frameworks: dict[str, FrameworkInfo]) -> AppConfig:
    model_cfg = ModelConfig(
        name="claude",
        sdk="anthropic",
        model="claude-3-5-haiku-latest",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=60,
        max_tokens=600,
    )
    return AppConfig(
        defaults=DefaultsConfig(judge="claude"),
        models={"claude": model_cfg},
        duelogic=duelogic_config,
        frameworks=frameworks,
        available_providers={"claude"},
    )


@pytest.fixture
def steel_man_response() -> str:
    return (
        "I appreciate the virtue ethics perspective here, and they make a compelling argument "
        "about character. I must admit my framework struggles with individual rights. "
        "Still, from the utilitarian perspective, the greatest good matters most."
    )


@pytest.fixture
def bare_response() -> str:
    return "AI will cure diseases and raise living standards, so we should build it as fast as we can."


@pytest.fixture
def evaluation_context(utilitarian_chair: Chair, virtue_chair: Chair, steel_man_response: str) -> EvaluationContext:
    return EvaluationContext(
        chair=utilitarian_chair,
        response_content=steel_man_response,
        debate_history="Opening statements have been made.",
        previous_speaker=virtue_chair,
        previous_content="A virtuous society would proceed with prudence.",
    )
