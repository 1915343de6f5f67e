"""Tests for duelogic/output.py: render into a recording console."""

import pytest
from rich.console import Console

import duelogic.output as output
from duelogic.models import ChairInterruptCandidate, EvaluationResult, QuickInterruptCheck
from duelogic.parsing import default_evaluation


@pytest.fixture
def recorded(monkeypatch) -> Console:
    console = Console(record=True, width=120, legacy_windows=False)
    monkeypatch.setattr(output, "console", console)
    return console


def test_preview_truncates():
    assert output._preview("one two three", words=2) == "one two..."
    assert output._preview("one two", words=2) == "one two"


@pytest.mark.parametrize("score,style", [(85, "bold green"), (50, "bold yellow"), (12, "bold red")])
def test_score_style(score, style):
    assert output._score_style(score) == style


def test_print_evaluation_with_interjection(recorded, utilitarian_chair):
    result = EvaluationResult(evaluation=default_evaluation(), method="full", duration_ms=420.0)

    output.print_evaluation(utilitarian_chair, result, "straw_manning", interject=True)

    text = recorded.export_text()
    assert "chair_1" in text
    assert "Adherence" in text
    assert "50" in text
    assert "Arbiter interjects" in text
    assert "straw_manning" in text
    assert "420ms" in text


def test_print_evaluation_without_interjection(recorded, utilitarian_chair):
    result = EvaluationResult(evaluation=default_evaluation(), method="cached", cached=True)

    output.print_evaluation(utilitarian_chair, result, None, interject=False)

    text = recorded.export_text()
    assert "No interjection" in text
    assert "cache hit" in text


def test_print_scan(recorded):
    check = QuickInterruptCheck(potential_trigger=True, likely_reason="pivotal_point", confidence=0.75)

    output.print_scan("The core problem is trust.", False, True, check)

    text = recorded.export_text()
    assert "pivotal_point (0.75)" in text
    assert "Self-critique" in text


def test_print_interrupt_none(recorded, utilitarian_chair):
    output.print_interrupt(utilitarian_chair, None, 0.7)
    assert "No interrupt" in recorded.export_text()


def test_print_interrupt_candidate(recorded, utilitarian_chair, virtue_chair):
    candidate = ChairInterruptCandidate(
        interrupting_chair=virtue_chair,
        interrupted_chair=utilitarian_chair,
        trigger_reason="straw_man_detected",
        trigger_content="they just want",
        urgency=0.85,
        suggested_opener="Hold on...",
    )

    output.print_interrupt(utilitarian_chair, candidate, 0.7)

    text = recorded.export_text()
    assert "chair_2 interrupts chair_1" in text
    assert "Hold on..." in text
    assert "0.85" in text
