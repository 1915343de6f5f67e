"""Tests for duelogic/policy.py."""

import random

import pytest

from duelogic.models import INTERRUPT_REASONS, FrameworkConsistency, IntellectualHonesty, QualityAssessment, ResponseEvaluation
from duelogic.policy import (
    INTERRUPT_OPENERS,
    URGENCY_THRESHOLDS,
    classify_violation,
    framework_info,
    get_urgency_threshold,
    random_interrupt_opener,
)


def _evaluation(
    steel: QualityAssessment | None = None,
    critique: QualityAssessment | None = None,
    consistent: bool = True,
    honesty: str = "high",
) -> ResponseEvaluation:
    return ResponseEvaluation(
        adherence_score=80,
        steel_manning=steel or QualityAssessment(attempted=True, quality="strong"),
        self_critique=critique or QualityAssessment(attempted=True, quality="strong"),
        framework_consistency=FrameworkConsistency(consistent=consistent),
        intellectual_honesty=IntellectualHonesty(score=honesty),
        requires_interjection=False,
    )


@pytest.mark.parametrize("level,expected", [(1, 0.9), (2, 0.8), (3, 0.7), (4, 0.6), (5, 0.5)])
def test_urgency_threshold_table(level, expected):
    assert get_urgency_threshold(level) == pytest.approx(expected)


def test_urgency_threshold_decreases_with_aggressiveness():
    values = [URGENCY_THRESHOLDS[level] for level in range(1, 6)]
    assert values == sorted(values, reverse=True)


@pytest.mark.parametrize("level", [0, 6, -1])
def test_urgency_threshold_rejects_out_of_range(level):
    with pytest.raises(ValueError, match="1-5"):
        get_urgency_threshold(level)


def test_opener_bank_covers_every_reason():
    assert set(INTERRUPT_OPENERS) == set(INTERRUPT_REASONS)
    for openers in INTERRUPT_OPENERS.values():
        assert len(openers) == 4
        assert all(o.endswith("...") for o in openers)


def test_random_opener_comes_from_bank():
    opener = random_interrupt_opener("pivotal_point", rng=random.Random(7))
    assert opener in INTERRUPT_OPENERS["pivotal_point"]


def test_classify_clean_evaluation():
    assert classify_violation(_evaluation()) is None


def test_classify_weak_steel_manning_is_straw_manning():
    evaluation = _evaluation(steel=QualityAssessment(attempted=True, quality="weak"))
    assert classify_violation(evaluation) == "straw_manning"


def test_classify_unattempted_self_critique():
    evaluation = _evaluation(critique=QualityAssessment(attempted=False, quality="absent"))
    assert classify_violation(evaluation) == "missing_self_critique"


def test_classify_weak_self_critique_is_not_a_violation():
    evaluation = _evaluation(critique=QualityAssessment(attempted=True, quality="weak"))
    assert classify_violation(evaluation) is None


def test_classify_framework_inconsistency():
    assert classify_violation(_evaluation(consistent=False)) == "framework_inconsistency"


def test_classify_low_honesty_is_rhetorical_evasion():
    assert classify_violation(_evaluation(honesty="low")) == "rhetorical_evasion"


def test_classify_precedence_reports_only_first():
    """Steel-manning outranks every other violation."""
    evaluation = _evaluation(
        steel=QualityAssessment(attempted=False, quality="absent"),
        critique=QualityAssessment(attempted=False, quality="absent"),
        consistent=False,
        honesty="low",
    )
    assert classify_violation(evaluation) == "straw_manning"


def test_classify_self_critique_outranks_consistency():
    evaluation = _evaluation(
        critique=QualityAssessment(attempted=False, quality="absent"),
        consistent=False,
        honesty="low",
    )
    assert classify_violation(evaluation) == "missing_self_critique"


def test_framework_info_configured(frameworks):
    assert framework_info(frameworks, "utilitarian").name == "Utilitarian Chair"


def test_framework_info_placeholder_for_unknown(frameworks):
    info = framework_info(frameworks, "care_ethics")
    assert info.name == "Care Ethics Chair"
    assert info.blind_spots == []
