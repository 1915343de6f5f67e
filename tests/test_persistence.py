"""Tests for duelogic/persistence.py (in-memory store)."""

from duelogic.models import ChairInterruptCandidate
from duelogic.parsing import default_evaluation
from duelogic.persistence import InMemoryDebateStore


def _candidate(interrupter, interrupted, reason="direct_challenge") -> ChairInterruptCandidate:
    return ChairInterruptCandidate(
        interrupting_chair=interrupter,
        interrupted_chair=interrupted,
        trigger_reason=reason,
        trigger_content="no reasonable person would",
        urgency=0.9,
    )


async def test_evaluation_ids_are_sequential(utilitarian_chair):
    store = InMemoryDebateStore()
    first = await store.save_evaluation("d1", 1, "chair_1", default_evaluation())
    second = await store.save_evaluation("d1", 2, "chair_2", default_evaluation())
    assert (first, second) == (1, 2)


async def test_evaluations_scoped_by_debate():
    store = InMemoryDebateStore()
    await store.save_evaluation("d1", 1, "chair_1", default_evaluation())
    await store.save_evaluation("d2", 1, "chair_1", default_evaluation())

    records = await store.get_evaluations("d1")

    assert len(records) == 1
    assert records[0].debate_id == "d1"


async def test_evaluations_grouped_by_chair():
    store = InMemoryDebateStore()
    await store.save_evaluation("d1", 1, "chair_1", default_evaluation())
    await store.save_evaluation("d1", 2, "chair_2", default_evaluation())
    await store.save_evaluation("d1", 3, "chair_1", default_evaluation())

    grouped = await store.get_evaluations_by_chair("d1")

    assert {k: len(v) for k, v in grouped.items()} == {"chair_1": 2, "chair_2": 1}


async def test_interruptions_ordered_by_timestamp(utilitarian_chair, virtue_chair):
    store = InMemoryDebateStore()
    await store.save_interruption("d1", _candidate(utilitarian_chair, virtue_chair), timestamp_ms=2000)
    await store.save_interruption("d1", _candidate(virtue_chair, utilitarian_chair), timestamp_ms=1000)

    records = await store.get_interruptions("d1")

    assert [r.timestamp_ms for r in records] == [1000, 2000]
    assert records[0].interrupting_chair == "chair_2"


async def test_interruption_counts(utilitarian_chair, virtue_chair, deontological_chair):
    store = InMemoryDebateStore()
    await store.save_interruption("d1", _candidate(utilitarian_chair, virtue_chair, "pivotal_point"), 1)
    await store.save_interruption("d1", _candidate(utilitarian_chair, deontological_chair), 2)

    counts = await store.get_interruption_counts("d1")

    assert counts["made"] == {"chair_1": 2}
    assert counts["received"] == {"chair_2": 1, "chair_3": 1}
    assert counts["by_reason"] == {"pivotal_point": 1, "direct_challenge": 1}


async def test_mark_responded(utilitarian_chair, virtue_chair):
    store = InMemoryDebateStore()
    interruption_id = await store.save_interruption("d1", _candidate(utilitarian_chair, virtue_chair), 1)

    await store.mark_interruption_responded(interruption_id)

    assert (await store.get_interruptions("d1"))[0].response_given is True


async def test_mark_unknown_interruption_logs(caplog):
    store = InMemoryDebateStore()
    await store.mark_interruption_responded(99)
    assert "99 not found" in caplog.text
