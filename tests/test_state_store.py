from __future__ import annotations

import logging

import pytest
from fakes import make_record

from pyfiremap.models import Prediction
from pyfiremap.state import ChangeSource, PredictionStore, StoreChange
from pyfiremap.state.policy import should_apply_replace


def _predictions(*addresses: str) -> list[Prediction]:
    return [Prediction.model_validate(make_record(a)) for a in addresses]


def test_store_starts_empty() -> None:
    store = PredictionStore()
    assert store.snapshot() == ()
    assert len(store) == 0
    assert store.last_applied_sequence is None


def test_replace_all_mirrors_last_fetch_without_merging() -> None:
    store = PredictionStore()
    l1 = _predictions("a", "b")
    l2 = _predictions("c")

    assert store.replace_all(l1, sequence=1) is True
    assert store.replace_all(l2, sequence=2) is True

    assert list(store.snapshot()) == l2


def test_append_keeps_existing_records_and_allows_duplicates() -> None:
    store = PredictionStore()
    fetched = _predictions("a")
    store.replace_all(fetched, sequence=1)

    duplicate = Prediction.model_validate(make_record("a"))
    store.append(duplicate, sequence=2)

    snapshot = store.snapshot()
    assert len(snapshot) == 2
    assert snapshot[0] == snapshot[1]


def test_snapshot_is_isolated_from_later_mutation() -> None:
    store = PredictionStore()
    store.replace_all(_predictions("a"), sequence=1)
    before = store.snapshot()

    store.append(_predictions("b")[0], sequence=2)

    assert len(before) == 1
    assert len(store.snapshot()) == 2


def test_stale_fetch_is_dropped_by_default() -> None:
    store = PredictionStore()
    store.replace_all(_predictions("new"), sequence=5)

    assert store.replace_all(_predictions("old"), sequence=3) is False
    assert [p.address for p in store.snapshot()] == ["new"]
    assert store.last_applied_sequence == 5


def test_fetch_issued_before_submit_cannot_wipe_appended_record() -> None:
    store = PredictionStore()
    store.append(_predictions("submitted")[0], sequence=2)

    assert store.replace_all(_predictions("older-fetch"), sequence=1) is False
    assert [p.address for p in store.snapshot()] == ["submitted"]


def test_last_write_wins_when_stale_discard_disabled() -> None:
    store = PredictionStore(discard_stale=False)
    store.replace_all(_predictions("new"), sequence=5)

    assert store.replace_all(_predictions("old"), sequence=3) is True
    assert [p.address for p in store.snapshot()] == ["old"]
    assert store.last_applied_sequence == 5


def test_listeners_receive_change_after_each_mutation() -> None:
    store = PredictionStore()
    changes: list[StoreChange] = []
    store.subscribe(changes.append)

    store.replace_all(_predictions("a"), sequence=1)
    store.append(_predictions("b")[0], sequence=2)
    store.replace_all(_predictions("stale"), sequence=1)

    assert [c.source for c in changes] == [ChangeSource.FETCH, ChangeSource.SUBMIT]
    assert [c.sequence for c in changes] == [1, 2]
    assert [p.address for p in changes[-1].predictions] == ["a", "b"]

    store.unsubscribe(changes.append)
    store.replace_all(_predictions("c"), sequence=3)
    assert len(changes) == 2


def test_failing_listener_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    store = PredictionStore()
    seen: list[int] = []

    def broken(_change: StoreChange) -> None:
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda change: seen.append(change.sequence))

    with caplog.at_level(logging.ERROR, logger="pyfiremap.state.store"):
        store.replace_all(_predictions("a"), sequence=1)

    assert seen == [1]
    assert "Store listener failed" in caplog.text


@pytest.mark.parametrize(
    ("last", "incoming", "discard", "expected"),
    [
        (None, 1, True, True),
        (1, 2, True, True),
        (2, 2, True, False),
        (3, 2, True, False),
        (3, 2, False, True),
    ],
)
def test_should_apply_replace(last: int | None, incoming: int, discard: bool, expected: bool) -> None:
    assert (
        should_apply_replace(
            last_applied_sequence=last,
            incoming_sequence=incoming,
            discard_stale=discard,
        )
        is expected
    )
