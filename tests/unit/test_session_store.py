from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal

import pytest

from src.sheet_import.errors import RowNotFound, SessionNotFound, SheetNotFound
from src.sheet_import.schemas.preview import RejectedRecord, SheetOutcome, ValidatedRecord
from src.sheet_import.services.session_store import ValidationSessionStore


def _outcome(sheet_name="Sheet1", valid=(2, 3), invalid=(4,)) -> SheetOutcome:
    return SheetOutcome(
        sheet_name=sheet_name,
        valid_rows=[
            ValidatedRecord(name=f"row{n}", amount=Decimal("10"), date=date(2024, 3, 1), row_number=n)
            for n in valid
        ],
        invalid_rows=[
            RejectedRecord(name="", row_number=n, errors=["Empty name not allowed"])
            for n in invalid
        ],
    )


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_get_unknown_session_raises():
    store = ValidationSessionStore()
    with pytest.raises(SessionNotFound):
        store.get("nope")


def test_replace_and_get_returns_copies():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome()])

    first = store.get("s1")
    first[0].valid_rows.clear()

    assert len(store.get("s1")[0].valid_rows) == 2


def test_replace_rejects_duplicate_sheet_names():
    store = ValidationSessionStore()
    with pytest.raises(ValueError):
        store.replace("s1", [_outcome("A"), _outcome("A")])


def test_replace_overwrites_previous_preview():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome("Old")])
    store.replace("s1", [_outcome("New")])
    assert [o.sheet_name for o in store.get("s1")] == ["New"]


def test_sessions_are_isolated():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome("A")])
    store.replace("s2", [_outcome("B")])
    store.remove_row("s1", "A", 2)

    assert store.get_sheet("s2", "B").row_count == 3
    assert store.get_sheet("s1", "A").row_count == 2


def test_put_sheet_adds_or_replaces_one_sheet():
    store = ValidationSessionStore()
    store.put_sheet("s1", _outcome("A"))
    store.put_sheet("s1", _outcome("B"))
    store.put_sheet("s1", _outcome("A", valid=(2,), invalid=()))

    sheets = store.get("s1")
    assert [o.sheet_name for o in sheets] == ["A", "B"]
    assert sheets[0].row_count == 1


def test_remove_row_from_valid_and_invalid_lists():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome()])

    after_valid = store.remove_row("s1", "Sheet1", 3)
    assert [r.row_number for r in after_valid.valid_rows] == [2]

    after_invalid = store.remove_row("s1", "Sheet1", 4)
    assert after_invalid.invalid_rows == []
    assert store.get_sheet("s1", "Sheet1").row_count == 1


def test_remove_missing_row_leaves_sheet_unchanged():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome()])
    before = store.get_sheet("s1", "Sheet1")

    with pytest.raises(RowNotFound):
        store.remove_row("s1", "Sheet1", 99)

    assert store.get_sheet("s1", "Sheet1") == before


def test_remove_row_from_unknown_sheet():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome()])
    with pytest.raises(SheetNotFound):
        store.remove_row("s1", "Other", 2)


def test_consume_sheet_removes_it_once():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome("A"), _outcome("B")])

    consumed = store.consume_sheet("s1", "A")
    assert consumed.sheet_name == "A"
    assert [o.sheet_name for o in store.get("s1")] == ["B"]

    with pytest.raises(SheetNotFound):
        store.consume_sheet("s1", "A")


def test_concurrent_consume_has_a_single_winner():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome()])
    barrier = threading.Barrier(8)
    results = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        try:
            store.consume_sheet("s1", "Sheet1")
            outcome = "ok"
        except SheetNotFound:
            outcome = "missing"
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("missing") == 7


def test_restore_puts_sheet_back_in_place():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome("A"), _outcome("B"), _outcome("C")])

    checkout = store.checkout_sheet("s1", "B")
    assert store.restore_sheet(checkout) is True
    assert [o.sheet_name for o in store.get("s1")] == ["A", "B", "C"]


def test_restore_skipped_after_new_upload():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome("A")])
    checkout = store.checkout_sheet("s1", "A")

    store.replace("s1", [_outcome("Fresh")])

    assert store.restore_sheet(checkout) is False
    assert [o.sheet_name for o in store.get("s1")] == ["Fresh"]


def test_restore_skipped_when_session_discarded():
    store = ValidationSessionStore()
    store.replace("s1", [_outcome("A")])
    checkout = store.checkout_sheet("s1", "A")
    assert store.discard("s1") is True

    assert store.restore_sheet(checkout) is False
    with pytest.raises(SessionNotFound):
        store.get("s1")


def test_sliding_ttl_expiry():
    clock = FakeClock()
    store = ValidationSessionStore(ttl_seconds=60, clock=clock)
    store.replace("s1", [_outcome()])

    clock.now = 50
    store.get("s1")
    clock.now = 100
    assert store.get_sheet("s1", "Sheet1").row_count == 3

    clock.now = 161
    with pytest.raises(SessionNotFound):
        store.get("s1")


def test_purge_expired_drops_only_idle_sessions():
    clock = FakeClock()
    store = ValidationSessionStore(ttl_seconds=60, clock=clock)
    store.replace("idle", [_outcome()])
    clock.now = 40
    store.replace("active", [_outcome()])

    clock.now = 70
    assert store.purge_expired() == 1
    assert len(store) == 1
    assert store.get("active")
