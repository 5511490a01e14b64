from __future__ import annotations

import pydantic
import pytest

from taskledger.state.store import BalanceLedger, LedgerState, TaskStore


def _create(store: TaskStore, title: str = "T", assignee: str = "bob") -> int:
    task = store.create_task(
        title=title,
        description="D",
        creator="alice",
        assignee=assignee,
        created_at=1_700_000_000,
    )
    return task.id


def test_ids_are_sequential_from_one() -> None:
    store = TaskStore()
    ids = [_create(store, title=f"T{i}") for i in range(5)]
    assert ids == [1, 2, 3, 4, 5]
    assert store.last_id == 5
    assert len(store) == 5


def test_new_task_defaults_and_lookup() -> None:
    store = TaskStore()
    tid = _create(store)

    task = store.get_task(tid)
    assert task is not None
    assert task.status == "Open"
    assert task.creator == "alice"
    assert task.assignee == "bob"
    assert task.created_at == 1_700_000_000
    assert store.get_task(99) is None


def test_list_preserves_creation_order() -> None:
    store = TaskStore()
    for title in ("First", "Second", "Third"):
        _create(store, title=title)
    store.set_status(1, "Completed")

    assert [t.title for t in store.list_tasks()] == ["First", "Second", "Third"]


def test_records_are_frozen_and_updates_replace_them() -> None:
    store = TaskStore()
    tid = _create(store)
    before = store.get_task(tid)
    assert before is not None

    with pytest.raises(pydantic.ValidationError):
        before.status = "Completed"  # type: ignore[misc]

    after = store.set_assignee(tid, "carol")
    assert after.assignee == "carol"
    assert before.assignee == "bob"
    assert store.get_task(tid) == after


def test_balance_defaults_to_zero_and_accumulates() -> None:
    ledger = BalanceLedger()
    assert ledger.balance_of("nobody") == 0

    assert ledger.credit("bob", 10) == 10
    assert ledger.credit("bob", 10) == 20
    assert ledger.balance_of("bob") == 20
    assert ledger.snapshot() == {"bob": 20}


def test_negative_credit_is_refused() -> None:
    ledger = BalanceLedger()
    with pytest.raises(ValueError):
        ledger.credit("bob", -1)
    assert ledger.balance_of("bob") == 0


def test_ledger_states_do_not_share_stores() -> None:
    a = LedgerState()
    b = LedgerState()
    _create(a.tasks)
    a.balances.credit("bob", 10)

    assert len(b.tasks) == 0
    assert b.balances.balance_of("bob") == 0
