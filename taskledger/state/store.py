from __future__ import annotations

from dataclasses import dataclass, field

from taskledger.models.task import STATUS_OPEN, Task, TaskStatus


class TaskStore:
    """In-memory task records keyed by a sequential id.

    Ids start at 1 and only increase. Tasks are never removed. Listing is in
    creation order (dict insertion order).
    """

    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self._last_id = 0

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def last_id(self) -> int:
        return self._last_id

    def create_task(
        self,
        *,
        title: str,
        description: str,
        creator: str,
        assignee: str,
        created_at: int,
    ) -> Task:
        self._last_id += 1
        task = Task(
            id=self._last_id,
            title=title,
            description=description,
            creator=creator,
            assignee=assignee,
            status=STATUS_OPEN,
            created_at=created_at,
        )
        self._tasks[task.id] = task
        return task

    def get_task(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def set_status(self, task_id: int, status: TaskStatus) -> Task:
        return self._replace(task_id, status=status)

    def set_assignee(self, task_id: int, assignee: str) -> Task:
        return self._replace(task_id, assignee=assignee)

    def _replace(self, task_id: int, **changes: object) -> Task:
        current = self._tasks[task_id]
        updated = current.model_copy(update=changes)
        self._tasks[task_id] = updated
        return updated


class BalanceLedger:
    """Token balance per identity; identities never credited hold 0."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def credit(self, identity: str, amount: int) -> int:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        new_balance = self._balances.get(identity, 0) + amount
        self._balances[identity] = new_balance
        return new_balance

    def snapshot(self) -> dict[str, int]:
        return dict(self._balances)


@dataclass(slots=True)
class LedgerState:
    """Authoritative application state rebuilt by replaying requests in order."""

    tasks: TaskStore = field(default_factory=TaskStore)
    balances: BalanceLedger = field(default_factory=BalanceLedger)


__all__ = ["BalanceLedger", "LedgerState", "TaskStore"]
