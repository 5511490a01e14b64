from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TaskStatus = Literal["Open", "In Progress", "Completed"]

STATUS_OPEN: TaskStatus = "Open"
STATUS_IN_PROGRESS: TaskStatus = "In Progress"
STATUS_COMPLETED: TaskStatus = "Completed"
VALID_STATUSES: tuple[TaskStatus, ...] = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_COMPLETED)


class Task(BaseModel):
    """One unit of assignable work tracked by the ledger.

    - Records are frozen; stores replace them with updated copies
    - ``created_at`` is serialized as ``createdAt``
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(gt=0)
    title: str
    description: str
    creator: str
    assignee: str
    status: TaskStatus = STATUS_OPEN
    created_at: int = Field(alias="createdAt")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def dumps_compact(value: Any) -> str:
    """Serialize to JSON with no whitespace between tokens."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def dump_task(task: Task) -> str:
    return dumps_compact(task.to_json_dict())


def dump_tasks(tasks: Iterable[Task]) -> str:
    return dumps_compact([t.to_json_dict() for t in tasks])


__all__ = [
    "STATUS_COMPLETED",
    "STATUS_IN_PROGRESS",
    "STATUS_OPEN",
    "Task",
    "TaskStatus",
    "VALID_STATUSES",
    "dump_task",
    "dump_tasks",
    "dumps_compact",
]
