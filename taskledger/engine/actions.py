"""Advance-request decoding and the task/reward state machine.

Every action is validated in full before the first store write, so a rejected
request leaves ``LedgerState`` untouched.
"""

from __future__ import annotations

import json

import pydantic

from taskledger.engine.results import (
    Accepted,
    ActionResult,
    AuthorizationError,
    LedgerError,
    NotFoundError,
    Rejected,
    ValidationError,
)
from taskledger.models.actions import (
    ACTION_MODELS,
    Action,
    CreateAction,
    ReassignAction,
    UpdateAction,
)
from taskledger.models.task import STATUS_COMPLETED, VALID_STATUSES, Task
from taskledger.state.store import LedgerState

TASK_REWARD = 10

INVALID_ACTION_MESSAGE = "Invalid action. Use 'create', 'update', or 'reassign'."
INVALID_STATUS_MESSAGE = "Invalid status. Use 'Open', 'In Progress', or 'Completed'."
TASK_NOT_FOUND_MESSAGE = "Task does not exist."


def decode_action(text: str) -> Action | LedgerError:
    """Parse an advance payload into a tagged action, or a ``ValidationError``."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        return ValidationError(f"Malformed payload: {exc.msg}.")
    if not isinstance(raw, dict):
        return ValidationError("Malformed payload: expected a JSON object.")

    tag = raw.get("action")
    model = ACTION_MODELS.get(tag) if isinstance(tag, str) else None
    if model is None:
        return ValidationError(INVALID_ACTION_MESSAGE)
    try:
        return model.model_validate(raw)
    except pydantic.ValidationError:
        return ValidationError(model.missing_fields_message)


def apply_action(
    state: LedgerState, action: Action, *, sender: str, timestamp: int
) -> ActionResult:
    if isinstance(action, CreateAction):
        return _create(state, action, sender=sender, timestamp=timestamp)
    if isinstance(action, UpdateAction):
        return _update(state, action, sender=sender)
    if isinstance(action, ReassignAction):
        return _reassign(state, action, sender=sender)
    return Rejected(ValidationError(INVALID_ACTION_MESSAGE))


def process_advance(state: LedgerState, text: str, *, sender: str, timestamp: int) -> ActionResult:
    decoded = decode_action(text)
    if isinstance(decoded, LedgerError):
        return Rejected(decoded)
    return apply_action(state, decoded, sender=sender, timestamp=timestamp)


def _create(state: LedgerState, action: CreateAction, *, sender: str, timestamp: int) -> Accepted:
    task = state.tasks.create_task(
        title=action.title,
        description=action.description,
        creator=sender,
        assignee=action.assignee,
        created_at=timestamp,
    )
    return Accepted(f"Task created with ID: {task.id}")


def _existing_task(state: LedgerState, task_id: int) -> Task | LedgerError:
    task = state.tasks.get_task(task_id)
    if task is None:
        return NotFoundError(TASK_NOT_FOUND_MESSAGE)
    return task


def _update(state: LedgerState, action: UpdateAction, *, sender: str) -> ActionResult:
    task = _existing_task(state, action.task_id)
    if isinstance(task, LedgerError):
        return Rejected(task)
    if sender not in (task.creator, task.assignee):
        return Rejected(
            AuthorizationError("Only the task creator or assignee can update the task.")
        )
    if action.status not in VALID_STATUSES:
        return Rejected(ValidationError(INVALID_STATUS_MESSAGE))

    previous = task.status
    task = state.tasks.set_status(task.id, action.status)
    # Reward only on a transition into Completed; leaving Completed keeps it.
    if task.status == STATUS_COMPLETED and previous != STATUS_COMPLETED:
        state.balances.credit(task.assignee, TASK_REWARD)
        return Accepted(
            f"Task {task.id} marked as Completed. {task.assignee} earned {TASK_REWARD} tokens.",
            reward=TASK_REWARD,
        )
    return Accepted(f"Task {task.id} updated to status: {task.status}")


def _reassign(state: LedgerState, action: ReassignAction, *, sender: str) -> ActionResult:
    task = _existing_task(state, action.task_id)
    if isinstance(task, LedgerError):
        return Rejected(task)
    if sender != task.creator:
        return Rejected(AuthorizationError("Only the task creator can reassign the task."))

    task = state.tasks.set_assignee(task.id, action.assignee)
    return Accepted(f"Task {task.id} reassigned to {task.assignee}")


__all__ = [
    "INVALID_ACTION_MESSAGE",
    "INVALID_STATUS_MESSAGE",
    "TASK_NOT_FOUND_MESSAGE",
    "TASK_REWARD",
    "apply_action",
    "decode_action",
    "process_advance",
]
