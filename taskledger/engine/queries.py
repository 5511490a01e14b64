from __future__ import annotations

from taskledger.engine.actions import TASK_NOT_FOUND_MESSAGE
from taskledger.models.task import dump_task, dump_tasks, dumps_compact
from taskledger.state.store import LedgerState

ROUTES = ("list", "task", "balance", "my_tasks")

INVALID_ROUTE_MESSAGE = "Invalid route. Use 'list', 'task <taskId>', 'balance', or 'my_tasks'."


def parse_query(text: str) -> tuple[str, list[str]]:
    """Split an inspect payload into its route keyword and positional params."""
    route, *params = text.split(" ")
    return route, params


def _task_id_from_param(param: str) -> int | None:
    # Expected form is "<prefix>/<id>"; the id is the segment after the first slash.
    segments = param.split("/")
    if len(segments) < 2:
        return None
    raw = segments[1].strip()
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


def run_query(state: LedgerState, text: str, *, sender: str | None) -> str:
    """Answer an inspect request. Read-only; never fails."""
    route, params = parse_query(text)

    if route == "list":
        return dump_tasks(state.tasks.list_tasks())

    if route == "task":
        if not params:
            return INVALID_ROUTE_MESSAGE
        task_id = _task_id_from_param(params[0])
        task = state.tasks.get_task(task_id) if task_id is not None else None
        if task is None:
            return TASK_NOT_FOUND_MESSAGE
        return dump_task(task)

    if route == "balance":
        balance = state.balances.balance_of(sender) if sender else 0
        return dumps_compact({"balance": balance})

    if route == "my_tasks":
        if not sender:
            return dump_tasks([])
        return dump_tasks(
            t for t in state.tasks.list_tasks() if sender in (t.creator, t.assignee)
        )

    return INVALID_ROUTE_MESSAGE


__all__ = ["INVALID_ROUTE_MESSAGE", "ROUTES", "TASK_NOT_FOUND_MESSAGE", "parse_query", "run_query"]
