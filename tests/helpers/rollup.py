from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any

from taskledger.models.rollup import FinishStatus, RollupRequest
from taskledger.rollup.codec import str_to_hex
from taskledger.rollup.interface import RollupServer


class InMemoryRollupServer(RollupServer):
    """Serves queued requests and records every output the dispatcher emits."""

    def __init__(self, requests: Iterable[RollupRequest] = ()) -> None:
        self._pending: deque[RollupRequest] = deque(requests)
        self.finish_calls: list[FinishStatus] = []
        self.notices: list[str] = []
        self.reports: list[str] = []

    def push(self, request: RollupRequest) -> None:
        self._pending.append(request)

    def finish(self, status: FinishStatus) -> RollupRequest | None:
        self.finish_calls.append(status)
        if not self._pending:
            return None
        return self._pending.popleft()

    def add_notice(self, text: str) -> None:
        self.notices.append(text)

    def add_report(self, text: str) -> None:
        self.reports.append(text)


def advance_request(
    sender: str, payload: str, *, input_index: int = 0, timestamp: int = 1_700_000_000
) -> RollupRequest:
    data: dict[str, Any] = {
        "metadata": {
            "msg_sender": sender,
            "epoch_index": 0,
            "input_index": input_index,
            "block_number": input_index,
            "timestamp": timestamp,
        },
        "payload": str_to_hex(payload),
    }
    return RollupRequest(request_type="advance_state", data=data)


def inspect_request(payload: str, sender: str | None = None) -> RollupRequest:
    data: dict[str, Any] = {"payload": str_to_hex(payload)}
    if sender is not None:
        data["metadata"] = {"msg_sender": sender}
    return RollupRequest(request_type="inspect_state", data=data)


__all__ = ["InMemoryRollupServer", "advance_request", "inspect_request"]
