"""Local stand-in for the rollup coordinator.

Queues advance/inspect inputs submitted over HTTP and serves them one at a time
through ``/finish``, collecting the notices and reports the dispatcher emits.
Intended for local development and end-to-end tests only.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, Field

from taskledger.models.rollup import FinishStatus, OutputPayload, RequestType
from taskledger.observability import configure_uvicorn_logging, get_json_logger
from taskledger.rollup.codec import PayloadDecodeError, hex_to_str, str_to_hex


class AdvanceInput(BaseModel):
    sender: str = Field(min_length=1)
    payload: str
    timestamp: int | None = None


class InspectInput(BaseModel):
    payload: str
    sender: str | None = None


class FinishRequest(BaseModel):
    status: FinishStatus


@dataclass(slots=True)
class InputRecord:
    index: int
    request_type: RequestType
    data: dict[str, Any]
    status: str = "pending"
    notices: list[str] = field(default_factory=list)
    reports: list[str] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "request_type": self.request_type,
            "status": self.status,
            "notices": list(self.notices),
            "reports": list(self.reports),
        }


class RollupQueue:
    """Ordered inputs plus the one currently handed out by ``/finish``."""

    def __init__(self) -> None:
        self.inputs: list[InputRecord] = []
        self._pending: deque[int] = deque()
        self._advance_count = 0
        self.current: InputRecord | None = None

    def enqueue_advance(self, body: AdvanceInput) -> InputRecord:
        input_index = self._advance_count
        self._advance_count += 1
        timestamp = body.timestamp if body.timestamp is not None else int(time.time())
        data = {
            "metadata": {
                "msg_sender": body.sender,
                "epoch_index": 0,
                "input_index": input_index,
                "block_number": input_index,
                "timestamp": timestamp,
            },
            "payload": str_to_hex(body.payload),
        }
        return self._append("advance_state", data)

    def enqueue_inspect(self, body: InspectInput) -> InputRecord:
        data: dict[str, Any] = {"payload": str_to_hex(body.payload)}
        if body.sender is not None:
            data["metadata"] = {"msg_sender": body.sender}
        return self._append("inspect_state", data)

    def _append(self, request_type: RequestType, data: dict[str, Any]) -> InputRecord:
        record = InputRecord(index=len(self.inputs), request_type=request_type, data=data)
        self.inputs.append(record)
        self._pending.append(record.index)
        return record

    def finish(self, status: FinishStatus) -> InputRecord | None:
        if self.current is not None:
            self.current.status = status
            self.current = None
        if not self._pending:
            return None
        self.current = self.inputs[self._pending.popleft()]
        return self.current


def create_app(queue: RollupQueue | None = None) -> FastAPI:
    app = FastAPI()
    configure_uvicorn_logging()
    logger = get_json_logger("taskledger.devserver")
    rollup = queue or RollupQueue()
    app.state.rollup = rollup

    @app.post("/advance")
    async def advance(body: AdvanceInput) -> dict[str, int]:
        record = rollup.enqueue_advance(body)
        logger.info(
            "advance queued",
            extra={"event": "advance_queued", "sender": body.sender, "kv": {"index": record.index}},
        )
        return {"index": record.index}

    @app.post("/inspect")
    async def inspect(body: InspectInput) -> dict[str, int]:
        record = rollup.enqueue_inspect(body)
        return {"index": record.index}

    @app.post("/finish")
    async def finish(body: FinishRequest, response: Response) -> dict[str, Any] | None:
        record = rollup.finish(body.status)
        if record is None:
            response.status_code = 202
            return None
        return {"request_type": record.request_type, "data": record.data}

    def _attach(kind: str, body: OutputPayload) -> dict[str, int]:
        record = rollup.current
        if record is None:
            raise HTTPException(status_code=400, detail="no request is being processed")
        try:
            text = hex_to_str(body.payload)
        except PayloadDecodeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        outputs = record.notices if kind == "notice" else record.reports
        outputs.append(text)
        return {"index": len(outputs) - 1}

    @app.post("/notice")
    async def notice(body: OutputPayload) -> dict[str, int]:
        return _attach("notice", body)

    @app.post("/report")
    async def report(body: OutputPayload) -> dict[str, int]:
        return _attach("report", body)

    @app.get("/inputs/{index}")
    async def get_input(index: int) -> dict[str, Any]:
        if index < 0 or index >= len(rollup.inputs):
            raise HTTPException(status_code=404, detail="input not found")
        return rollup.inputs[index].summary()

    return app


__all__ = ["AdvanceInput", "InputRecord", "InspectInput", "RollupQueue", "create_app"]
