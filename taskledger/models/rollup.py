from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

RequestType = Literal["advance_state", "inspect_state"]
FinishStatus = Literal["accept", "reject"]


class RollupRequest(BaseModel):
    """Request envelope returned by the rollup server's ``/finish`` endpoint.

    ``data`` is kept loose here and validated per request type by the dispatcher.
    """

    request_type: str
    data: dict[str, Any] = Field(default_factory=dict)


class AdvanceMetadata(BaseModel):
    msg_sender: str
    epoch_index: int = 0
    input_index: int = 0
    block_number: int = 0
    timestamp: int = 0


class AdvanceData(BaseModel):
    metadata: AdvanceMetadata
    payload: str


class InspectMetadata(BaseModel):
    msg_sender: str | None = None


class InspectData(BaseModel):
    payload: str
    metadata: InspectMetadata | None = None


class OutputPayload(BaseModel):
    """Body of ``/notice`` and ``/report`` calls; ``payload`` is 0x-prefixed hex."""

    payload: str


__all__ = [
    "AdvanceData",
    "AdvanceMetadata",
    "FinishStatus",
    "InspectData",
    "InspectMetadata",
    "OutputPayload",
    "RequestType",
    "RollupRequest",
]
