from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ActionBase(BaseModel):
    """Fields shared by every decoded advance action.

    ``missing_fields_message`` is reported when the payload names the action but
    lacks (or mistypes) one of its required fields.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    missing_fields_message: ClassVar[str] = ""


class _TaskRefAction(_ActionBase):
    task_id: int = Field(alias="taskId")

    @field_validator("task_id", mode="before")
    @classmethod
    def _not_bool(cls, value: Any) -> Any:
        # JSON true/false would otherwise coerce to 1/0.
        if isinstance(value, bool):
            raise ValueError("taskId must be a number")
        return value

    @field_validator("task_id")
    @classmethod
    def _non_zero(cls, value: int) -> int:
        # Zero is treated as an absent id.
        if value == 0:
            raise ValueError("taskId is required")
        return value


class CreateAction(_ActionBase):
    missing_fields_message: ClassVar[str] = (
        "Title, description, and assignee are required for task creation."
    )

    action: Literal["create"] = "create"
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    assignee: str = Field(min_length=1)


class UpdateAction(_TaskRefAction):
    missing_fields_message: ClassVar[str] = "TaskId and status are required for update."

    action: Literal["update"] = "update"
    # Any present value is accepted here; the state machine checks it against the
    # valid statuses after existence and authorization.
    status: Any = Field(default=None, validate_default=True)

    @field_validator("status")
    @classmethod
    def _present(cls, value: Any) -> Any:
        if value in (None, False, 0, ""):
            raise ValueError("status is required")
        return value


class ReassignAction(_TaskRefAction):
    missing_fields_message: ClassVar[str] = (
        "TaskId and new assignee are required for reassignment."
    )

    action: Literal["reassign"] = "reassign"
    assignee: str = Field(min_length=1)


Action = CreateAction | UpdateAction | ReassignAction

ACTION_MODELS: dict[str, type[CreateAction] | type[UpdateAction] | type[ReassignAction]] = {
    "create": CreateAction,
    "update": UpdateAction,
    "reassign": ReassignAction,
}


__all__ = [
    "ACTION_MODELS",
    "Action",
    "CreateAction",
    "ReassignAction",
    "UpdateAction",
]
