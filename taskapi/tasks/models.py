from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


class Task(BaseModel):
    """A named work item with a completion flag.

    - `id` is assigned by the store on insert and is always positive
    - Tasks are immutable once stored; equality is over (id, name, completed)
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    name: str
    completed: bool


class TaskPayload(BaseModel):
    """Incoming task body as decoded from the wire.

    Every field is optional here so that an absent or null `completed` can be
    told apart from `false`; TaskService re-validates to the required shape.
    A client-supplied `id` is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    name: StrictStr | None = None
    completed: StrictBool | None = None


class ErrorResult(BaseModel):
    message: str


__all__ = ["Task", "TaskPayload", "ErrorResult"]
