import secrets
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ALPHABET = string.digits + string.ascii_lowercase


class Status(str, Enum):
    OPEN = "open"
    REVIEW = "review"
    DONE = "done"


# Fixed bucket order for listing and lookup.
STATUSES = (Status.OPEN, Status.REVIEW, Status.DONE)


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Task(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str
    text: str
    category: str = ""
    priority: Priority = Priority.LOW
    status: Status = Status.OPEN
    comment: Optional[str] = None
    screenshots: list[str] = Field(default_factory=list)
    created: str
    completed: Optional[str] = None


class CreateTaskRequest(BaseModel):
    text: str = ""
    category: Optional[str] = None
    priority: Optional[Priority] = None
    screenshots: list[str] = Field(default_factory=list)

    @field_validator("category", "priority", mode="before")
    @classmethod
    def blank_means_unset(cls, value):
        # "" defers to the tag parsed from the text.
        return None if value == "" else value


class BatchRequest(BaseModel):
    lines: list[str] = Field(default_factory=list)


class ScreenshotRequest(BaseModel):
    data: str


class UpdateTaskRequest(BaseModel):
    """
    Partial update. Only fields present in the request body are applied, so
    callers read them with model_dump(exclude_unset=True). `comment` may be
    set to null; the other fields may be omitted but not nulled.
    """

    text: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[Priority] = None
    comment: Optional[str] = None
    status: Optional[Status] = None

    @field_validator("text", "category", "priority", "status", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


def now_iso() -> str:
    """UTC timestamp in the `2024-05-01T12:00:00.000Z` form."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _base36(number: int) -> str:
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits)) or "0"


def new_task_id() -> str:
    """Millisecond clock in base 36 followed by five random base-36 chars."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(5))
    return _base36(int(time.time() * 1000)) + suffix
