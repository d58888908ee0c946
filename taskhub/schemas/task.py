"""
Pydantic schemas for tasks.

The wire format is camelCase (``dueDate``, ``assignedTo``); snake_case names
are accepted on input as well.
"""
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def parse_due_date(value: Any) -> datetime:
    """
    Parse a due date given as datetime, date or ISO-8601 text.

    Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid due date: {value!r}")
    else:
        raise ValueError(f"Invalid due date: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TaskCreate(CamelModel):
    """Schema for creating a task"""
    title: str = Field(..., min_length=1, max_length=200, description="Task title")
    description: str = Field(..., min_length=1, description="Task description")
    due_date: datetime = Field(..., description="Task due date")
    assigned_to: Optional[int] = Field(None, description="User ID the task is assigned to")

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value):
        return parse_due_date(value)


class TaskUpdate(CamelModel):
    """Schema for updating a task; the creator is not updatable"""
    title: Optional[str] = Field(None, min_length=1, max_length=200, description="Task title")
    description: Optional[str] = Field(None, min_length=1, description="Task description")
    status: Optional[str] = Field(None, description="Task status")
    due_date: Optional[datetime] = Field(None, description="Task due date")
    assigned_to: Optional[int] = Field(None, description="User ID the task is assigned to")

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value):
        return None if value is None else parse_due_date(value)


class StatusUpdate(CamelModel):
    """Schema for a status change; the value is checked against TaskStatus by the orchestrator"""
    status: str = Field(..., description="New task status")


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class TaskResponse(CamelModel):
    """Schema for task response"""
    id: int = Field(..., description="Task ID")
    title: str
    description: str
    status: str
    due_date: datetime
    created_by: Optional[UserSummary] = Field(None, description="Task creator")
    assigned_to: Optional[UserSummary] = Field(None, description="Task assignee")
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_task(cls, task) -> "TaskResponse":
        """Build the response with creator and assignee expanded to display fields"""
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            due_date=task.due_date,
            created_by=UserSummary.model_validate(task.creator) if task.creator else None,
            assigned_to=UserSummary.model_validate(task.assignee) if task.assignee else None,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class MessageResponse(BaseModel):
    message: str
