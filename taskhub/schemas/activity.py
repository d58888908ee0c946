"""
Pydantic schemas for notifications and audit logs.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from .task import CamelModel, UserSummary


class NotificationResponse(CamelModel):
    id: int
    user: int = Field(..., description="Recipient user ID")
    message: str
    task: Optional[int] = Field(None, description="Task that triggered the notification")
    created_at: datetime

    @classmethod
    def from_notification(cls, notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            user=notification.user_id,
            message=notification.message,
            task=notification.task_id,
            created_at=notification.created_at,
        )


class AuditTaskSummary(CamelModel):
    id: int
    title: Optional[str] = Field(None, description="Null once the task has been deleted")


class AuditLogResponse(CamelModel):
    id: int
    user: Optional[UserSummary] = None
    action: str
    task: Optional[AuditTaskSummary] = None
    timestamp: datetime
    details: Optional[str] = None

    @classmethod
    def from_entry(cls, entry, task_title: Optional[str] = None) -> "AuditLogResponse":
        return cls(
            id=entry.id,
            user=UserSummary.model_validate(entry.actor) if entry.actor else None,
            action=entry.action,
            task=AuditTaskSummary(id=entry.task_id, title=task_title) if entry.task_id is not None else None,
            timestamp=entry.timestamp,
            details=entry.details,
        )
