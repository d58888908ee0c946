from datetime import datetime, timezone
import enum

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from ..core.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    """Task status enumeration"""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class Task(Base):
    """Task model for database"""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)

    status = Column(
        String(20),
        default=TaskStatus.PENDING.value,
        nullable=False,
        index=True
    )
    due_date = Column(DateTime(timezone=True), nullable=False)

    # Ownership; created_by is written once on insert. User ids come from the
    # token, so there is no foreign key to users; the row may not exist locally.
    created_by = Column(Integer, nullable=False, index=True)
    assigned_to = Column(Integer, nullable=True, index=True)

    # Read-only expansions for display fields; None when the user row is missing
    creator = relationship("User", primaryjoin="foreign(Task.created_by) == User.id", viewonly=True)
    assignee = relationship("User", primaryjoin="foreign(Task.assigned_to) == User.id", viewonly=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    def to_dict(self) -> dict:
        """Flat snapshot used in event payloads and audit details"""
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
        }

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"
