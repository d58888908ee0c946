from sqlalchemy import Column, DateTime, Integer, Text

from ..core.database import Base
from .task import utc_now


class Notification(Base):
    """In-app notification, created when a task is assigned to a user"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    message = Column(Text, nullable=False)
    # Not a foreign key: the notification outlives the task
    task_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id})>"
