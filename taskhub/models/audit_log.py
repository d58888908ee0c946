import enum

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from ..core.database import Base
from .task import utc_now


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditLog(Base):
    """Append-only record of a task mutation. Rows are never updated or deleted."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    # Actor id from the token; no foreign key so entries never depend on a users row
    user_id = Column(Integer, nullable=False, index=True)
    action = Column(String(10), nullable=False, index=True)
    # Plain column so DELETE entries keep pointing at the removed task
    task_id = Column(Integer, nullable=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    details = Column(Text, nullable=True)

    actor = relationship("User", primaryjoin="foreign(AuditLog.user_id) == User.id", viewonly=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', task_id={self.task_id})>"
