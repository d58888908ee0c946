"""Task store, side-effect sinks and the mutation orchestrator."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.database import get_db
from .orchestrator import TaskOrchestrator
from .sinks import AuditSink, NotificationSink
from .task_store import TaskStore


def get_notification_sink(request: Request, db: Session = Depends(get_db)) -> NotificationSink:
    return NotificationSink(db, publisher=getattr(request.app.state, "publisher", None))


def get_audit_sink(db: Session = Depends(get_db)) -> AuditSink:
    return AuditSink(db)


def get_orchestrator(
    db: Session = Depends(get_db),
    notifications: NotificationSink = Depends(get_notification_sink),
    audit: AuditSink = Depends(get_audit_sink),
) -> TaskOrchestrator:
    """Orchestrator for one request; notification runs before audit."""
    return TaskOrchestrator(TaskStore(db), hooks=[notifications.on_task_event, audit.on_task_event])
