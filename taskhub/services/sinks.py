"""
Side-effect sinks for task mutations.

Both sinks are best-effort: a failed write is rolled back and logged, and the
caller carries on. The task mutation that triggered them is already
committed and stays committed.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from ..core.rabbitmq import RabbitMQPublisher
from ..models.audit_log import AuditAction, AuditLog
from ..models.notification import Notification
from ..models.task import Task
from .events import TaskEvent

logger = logging.getLogger(__name__)


class NotificationSink:
    """Creates in-app notifications for assignees and optionally fans them out to RabbitMQ"""

    def __init__(self, db: Session, publisher: Optional[RabbitMQPublisher] = None):
        self.db = db
        self.publisher = publisher

    def record(self, user_id: int, message: str, task_id: Optional[int] = None) -> Optional[Notification]:
        """Store a notification for ``user_id``; returns None if it could not be stored."""
        notification = Notification(user_id=user_id, message=message, task_id=task_id)
        try:
            self.db.add(notification)
            self.db.commit()
            self.db.refresh(notification)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to record notification for user {user_id}: {e}")
            return None

        logger.info(f"Notification {notification.id} recorded for user {user_id}")
        self._publish(notification)
        return notification

    def _publish(self, notification: Notification) -> None:
        if self.publisher is None:
            return
        try:
            self.publisher.publish_event('task_assigned', {
                'notification_id': notification.id,
                'user_id': notification.user_id,
                'task_id': notification.task_id,
                'message': notification.message,
                'created_at': notification.created_at.isoformat() if notification.created_at else None,
            })
        except Exception as e:
            # Don't fail the notification if event publishing fails
            logger.warning(f"Failed to publish task_assigned event: {e}")

    def on_task_event(self, event: TaskEvent) -> None:
        """Notify the assignee when a task is created for them or reassigned to them"""
        assignee = event.task.get("assigned_to")
        created = event.action == AuditAction.CREATE
        reassigned = event.action == AuditAction.UPDATE and assignee != event.previous_assignee
        if assignee is None or not (created or reassigned):
            return
        self.record(
            user_id=assignee,
            message=f"You have been assigned a new task: {event.task.get('title')}",
            task_id=event.task_id,
        )

    def list_for_user(self, user_id: int) -> List[Notification]:
        """Notifications for ``user_id``, newest first"""
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )


class AuditSink:
    """Appends audit records; there is intentionally no update or delete path"""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        user_id: int,
        action: AuditAction,
        task_id: Optional[int],
        details: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """Append one audit entry; returns None if it could not be stored."""
        entry = AuditLog(
            user_id=user_id,
            action=AuditAction(action).value,
            task_id=task_id,
            details=details,
        )
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to record {entry.action} audit entry for task {task_id}: {e}")
            return None

        logger.debug(f"Audit entry {entry.id}: user {user_id} {entry.action} task {task_id}")
        return entry

    def on_task_event(self, event: TaskEvent) -> None:
        self.record(
            user_id=event.actor_id,
            action=event.action,
            task_id=event.task_id,
            details=event.details,
        )

    def list_all(self) -> List[Tuple[AuditLog, Optional[str]]]:
        """All entries newest first, each with the task title (None once the task is gone)"""
        rows = (
            self.db.query(AuditLog, Task.title)
            .outerjoin(Task, Task.id == AuditLog.task_id)
            .options(joinedload(AuditLog.actor))
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .all()
        )
        return [(entry, title) for entry, title in rows]
