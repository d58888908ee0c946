"""
Task store: owns task rows.

Writes commit immediately and never touch denormalized data; reads load the
creator and assignee so callers get display fields without extra queries.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.auth import CurrentUser
from ..core.exceptions import InternalError, NotFoundError, ValidationError
from ..core.policy import list_scope
from ..models.task import Task, TaskStatus
from ..models.user import User
from ..schemas.task import parse_due_date

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "status", "due_date", "assigned_to")

# Input spellings accepted besides the stored values
STATUS_ALIASES = {"InProgress": TaskStatus.IN_PROGRESS.value}


def validate_status(value: Any) -> str:
    """Return the canonical status value or raise ValidationError."""
    if isinstance(value, str):
        value = STATUS_ALIASES.get(value, value)
    try:
        return TaskStatus(value).value
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed values: {allowed}", field="status")


def _validate_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value


def _validate_due_date(value: Any):
    try:
        return parse_due_date(value)
    except ValueError as e:
        raise ValidationError(str(e), field="dueDate")


class TaskStore:
    """SQLAlchemy-backed task repository"""

    def __init__(self, db: Session):
        self.db = db

    def _with_people(self):
        return self.db.query(Task).options(joinedload(Task.creator), joinedload(Task.assignee))

    def _check_assignee(self, user_id: Optional[int]) -> None:
        if user_id is not None and self.db.get(User, user_id) is None:
            raise ValidationError(f"Assigned user {user_id} does not exist", field="assignedTo")

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error {operation} task: {e}")
            raise InternalError(f"Error {operation} task")

    def create(
        self,
        title: str,
        description: str,
        due_date: Any,
        created_by: int,
        assigned_to: Optional[int] = None,
    ) -> Task:
        """
        Persist a new task.

        Raises:
            ValidationError: Blank title/description, bad due date or unknown assignee
            InternalError: If the database write fails
        """
        task = Task(
            title=_validate_text("title", title),
            description=_validate_text("description", description),
            due_date=_validate_due_date(due_date),
            status=TaskStatus.PENDING.value,
            created_by=created_by,
            assigned_to=assigned_to,
        )
        self._check_assignee(assigned_to)

        self.db.add(task)
        self._commit("creating")
        self.db.refresh(task)
        logger.info(f"Task {task.id} created by user {created_by}")
        return task

    def get(self, task_id: int) -> Optional[Task]:
        return self._with_people().filter(Task.id == task_id).first()

    def list_for(self, caller: CurrentUser) -> List[Task]:
        """All tasks for admins, otherwise only the tasks the caller created"""
        query = self._with_people()
        creator_id = list_scope(caller)
        if creator_id is not None:
            query = query.filter(Task.created_by == creator_id)
        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

    def update_status(self, task_id: int, status: Any) -> Task:
        """
        Raises:
            ValidationError: If status is not a TaskStatus value
            NotFoundError: If the task does not exist
        """
        return self.update(task_id, {"status": status})

    def update(self, task_id: int, changes: Dict[str, Any]) -> Task:
        """Apply field changes; unknown keys, including created_by, are rejected."""
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        values = dict(changes)
        if "title" in values:
            values["title"] = _validate_text("title", values["title"])
        if "description" in values:
            values["description"] = _validate_text("description", values["description"])
        if "status" in values:
            values["status"] = validate_status(values["status"])
        if "due_date" in values:
            values["due_date"] = _validate_due_date(values["due_date"])

        task = self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        if "assigned_to" in values:
            self._check_assignee(values["assigned_to"])

        for field, value in values.items():
            setattr(task, field, value)

        self._commit("updating")
        self.db.refresh(task)
        logger.info(f"Task {task_id} updated: {', '.join(sorted(values))}")
        return task

    def delete(self, task_id: int) -> None:
        """
        Raises:
            NotFoundError: If the task does not exist, including when it was already deleted
        """
        task = self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)

        self.db.delete(task)
        self._commit("deleting")
        logger.info(f"Task {task_id} deleted")
