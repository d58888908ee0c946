"""
Task mutation orchestrator.

Every mutation runs the same pipeline: validate, load, authorize, mutate and
commit through the task store, then run the post-commit hooks in order.
Validation and authorization failures happen before anything is written, so
they leave no side effects. A hook that fails is logged and skipped; it never
undoes the committed mutation or changes the response.
"""
import logging
from typing import Any, Dict, List, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from ..core.auth import CurrentUser
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import Operation, authorize
from ..models.audit_log import AuditAction
from ..models.task import Task
from ..schemas.task import TaskCreate, TaskUpdate
from .events import PostCommitHook, TaskEvent
from .task_store import TaskStore, validate_status

logger = logging.getLogger(__name__)


def _as_validation_error(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return ValidationError(f"{field}: {first.get('msg')}" if field else first.get("msg"), field=field or None)


class TaskOrchestrator:
    """Runs task mutations and fires post-commit hooks"""

    def __init__(self, store: TaskStore, hooks: Sequence[PostCommitHook] = ()):
        self.store = store
        self.hooks: List[PostCommitHook] = list(hooks)

    def _run_hooks(self, event: TaskEvent) -> None:
        for hook in self.hooks:
            try:
                hook(event)
            except Exception as e:
                logger.error(
                    f"Post-commit hook {getattr(hook, '__qualname__', hook)} failed for "
                    f"{event.action.value} on task {event.task_id}: {e}"
                )

    def _load(self, task_id: int) -> Task:
        task = self.store.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def create_task(self, caller: CurrentUser, payload: Union[TaskCreate, Dict[str, Any]]) -> Task:
        """Create a task owned by the caller; notify the assignee, then audit."""
        if not isinstance(payload, TaskCreate):
            try:
                payload = TaskCreate.model_validate(payload)
            except PydanticValidationError as e:
                raise _as_validation_error(e)

        task = self.store.create(
            title=payload.title,
            description=payload.description,
            due_date=payload.due_date,
            created_by=caller.user_id,
            assigned_to=payload.assigned_to,
        )
        self._run_hooks(TaskEvent(
            action=AuditAction.CREATE,
            actor_id=caller.user_id,
            task_id=task.id,
            task=task.to_dict(),
            details=f"Task '{task.title}' created",
        ))
        return task

    def list_tasks(self, caller: CurrentUser) -> List[Task]:
        return self.store.list_for(caller)

    def get_task(self, caller: CurrentUser, task_id: int) -> Task:
        task = self._load(task_id)
        authorize(caller, task, Operation.READ)
        return task

    def update_status(self, caller: CurrentUser, task_id: int, status: Any) -> Task:
        """Change the status of a task the caller owns (or any task, for admins)."""
        new_status = validate_status(status)
        task = self._load(task_id)
        authorize(caller, task, Operation.UPDATE)

        previous_status = task.status
        task = self.store.update_status(task_id, new_status)
        self._run_hooks(TaskEvent(
            action=AuditAction.UPDATE,
            actor_id=caller.user_id,
            task_id=task.id,
            task=task.to_dict(),
            details=f"Status changed from '{previous_status}' to '{new_status}'",
            previous_assignee=task.assigned_to,
        ))
        return task

    def update_task(self, caller: CurrentUser, task_id: int, changes: Union[TaskUpdate, Dict[str, Any]]) -> Task:
        """Apply a partial update; a new assignee is notified."""
        if not isinstance(changes, TaskUpdate):
            try:
                changes = TaskUpdate.model_validate(changes)
            except PydanticValidationError as e:
                raise _as_validation_error(e)
        values = changes.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("No fields to update")
        if "status" in values:
            values["status"] = validate_status(values["status"])

        task = self._load(task_id)
        authorize(caller, task, Operation.UPDATE)

        previous_assignee = task.assigned_to
        task = self.store.update(task_id, values)
        self._run_hooks(TaskEvent(
            action=AuditAction.UPDATE,
            actor_id=caller.user_id,
            task_id=task.id,
            task=task.to_dict(),
            details=f"Updated fields: {', '.join(sorted(values))}",
            previous_assignee=previous_assignee,
        ))
        return task

    def delete_task(self, caller: CurrentUser, task_id: int) -> None:
        task = self._load(task_id)
        authorize(caller, task, Operation.DELETE)

        snapshot = task.to_dict()
        self.store.delete(task_id)
        self._run_hooks(TaskEvent(
            action=AuditAction.DELETE,
            actor_id=caller.user_id,
            task_id=task_id,
            task=snapshot,
            details=f"Task '{snapshot['title']}' deleted",
        ))
