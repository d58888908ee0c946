"""
Authorization policy for task operations.

A caller relates to a task as Admin, Owner or Other; each relation is a
policy object deciding which operations it allows. Only the creator of a
task counts as its owner; the assignee gets no extra rights.
"""
import enum
from typing import Optional

from .auth import CurrentUser
from .exceptions import AuthorizationError


class Operation(str, enum.Enum):
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Policy:
    name = "base"

    def allows(self, operation: Operation) -> bool:
        raise NotImplementedError


class AdminPolicy(Policy):
    name = "admin"

    def allows(self, operation: Operation) -> bool:
        return True


class OwnerPolicy(Policy):
    name = "owner"

    def allows(self, operation: Operation) -> bool:
        return True


class OtherPolicy(Policy):
    name = "other"

    def allows(self, operation: Operation) -> bool:
        return False


ADMIN = AdminPolicy()
OWNER = OwnerPolicy()
OTHER = OtherPolicy()


def policy_for(caller: CurrentUser, task) -> Policy:
    """Pick the policy variant for ``caller`` acting on ``task``."""
    if caller.is_admin:
        return ADMIN
    if task.created_by == caller.user_id:
        return OWNER
    return OTHER


def can_act(caller: CurrentUser, task, operation: Operation) -> bool:
    return policy_for(caller, task).allows(Operation(operation))


def authorize(caller: CurrentUser, task, operation: Operation) -> None:
    """
    Raise AuthorizationError unless the caller may perform the operation.

    Non-owners get 403 even though the task exists, never 404.
    """
    operation = Operation(operation)
    if not can_act(caller, task, operation):
        raise AuthorizationError(
            f"Unauthorized to {operation.value} this task",
            resource="task",
            action=operation.value,
        )


def list_scope(caller: CurrentUser) -> Optional[int]:
    """Creator id to restrict listings to, or None for an unrestricted view."""
    return None if caller.is_admin else caller.user_id


def require_admin(caller: CurrentUser) -> None:
    if not caller.is_admin:
        raise AuthorizationError("Admin access required")
