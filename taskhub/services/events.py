from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..models.audit_log import AuditAction


@dataclass(frozen=True)
class TaskEvent:
    """A committed task mutation, handed to every post-commit hook"""
    action: AuditAction
    actor_id: int
    task_id: int
    task: Dict[str, Any] = field(default_factory=dict)
    details: Optional[str] = None
    previous_assignee: Optional[int] = None


PostCommitHook = Callable[[TaskEvent], None]
