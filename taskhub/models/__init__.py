"""Database models for Task Hub."""
from .audit_log import AuditAction, AuditLog
from .notification import Notification
from .task import Task, TaskStatus
from .user import User, UserTypeEnum

__all__ = ["AuditAction", "AuditLog", "Notification", "Task", "TaskStatus", "User", "UserTypeEnum"]
