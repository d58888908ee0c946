import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.sql import func

from ..core.database import Base


class UserTypeEnum(enum.Enum):
    admin = "admin"
    normal = "normal"


class User(Base):
    """
    User account owned by the auth service.

    Same table layout as the auth service so both can share a database. This
    service only reads it, for display fields and assignee checks; tasks,
    notifications and audit entries refer to user ids without a foreign key.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    user_type = Column(Enum(UserTypeEnum), default=UserTypeEnum.normal, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def name(self) -> str:
        """Display name; accounts carry no separate name, so the email local part is used"""
        return self.email.split("@", 1)[0]

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', user_type='{self.user_type}')>"
