import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from workdesk.database.base import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    PROJECT_MANAGER = "PROJECT_MANAGER"
    OPERATOR = "OPERATOR"


MANAGER_ROLES = (Role.MANAGER.value, Role.PROJECT_MANAGER.value)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # empty when authentication is delegated to an external provider
    password_hash = Column(String(255), nullable=False, default="")

    role = Column(String(32), nullable=False, default=Role.OPERATOR.value)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship(
        "Employee",
        back_populates="user",
        uselist=False,
        foreign_keys="Employee.user_id",
    )
    managed_employees = relationship(
        "Employee",
        back_populates="manager",
        foreign_keys="Employee.manager_id",
    )
    tasks_assigned = relationship(
        "Task",
        back_populates="assignee",
        foreign_keys="Task.assignee_id",
    )
