from sqlalchemy import (
    Boolean, Column, Date, DateTime, Float,
    ForeignKey, Index, Integer, String, Text, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from workdesk.database.base import Base


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    WORKING = "WORKING"
    STUCK = "STUCK"
    DONE = "DONE"


class TaskPriority(str, enum.Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class FileSide(str, enum.Enum):
    MANAGER = "manager"
    OPERATOR = "operator"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(16), default=TaskStatus.TODO.value, nullable=False)
    priority = Column(String(16), default=TaskPriority.MEDIUM.value, nullable=False)
    due_date = Column(Date, nullable=True)
    assigned_hours = Column(Float, nullable=True)

    # Relations
    assignee_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    created_by_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    file_url_manager = Column(String(512), nullable=True)
    file_url_operator = Column(String(512), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    assignee = relationship("User", back_populates="tasks_assigned", foreign_keys=[assignee_id])
    created_by = relationship("User", foreign_keys=[created_by_id])
    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Comment.created_at"
    )
    files = relationship(
        "TaskFile",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskFile.id"
    )

    __table_args__ = (
        # at most one running task per assignee
        Index(
            "uq_tasks_one_working_per_assignee",
            "assignee_id",
            unique=True,
            postgresql_where=text("status = 'WORKING' AND NOT is_deleted"),
            sqlite_where=text("status = 'WORKING' AND NOT is_deleted"),
        ),
    )

    @property
    def manager_files(self):
        return [f.url for f in self.files if f.side == FileSide.MANAGER.value]

    @property
    def employee_files(self):
        return [f.url for f in self.files if f.side == FileSide.OPERATOR.value]

    @property
    def assignee_email(self):
        return self.assignee.email if self.assignee else None

    @property
    def created_by_email(self):
        return self.created_by.email if self.created_by else None


class TaskFile(Base):
    __tablename__ = "task_files"

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    side = Column(String(16), nullable=False)
    url = Column(String(512), nullable=False)
    original_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    task = relationship("Task", back_populates="files")
