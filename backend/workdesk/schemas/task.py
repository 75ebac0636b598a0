from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from workdesk.models.task import TaskPriority, TaskStatus
from workdesk.schemas.common import CamelModel


# ---------- UPDATE ----------
class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskPriorityUpdate(BaseModel):
    priority: TaskPriority


class TaskTransfer(CamelModel):
    new_employee_id: int


# ---------- OUT ----------
class AuthorOut(BaseModel):
    id: int
    email: str
    role: str

    model_config = {"from_attributes": True}


class CommentOut(CamelModel):
    id: int
    task_id: int
    author_id: int
    author: Optional[AuthorOut] = None
    content: str
    seen_by_assignee: bool
    seen_by_manager: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskOut(CamelModel):
    id: int
    title: str
    notes: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None
    assigned_hours: Optional[float] = None
    assignee_id: Optional[int] = None
    assignee_email: Optional[str] = None
    created_by_id: Optional[int] = None
    created_by_email: Optional[str] = None
    file_url_manager: Optional[str] = Field(default=None, serialization_alias="fileUrl_manager")
    file_url_operator: Optional[str] = Field(default=None, serialization_alias="fileUrl_operator")
    manager_files: List[str] = []
    employee_files: List[str] = []
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskWithCommentsOut(TaskOut):
    comments: List[CommentOut] = []


class TaskListOut(BaseModel):
    tasks: List[TaskWithCommentsOut]


class FileUploadOut(CamelModel):
    file_url: str
