from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from workdesk.config import Settings, get_settings
from workdesk.core.dependencies import get_current_any_manager, get_current_user
from workdesk.database.session import get_db
from workdesk.models.user import User
from workdesk.schemas.common import MessageOut
from workdesk.schemas.dashboard import OperatorDashboard
from workdesk.schemas.task import (
    FileUploadOut,
    TaskListOut,
    TaskOut,
    TaskPriorityUpdate,
    TaskStatusUpdate,
    TaskTransfer,
)
from workdesk.services import dashboard_service, task_service

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


# =====================================
# CREATE TASK (Manager / Project Manager)
# =====================================
@router.post("/create", response_model=TaskOut, status_code=201)
def create_task(
    title: str = Form(...),
    assigneeEmployeeId: int = Form(...),
    notes: Optional[str] = Form(None),
    dueDate: Optional[date] = Form(None),
    priority: Optional[str] = Form(None),
    assignedHours: Optional[float] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_any_manager)
):
    task = task_service.create_task(
        current_user,
        title=title,
        assignee_employee_id=assigneeEmployeeId,
        notes=notes,
        due_date=dueDate,
        priority=priority,
        assigned_hours=assignedHours,
        db=db,
    )
    if file is not None and file.filename:
        task_service.attach_file(task, current_user, file, settings, db)
    return task


# =====================================
# MY TASKS
# =====================================
@router.get("/EmployeeTasks", response_model=TaskListOut)
def get_my_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"tasks": task_service.list_assigned_tasks(current_user.id, db)}


@router.get("/Dashboard", response_model=OperatorDashboard)
def get_my_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return dashboard_service.operator_dashboard(current_user.id, db)


# =====================================
# STATUS (single running task per assignee)
# =====================================
@router.patch("/{task_id}/status", response_model=TaskOut)
def update_status(
    task_id: int,
    payload: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.set_status(task_id, payload.status, current_user, db)


@router.patch("/{task_id}/priority", response_model=TaskOut)
def update_priority(
    task_id: int,
    payload: TaskPriorityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_any_manager)
):
    return task_service.set_priority(task_id, payload.priority.value, db)


@router.patch("/{task_id}/transfer", response_model=TaskOut)
def transfer_task(
    task_id: int,
    payload: TaskTransfer,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_any_manager)
):
    return task_service.transfer_task(task_id, payload.new_employee_id, db)


# =====================================
# FILE UPLOAD
# =====================================
@router.post("/{task_id}/upload", response_model=FileUploadOut)
def upload_file(
    task_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    task = task_service.get_task(task_id, db)
    task_service.ensure_task_access(task, current_user)
    file_url = task_service.attach_file(task, current_user, file, settings, db)
    return {"file_url": file_url}


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_any_manager)
):
    task_service.soft_delete_task(task_id, db)
    return {"message": "Task deleted"}
