import logging
import os
import shutil
import uuid
from datetime import date, datetime, timezone

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from workdesk.config import Settings
from workdesk.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from workdesk.models.employee import Employee
from workdesk.models.task import FileSide, Task, TaskFile, TaskPriority, TaskStatus
from workdesk.models.user import MANAGER_ROLES, Role, User

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
TASK_UPLOAD_SUBDIR = "tasks"


def _parse_priority(value: str | None) -> str:
    if value is None or not str(value).strip():
        return TaskPriority.MEDIUM.value
    try:
        return TaskPriority(str(value).strip().upper()).value
    except ValueError:
        raise ValidationError("priority must be one of HIGH, MEDIUM, LOW")


def _resolve_employee_user(employee_id: int, db: Session) -> User:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee or not employee.user:
        raise NotFoundError("Employee not found")
    return employee.user


def get_task(task_id: int, db: Session, lock: bool = False) -> Task:
    query = db.query(Task).filter(Task.id == task_id, Task.is_deleted == False)  # noqa: E712
    if lock:
        query = query.with_for_update()
    task = query.first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def ensure_task_access(task: Task, user: User) -> None:
    """Assignee, creator, or any manager-level role may act on a task."""
    if user.id in {task.assignee_id, task.created_by_id}:
        return
    if user.role in MANAGER_ROLES or user.role == Role.ADMIN.value:
        return
    raise AuthorizationError("You are not allowed to access this task")


def running_task_for(assignee_id: int, db: Session, exclude_task_id: int | None = None) -> Task | None:
    query = db.query(Task).filter(
        Task.assignee_id == assignee_id,
        Task.status == TaskStatus.WORKING.value,
        Task.is_deleted == False  # noqa: E712
    )
    if exclude_task_id is not None:
        query = query.filter(Task.id != exclude_task_id)
    return query.first()


def _running_task_conflict(running: Task) -> ConflictError:
    return ConflictError(
        "Please pause current task before starting another",
        runningTask={"id": running.id, "title": running.title},
    )


def create_task(
    creator: User,
    *,
    title: str,
    assignee_employee_id: int,
    db: Session,
    notes: str | None = None,
    due_date: date | None = None,
    priority: str | None = None,
    assigned_hours: float | None = None,
) -> Task:
    title = (title or "").strip()
    if not title:
        raise ValidationError("title is required")
    if assigned_hours is not None and assigned_hours < 0:
        raise ValidationError("assignedHours cannot be negative")

    assignee = _resolve_employee_user(assignee_employee_id, db)

    task = Task(
        title=title,
        notes=notes,
        due_date=due_date,
        priority=_parse_priority(priority),
        assigned_hours=assigned_hours,
        assignee_id=assignee.id,
        created_by_id=creator.id,
        status=TaskStatus.TODO.value,
        is_deleted=False,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    logger.info("User %s created task %s for user %s", creator.id, task.id, assignee.id)
    return task


def set_status(task_id: int, new_status: TaskStatus, acting_user: User, db: Session) -> Task:
    task = get_task(task_id, db, lock=True)
    ensure_task_access(task, acting_user)

    new_status = TaskStatus(new_status)
    if new_status == TaskStatus.WORKING and task.assignee_id is not None:
        running = running_task_for(task.assignee_id, db, exclude_task_id=task.id)
        if running:
            logger.info(
                "Rejected start of task %s: task %s is already running for user %s",
                task.id, running.id, task.assignee_id,
            )
            raise _running_task_conflict(running)

    task.status = new_status.value
    task.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        running = running_task_for(task.assignee_id, db, exclude_task_id=task_id)
        if running:
            raise _running_task_conflict(running)
        raise ConflictError("Another task is already running")

    db.refresh(task)
    return task


def set_priority(task_id: int, priority: str, db: Session) -> Task:
    task = get_task(task_id, db)
    task.priority = _parse_priority(priority)
    db.commit()
    db.refresh(task)
    return task


def transfer_task(task_id: int, new_employee_id: int, db: Session) -> Task:
    task = get_task(task_id, db, lock=True)
    new_assignee = _resolve_employee_user(new_employee_id, db)

    if task.assignee_id != new_assignee.id:
        previous = task.assignee_id
        task.assignee_id = new_assignee.id
        # the new assignee has not started it yet
        if task.status == TaskStatus.WORKING.value:
            task.status = TaskStatus.TODO.value
        db.commit()
        logger.info("Task %s transferred from user %s to user %s", task.id, previous, new_assignee.id)

    db.refresh(task)
    return task


def soft_delete_task(task_id: int, db: Session) -> None:
    task = get_task(task_id, db)
    task.is_deleted = True
    db.commit()
    logger.info("Task %s deleted", task_id)


def attach_file(task: Task, uploader: User, upload: UploadFile, settings: Settings, db: Session) -> str:
    if not upload or not upload.filename:
        raise ValidationError("file is required")

    contents = upload.file.read()
    if len(contents) > MAX_UPLOAD_BYTES:
        raise ValidationError("File too large")
    upload.file.seek(0)

    upload_dir = os.path.join(settings.UPLOAD_DIR, TASK_UPLOAD_SUBDIR)
    os.makedirs(upload_dir, exist_ok=True)

    extension = os.path.splitext(upload.filename)[1].lower()
    unique_filename = f"{task.id}_{uuid.uuid4().hex}{extension}"
    file_path = os.path.join(upload_dir, unique_filename)

    with open(file_path, "wb") as buffer:
        shutil.copyfileobj(upload.file, buffer)

    file_url = f"/uploads/{TASK_UPLOAD_SUBDIR}/{unique_filename}"
    side = FileSide.OPERATOR if uploader.id == task.assignee_id else FileSide.MANAGER

    db.add(TaskFile(
        task_id=task.id,
        uploaded_by_id=uploader.id,
        side=side.value,
        url=file_url,
        original_name=upload.filename,
    ))
    if side == FileSide.OPERATOR:
        task.file_url_operator = file_url
    else:
        task.file_url_manager = file_url
    db.commit()
    db.refresh(task)

    logger.info("User %s attached %s file to task %s", uploader.id, side.value, task.id)
    return file_url


def list_assigned_tasks(user_id: int, db: Session) -> list[Task]:
    return db.query(Task).options(
        selectinload(Task.comments),
        selectinload(Task.files),
    ).filter(
        Task.assignee_id == user_id,
        Task.is_deleted == False  # noqa: E712
    ).order_by(Task.due_date.asc(), Task.id.asc()).all()


def list_created_tasks(user_id: int, db: Session) -> list[Task]:
    return db.query(Task).filter(
        Task.created_by_id == user_id,
        Task.is_deleted == False  # noqa: E712
    ).order_by(Task.id.desc()).all()
