import io
import os
from datetime import date

import pytest
from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError

from workdesk.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from workdesk.models.task import Task, TaskFile, TaskStatus
from workdesk.models.user import Role
from workdesk.services import task_service


def _task(db, manager, operator, title="Prepare report", **kwargs):
    return task_service.create_task(
        manager,
        title=title,
        assignee_employee_id=operator.employee.id,
        db=db,
        **kwargs,
    )


def test_create_task_defaults(db, manager, operator):
    task = _task(db, manager, operator, due_date=date(2025, 1, 10), assigned_hours=4)

    assert task.status == TaskStatus.TODO.value
    assert task.priority == "MEDIUM"
    assert task.assignee_id == operator.id
    assert task.created_by_id == manager.id
    assert task.is_deleted is False


def test_create_task_rejects_bad_input(db, manager, operator):
    with pytest.raises(ValidationError):
        _task(db, manager, operator, title="   ")
    with pytest.raises(ValidationError):
        _task(db, manager, operator, priority="URGENT")
    with pytest.raises(NotFoundError):
        task_service.create_task(manager, title="x", assignee_employee_id=999, db=db)


def test_second_working_task_is_rejected(db, manager, operator):
    first = _task(db, manager, operator, title="First")
    second = _task(db, manager, operator, title="Second")
    task_service.set_status(first.id, TaskStatus.WORKING, operator, db)

    with pytest.raises(ConflictError) as exc:
        task_service.set_status(second.id, TaskStatus.WORKING, operator, db)

    assert exc.value.status_code == 409
    assert exc.value.to_payload() == {
        "error": "Please pause current task before starting another",
        "runningTask": {"id": first.id, "title": "First"},
    }
    db.refresh(second)
    assert second.status == TaskStatus.TODO.value


def test_restarting_the_running_task_is_allowed(db, manager, operator):
    task = _task(db, manager, operator)
    task_service.set_status(task.id, TaskStatus.WORKING, operator, db)

    assert task_service.set_status(task.id, TaskStatus.WORKING, operator, db).status == "WORKING"


def test_other_transitions_skip_the_running_check(db, manager, operator):
    running = _task(db, manager, operator, title="Running")
    other = _task(db, manager, operator, title="Other")
    task_service.set_status(running.id, TaskStatus.WORKING, operator, db)

    for status in (TaskStatus.STUCK, TaskStatus.DONE, TaskStatus.TODO):
        assert task_service.set_status(other.id, status, operator, db).status == status.value


def test_pausing_frees_the_slot(db, manager, operator):
    first = _task(db, manager, operator, title="First")
    second = _task(db, manager, operator, title="Second")
    task_service.set_status(first.id, TaskStatus.WORKING, operator, db)
    task_service.set_status(first.id, TaskStatus.STUCK, operator, db)

    assert task_service.set_status(second.id, TaskStatus.WORKING, operator, db).status == "WORKING"


def test_running_tasks_are_per_assignee(db, make_user, manager, operator):
    bob = make_user("bob@example.com", name="Bob", manager=manager)
    mine = _task(db, manager, operator)
    theirs = _task(db, manager, bob)

    task_service.set_status(mine.id, TaskStatus.WORKING, operator, db)
    assert task_service.set_status(theirs.id, TaskStatus.WORKING, bob, db).status == "WORKING"


def test_outsider_cannot_change_status(db, make_user, manager, operator):
    outsider = make_user("mallory@example.com", name="Mallory")
    task = _task(db, manager, operator)

    with pytest.raises(AuthorizationError):
        task_service.set_status(task.id, TaskStatus.DONE, outsider, db)


def test_soft_deleted_task_is_hidden(db, manager, operator):
    task = _task(db, manager, operator)
    task_service.soft_delete_task(task.id, db)

    assert db.query(Task).filter(Task.id == task.id).one().is_deleted is True
    assert task_service.list_assigned_tasks(operator.id, db) == []
    with pytest.raises(NotFoundError):
        task_service.get_task(task.id, db)


def test_deleted_running_task_does_not_block(db, manager, operator):
    running = _task(db, manager, operator, title="Running")
    task_service.set_status(running.id, TaskStatus.WORKING, operator, db)
    task_service.soft_delete_task(running.id, db)

    fresh = _task(db, manager, operator, title="Fresh")
    assert task_service.set_status(fresh.id, TaskStatus.WORKING, operator, db).status == "WORKING"


def test_transfer_resets_running_task(db, make_user, manager, operator):
    bob = make_user("bob@example.com", name="Bob", manager=manager)
    task = _task(db, manager, operator)
    task_service.set_status(task.id, TaskStatus.WORKING, operator, db)

    moved = task_service.transfer_task(task.id, bob.employee.id, db)

    assert moved.assignee_id == bob.id
    assert moved.status == TaskStatus.TODO.value


def test_set_priority(db, manager, operator):
    task = _task(db, manager, operator)
    assert task_service.set_priority(task.id, "high", db).priority == "HIGH"


def test_attach_file_records_side(db, settings, manager, operator):
    task = _task(db, manager, operator)

    manager_url = task_service.attach_file(
        task, manager, UploadFile(file=io.BytesIO(b"brief"), filename="brief.pdf"), settings, db
    )
    operator_url = task_service.attach_file(
        task, operator, UploadFile(file=io.BytesIO(b"result"), filename="Result.PDF"), settings, db
    )

    assert manager_url.startswith("/uploads/tasks/") and manager_url.endswith(".pdf")
    assert task.file_url_manager == manager_url
    assert task.file_url_operator == operator_url
    assert task.manager_files == [manager_url]
    assert task.employee_files == [operator_url]
    assert db.query(TaskFile).count() == 2

    stored = os.path.join(settings.UPLOAD_DIR, "tasks", os.path.basename(operator_url))
    with open(stored, "rb") as fh:
        assert fh.read() == b"result"


def test_attach_file_rejects_large_upload(db, settings, manager, operator, monkeypatch):
    monkeypatch.setattr(task_service, "MAX_UPLOAD_BYTES", 4)
    task = _task(db, manager, operator)

    with pytest.raises(ValidationError):
        task_service.attach_file(
            task, manager, UploadFile(file=io.BytesIO(b"too big"), filename="a.txt"), settings, db
        )


def test_list_created_tasks(db, make_user, manager, operator):
    other_manager = make_user("pm@example.com", Role.PROJECT_MANAGER)
    _task(db, manager, operator, title="Mine")
    _task(db, other_manager, operator, title="Theirs")

    assert [t.title for t in task_service.list_created_tasks(manager.id, db)] == ["Mine"]


def test_lost_start_race_is_a_conflict(db, manager, operator, monkeypatch):
    first = _task(db, manager, operator, title="First")
    second = _task(db, manager, operator, title="Second")
    task_service.set_status(first.id, TaskStatus.WORKING, operator, db)

    real_lookup = task_service.running_task_for
    lookups = []

    def stale_first_lookup(*args, **kwargs):
        # the first check runs before the other start is committed
        lookups.append(args)
        if len(lookups) == 1:
            return None
        return real_lookup(*args, **kwargs)

    monkeypatch.setattr(task_service, "running_task_for", stale_first_lookup)

    with pytest.raises(ConflictError) as exc:
        task_service.set_status(second.id, TaskStatus.WORKING, operator, db)

    assert exc.value.to_payload() == {
        "error": "Please pause current task before starting another",
        "runningTask": {"id": first.id, "title": "First"},
    }
    assert len(lookups) == 2
    assert db.query(Task).filter(Task.status == TaskStatus.WORKING.value).count() == 1


def test_one_working_task_per_assignee_in_storage(db, manager, operator):
    first = _task(db, manager, operator, title="First")
    second = _task(db, manager, operator, title="Second")
    first.status = TaskStatus.WORKING.value
    db.commit()

    second.status = TaskStatus.WORKING.value
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    # a soft-deleted running task no longer holds the slot
    first.is_deleted = True
    db.commit()
    second.status = TaskStatus.WORKING.value
    db.commit()
    assert second.status == "WORKING"
