from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workdesk.core.dependencies import get_current_any_manager, get_current_project_manager
from workdesk.database.session import get_db
from workdesk.models.user import User
from workdesk.schemas.employee import (
    AssignEmployeeRequest,
    AssignEmployeeResponse,
    ManagerTreeOut,
    NewJoinersOut,
)
from workdesk.schemas.task import TaskListOut
from workdesk.services import employee_service, task_service

router = APIRouter(prefix="/api/projectManager", tags=["Project Manager"])


@router.get("/ManagerTasks", response_model=TaskListOut)
def get_created_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_any_manager)
):
    return {"tasks": task_service.list_created_tasks(current_user.id, db)}


@router.get("/Manager_employee_list", response_model=ManagerTreeOut)
def get_manager_tree(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_any_manager)
):
    return {"managers": employee_service.manager_tree(current_user.id, db)}


# ================= EMPLOYEE ASSIGNMENT =================
@router.get("/employee-assign/new-joiners", response_model=NewJoinersOut)
def get_new_joiners(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_project_manager)
):
    return {"new_joiners": employee_service.new_joiners(db)}


@router.post("/employee-assign/assign", response_model=AssignEmployeeResponse)
def assign_employee(
    payload: AssignEmployeeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_project_manager)
):
    employee = employee_service.assign_employee(
        employee_id=payload.employee_id,
        manager_user_id=payload.manager_user_id,
        name=payload.name,
        department=payload.department,
        db=db,
    )
    return {"message": "Employee assigned successfully", "employee": employee}
