from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workdesk.config import Settings, get_settings
from workdesk.core.dependencies import get_current_manager, get_current_operator
from workdesk.database.session import get_db
from workdesk.models.user import User
from workdesk.schemas.dashboard import EmployeeDetail, EmployeePerformance, ManagerDashboard, TeamPerformance
from workdesk.schemas.employee import EmployeeCreate, EmployeeCreateResponse, EmployeeListOut, EmployeeOut
from workdesk.services import dashboard_service, employee_service
from workdesk.services.attendance_service import work_date_for

router = APIRouter(prefix="/api/employees", tags=["Employees"])


def _today(settings: Settings):
    return work_date_for(datetime.now(timezone.utc), settings)


# ================= TEAM =================
@router.get("/employees", response_model=EmployeeListOut)
def get_employees(
    db: Session = Depends(get_db),
    manager: User = Depends(get_current_manager)
):
    return {"employees": employee_service.list_manager_employees(manager.id, db)}


@router.post("", response_model=EmployeeCreateResponse, status_code=201)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    manager: User = Depends(get_current_manager)
):
    employee = employee_service.create_employee(
        manager,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        role_title=payload.role_title,
        department=payload.department,
        settings=settings,
        db=db,
    )
    return {"employee": employee, "user": employee.user}


@router.get("/me", response_model=EmployeeOut)
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_operator)
):
    return employee_service.get_profile(current_user, db)


# ================= DASHBOARD =================
@router.get("/dashboard", response_model=ManagerDashboard)
def get_dashboard(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    manager: User = Depends(get_current_manager)
):
    return dashboard_service.manager_dashboard(manager.id, _today(settings), db)


@router.get("/performance", response_model=TeamPerformance)
def get_team_performance(
    db: Session = Depends(get_db),
    manager: User = Depends(get_current_manager)
):
    return dashboard_service.team_performance(manager.id, db)


@router.get("/{employee_id}", response_model=EmployeeDetail)
def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    manager: User = Depends(get_current_manager)
):
    return dashboard_service.employee_detail(employee_id, db)


@router.get("/{employee_id}/performance", response_model=EmployeePerformance)
def get_employee_performance(
    employee_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    manager: User = Depends(get_current_manager)
):
    return dashboard_service.employee_performance(employee_id, _today(settings), db)
