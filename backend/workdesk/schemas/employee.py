from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from workdesk.schemas.common import CamelModel
from workdesk.schemas.task import TaskOut
from workdesk.schemas.user import RegisterResponse


class EmployeeCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role_title: Optional[str] = None
    department: Optional[str] = None


class EmployeeOut(CamelModel):
    id: int
    user_id: int
    name: str
    email: Optional[str] = None
    role_title: Optional[str] = None
    department: Optional[str] = None
    status: str
    manager_id: Optional[int] = None
    created_at: Optional[datetime] = None


class EmployeeCreateResponse(CamelModel):
    employee: EmployeeOut
    user: RegisterResponse


class EmployeeWithTasksOut(EmployeeOut):
    tasks: List[TaskOut] = []


class EmployeeListOut(CamelModel):
    employees: List[EmployeeWithTasksOut]


class ManagerWithTeamOut(EmployeeOut):
    team: List[EmployeeOut] = []


class ManagerTreeOut(CamelModel):
    managers: List[ManagerWithTeamOut]


class NewJoinersOut(CamelModel):
    new_joiners: List[EmployeeOut]


class AssignEmployeeRequest(CamelModel):
    employee_id: int
    manager_user_id: int
    name: Optional[str] = None
    department: Optional[str] = None


class AssignEmployeeResponse(CamelModel):
    message: str
    employee: EmployeeOut
