from typing import List, Optional

from workdesk.schemas.common import CamelModel
from workdesk.schemas.task import TaskOut, TaskWithCommentsOut


class DayHours(CamelModel):
    day: str
    hours: float


class WeekCompletion(CamelModel):
    week: str
    completion: int


class TeamMemberOverview(CamelModel):
    id: int
    name: str
    role: Optional[str] = None
    status: str
    tasks_completed: int
    hours_logged: float
    efficiency: int


class ManagerDashboard(CamelModel):
    total_employees: int
    active_employees: int
    total_tasks: int
    completion_rate: int
    weekly_data: List[DayHours]
    performance_data: List[WeekCompletion]
    team_overview: List[TeamMemberOverview]


class OperatorStats(CamelModel):
    total: int
    todo: int
    working: int
    stuck: int
    done: int
    completion_rate: int
    total_assigned_hours: float


class OperatorDashboard(CamelModel):
    tasks: List[TaskWithCommentsOut]
    stats: OperatorStats


class EmployeeCard(CamelModel):
    id: int
    name: str
    role_title: Optional[str] = None
    department: Optional[str] = None
    email: Optional[str] = None
    status: str


class EmployeeTaskSummary(EmployeeCard):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int


class TeamPerformance(CamelModel):
    employees: List[EmployeeTaskSummary]


class PerformanceCounts(CamelModel):
    total_tasks: int
    completed: int
    working: int
    stuck: int
    pending: int
    completion_rate: int
    total_hours: float


class EmployeeDetail(CamelModel):
    employee: EmployeeCard
    performance: PerformanceCounts
    tasks: List[TaskOut]


class EmployeePerformanceMetrics(PerformanceCounts):
    weekly_hours: List[DayHours]
    completion_trend: List[WeekCompletion]


class EmployeePerformance(CamelModel):
    employee: EmployeeCard
    performance: EmployeePerformanceMetrics


class AdminStats(CamelModel):
    total_users: int
    active_users: int
    disabled_users: int
    managers: int
