"""Read-only aggregations behind the manager, operator and admin dashboards.

Everything is recomputed per request: tasks are loaded once and rolled up in
memory. Soft-deleted tasks never count.
"""
from datetime import date, timedelta
from typing import Iterable

from sqlalchemy.orm import Session, selectinload

from workdesk.core.exceptions import NotFoundError
from workdesk.models.employee import Employee
from workdesk.models.task import Task, TaskStatus
from workdesk.models.user import Role, User
from workdesk.schemas.dashboard import (
    AdminStats,
    DayHours,
    EmployeeCard,
    EmployeeDetail,
    EmployeePerformance,
    EmployeePerformanceMetrics,
    EmployeeTaskSummary,
    ManagerDashboard,
    OperatorDashboard,
    OperatorStats,
    PerformanceCounts,
    TeamMemberOverview,
    TeamPerformance,
    WeekCompletion,
)
from workdesk.schemas.task import TaskOut, TaskWithCommentsOut
from workdesk.services.task_service import list_assigned_tasks

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def completion_rate(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(100 * completed / total)


def _live(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if not t.is_deleted]


def _count(tasks: Iterable[Task], status: TaskStatus) -> int:
    return sum(1 for t in tasks if t.status == status.value)


def _hours(tasks: Iterable[Task]) -> float:
    return float(sum(t.assigned_hours or 0 for t in tasks))


def _hours_by_day(tasks: list[Task], days: list[date]) -> list[DayHours]:
    return [
        DayHours(
            day=WEEKDAY_LABELS[day.weekday()],
            hours=_hours(t for t in tasks if t.due_date == day and t.assigned_hours is not None),
        )
        for day in days
    ]


def _completion_trend(tasks: list[Task], today: date) -> list[WeekCompletion]:
    four_weeks_ago = today - timedelta(days=28)
    trend = []
    for week in range(4):
        start = four_weeks_ago + timedelta(days=week * 7)
        end = start + timedelta(days=6)
        week_tasks = [t for t in tasks if t.due_date and start <= t.due_date <= end]
        trend.append(WeekCompletion(
            week=f"Week {week + 1}",
            completion=completion_rate(_count(week_tasks, TaskStatus.DONE), len(week_tasks)),
        ))
    return trend


def _counts(tasks: list[Task]) -> PerformanceCounts:
    total = len(tasks)
    completed = _count(tasks, TaskStatus.DONE)
    return PerformanceCounts(
        total_tasks=total,
        completed=completed,
        working=_count(tasks, TaskStatus.WORKING),
        stuck=_count(tasks, TaskStatus.STUCK),
        pending=total - completed,
        completion_rate=completion_rate(completed, total),
        total_hours=_hours(tasks),
    )


def _card(employee: Employee) -> EmployeeCard:
    return EmployeeCard(
        id=employee.id,
        name=employee.name,
        role_title=employee.role_title,
        department=employee.department,
        email=employee.email,
        status=employee.status,
    )


def _team(manager_id: int, db: Session) -> list[Employee]:
    return db.query(Employee).options(
        selectinload(Employee.user).selectinload(User.tasks_assigned)
    ).filter(Employee.manager_id == manager_id).order_by(Employee.id).all()


def _employee(employee_id: int, db: Session) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def manager_dashboard(manager_id: int, today: date, db: Session) -> ManagerDashboard:
    team = _team(manager_id, db)
    created = db.query(Task).filter(
        Task.created_by_id == manager_id,
        Task.is_deleted == False  # noqa: E712
    ).all()

    week_start = today - timedelta(days=6)
    team_overview = []
    for employee in team:
        tasks = _live(employee.user.tasks_assigned if employee.user else [])
        done = _count(tasks, TaskStatus.DONE)
        team_overview.append(TeamMemberOverview(
            id=employee.id,
            name=employee.name,
            role=employee.role_title,
            status=employee.status,
            tasks_completed=done,
            hours_logged=_hours(tasks),
            efficiency=completion_rate(done, len(tasks)),
        ))

    return ManagerDashboard(
        total_employees=len(team),
        active_employees=sum(1 for e in team if e.status == "Active"),
        total_tasks=len(created),
        completion_rate=completion_rate(_count(created, TaskStatus.DONE), len(created)),
        weekly_data=_hours_by_day(created, [week_start + timedelta(days=i) for i in range(7)]),
        performance_data=_completion_trend(created, today),
        team_overview=team_overview,
    )


def operator_dashboard(user_id: int, db: Session) -> OperatorDashboard:
    tasks = list_assigned_tasks(user_id, db)
    done = _count(tasks, TaskStatus.DONE)
    stats = OperatorStats(
        total=len(tasks),
        todo=_count(tasks, TaskStatus.TODO),
        working=_count(tasks, TaskStatus.WORKING),
        stuck=_count(tasks, TaskStatus.STUCK),
        done=done,
        completion_rate=completion_rate(done, len(tasks)),
        total_assigned_hours=_hours(tasks),
    )
    return OperatorDashboard(
        tasks=[TaskWithCommentsOut.model_validate(t) for t in tasks],
        stats=stats,
    )


def team_performance(manager_id: int, db: Session) -> TeamPerformance:
    summaries = []
    for employee in _team(manager_id, db):
        tasks = _live(employee.user.tasks_assigned if employee.user else [])
        completed = _count(tasks, TaskStatus.DONE)
        summaries.append(EmployeeTaskSummary(
            **_card(employee).model_dump(),
            total_tasks=len(tasks),
            completed_tasks=completed,
            pending_tasks=len(tasks) - completed,
        ))
    return TeamPerformance(employees=summaries)


def employee_detail(employee_id: int, db: Session) -> EmployeeDetail:
    employee = _employee(employee_id, db)
    tasks = _live(employee.user.tasks_assigned if employee.user else [])
    return EmployeeDetail(
        employee=_card(employee),
        performance=_counts(tasks),
        tasks=[TaskOut.model_validate(t) for t in tasks],
    )


def employee_performance(employee_id: int, today: date, db: Session) -> EmployeePerformance:
    employee = _employee(employee_id, db)
    tasks = _live(employee.user.tasks_assigned if employee.user else [])

    monday = today - timedelta(days=today.weekday())
    metrics = EmployeePerformanceMetrics(
        **_counts(tasks).model_dump(),
        weekly_hours=_hours_by_day(tasks, [monday + timedelta(days=i) for i in range(7)]),
        completion_trend=_completion_trend(tasks, today),
    )
    return EmployeePerformance(employee=_card(employee), performance=metrics)


def admin_stats(db: Session) -> AdminStats:
    total = db.query(User).count()
    active = db.query(User).filter(User.enabled == True).count()  # noqa: E712
    managers = db.query(User).filter(User.role == Role.MANAGER.value).count()
    return AdminStats(
        total_users=total,
        active_users=active,
        disabled_users=total - active,
        managers=managers,
    )
