import logging

from sqlalchemy.orm import Session, selectinload

from workdesk.config import Settings
from workdesk.core.exceptions import ConflictError, NotFoundError, ValidationError
from workdesk.core.security import hash_password
from workdesk.models.employee import Employee
from workdesk.models.user import MANAGER_ROLES, Role, User
from workdesk.services.auth_service import add_new_user, normalize_email

logger = logging.getLogger(__name__)


def list_manager_employees(manager_id: int, db: Session) -> list[Employee]:
    return db.query(Employee).options(
        selectinload(Employee.user).selectinload(User.tasks_assigned)
    ).filter(Employee.manager_id == manager_id).order_by(Employee.id).all()


def create_employee(
    manager: User,
    *,
    email: str,
    password: str,
    name: str,
    settings: Settings,
    db: Session,
    role_title: str | None = None,
    department: str | None = None,
) -> Employee:
    email = normalize_email(email)
    name = (name or "").strip()
    if not email or not password or not name:
        raise ValidationError("email, password, name required")

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(password, settings),
        role=Role.OPERATOR.value,
        enabled=True
    )
    add_new_user(user, db)

    employee = Employee(
        user_id=user.id,
        name=name,
        role_title=role_title or "Operator",
        department=department,
        manager_id=manager.id
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)

    logger.info("Manager %s created employee %s (user %s)", manager.id, employee.id, user.id)
    return employee


def get_profile(user: User, db: Session) -> Employee:
    employee = db.query(Employee).filter(Employee.user_id == user.id).first()
    if not employee:
        raise NotFoundError("Employee profile not found")
    return employee


def manager_tree(user_id: int, db: Session) -> list[Employee]:
    """Managers reporting to ``user_id``, each with the employees they manage."""
    return db.query(Employee).options(
        selectinload(Employee.user).selectinload(User.managed_employees)
    ).filter(Employee.manager_id == user_id).order_by(Employee.id).all()


def new_joiners(db: Session) -> list[Employee]:
    return db.query(Employee).join(User, Employee.user_id == User.id).filter(
        Employee.manager_id == None,  # noqa: E711
        User.role == Role.OPERATOR.value
    ).order_by(Employee.created_at.desc(), Employee.id.desc()).all()


def assign_employee(
    *,
    employee_id: int,
    manager_user_id: int,
    db: Session,
    name: str | None = None,
    department: str | None = None,
) -> Employee:
    manager = db.query(User).filter(
        User.id == manager_user_id,
        User.role.in_(MANAGER_ROLES)
    ).first()
    if not manager:
        raise NotFoundError("Target Manager not found")

    employee = db.query(Employee).join(User, Employee.user_id == User.id).filter(
        Employee.id == employee_id,
        User.role == Role.OPERATOR.value
    ).first()
    if not employee:
        raise NotFoundError("Employee (operator) not found")

    employee.manager_id = manager.id
    if name:
        employee.name = name
    if department:
        employee.department = department
    db.commit()
    db.refresh(employee)

    logger.info("Employee %s assigned to manager %s", employee.id, manager.id)
    return employee
