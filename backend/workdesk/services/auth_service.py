import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workdesk.config import Settings
from workdesk.core.exceptions import AuthenticationError, AuthorizationError, ConflictError, ValidationError
from workdesk.core.security import create_access_token, hash_password
from workdesk.models.employee import Employee
from workdesk.models.user import Role, User
from workdesk.services.attendance_service import close_session_on_logout, open_session
from workdesk.services.auth_strategies import AuthStrategy

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def parse_role(value: str) -> Role:
    try:
        return Role(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError("role must be one of ADMIN, MANAGER, PROJECT_MANAGER, OPERATOR")


def add_new_user(user: User, db: Session) -> User:
    """Insert ``user``; losing a race on the unique email becomes a Conflict."""
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.info("Rejected duplicate account for %s", user.email)
        raise ConflictError("Email already registered")
    return user


def register(
    *,
    email: str,
    password: str,
    role: str,
    settings: Settings,
    db: Session,
    name: str | None = None,
    role_title: str | None = None,
    department: str | None = None,
) -> User:
    email = normalize_email(email)
    if not email or not password or not role:
        raise ValidationError("email, password, role required")
    role = parse_role(role)

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(password, settings),
        role=role.value,
        enabled=True,
    )
    add_new_user(user, db)

    if role == Role.OPERATOR:
        db.add(Employee(
            user_id=user.id,
            name=name or email.split("@")[0],
            role_title=role_title or "Operator",
            department=department or "Operations",
        ))

    db.commit()
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role)
    return user


def login(
    *,
    email: str,
    password: str,
    strategy: AuthStrategy,
    settings: Settings,
    db: Session,
    now: datetime,
) -> dict:
    email = normalize_email(email)
    if not email or not password:
        raise ValidationError("email & password required")

    try:
        user = strategy.authenticate(email, password, db)
    except AuthenticationError:
        logger.info("Login failed for %s", email)
        raise

    if not user.enabled:
        raise AuthorizationError("Account is disabled")

    open_session(user.id, now, db, settings)

    token = create_access_token(
        {"sub": str(user.id), "role": user.role, "email": user.email},
        settings,
    )
    logger.info("User %s logged in", user.id)
    return {
        "token": token,
        "userId": user.id,
        "role": user.role,
        "email": user.email,
    }


def logout(user: User, now: datetime, db: Session, settings: Settings) -> None:
    close_session_on_logout(user.id, now, db, settings)
    logger.info("User %s logged out", user.id)


def change_password(user: User, new_password: str, settings: Settings, db: Session) -> None:
    if not new_password or len(new_password) < 6:
        raise ValidationError("Password must be at least 6 characters")
    user.password_hash = hash_password(new_password, settings)
    db.commit()
