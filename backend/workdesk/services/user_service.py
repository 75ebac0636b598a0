import logging

from sqlalchemy.orm import Session

from workdesk.core.exceptions import ConflictError, NotFoundError
from workdesk.models.user import MANAGER_ROLES, User
from workdesk.services.auth_service import parse_role

logger = logging.getLogger(__name__)


def _get_user(user_id: int, db: Session) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id).all()


def toggle_user_status(user_id: int, db: Session) -> User:
    user = _get_user(user_id, db)
    user.enabled = not user.enabled
    db.commit()
    db.refresh(user)
    logger.info("User %s %s", user.id, "enabled" if user.enabled else "disabled")
    return user


def change_user_role(user_id: int, role: str, db: Session) -> User:
    new_role = parse_role(role)
    user = _get_user(user_id, db)

    # employees may only report to a MANAGER or PROJECT_MANAGER
    if new_role.value not in MANAGER_ROLES and user.managed_employees:
        raise ConflictError(
            "Reassign this manager's employees before changing the role",
            employeeCount=len(user.managed_employees),
        )

    user.role = new_role.value
    db.commit()
    db.refresh(user)
    logger.info("User %s role changed to %s", user.id, user.role)
    return user
