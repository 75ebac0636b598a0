import argparse
import logging

from sqlalchemy.orm import Session

from workdesk.config import Settings, get_settings
from workdesk.core.exceptions import ConflictError
from workdesk.core.security import hash_password
from workdesk.database.base import Base
from workdesk.database.session import SessionLocal, engine
from workdesk.models import attendance, comment, employee, external_identity, task  # noqa: F401
from workdesk.models.user import Role, User
from workdesk.services.auth_service import add_new_user, normalize_email

logger = logging.getLogger(__name__)


def create_admin(email: str, password: str, settings: Settings, db: Session) -> tuple[User, bool]:
    """Create the first ADMIN account; returns the existing admin if there already is one."""
    existing_admin = db.query(User).filter(User.role == Role.ADMIN.value).first()
    if existing_admin:
        return existing_admin, False

    admin = User(
        email=normalize_email(email),
        password_hash=hash_password(password, settings),
        role=Role.ADMIN.value,
        enabled=True
    )
    add_new_user(admin, db)
    db.commit()
    db.refresh(admin)
    return admin, True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the initial admin account")
    parser.add_argument("--email", default="admin@company.com")
    parser.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        admin, created = create_admin(args.email, args.password, get_settings(), db)
    except ConflictError as exc:
        logger.error("Cannot create admin %s: %s", args.email, exc.message)
        raise SystemExit(1)
    finally:
        db.close()

    if created:
        logger.info("Admin %s created successfully", admin.email)
    else:
        logger.info("Admin already exists (%s)", admin.email)


if __name__ == "__main__":
    main()
