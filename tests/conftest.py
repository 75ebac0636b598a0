import os
import tempfile

# configure the app before anything imports workdesk.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_STRATEGY"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="workdesk-uploads-")

import pytest
from fastapi.testclient import TestClient

from workdesk.config import get_settings
from workdesk.core.security import create_access_token, hash_password
from workdesk.database.base import Base
from workdesk.database.session import SessionLocal, engine
from workdesk.main import app
from workdesk.models.employee import Employee
from workdesk.models.user import Role, User

PASSWORD = "secret123"


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db, settings):
    """Factory for users; operators get an Employee profile."""

    def _make_user(email, role=Role.OPERATOR, *, name=None, manager=None, enabled=True, password=PASSWORD):
        user = User(
            email=email,
            password_hash=hash_password(password, settings),
            role=role.value,
            enabled=enabled,
        )
        db.add(user)
        db.flush()
        if role == Role.OPERATOR:
            db.add(Employee(
                user_id=user.id,
                name=name or email.split("@")[0],
                role_title="Operator",
                department="Operations",
                manager_id=manager.id if manager else None,
            ))
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers(settings):
    def _auth_headers(user):
        token = create_access_token({"sub": str(user.id), "role": user.role}, settings)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def manager(make_user):
    return make_user("manager@example.com", Role.MANAGER)


@pytest.fixture
def operator(make_user, manager):
    return make_user("alice@example.com", name="Alice", manager=manager)
