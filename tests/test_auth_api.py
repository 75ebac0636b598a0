from workdesk.models.attendance import UserAttendance
from workdesk.models.employee import Employee
from workdesk.models.user import Role, User

from conftest import PASSWORD


def test_health(client):
    assert client.get("/api/health").json() == {"ok": True}


def test_register_operator_creates_employee(client, db):
    response = client.post("/api/auth/register", json={
        "email": "New.Hire@Example.com",
        "password": "pw123456",
        "role": "OPERATOR",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "new.hire@example.com"
    assert body["role"] == "OPERATOR"

    employee = db.query(Employee).filter(Employee.user_id == body["id"]).one()
    assert employee.name == "new.hire"
    assert employee.role_title == "Operator"
    assert employee.department == "Operations"


def test_register_manager_has_no_employee_row(client, db):
    response = client.post("/api/auth/register", json={
        "email": "boss@example.com", "password": "pw123456", "role": "manager",
    })

    assert response.json()["role"] == "MANAGER"
    assert db.query(Employee).count() == 0


def test_register_duplicate_email(client, operator):
    response = client.post("/api/auth/register", json={
        "email": operator.email, "password": "pw123456", "role": "OPERATOR",
    })

    assert response.status_code == 409
    assert response.json() == {"error": "Email already registered"}


def test_register_invalid_role(client):
    response = client.post("/api/auth/register", json={
        "email": "x@example.com", "password": "pw123456", "role": "CEO",
    })

    assert response.status_code == 400
    assert "role" in response.json()["error"]


def test_register_missing_fields(client):
    response = client.post("/api/auth/register", json={"email": "x@example.com"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert "password is required" in body["errors"]


def test_login_opens_attendance_session(client, db, operator):
    response = client.post("/api/auth/login", json={"email": operator.email, "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"token", "userId", "role", "email"}
    assert body["userId"] == operator.id
    assert body["role"] == "OPERATOR"

    attendance = db.query(UserAttendance).filter(UserAttendance.user_id == operator.id).one()
    assert attendance.is_active_session is True

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.json() == {"id": operator.id, "email": operator.email, "role": "OPERATOR"}


def test_login_wrong_password(client, operator):
    response = client.post("/api/auth/login", json={"email": operator.email, "password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_login_disabled_account(client, make_user):
    user = make_user("off@example.com", enabled=False)

    response = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})

    assert response.status_code == 403


def test_logout_closes_session(client, db, operator, auth_headers):
    client.post("/api/auth/login", json={"email": operator.email, "password": PASSWORD})

    response = client.post("/api/auth/logout", headers=auth_headers(operator))

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
    db.expire_all()
    attendance = db.query(UserAttendance).filter(UserAttendance.user_id == operator.id).one()
    assert attendance.is_active_session is False
    assert attendance.logout_time is not None


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired token"}


def test_disabled_user_token_is_rejected(client, db, operator, auth_headers):
    headers = auth_headers(operator)
    operator.enabled = False
    db.commit()

    response = client.get("/api/auth/me", headers=headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Account is disabled"}


def test_change_password(client, db, operator, auth_headers):
    short = client.post(
        "/api/auth/change-password", json={"newPassword": "abc"}, headers=auth_headers(operator)
    )
    assert short.status_code == 400

    response = client.post(
        "/api/auth/change-password", json={"newPassword": "brand-new-pw"}, headers=auth_headers(operator)
    )
    assert response.status_code == 200

    login = client.post("/api/auth/login", json={"email": operator.email, "password": "brand-new-pw"})
    assert login.status_code == 200


def test_role_gating(client, operator, manager, make_user, auth_headers):
    admin = make_user("root@example.com", Role.ADMIN)

    assert client.get("/api/users", headers=auth_headers(operator)).status_code == 403
    assert client.get("/api/users", headers=auth_headers(manager)).status_code == 403
    assert client.get("/api/users", headers=auth_headers(admin)).status_code == 200

    denied = client.get("/api/employees/dashboard", headers=auth_headers(operator))
    assert denied.status_code == 403
    assert denied.json() == {"error": "Access denied"}


def test_unknown_user_in_token(client, db, operator, auth_headers):
    headers = auth_headers(operator)
    db.query(Employee).delete()
    db.query(User).delete()
    db.commit()

    assert client.get("/api/auth/me", headers=headers).status_code == 401
