from workdesk.models.employee import Employee
from workdesk.models.user import Role
from workdesk.services import task_service


def test_comment_thread_and_seen_flags(client, db, manager, operator, auth_headers):
    task = task_service.create_task(
        manager, title="Review", assignee_employee_id=operator.employee.id, db=db
    )

    posted = client.post(
        f"/api/comments/{task.id}", json={"content": "Please look"}, headers=auth_headers(manager)
    )
    assert posted.status_code == 201
    assert posted.json()["seenByManager"] is True
    assert posted.json()["seenByAssignee"] is False

    seen = client.patch(f"/api/comments/{task.id}/seen", headers=auth_headers(operator))
    assert seen.json() == {"updated": 1}

    comments = client.get(f"/api/comments/{task.id}", headers=auth_headers(operator)).json()
    assert len(comments) == 1
    assert comments[0]["seenByAssignee"] is True
    assert comments[0]["author"]["email"] == manager.email


def test_comment_on_missing_task(client, operator, auth_headers):
    response = client.get("/api/comments/999", headers=auth_headers(operator))
    assert response.status_code == 404
    assert response.json() == {"error": "Task not found"}


def test_manager_creates_and_lists_employees(client, manager, auth_headers):
    response = client.post("/api/employees", json={
        "email": "carol@example.com",
        "password": "pw123456",
        "name": "Carol",
        "department": "Finance",
    }, headers=auth_headers(manager))

    assert response.status_code == 201
    body = response.json()
    assert body["employee"]["name"] == "Carol"
    assert body["employee"]["managerId"] == manager.id
    assert body["user"]["role"] == "OPERATOR"

    listing = client.get("/api/employees/employees", headers=auth_headers(manager)).json()
    assert [e["email"] for e in listing["employees"]] == ["carol@example.com"]

    login = client.post("/api/auth/login", json={"email": "carol@example.com", "password": "pw123456"})
    assert login.status_code == 200


def test_operator_profile(client, operator, auth_headers):
    response = client.get("/api/employees/me", headers=auth_headers(operator))

    assert response.status_code == 200
    assert response.json()["name"] == "Alice"
    assert response.json()["email"] == operator.email


def test_manager_dashboard_endpoints(client, db, manager, operator, auth_headers):
    task_service.create_task(manager, title="t", assignee_employee_id=operator.employee.id, db=db)
    headers = auth_headers(manager)

    dashboard = client.get("/api/employees/dashboard", headers=headers).json()
    assert dashboard["totalEmployees"] == 1
    assert len(dashboard["weeklyData"]) == 7
    assert len(dashboard["performanceData"]) == 4
    assert dashboard["teamOverview"][0]["name"] == "Alice"

    performance = client.get("/api/employees/performance", headers=headers).json()
    assert performance["employees"][0]["totalTasks"] == 1

    detail = client.get(f"/api/employees/{operator.employee.id}", headers=headers).json()
    assert detail["performance"]["pending"] == 1
    assert detail["tasks"][0]["title"] == "t"

    metrics = client.get(f"/api/employees/{operator.employee.id}/performance", headers=headers).json()
    assert len(metrics["performance"]["weeklyHours"]) == 7
    assert len(metrics["performance"]["completionTrend"]) == 4

    assert client.get("/api/employees/9999", headers=headers).status_code == 404


def test_admin_user_management(client, make_user, operator, auth_headers):
    admin = make_user("root@example.com", Role.ADMIN)
    headers = auth_headers(admin)

    users = client.get("/api/users", headers=headers).json()
    assert {u["email"] for u in users} >= {operator.email, admin.email}

    toggled = client.patch(f"/api/users/{operator.id}/status", headers=headers).json()
    assert toggled["enabled"] is False
    assert client.get("/api/auth/me", headers=auth_headers(operator)).status_code == 403

    promoted = client.patch(f"/api/users/{operator.id}/role", json={"role": "PROJECT_MANAGER"}, headers=headers)
    assert promoted.json()["role"] == "PROJECT_MANAGER"

    bad_role = client.patch(f"/api/users/{operator.id}/role", json={"role": "KING"}, headers=headers)
    assert bad_role.status_code == 400

    stats = client.get("/api/users/admin/stats", headers=headers).json()
    assert stats["disabledUsers"] == 1
    assert stats["totalUsers"] == 3


def test_project_manager_assignment(client, db, make_user, manager, auth_headers):
    pm = make_user("pm@example.com", Role.PROJECT_MANAGER)
    joiner = make_user("newbie@example.com", name="Newbie")
    headers = auth_headers(pm)

    joiners = client.get("/api/projectManager/employee-assign/new-joiners", headers=headers).json()
    assert [e["name"] for e in joiners["newJoiners"]] == ["Newbie"]

    response = client.post("/api/projectManager/employee-assign/assign", json={
        "employeeId": joiner.employee.id,
        "managerUserId": manager.id,
        "department": "Support",
    }, headers=headers)
    assert response.status_code == 200
    assert response.json()["employee"]["managerId"] == manager.id
    assert response.json()["employee"]["department"] == "Support"

    after = client.get("/api/projectManager/employee-assign/new-joiners", headers=headers).json()
    assert after["newJoiners"] == []

    missing = client.post("/api/projectManager/employee-assign/assign", json={
        "employeeId": joiner.employee.id, "managerUserId": 9999,
    }, headers=headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Target Manager not found"}

    # plain managers cannot reassign people
    assert client.get(
        "/api/projectManager/employee-assign/new-joiners", headers=auth_headers(manager)
    ).status_code == 403


def test_manager_tree(client, db, make_user, auth_headers):
    pm = make_user("pm@example.com", Role.PROJECT_MANAGER)
    lead = make_user("lead@example.com", Role.MANAGER)
    db.add(Employee(user_id=lead.id, name="Lead", role_title="Manager", manager_id=pm.id))
    db.commit()
    make_user("worker@example.com", name="Worker", manager=lead)

    tree = client.get("/api/projectManager/Manager_employee_list", headers=auth_headers(pm)).json()

    assert [m["name"] for m in tree["managers"]] == ["Lead"]
    assert [e["name"] for e in tree["managers"][0]["team"]] == ["Worker"]


def test_demoting_manager_with_team_is_a_conflict(client, make_user, manager, operator, auth_headers):
    admin = make_user("root@example.com", Role.ADMIN)

    response = client.patch(
        f"/api/users/{manager.id}/role", json={"role": "OPERATOR"}, headers=auth_headers(admin)
    )

    assert response.status_code == 409
    assert response.json() == {
        "error": "Reassign this manager's employees before changing the role",
        "employeeCount": 1,
    }
