from tourdesk.models import AuditLog, UserRole

from conftest import make_user, headers_for


def test_login_issues_token_and_records_audit(client, db, admin):
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "admin"

    entry = db.query(AuditLog).filter(AuditLog.action == "LOGIN").one()
    assert entry.user_id == admin.id


def test_failed_login_is_audited(client, db, admin):
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "wrong"})
    assert response.status_code == 401

    entry = db.query(AuditLog).filter(AuditLog.action == "LOGIN_FAILED").one()
    assert entry.status == "failure"
    assert entry.username == "admin"


def test_disabled_account_cannot_login(client, db):
    make_user(db, "sleeper", UserRole.OPERATIONS.value, is_active=False)
    response = client.post("/api/v1/auth/login", json={"username": "sleeper", "password": "secret123"})
    assert response.status_code == 403


def test_requests_without_token_are_rejected(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    bad = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


def test_change_password_requires_matching_confirmation(client, admin_headers):
    response = client.post("/api/v1/auth/change-password", headers=admin_headers, json={
        "current_password": "secret123", "new_password": "newsecret", "confirm_password": "other",
    })
    assert response.status_code == 400

    response = client.post("/api/v1/auth/change-password", headers=admin_headers, json={
        "current_password": "wrong", "new_password": "newsecret", "confirm_password": "newsecret",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Current password is incorrect"

    response = client.post("/api/v1/auth/change-password", headers=admin_headers, json={
        "current_password": "secret123", "new_password": "newsecret", "confirm_password": "newsecret",
    })
    assert response.status_code == 200
    login = client.post("/api/v1/auth/login", json={"username": "admin", "password": "newsecret"})
    assert login.status_code == 200


def test_role_permissions(client, associate_headers, accounts_headers, operations_headers):
    associate = client.get("/api/v1/auth/permissions", headers=associate_headers).json()
    assert "queries:create" in associate["permissions"]
    assert "sales:create" not in associate["permissions"]
    assert "sales:view" in associate["permissions"]

    accounts = client.get("/api/v1/auth/permissions", headers=accounts_headers).json()
    assert "receipts:create" in accounts["permissions"]
    assert "tour_packages:create" not in accounts["permissions"]

    operations = client.get("/api/v1/auth/permissions", headers=operations_headers).json()
    assert "tour_packages:create" in operations["permissions"]
    assert "payments:create" not in operations["permissions"]


def test_associate_cannot_post_a_sale(client, associate_headers):
    response = client.post("/api/v1/sales", headers=associate_headers, json={
        "sale_date": "2024-03-01", "sale_price": "1000",
    })
    assert response.status_code == 403
    assert "sales:create" in response.json()["detail"]


def test_admin_manages_users_but_cannot_disable_self(client, db, admin, admin_headers):
    created = client.post("/api/v1/users", headers=admin_headers, json={
        "username": "ravi", "email": "ravi@example.com", "full_name": "Ravi",
        "password": "secret123", "role": "operations",
    })
    assert created.status_code == 200
    assert created.json()["role"] == "operations"

    duplicate = client.post("/api/v1/users", headers=admin_headers, json={
        "username": "ravi", "email": "other@example.com", "password": "secret123", "role": "operations",
    })
    assert duplicate.status_code == 400

    response = client.patch(f"/api/v1/users/{admin.id}", headers=admin_headers, json={"is_active": False})
    assert response.status_code == 400

    assert db.query(AuditLog).filter(AuditLog.action == "USER_CREATED").count() == 1


def test_disabled_user_token_is_refused(client, db):
    user = make_user(db, "leaver", UserRole.ACCOUNTS.value)
    headers = headers_for(user)
    user.is_active = False
    db.commit()
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 403


def test_audit_trail_is_searchable_by_admins_only(client, db, masters, admin, admin_headers, accounts_headers):
    sale = client.post("/api/v1/sales", headers=admin_headers, json={
        "customer_id": masters['customer'].id, "sale_date": "2024-03-01", "sale_price": "1000",
    }).json()
    client.patch(f"/api/v1/sales/{sale['id']}", headers=admin_headers, json={"sale_price": "1200"})

    logs = client.get("/api/v1/audit-logs", headers=admin_headers,
                      params={"resource_type": "SaleDetail", "user_id": admin.id}).json()
    assert [log['action'] for log in logs] == ["UPDATE", "CREATE"]
    assert logs[0]['old_values']['sale_price'] == 1000.0
    assert logs[0]['new_values']['sale_price'] == 1200.0

    updates = client.get("/api/v1/audit-logs", headers=admin_headers, params={"action": "UPDATE"}).json()
    assert [log['resource_id'] for log in updates] == [sale['id']]
    future = client.get("/api/v1/audit-logs", headers=admin_headers, params={"start_date": "2999-01-01"}).json()
    assert future == []

    history = client.get(f"/api/v1/audit-logs/resource/SaleDetail/{sale['id']}", headers=admin_headers).json()
    assert len(history) == 2
    assert client.get(f"/api/v1/audit-logs/{logs[0]['id']}", headers=admin_headers).json()['action'] == "UPDATE"
    assert client.get("/api/v1/audit-logs/99999", headers=admin_headers).status_code == 404

    assert client.get("/api/v1/audit-logs", headers=accounts_headers).status_code == 403
