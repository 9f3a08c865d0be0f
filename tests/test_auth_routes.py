from estate_app.models import ActivityLog, AdminRole


def test_login_with_valid_credentials(client, import_admin):
    response = client.post("/login", json={"email": "Importer@Example.com", "password": "adminpass123"})

    assert response.status_code == 200
    assert response.get_json() == {"id": import_admin.id, "email": "importer@example.com", "role": "admin"}
    log = ActivityLog.query.one()
    assert log.action_type == "admin_login"
    assert log.entity_id == str(import_admin.id)


def test_login_rejects_bad_password(client, import_admin):
    response = client.post("/login", data={"email": "importer@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid email or password."
    assert ActivityLog.query.count() == 0


def test_login_rejects_inactive_admin(client, import_admin):
    import_admin.is_active = False

    response = client.post("/login", json={"email": "importer@example.com", "password": "adminpass123"})

    assert response.status_code == 401


def test_logout_requires_session(client):
    assert client.post("/logout").status_code == 401


def test_login_then_import_session(client, chairman):
    client.post("/login", json={"email": "chair@example.com", "password": "adminpass123"})

    response = client.get("/admin/imports/landlords/activity")

    assert response.status_code == 200
    assert chairman.role is AdminRole.CHAIRMAN


def test_permission_defaults_and_overrides(import_admin, restricted_admin, chairman):
    assert import_admin.has_permission("bulk_import")
    assert not restricted_admin.has_permission("bulk_import")
    assert restricted_admin.has_permission("landlords") is import_admin.has_permission("landlords")
    assert chairman.has_permission("anything")

    chairman.is_active = False
    assert not chairman.has_permission("bulk_import")
