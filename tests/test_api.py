def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_missing_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"data": None, "success": False, "message": "Access token required"}


def test_invalid_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 403
    assert response.json()["message"] == "Invalid or expired token"


def test_expired_token(client, employee, bearer):
    response = client.get("/api/auth/me", headers=bearer(employee, expires_minutes=-1))
    assert response.status_code == 403


def test_token_of_deleted_user(client, db, temp_employee, bearer):
    headers = bearer(temp_employee)
    db.users.delete_one(temp_employee["id"])

    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


def test_login_me_and_refresh(client):
    response = client.post("/api/auth/login", json={"username": "jdoe", "password": "password"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["token_type"] == "bearer"
    assert "password_hash" not in body["data"]["user"]

    headers = {"Authorization": f"Bearer {body['data']['access_token']}"}
    me = client.get("/api/auth/me", headers=headers).json()["data"]
    assert me["username"] == "jdoe"

    refreshed = client.post("/api/auth/refresh", headers=headers)
    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["access_token"]


def test_login_with_wrong_password(client):
    response = client.post("/api/auth/login", json={"username": "jdoe", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_permissions_endpoint(client, manager, bearer):
    data = client.get("/api/auth/permissions", headers=bearer(manager)).json()["data"]
    assert data["role"] == "manager"
    assert data["permissions"]["approve_requests"] is True
    assert data["permissions"]["manage_payroll"] is False


def test_employee_cannot_create_shift(client, employee, downtown, bearer):
    payload = {
        "user_id": employee["id"],
        "location_id": downtown["id"],
        "date": "2025-01-06",
        "start_time": "09:00",
        "end_time": "17:00",
        "role": "Cashier",
    }
    response = client.post("/api/shifts", json=payload, headers=bearer(employee))
    assert response.status_code == 403
    assert response.json()["message"] == "Insufficient permissions"


def test_shift_body_validation(client, manager, bearer):
    response = client.post("/api/shifts", json={}, headers=bearer(manager))
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert {"user_id", "location_id", "date", "start_time", "end_time", "role"} <= set(body["errors"])


def test_shift_reference_errors(client, manager, bearer):
    payload = {
        "user_id": "ghost",
        "location_id": "nowhere",
        "date": "2025-01-06",
        "start_time": "17:00",
        "end_time": "09:00",
        "role": "Cashier",
    }
    response = client.post("/api/shifts", json=payload, headers=bearer(manager))
    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"user_id", "location_id", "end_time"}


def test_shift_create_and_cancel_twice(client, manager, employee, downtown, bearer):
    headers = bearer(manager)
    payload = {
        "user_id": employee["id"],
        "location_id": downtown["id"],
        "date": "2025-01-06",
        "start_time": "09:00",
        "end_time": "17:00",
        "role": "Cashier",
    }
    created = client.post("/api/shifts", json=payload, headers=headers)
    assert created.status_code == 201
    shift = created.json()["data"]
    assert shift["status"] == "scheduled"
    assert shift["user"]["username"] == "jdoe"

    first = client.post(f"/api/shifts/{shift['id']}/cancel", headers=headers)
    assert first.status_code == 200
    assert first.json()["data"]["status"] == "cancelled"

    second = client.post(f"/api/shifts/{shift['id']}/cancel", headers=headers)
    assert second.status_code == 409


def test_unknown_shift(client, manager, bearer):
    assert client.get("/api/shifts/missing", headers=bearer(manager)).status_code == 404


def test_list_shifts_for_user(client, employee, bearer):
    response = client.get("/api/shifts", params={"user_id": employee["id"]}, headers=bearer(employee))
    assert len(response.json()["data"]) == 4


def test_swap_approval_flow(client, employee, manager, shift_on, bearer):
    payload = {
        "original_shift_id": shift_on("jdoe", "2024-12-23")["id"],
        "target_user_id": manager["id"],
        "target_shift_id": shift_on("jsmith", "2024-12-23")["id"],
        "reason": "Doctor",
    }
    created = client.post("/api/swaps", json=payload, headers=bearer(employee))
    assert created.status_code == 201
    swap_id = created.json()["data"]["id"]

    # employees cannot review
    denied = client.put(f"/api/swaps/{swap_id}/approve", json={"approved": True}, headers=bearer(employee))
    assert denied.status_code == 403

    approved = client.put(f"/api/swaps/{swap_id}/approve", json={"approved": True}, headers=bearer(manager))
    assert approved.status_code == 200
    data = approved.json()["data"]
    assert data["status"] == "approved"
    assert data["reviewer"]["username"] == "jsmith"

    again = client.put(f"/api/swaps/{swap_id}/approve", json={"approved": False}, headers=bearer(manager))
    assert again.status_code == 409


def test_time_off_request_and_review(client, employee, admin, shift_on, bearer):
    created = client.post(
        "/api/timeoff",
        json={"shift_id": shift_on("jdoe", "2024-12-23")["id"], "reason": "Wedding"},
        headers=bearer(employee),
    )
    assert created.status_code == 201
    request_id = created.json()["data"]["id"]

    reviewed = client.put(f"/api/timeoff/{request_id}/approve", json={"approved": False}, headers=bearer(admin))
    assert reviewed.json()["data"]["status"] == "rejected"


def test_availability_endpoint(client, employee, manager, bearer):
    response = client.get(
        f"/api/users/{employee['id']}/availability", params={"date": "2024-12-27"}, headers=bearer(manager)
    )
    assert response.status_code == 200
    assert response.json()["data"]["available"] is False


def test_check_in_and_out(client, employee, downtown, bearer):
    headers = bearer(employee)
    body = {"location_id": downtown["id"], "latitude": 55.6761, "longitude": 12.5683}

    created = client.post("/api/checkins", json=body, headers=headers)
    assert created.status_code == 201
    checkin_id = created.json()["data"]["id"]

    again = client.post("/api/checkins", json=body, headers=headers)
    assert again.status_code == 409
    assert again.json()["message"] == "User is already checked in"

    closed = client.put(f"/api/checkins/{checkin_id}/checkout", json={"break_duration": 15}, headers=headers)
    assert closed.status_code == 200
    assert closed.json()["data"]["overtime_minutes"] == 0

    assert client.put("/api/checkins/missing/checkout", headers=headers).status_code == 404


def test_check_in_outside_geofence(client, employee, downtown, bearer):
    body = {"location_id": downtown["id"], "latitude": 55.70, "longitude": 12.60}
    response = client.post("/api/checkins", json=body, headers=bearer(employee))
    assert response.status_code == 400
    assert "Please move closer" in response.json()["message"]


def test_create_temporary_user(client, manager, bearer):
    response = client.post("/api/users", json={"is_temporary": True}, headers=bearer(manager))
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["username"].startswith("guest")
    assert data["temporary_password"]
    assert "password_hash" not in data


def test_duplicate_user(client, admin, bearer):
    payload = {"username": "jdoe", "email": "other@example.com", "first_name": "J", "last_name": "D"}
    response = client.post("/api/users", json=payload, headers=bearer(admin))
    assert response.status_code == 409
    assert response.json()["errors"] == {"username": ["Username already exists"]}


def test_payroll_estimate(client, admin, employee, bearer):
    response = client.get(
        "/api/payroll", params={"start_date": "2024-12-01", "end_date": "2024-12-31"}, headers=bearer(admin)
    )
    assert response.status_code == 200
    data = response.json()["data"]
    jdoe = next(e for e in data["entries"] if e["user_id"] == employee["id"])
    assert jdoe["regular_hours"] == 7
    assert jdoe["overtime_hours"] == 0
    assert jdoe["gross_pay"] == 129.5
    assert jdoe["taxes"] == 25.9
    assert jdoe["net_pay"] == 103.6
    assert data["currency"] == "DKK"

    assert client.get("/api/payroll", headers=bearer(employee)).status_code == 403


def test_payroll_date_range(client, admin, bearer):
    response = client.get(
        "/api/payroll", params={"start_date": "2024-12-31", "end_date": "2024-12-01"}, headers=bearer(admin)
    )
    assert response.status_code == 400


def test_settings(client, admin, manager, bearer):
    assert client.get("/api/settings", headers=bearer(manager)).json()["data"]["currency"] == "DKK"
    assert client.put("/api/settings", json={"tax_rate": 25}, headers=bearer(manager)).status_code == 403

    updated = client.put("/api/settings", json={"tax_rate": 25}, headers=bearer(admin))
    assert updated.json()["data"]["tax_rate"] == 25

    reset = client.post("/api/settings/reset", headers=bearer(admin))
    assert reset.json()["data"]["tax_rate"] == 20


def test_dashboard(client, manager, employee, bearer):
    stats = client.get("/api/dashboard/stats", headers=bearer(manager)).json()["data"]
    assert stats["pending_approvals"] == 2

    mine = client.get("/api/dashboard/stats", headers=bearer(employee)).json()["data"]
    assert mine["pending_approvals"] == 1

    assert client.get("/api/dashboard/approvals", headers=bearer(employee)).status_code == 403
    approvals = client.get("/api/dashboard/approvals", headers=bearer(manager)).json()["data"]
    assert len(approvals["shift_swaps"]) == 1


def test_locations(client, admin, manager, bearer):
    payload = {
        "name": "Airport Kiosk",
        "address": "Lufthavnsboulevarden 6",
        "city": "Kastrup",
        "postal_code": "2770",
        "country": "Denmark",
    }
    assert client.post("/api/locations", json=payload, headers=bearer(manager)).status_code == 403
    created = client.post("/api/locations", json=payload, headers=bearer(admin))
    assert created.status_code == 201
    assert len(client.get("/api/locations", headers=bearer(manager)).json()["data"]) == 3


def test_employee_cannot_raise_own_hourly_rate(client, employee, bearer):
    response = client.put(f"/api/users/{employee['id']}", json={"hourly_rate": 999}, headers=bearer(employee))
    assert response.status_code == 403

    me = client.get("/api/auth/me", headers=bearer(employee)).json()["data"]
    assert me["hourly_rate"] == 18.5


def test_deactivated_user_token_stops_working(client, admin, employee, bearer):
    headers = bearer(employee)
    deactivated = client.put(f"/api/users/{employee['id']}", json={"is_active": False}, headers=bearer(admin))
    assert deactivated.status_code == 200

    assert client.get("/api/auth/me", headers=headers).status_code == 401
    assert client.post("/api/auth/refresh", headers=headers).status_code == 401
    login = client.post("/api/auth/login", json={"username": "jdoe", "password": "password"})
    assert login.status_code == 401
