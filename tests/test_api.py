from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.care_portal.care_portal.main import create_app


@pytest.fixture
def app(world, people, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=world.container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email, password="password123"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_login_and_me(client):
    resp = _login(client, "stu.staff@example.com")
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "staff"

    me = client.get("/api/auth/me")
    assert me.get_json()["user"]["name"] == "Stu Staff"


def test_bad_login_returns_401(client):
    resp = _login(client, "stu.staff@example.com", "wrong")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Invalid email or password"}


def test_protected_routes_need_session(client):
    resp = client.get("/api/residents/mine")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Not authenticated"


def test_domain_errors_map_to_status_codes(client, world):
    world.add_resident("Resident B", "Cedar House")
    _login(client, "stu.staff@example.com")

    assert client.get("/api/settings/app").status_code == 403
    assert client.get("/api/residents/1").status_code == 403
    assert client.get("/api/residents/99").status_code == 404
    bad = client.post("/api/care/clock-in", json={})
    assert bad.status_code == 400
    assert bad.get_json()["message"] == "Location is required"


def test_clock_in_and_out_over_http(client):
    _login(client, "stu.staff@example.com")
    resp = client.post("/api/care/clock-in", json={"location": "Maple House"})
    assert resp.status_code == 201
    assert client.get("/api/care/shift").get_json()["shift"]["location"] == "Maple House"
    assert client.post("/api/care/clock-out", json={}).get_json()["success"] is True


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_kiosk_pairing_over_http(client):
    _login(client, "ada.admin@example.com")
    issued = client.post("/api/kiosks/pairings", json={"location": "Maple House"}).get_json()["pairing"]
    client.post("/api/auth/logout")

    paired = client.post("/api/kiosk/pair", json={"token": issued["token"]})
    assert paired.status_code == 201
    device_id = paired.get_json()["device_id"]
    assert client.get(f"/api/kiosk/{device_id}").get_json()["kiosk"]["location"] == "Maple House"
    assert client.get("/api/kiosk/unknown-device").status_code == 404


def test_audit_csv_export(client):
    _login(client, "ada.admin@example.com")
    resp = client.get("/api/audit/export.csv")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment; filename=audit_logs_" in resp.headers["Content-Disposition"]
    assert resp.data.decode("utf-8-sig").splitlines()[0].startswith("id,timestamp,actor_id")


def test_password_reset_request_never_returns_the_token(client, world):
    known = client.post("/api/auth/password-reset", json={"email": "ada.admin@example.com"})
    unknown = client.post("/api/auth/password-reset", json={"email": "ghost@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.get_json() == unknown.get_json()
    assert set(known.get_json()) == {"success", "message"}
    assert "token" not in known.get_data(as_text=True)
    assert len(world.resets.tokens) == 1

    guessed = client.post(
        "/api/auth/password-reset/confirm",
        json={"email": "ada.admin@example.com", "token": "guess", "new_password": "takeover123"},
    )
    assert guessed.status_code == 400
    assert _login(client, "ada.admin@example.com").status_code == 200


def test_malformed_log_fields_are_a_bad_request(client, world):
    world.add_resident("Resident A", "Maple House")
    _login(client, "stu.staff@example.com")
    resp = client.post("/api/residents/1/logs", json={"template": "daily_notes", "fields": "abc"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Fields must be an object"


def test_compliance_and_time_exception_routes(client, world, people):
    world.add_resident("Resident A", "Maple House")
    shift_id = world.add_shift(people["staff"], "Maple House", datetime.now() - timedelta(hours=20))
    _login(client, "sam.super@example.com")

    overview = client.get("/api/compliance/overview")
    assert overview.status_code == 200
    assert [i["note"] for i in overview.get_json()["items"]] == ["No ISP on file", "No plan on file"]

    pending = client.get("/api/supervisor/time-exceptions").get_json()["exceptions"]
    assert [e["id"] for e in pending] == [f"{shift_id}:missed_clock_out"]

    denied = client.post(f"/api/supervisor/time-exceptions/{shift_id}:missed_clock_out/deny", json={})
    assert denied.status_code == 400
    approved = client.post(f"/api/supervisor/time-exceptions/{shift_id}:missed_clock_out/approve", json={})
    assert approved.status_code == 200
    assert approved.get_json()["status"] == "approved"

    assert client.put("/api/compliance/schedule", json={"weekday": 1, "hour": 9, "minute": 0}).status_code == 403
    assert client.get("/api/team/shifts").get_json()["totals"][0]["user_name"] == "Stu Staff"
