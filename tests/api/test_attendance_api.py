import pytest

from hr_attendance.core.enums import EmploymentStatus, ShiftKind
from hr_attendance.employees.model import Employee
from hr_attendance.main import create_app


@pytest.fixture
def client(monkeypatch, container, repos):
    monkeypatch.setenv("APP_ENV", "testing")
    repos["employees_repo"].add(Employee(7, "Pending Hire", ShiftKind.DAY, EmploymentStatus.PENDING))
    app = create_app(container=container)
    return app.test_client()


def _login(client, role="Employee", employee_id=1):
    with client.session_transaction() as sess:
        sess["role"] = role
        sess["employee_id"] = employee_id


def test_checkin_unknown_employee_is_404(client):
    resp = client.post("/api/attendance/checkin", json={"employee_id": 999})

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_checkin_blocked_employee_is_400(client):
    resp = client.post("/api/attendance/checkin", json={"employee_id": 7})

    assert resp.status_code == 400
    assert "Pending" in resp.get_json()["message"]


def test_checkin_without_employee_is_400(client):
    resp = client.post("/api/attendance/checkin", json={})

    assert resp.status_code == 400


def test_manual_create_requires_admin_session(client):
    _login(client, role="Manager")

    resp = client.post("/api/attendance", json={"employee_id": 1, "date": "2024-05-01", "check_in": "09:10"})

    assert resp.status_code == 403


def test_admin_manual_create_and_history(client):
    _login(client, role="Admin")

    resp = client.post(
        "/api/attendance",
        json={"employee_id": 1, "date": "2024-05-01", "check_in": "09:10", "check_out": "18:00"},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["attendance"]["status"] == "graced"
    assert body["attendance"]["manually_created"] is True

    history = client.get("/api/attendance/employee/1?limit=5").get_json()
    assert history["records"][0]["check_in"] == "09:10"


def test_admin_patch_pins_status(client):
    _login(client, role="Admin")
    created = client.post(
        "/api/attendance", json={"employee_id": 1, "date": "2024-05-01", "check_in": "09:00"}
    ).get_json()["attendance"]

    resp = client.patch(f"/api/attendance/{created['attendance_id']}", json={"status": "late"})

    assert resp.status_code == 200
    assert resp.get_json()["attendance"]["is_status_updated"] is True


def test_patch_with_unknown_status_is_400(client):
    _login(client, role="Admin")

    resp = client.patch("/api/attendance/1", json={"status": "sleeping"})

    assert resp.status_code == 400


def test_auto_checkout_endpoint(client):
    _login(client, role="Admin")

    resp = client.post("/api/attendance/auto-checkout", json={"process_all": True})

    assert resp.status_code == 200
    assert resp.get_json()["result"]["scope"] == "all dates"


def test_summary_and_report_endpoints(client):
    resp = client.get("/api/attendance/summary?start_date=2024-05-01&end_date=2024-05-02")
    assert resp.status_code == 200
    assert len(resp.get_json()["days"]) == 2

    report = client.get("/api/attendance/report?year=2024&month=2")
    assert report.status_code == 200
    assert len(report.get_json()["employees"][0]["summary"]) == 29


def test_bad_date_is_400(client):
    resp = client.get("/api/attendance/summary?start_date=05/01/2024")

    assert resp.status_code == 400


def test_work_stats_endpoint(client):
    resp = client.get("/api/attendance/work-stats/1?start_date=2024-05-01&end_date=2024-05-03")

    assert resp.status_code == 200
    assert len(resp.get_json()["stats"]["days"]) == 3


def test_get_record_and_ranged_history(client):
    _login(client, role="Admin")
    created = client.post(
        "/api/attendance", json={"employee_id": 1, "date": "2024-05-01", "check_in": "09:00"}
    ).get_json()["attendance"]
    client.post("/api/attendance", json={"employee_id": 1, "date": "2024-05-03", "check_in": "09:00"})

    resp = client.get(f"/api/attendance/{created['attendance_id']}")
    assert resp.status_code == 200
    assert resp.get_json()["attendance"]["date"] == "2024-05-01"
    assert client.get("/api/attendance/404").status_code == 404

    history = client.get("/api/attendance/employee/1?start_date=2024-05-01&end_date=2024-05-02").get_json()
    assert [r["date"] for r in history["records"]] == ["2024-05-01"]
    assert client.get("/api/attendance/employee/1?start_date=2024-05-01").status_code == 400


def test_attendance_stats_endpoint(client):
    _login(client, role="Admin")
    client.post("/api/attendance", json={"employee_id": 1, "date": "2024-05-01", "check_in": "09:40"})

    resp = client.get("/api/attendance/stats?start_date=2024-05-01&end_date=2024-05-02&department_ids=10")

    assert resp.status_code == 200
    body = resp.get_json()
    assert [row["employee_id"] for row in body["stats"]] == [1]
    assert body["stats"][0]["late_count"] == 1
    assert body["totals"]["total_absent"] == 1
