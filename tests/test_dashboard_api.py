from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from src.models.products import UserRole
from src.shared.time import business_now

ADMIN_HEADERS = {"X-User-Id": "1", "X-User-Role": "admin"}
COUNSELLOR_HEADERS = {"X-User-Id": "7", "X-User-Role": "counsellor"}


@pytest.fixture(autouse=True)
def seed(clients_repository, staged_repository) -> None:
    today = business_now().date()
    clients_repository.add_user(1, UserRole.ADMIN)
    clients_repository.add_user(5, UserRole.MANAGER)
    clients_repository.add_user(7, UserRole.COUNSELLOR, full_name="Asha", manager_id=5)
    clients_repository.add_user(8, UserRole.COUNSELLOR, full_name="Ben")
    clients_repository.add_client(1, counsellor_id=7, enrollment_date=today)
    clients_repository.add_client(2, counsellor_id=8)
    staged_repository.insert_payment(
        {
            "client_id": 1,
            "stage": "INITIAL",
            "amount": Decimal("1000"),
            "total_payment": Decimal("5000"),
            "payment_date": today,
            "invoice_no": "INV-1",
        }
    )


def test_admin_dashboard_stats(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/dashboard/stats?filter=monthly", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    payload = response.json()
    data = payload["data"]
    assert data["view"] == "admin"
    assert Decimal(data["revenue"]) == Decimal("1000")
    assert Decimal(data["totalPendingAmount"]["pendingAmount"]) == Decimal("4000")
    assert data["revenueChange"]["changeType"] == "increase"
    assert data["leaderboard"][0]["fullName"] == "Asha"
    assert data["chartData"]["filter"] == "monthly"
    assert payload["meta"]["timeWindow"] == "monthly"


def test_counsellor_dashboard_hides_amounts(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/dashboard/stats", headers=COUNSELLOR_HEADERS)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["view"] == "counsellor"
    assert data["filter"] == "today"
    assert data["coreSale"] == {"number": 1, "amount": None}
    assert data["individualPerformance"]["periodLabel"] == "Today vs Yesterday"
    assert data["totalClients"] == 1


def test_dashboard_requires_principal_headers(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/dashboard/stats")
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_dashboard_rejects_unknown_role(api_client: TestClient) -> None:
    response = api_client.get(
        "/api/v1/dashboard/stats", headers={"X-User-Id": "1", "X-User-Role": "owner"}
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "bad_request"


def test_dashboard_rejects_unknown_filter(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/dashboard/stats?filter=hourly", headers=ADMIN_HEADERS)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "bad_request"


def test_leaderboard_for_period(api_client: TestClient) -> None:
    now = business_now()
    response = api_client.get(f"/api/v1/leaderboard?month={now.month}&year={now.year}")
    assert response.status_code == 200
    payload = response.json()
    entries = payload["data"]["entries"]
    assert [entry["rank"] for entry in entries] == [1, 2]
    assert entries[0]["counsellorId"] == 7
    assert entries[0]["enrollments"] == 1
    assert payload["meta"]["timeWindow"] == f"{now.year}-{now.month:02d}"


def test_leaderboard_summary_defaults_to_current_month(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/leaderboard/summary")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalCounsellors"] == 2
    assert data["totalEnrollments"] == 1


def test_leaderboard_rejects_bad_month(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/leaderboard?month=13&year=2026")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "bad_request"


def test_leaderboard_targets(api_client: TestClient) -> None:
    now = business_now()
    body = {"counsellorId": 7, "managerId": 5, "target": 10, "month": now.month, "year": now.year}
    created = api_client.post("/api/v1/leaderboard/targets", json=body)
    assert created.status_code == 200
    target = created.json()["data"]["target"]
    assert created.json()["data"]["action"] == "CREATED"
    assert target["achievedTarget"] == 1

    patched = api_client.patch(f"/api/v1/leaderboard/targets/{target['id']}", json={"target": 15})
    assert patched.status_code == 200
    assert patched.json()["data"]["target"] == 15

    missing = api_client.patch("/api/v1/leaderboard/targets/999", json={"target": 15})
    assert missing.status_code == 404

    invalid = api_client.post("/api/v1/leaderboard/targets", json={**body, "target": 0})
    assert invalid.status_code == 422


def test_clients_are_scoped_and_paginated(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/clients?page_size=1", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    payload = response.json()
    assert payload["pagination"]["totalItems"] == 2
    assert len(payload["data"]) == 1

    mine = api_client.get("/api/v1/clients", headers=COUNSELLOR_HEADERS)
    assert [row["clientId"] for row in mine.json()["data"]] == [1]

    hidden = api_client.get("/api/v1/clients/2", headers=COUNSELLOR_HEADERS)
    assert hidden.status_code == 404


def test_client_detail(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/clients/1", headers=COUNSELLOR_HEADERS)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["client"]["clientId"] == 1
    assert data["payments"][0]["invoiceNo"] == "INV-1"
    assert data["productPayments"] == []


def test_client_write_routes(api_client: TestClient) -> None:
    created = api_client.post(
        "/api/v1/clients",
        json={"fullName": "Meera Das", "enrollmentDate": "2026-10-02", "saleTypeId": 1, "leadTypeId": 2},
        headers=COUNSELLOR_HEADERS,
    )
    assert created.status_code == 200
    client_id = created.json()["data"]["client"]["clientId"]
    assert created.json()["data"]["action"] == "CREATED"

    archived = api_client.patch(
        f"/api/v1/clients/{client_id}/archive", json={"archived": True}, headers=COUNSELLOR_HEADERS
    )
    assert archived.status_code == 200
    assert archived.json()["data"]["action"] == "ARCHIVED"

    listed = api_client.get("/api/v1/clients/archived", headers=COUNSELLOR_HEADERS)
    assert [row["clientId"] for row in listed.json()["data"]] == [client_id]

    moved = api_client.patch(
        f"/api/v1/clients/{client_id}/transfer", json={"counsellorId": 8}, headers=ADMIN_HEADERS
    )
    assert moved.status_code == 200
    assert moved.json()["data"]["previousCounsellorId"] == 7
    assert moved.json()["data"]["client"]["counsellorId"] == 8


def test_client_archive_errors(api_client: TestClient) -> None:
    not_bool = api_client.patch("/api/v1/clients/1/archive", json={"archived": "yes"}, headers=ADMIN_HEADERS)
    assert not_bool.status_code == 422

    forbidden = api_client.patch("/api/v1/clients/2/archive", json={"archived": True}, headers=COUNSELLOR_HEADERS)
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "forbidden"
