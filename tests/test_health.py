from __future__ import annotations


def test_health_check(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["data"]["status"] == "ok"
    assert payload["data"]["service"] == "Counsellor CRM Backend"
    assert payload["data"]["businessTimezone"] == "UTC"
    assert payload["pagination"] is None
    assert payload["meta"]["source"] == "system"
    assert payload["meta"]["businessTimezone"] == "UTC"
    assert "calculationVersion" not in payload["meta"]


def test_meta_is_stamped_with_business_day(business_clock):
    from src.shared.response import build_meta

    meta = build_meta("client_payments", "monthly")

    assert meta.as_of_date == "2031-01-01"
    assert meta.business_timezone == "Etc/GMT-14"
    assert meta.model_dump(by_alias=True)["timeWindow"] == "monthly"
