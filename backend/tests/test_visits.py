"""Visit tracking and visit statistics."""
from datetime import datetime, timedelta

from pharmasales.models import Visit


def test_record_visit_fills_request_metadata(client, pharmacist):
    response = client.post(
        "/api/visits",
        json={"path": "/reports", "method": "GET"},
        headers={**pharmacist.headers, "User-Agent": "pytest-agent", "Referer": "/home"},
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["path"] == "/reports"
    assert data["userAgent"] == "pytest-agent"
    assert data["referer"] == "/home"
    assert data["ipAddress"]
    assert data["user"]["username"] == "pharmacist"


def test_record_visit_validates_method(client, pharmacist):
    response = client.post("/api/visits", json={"path": "/reports", "method": "TRACE"}, headers=pharmacist.headers)

    assert response.status_code == 400


def test_visits_require_authentication(client):
    assert client.post("/api/visits", json={"path": "/reports"}).status_code == 401


def test_listing_is_admin_only(client, pharmacist):
    assert client.get("/api/visits", headers=pharmacist.headers).status_code == 403
    assert client.get("/api/visits/stats", headers=pharmacist.headers).status_code == 403


def test_list_visits_filters_by_user(client, admin, pharmacist, supervisor):
    client.post("/api/visits", json={"path": "/a"}, headers=pharmacist.headers)
    client.post("/api/visits", json={"path": "/b"}, headers=supervisor.headers)

    response = client.get("/api/visits", params={"userId": pharmacist.id}, headers=admin.headers)

    body = response.json()
    assert body["total"] == 1
    assert body["data"][0]["path"] == "/a"


def test_visit_stats(client, admin, pharmacist, supervisor, seed):
    now = datetime.utcnow()
    seed(
        Visit(user_id=pharmacist.id, path="/reports", method="GET", created_at=now - timedelta(days=1)),
        Visit(user_id=pharmacist.id, path="/reports", method="GET", created_at=now - timedelta(days=1)),
        Visit(user_id=pharmacist.id, path="/catalog", method="GET", created_at=now),
        Visit(user_id=supervisor.id, path="/reports", method="GET", created_at=now - timedelta(days=90)),
    )

    response = client.get("/api/visits/stats", headers=admin.headers)

    data = response.json()["data"]
    assert data["totalVisits"] == 4
    assert data["uniqueUsers"] == 2
    assert data["mostVisitedPages"][0] == {"path": "/reports", "count": 3}
    top_user = data["visitsByUser"][0]
    assert top_user["user"]["username"] == "pharmacist"
    assert top_user["count"] == 3
    assert sum(day["count"] for day in data["visitsByDay"]) == 3


def test_visit_stats_respects_date_range(client, admin, pharmacist, seed):
    seed(
        Visit(user_id=pharmacist.id, path="/old", method="GET", created_at=datetime(2023, 5, 1, 12, 0)),
        Visit(user_id=pharmacist.id, path="/new", method="GET", created_at=datetime(2024, 5, 1, 12, 0)),
    )

    response = client.get(
        "/api/visits/stats", params={"startDate": "2024-01-01", "endDate": "2024-12-31"}, headers=admin.headers
    )

    data = response.json()["data"]
    assert data["totalVisits"] == 1
    assert data["mostVisitedPages"] == [{"path": "/new", "count": 1}]
