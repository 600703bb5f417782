"""Pharmacies and pharmacist assignment."""


def pharmacy_payload(**overrides):
    payload = {
        "branchCode": 301,
        "name": "  Downtown Pharmacy ",
        "address": {"street": "12 Tahrir St", "city": "Cairo"},
        "contact": {"phone": "0223456789", "email": "Downtown@Pharma.com"},
        "workingHours": {"open": "08:00", "close": "23:00", "days": ["Monday", "Tuesday"]},
    }
    payload.update(overrides)
    return payload


def test_admin_creates_pharmacy(client, admin, supervisor, pharmacist):
    response = client.post(
        "/api/pharmacies",
        json=pharmacy_payload(supervisor=supervisor.id, pharmacists=[pharmacist.id]),
        headers=admin.headers,
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["name"] == "Downtown Pharmacy"
    assert data["contact"]["email"] == "downtown@pharma.com"
    assert data["address"]["country"] == "Egypt"
    assert data["supervisor"]["username"] == "supervisor"
    assert [p["id"] for p in data["pharmacists"]] == [pharmacist.id]


def test_supervisor_becomes_supervisor_of_created_pharmacy(client, supervisor, other_supervisor):
    response = client.post(
        "/api/pharmacies", json=pharmacy_payload(supervisor=other_supervisor.id), headers=supervisor.headers
    )

    assert response.json()["data"]["supervisor"]["id"] == supervisor.id


def test_pharmacist_cannot_create(client, pharmacist):
    response = client.post("/api/pharmacies", json=pharmacy_payload(), headers=pharmacist.headers)

    assert response.status_code == 403


def test_duplicate_branch_code(client, admin, make_pharmacy):
    make_pharmacy(301)

    response = client.post("/api/pharmacies", json=pharmacy_payload(), headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["message"] == "branchCode already exists"


def test_unknown_pharmacist_is_rejected(client, admin):
    response = client.post("/api/pharmacies", json=pharmacy_payload(pharmacists=[9999]), headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Pharmacist not found: 9999"


def test_invalid_weekday_is_rejected(client, admin):
    payload = pharmacy_payload(workingHours={"days": ["Funday"]})

    response = client.post("/api/pharmacies", json=payload, headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"


def test_legacy_single_pharmacist_field(client, admin, pharmacist):
    response = client.post("/api/pharmacies", json=pharmacy_payload(pharmacist=pharmacist.id), headers=admin.headers)

    assert [p["id"] for p in response.json()["data"]["pharmacists"]] == [pharmacist.id]


def test_supervisor_lists_only_own_pharmacies(client, supervisor, other_supervisor, make_pharmacy):
    make_pharmacy(101, supervisor.id)
    make_pharmacy(200, other_supervisor.id)

    response = client.get("/api/pharmacies", headers=supervisor.headers)

    assert [p["branchCode"] for p in response.json()["data"]] == [101]


def test_list_filters_by_city_and_search(client, admin, make_pharmacy):
    make_pharmacy(101, name="Nile Pharmacy")
    make_pharmacy(102, name="Delta Pharmacy", address={"street": "5 Corniche", "city": "Alexandria"})

    by_city = client.get("/api/pharmacies", params={"city": "alex"}, headers=admin.headers).json()
    by_code = client.get("/api/pharmacies", params={"search": "101"}, headers=admin.headers).json()
    by_name = client.get("/api/pharmacies", params={"search": "nile"}, headers=admin.headers).json()

    assert [p["branchCode"] for p in by_city["data"]] == [102]
    assert [p["branchCode"] for p in by_code["data"]] == [101]
    assert [p["name"] for p in by_name["data"]] == ["Nile Pharmacy"]


def test_supervisor_cannot_view_or_update_foreign_pharmacy(client, supervisor, other_supervisor, make_pharmacy):
    foreign = make_pharmacy(200, other_supervisor.id)

    assert client.get(f"/api/pharmacies/{foreign.id}", headers=supervisor.headers).status_code == 403
    response = client.put(f"/api/pharmacies/{foreign.id}", json={"name": "Mine"}, headers=supervisor.headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to update this pharmacy"


def test_supervisor_update_keeps_supervisor(client, supervisor, other_supervisor, make_pharmacy):
    own = make_pharmacy(101, supervisor.id)

    response = client.put(
        f"/api/pharmacies/{own.id}",
        json={"name": "Renamed", "supervisor": other_supervisor.id, "isActive": False},
        headers=supervisor.headers,
    )

    data = response.json()["data"]
    assert data["name"] == "Renamed"
    assert data["isActive"] is False
    assert data["supervisor"]["id"] == supervisor.id
    assert data["branchCode"] == 101


def test_add_and_remove_pharmacist(client, admin, pharmacist, make_pharmacy):
    pharmacy = make_pharmacy(101)

    missing = client.post(f"/api/pharmacies/{pharmacy.id}/pharmacists", json={}, headers=admin.headers)
    assert missing.status_code == 400
    assert missing.json()["message"] == "Pharmacist ID is required"

    added = client.post(
        f"/api/pharmacies/{pharmacy.id}/pharmacists", json={"pharmacistId": pharmacist.id}, headers=admin.headers
    )
    assert [p["id"] for p in added.json()["data"]["pharmacists"]] == [pharmacist.id]

    again = client.post(
        f"/api/pharmacies/{pharmacy.id}/pharmacists", json={"pharmacistId": pharmacist.id}, headers=admin.headers
    )
    assert again.status_code == 400
    assert again.json()["message"] == "Pharmacist is already assigned to this pharmacy"

    removed = client.delete(f"/api/pharmacies/{pharmacy.id}/pharmacists/{pharmacist.id}", headers=admin.headers)
    assert removed.json()["data"]["pharmacists"] == []


def test_delete_pharmacy(client, admin, make_pharmacy):
    pharmacy = make_pharmacy(101)

    response = client.delete(f"/api/pharmacies/{pharmacy.id}", headers=admin.headers)

    assert response.json()["message"] == "Pharmacy deleted successfully"
    assert client.get(f"/api/pharmacies/{pharmacy.id}", headers=admin.headers).status_code == 404
