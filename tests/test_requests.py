"""Help request intake tests."""

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.help_request import HelpRequest


def test_submit_request_is_pending_and_unassigned(client, submit_request):
    data = submit_request(19.0760, 72.8777, urgency="Critical")
    assert data["status"] == "pending"
    assert data["assigned_to"] is None
    assert data["urgency"] == "Critical"


def test_duplicate_coordinates_rejected(client, submit_request):
    submit_request(12.9716, 77.5946)
    r = client.post(
        "/requests",
        json={
            "name": "Other",
            "contact": "555-000-1111",
            "category": "Rescue",
            "urgency": "Low",
            "latitude": 12.9716,
            "longitude": 77.5946,
        },
    )
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "DUPLICATE_LOCATION"


def test_nearby_but_distinct_coordinates_allowed(client, submit_request):
    submit_request(12.9716, 77.5946)
    submit_request(12.97161, 77.5946)


def test_location_uniqueness_enforced_by_store(db_session):
    """The unique constraint holds even when the application check is bypassed."""
    for _ in range(2):
        db_session.add(
            HelpRequest(
                name="X",
                contact="555",
                category="Other",
                urgency="Low",
                latitude=1.5,
                longitude=2.5,
                status="pending",
            )
        )
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_invalid_fields_rejected(client):
    base = {
        "name": "A",
        "contact": "555-123-4567",
        "category": "Medical",
        "urgency": "High",
        "latitude": 10.0,
        "longitude": 10.0,
    }
    assert client.post("/requests", json={**base, "category": "Fire"}).status_code == 422
    assert client.post("/requests", json={**base, "urgency": "Extreme"}).status_code == 422
    assert client.post("/requests", json={**base, "latitude": 91}).status_code == 422
    assert client.post("/requests", json={**base, "longitude": -181}).status_code == 422


def test_list_requires_auth_and_filters_by_status(client, register_volunteer, submit_request):
    _, headers = register_volunteer("lister@test.com")
    first = submit_request(10.0, 10.0)
    submit_request(11.0, 11.0)
    client.patch("/lifecycle", headers=headers, json={"requestId": first["id"]})

    assert client.get("/requests").status_code == 401

    all_rows = client.get("/requests", headers=headers).json()
    assert len(all_rows) == 2

    accepted = client.get("/requests?status=ACCEPTED", headers=headers).json()
    assert [r["id"] for r in accepted] == [first["id"]]

    r = client.get(f"/requests/{first['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "accepted"
    assert client.get("/requests/9999", headers=headers).status_code == 404
