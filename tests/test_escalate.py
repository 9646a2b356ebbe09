"""Escalate (Accepted -> Emergency) + proximity alerting tests."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from app.core.errors import AlertPersistenceError
from app.models.alert import Alert
from app.models.alert_recipient import AlertRecipient
from app.services.alert_service import create_alert
from app.services.geo_service import NearbyVolunteer

MUMBAI = (19.0760, 72.8777)
# ~2 km and ~50 km due north of MUMBAI
TWO_KM_NORTH = (19.0940, 72.8777)
FIFTY_KM_NORTH = (19.5257, 72.8777)


def _count(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_escalation_scenario(client, notifier, register_volunteer, submit_request, db_session):
    """A claims, B is refused, A escalates; only C (2 km) is alerted, not D (50 km)."""
    req = submit_request(*MUMBAI, urgency="Critical")
    a_id, a_headers = register_volunteer("vol_a@test.com", name="A")
    _, b_headers = register_volunteer("vol_b@test.com", name="B")
    c_id, _ = register_volunteer("+919800000003", name="C", latitude=TWO_KM_NORTH[0], longitude=TWO_KM_NORTH[1])
    register_volunteer("+919800000004", name="D", latitude=FIFTY_KM_NORTH[0], longitude=FIFTY_KM_NORTH[1])

    r = client.patch("/lifecycle", headers=a_headers, json={"requestId": req["id"]})
    assert r.json()["status"] == "accepted"
    assert r.json()["assigned_to"] == a_id

    r = client.patch("/lifecycle", headers=b_headers, json={"requestId": req["id"]})
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "ALREADY_CLAIMED"

    r = client.put("/lifecycle", headers=a_headers, json={"requestId": req["id"]})
    assert r.status_code == 200
    data = r.json()
    assert data["request"]["status"] == "emergency"
    assert data["authority_notified"] is True
    assert data["warnings"] == []

    recipients = data["alert"]["recipients"]
    assert [rec["volunteer_id"] for rec in recipients] == [c_id]
    assert recipients[0]["name"] == "C"
    assert data["alert"]["request_id"] == req["id"]
    assert data["alert"]["latitude"] == MUMBAI[0]

    assert _count(db_session, Alert) == 1
    assert _count(db_session, AlertRecipient) == 1

    # authority email with a map link, and an SMS to C
    to, subject, body = notifier.emails[0]
    assert to == "government@example.com"
    assert "19.076" in subject
    assert "https://www.google.com/maps?q=19.076,72.8777" in body
    assert notifier.sms == [("+919800000003", data["alert"]["message"])]


def test_escalation_with_n_recipients_persists_all(client, register_volunteer, submit_request, db_session):
    req = submit_request(*MUMBAI)
    _, headers = register_volunteer("owner_n@test.com")
    for i in range(4):
        register_volunteer(f"near{i}@test.com", latitude=MUMBAI[0] + 0.01 * (i + 1), longitude=MUMBAI[1])
    client.patch("/lifecycle", headers=headers, json={"requestId": req["id"]})

    r = client.put("/lifecycle", headers=headers, json={"requestId": req["id"]})
    assert r.status_code == 200
    assert len(r.json()["alert"]["recipients"]) == 4
    assert _count(db_session, Alert) == 1
    assert _count(db_session, AlertRecipient) == 4


def test_escalating_volunteer_is_not_a_recipient(client, register_volunteer, submit_request):
    req = submit_request(*MUMBAI)
    _, headers = register_volunteer("self@test.com", latitude=MUMBAI[0], longitude=MUMBAI[1])
    other_id, _ = register_volunteer("other@test.com", latitude=TWO_KM_NORTH[0], longitude=TWO_KM_NORTH[1])
    client.patch("/lifecycle", headers=headers, json={"requestId": req["id"]})

    r = client.put("/lifecycle", headers=headers, json={"requestId": req["id"]})
    assert [rec["volunteer_id"] for rec in r.json()["alert"]["recipients"]] == [other_id]


def test_no_recipients_keeps_emergency_without_alert(client, notifier, register_volunteer, submit_request, db_session):
    req = submit_request(*MUMBAI)
    _, headers = register_volunteer("alone@test.com")
    register_volunteer("far@test.com", latitude=FIFTY_KM_NORTH[0], longitude=FIFTY_KM_NORTH[1])
    client.patch("/lifecycle", headers=headers, json={"requestId": req["id"]})

    r = client.put("/lifecycle", headers=headers, json={"requestId": req["id"]})
    assert r.status_code == 404
    body = r.json()
    assert body["detail"]["code"] == "NO_RECIPIENTS_FOUND"
    assert body["request"]["status"] == "emergency"

    assert client.get(f"/requests/{req['id']}", headers=headers).json()["status"] == "emergency"
    assert _count(db_session, Alert) == 0
    # the authority is still told
    assert len(notifier.emails) == 1


def test_non_assignee_cannot_escalate(client, notifier, register_volunteer, submit_request, db_session):
    req = submit_request(*MUMBAI)
    owner_id, owner_headers = register_volunteer("esc_owner@test.com")
    _, other_headers = register_volunteer("esc_other@test.com", latitude=TWO_KM_NORTH[0], longitude=TWO_KM_NORTH[1])
    client.patch("/lifecycle", headers=owner_headers, json={"requestId": req["id"]})

    r = client.put("/lifecycle", headers=other_headers, json={"requestId": req["id"]})
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "NOT_ELIGIBLE"

    current = client.get(f"/requests/{req['id']}", headers=owner_headers).json()
    assert current["status"] == "accepted"
    assert current["assigned_to"] == owner_id
    assert notifier.emails == []
    assert _count(db_session, Alert) == 0


def test_cannot_escalate_twice(client, register_volunteer, submit_request, db_session):
    req = submit_request(*MUMBAI)
    _, headers = register_volunteer("twice@test.com")
    register_volunteer("twice_near@test.com", latitude=TWO_KM_NORTH[0], longitude=TWO_KM_NORTH[1])
    client.patch("/lifecycle", headers=headers, json={"requestId": req["id"]})

    assert client.put("/lifecycle", headers=headers, json={"requestId": req["id"]}).status_code == 200
    r = client.put("/lifecycle", headers=headers, json={"requestId": req["id"]})
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "NOT_ELIGIBLE"
    assert _count(db_session, Alert) == 1


def test_authority_email_failure_is_not_fatal(client, notifier, register_volunteer, submit_request):
    notifier.fail_email_to.add("government@example.com")
    req = submit_request(*MUMBAI)
    _, headers = register_volunteer("auth_fail@test.com")
    register_volunteer("auth_fail_near@test.com", latitude=TWO_KM_NORTH[0], longitude=TWO_KM_NORTH[1])
    client.patch("/lifecycle", headers=headers, json={"requestId": req["id"]})

    r = client.put("/lifecycle", headers=headers, json={"requestId": req["id"]})
    assert r.status_code == 200
    assert r.json()["authority_notified"] is False
    assert r.json()["request"]["status"] == "emergency"
    assert r.json()["alert"] is not None


def test_partial_delivery_failure_keeps_alert(client, notifier, register_volunteer, submit_request, db_session):
    req = submit_request(*MUMBAI)
    _, headers = register_volunteer("partial@test.com")
    ok_id, _ = register_volunteer("+919811111111", latitude=TWO_KM_NORTH[0], longitude=TWO_KM_NORTH[1])
    bad_id, _ = register_volunteer("+919822222222", latitude=19.0800, longitude=72.8800)
    notifier.fail_sms_to.add("+919822222222")
    client.patch("/lifecycle", headers=headers, json={"requestId": req["id"]})

    r = client.put("/lifecycle", headers=headers, json={"requestId": req["id"]})
    assert r.status_code == 200
    warnings = r.json()["warnings"]
    assert [w["code"] for w in warnings] == ["PARTIAL_DELIVERY_FAILURE"]
    assert warnings[0]["failed_recipient_ids"] == [bad_id]
    assert {rec["volunteer_id"] for rec in r.json()["alert"]["recipients"]} == {ok_id, bad_id}
    assert _count(db_session, AlertRecipient) == 2


def test_alert_transaction_is_all_or_nothing(db_session):
    """A failing recipient row rolls back the alert and every other recipient."""
    recipients = [
        NearbyVolunteer(id=None, name="Good", contact="+15550000001", distance_km=1.0),
        NearbyVolunteer(id=None, name="Also good", contact="+15550000002", distance_km=1.5),
        NearbyVolunteer(id=None, name=None, contact="+15550000003", distance_km=2.0),
    ]
    with pytest.raises(AlertPersistenceError):
        create_alert(db_session, MUMBAI, "flood", datetime.now(timezone.utc), recipients)

    assert _count(db_session, Alert) == 0
    assert _count(db_session, AlertRecipient) == 0


def test_alert_requires_recipients(db_session):
    with pytest.raises(ValueError):
        create_alert(db_session, MUMBAI, "flood", datetime.now(timezone.utc), [])
