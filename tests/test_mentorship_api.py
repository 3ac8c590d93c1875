import uuid
from datetime import datetime, timezone

from clstr.core.config import settings
from clstr.schemas.notification import Connection, ConnectionStatus, Notification, NotificationType

from conftest import add_user

SECRET = {"X-Internal-Secret": settings.SECRET_KEY}


def _offer_as(client, session, mentor, **fields):
    session.login(mentor)
    r = client.put("/api/v1/mentorship/offer/me", json={"available_slots": 2, **fields})
    assert r.status_code == 200
    return r.json()


def test_list_mentors(client, session, store):
    mentor = add_user(store, "Alumni", "Alex Alumni")
    _offer_as(client, session, mentor)

    session.login(add_user(store, "Student"))
    r = client.get("/api/v1/mentorship/mentors")

    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 1
    assert data["mentors"][0]["full_name"] == "Alex Alumni"
    assert data["mentors"][0]["badge_status"] == "available"
    assert data["mentors"][0]["remaining_slots"] == 2


def test_club_cannot_browse(client, session, store):
    session.login(add_user(store, "Club"))

    r = client.get("/api/v1/mentorship/mentors")

    assert r.status_code == 403
    assert r.json()["code"] == "NotAuthorized"


def test_get_mentor_nonexistent(client, session, store):
    session.login(add_user(store, "Student"))

    r = client.get(f"/api/v1/mentorship/mentors/{uuid.uuid4()}")

    assert r.status_code == 404


def test_missing_profile_is_forbidden(client, session, store):
    session.login(add_user(store, "Student"))
    session.user_id = uuid.uuid4()

    r = client.get("/api/v1/mentorship/mentors")

    assert r.status_code == 403


def test_request_lifecycle(client, session, store):
    mentor = add_user(store, "Alumni", "Alex Alumni")
    mentee = add_user(store, "Student", "Sam Student")
    _offer_as(client, session, mentor)

    session.login(mentee)
    r = client.post(
        "/api/v1/mentorship/requests",
        json={"mentor_id": str(mentor.id), "topic": "Internships", "message": "Hello"},
    )
    assert r.status_code == 201
    request = r.json()
    assert request["status"] == "pending"
    assert request["mentor"]["full_name"] == "Alex Alumni"

    r = client.post(
        "/api/v1/mentorship/requests",
        json={"mentor_id": str(mentor.id), "topic": "Again"},
    )
    assert r.status_code == 409
    assert r.json()["code"] == "DuplicateActiveRequest"

    r = client.post(f"/api/v1/mentorship/requests/{request['id']}/accept")
    assert r.status_code == 403

    session.login(mentor)
    received = client.get("/api/v1/mentorship/requests/received?status=pending").json()
    assert received["total"] == 1

    r = client.post(f"/api/v1/mentorship/requests/{request['id']}/accept")
    assert r.status_code == 200
    assert r.json()["already_applied"] is False

    r = client.post(f"/api/v1/mentorship/requests/{request['id']}/accept")
    assert r.status_code == 200
    assert r.json()["already_applied"] is True

    offer = client.get("/api/v1/mentorship/offer/me").json()
    assert offer["current_mentees"] == 1

    r = client.post(f"/api/v1/mentorship/requests/{request['id']}/complete")
    assert r.status_code == 200
    assert client.get("/api/v1/mentorship/offer/me").json()["current_mentees"] == 0

    session.login(mentee)
    r = client.post(
        f"/api/v1/mentorship/requests/{request['id']}/feedback", json={"helpful": True}
    )
    assert r.status_code == 200

    sent = client.get("/api/v1/mentorship/requests/sent").json()
    assert sent["requests"][0]["status"] == "completed"
    assert sent["requests"][0]["mentee_feedback"] is True


def test_reject_and_follow_suggestion(client, session, store):
    mentor = add_user(store, "Alumni")
    other = add_user(store, "Faculty", "Fran Faculty")
    mentee = add_user(store, "Student")
    _offer_as(client, session, mentor)
    _offer_as(client, session, other)

    session.login(mentee)
    request = client.post(
        "/api/v1/mentorship/requests",
        json={"mentor_id": str(mentor.id), "topic": "Research"},
    ).json()

    session.login(mentor)
    r = client.post(
        f"/api/v1/mentorship/requests/{request['id']}/reject",
        json={"suggested_mentor_id": str(other.id)},
    )
    assert r.status_code == 200

    session.login(mentee)
    suggestion = client.get(f"/api/v1/mentorship/requests/{request['id']}/suggestion").json()
    assert suggestion["full_name"] == "Fran Faculty"

    r = client.post(f"/api/v1/mentorship/requests/{request['id']}/suggestion/request")
    assert r.status_code == 201
    assert r.json()["mentor"]["id"] == str(other.id)
    assert r.json()["topics"] == ["Research"]


def test_reject_without_body(client, session, store):
    mentor = add_user(store, "Alumni")
    mentee = add_user(store, "Student")
    _offer_as(client, session, mentor)

    session.login(mentee)
    request = client.post(
        "/api/v1/mentorship/requests",
        json={"mentor_id": str(mentor.id), "topic": "Research"},
    ).json()

    session.login(mentor)
    assert client.post(f"/api/v1/mentorship/requests/{request['id']}/reject").status_code == 200

    session.login(mentee)
    r = client.get(f"/api/v1/mentorship/requests/{request['id']}/suggestion")
    assert r.status_code == 200
    assert r.json() is None


def test_pause_offer(client, session, store):
    mentor = add_user(store, "Alumni")
    _offer_as(client, session, mentor)

    r = client.post("/api/v1/mentorship/offer/me/pause", json={"paused": True})

    assert r.status_code == 200
    assert r.json()["is_paused"] is True


def test_offer_update_keeps_pause_when_flag_omitted(client, session, store):
    mentor = add_user(store, "Alumni")
    _offer_as(client, session, mentor)
    client.post("/api/v1/mentorship/offer/me/pause", json={"paused": True})

    data = _offer_as(client, session, mentor, availability_schedule="Weekends")

    assert data["is_paused"] is True


def test_student_cannot_offer(client, session, store):
    session.login(add_user(store, "Student"))

    r = client.put("/api/v1/mentorship/offer/me", json={"available_slots": 2})

    assert r.status_code == 403


def test_expire_requires_secret(client):
    assert client.post("/api/v1/mentorship/maintenance/expire").status_code == 401

    r = client.post(
        "/api/v1/mentorship/maintenance/expire", headers={"X-Internal-Secret": "wrong"}
    )
    assert r.status_code == 403

    r = client.post("/api/v1/mentorship/maintenance/expire", headers=SECRET)
    assert r.status_code == 200
    assert r.json() == {"expired": 0, "request_ids": []}


# ==========================================
# Notifications
# ==========================================


def test_notifications_carry_actionability(client, session, store):
    me = add_user(store, "Student")
    pending = store.add_connection(
        Connection(
            id=uuid.uuid4(),
            requester_id=uuid.uuid4(),
            receiver_id=me.id,
            status=ConnectionStatus.PENDING,
        )
    )
    for related_id in (pending.id, uuid.uuid4()):
        store.insert_notification(
            Notification(
                id=uuid.uuid4(),
                user_id=me.id,
                type=NotificationType.CONNECTION,
                content="New connection request",
                related_id=related_id,
                created_at=datetime.now(timezone.utc),
            )
        )

    session.login(me)
    data = client.get("/api/v1/notifications").json()

    assert data["total"] == 2
    assert data["unread_count"] == 2
    by_related = {n["related_id"]: n["actionable"] for n in data["notifications"]}
    assert by_related[str(pending.id)] is True
    assert list(by_related.values()).count(False) == 1


def test_notifications_list_types_from_other_features(client, session, store):
    me = add_user(store, "Student")
    for kind in ("club", "project", "badge"):
        store.insert_notification(
            Notification(
                id=uuid.uuid4(),
                user_id=me.id,
                type=kind,
                content=f"New {kind} activity",
                related_id=uuid.uuid4(),
                created_at=datetime.now(timezone.utc),
            )
        )
    session.login(me)

    r = client.get("/api/v1/notifications")

    assert r.status_code == 200
    notes = r.json()["notifications"]
    assert sorted(n["type"] for n in notes) == ["badge", "club", "project"]
    assert not any(n["actionable"] for n in notes)


def test_mark_notifications_read(client, session, store):
    me = add_user(store, "Student")
    note = store.insert_notification(
        Notification(
            id=uuid.uuid4(),
            user_id=me.id,
            type=NotificationType.SYSTEM,
            content="Welcome",
            created_at=datetime.now(timezone.utc),
        )
    )
    session.login(me)

    assert client.patch(f"/api/v1/notifications/{note.id}/read").status_code == 200
    assert client.patch(f"/api/v1/notifications/{note.id}/read").status_code == 200
    assert client.patch(f"/api/v1/notifications/{uuid.uuid4()}/read").status_code == 404
    assert client.patch("/api/v1/notifications/read-all").status_code == 200
    assert client.get("/api/v1/notifications").json()["unread_count"] == 0


def test_push_subscription_roundtrip(client, session, store):
    me = add_user(store, "Student")
    session.login(me)
    body = {"endpoint": "https://push.example/abc", "p256dh": "key", "auth": "secret"}

    assert client.post("/api/v1/notifications/push/subscribe", json=body).status_code == 201
    assert len(store.list_push_subscriptions(me.id)) == 1

    assert client.request("DELETE", "/api/v1/notifications/push/subscribe", json=body).status_code == 200
    assert store.list_push_subscriptions(me.id) == []


# ==========================================
# Realtime webhook
# ==========================================


def test_realtime_change_webhook(client):
    payload = {
        "type": "UPDATE",
        "table": "mentorship_requests",
        "schema": "public",
        "record": {"mentee_id": "m1", "mentor_id": "t1", "status": "accepted"},
        "old_record": {"status": "pending"},
    }

    assert client.post("/api/v1/realtime/changes", json=payload).status_code == 401

    r = client.post("/api/v1/realtime/changes", json=payload, headers=SECRET)

    assert r.status_code == 200
    data = r.json()
    assert "mentorship-requests-mentee-m1" in data["channels"]
    assert ["mentorship", "my-requests", "m1"] in data["invalidate"]
