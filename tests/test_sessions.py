from datetime import datetime, timedelta, timezone

import pytest

from routers.sessions import price_for_duration


def booking(giver, duration=30, session_type="SILENT_PRESENCE"):
    return {
        "giver_id": giver.id,
        "session_type": session_type,
        "duration": duration,
        "scheduled_for": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
    }


@pytest.mark.parametrize("duration, price", [(10, 99), (30, 249), (60, 399), (45, 399)])
def test_price_for_duration(duration, price):
    assert price_for_duration(duration) == price


def test_book_session(client, seeker, giver, headers):
    res = client.post("/sessions/", json=booking(giver, duration=10), headers=headers(seeker))

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "SCHEDULED"
    assert body["payment_status"] == "PENDING"
    assert body["amount"] == 99
    assert body["meeting_link"].split("/")[-1].startswith("TimeRent-")
    assert body["seeker"]["name"] == "Alex Johnson"
    assert body["giver"]["name"] == "Sarah Chen"


def test_book_requires_auth(client, giver):
    assert client.post("/sessions/", json=booking(giver)).status_code == 401


def test_book_rejects_non_giver(client, seeker, make_user, headers):
    other_seeker = make_user("TIME_SEEKER")
    res = client.post("/sessions/", json=booking(other_seeker), headers=headers(seeker))
    assert res.status_code == 400


def test_book_rejects_unavailable_giver(client, seeker, make_user, headers):
    busy = make_user("TIME_GIVER", is_available=False)
    res = client.post("/sessions/", json=booking(busy), headers=headers(seeker))
    assert res.status_code == 400


def test_book_rejects_self(client, make_user, headers):
    both = make_user("BOTH")
    res = client.post("/sessions/", json=booking(both), headers=headers(both))
    assert res.status_code == 400


def test_book_rejects_unknown_session_type(client, seeker, giver, headers):
    res = client.post(
        "/sessions/", json=booking(giver, session_type="KARAOKE"), headers=headers(seeker)
    )
    assert res.status_code == 422


def test_list_sessions_for_both_participants(client, seeker, giver, make_user, make_session, headers):
    outsider = make_user("TIME_SEEKER")
    make_session(seeker, giver)
    make_session(outsider, giver)

    assert len(client.get("/sessions/", headers=headers(seeker)).json()) == 1
    assert len(client.get("/sessions/", headers=headers(giver)).json()) == 2
    assert len(client.get("/sessions/", headers=headers(outsider)).json()) == 1


def test_list_sessions_latest_first(client, seeker, giver, make_session, headers):
    now = datetime.now(timezone.utc)
    early = make_session(seeker, giver, scheduled_for=now + timedelta(days=1))
    late = make_session(seeker, giver, scheduled_for=now + timedelta(days=5))

    ids = [s["id"] for s in client.get("/sessions/", headers=headers(seeker)).json()]
    assert ids == [late.id, early.id]


def test_session_detail_hidden_from_outsiders(client, seeker, giver, make_user, make_session, headers):
    ts = make_session(seeker, giver)
    outsider = make_user("TIME_SEEKER")

    assert client.get(f"/sessions/{ts.id}", headers=headers(giver)).status_code == 200
    assert client.get(f"/sessions/{ts.id}", headers=headers(outsider)).status_code == 404


def test_update_session_status(client, seeker, giver, make_session, headers):
    ts = make_session(seeker, giver)
    started = datetime.now(timezone.utc).isoformat()

    res = client.patch(
        f"/sessions/{ts.id}",
        json={"status": "IN_PROGRESS", "started_at": started},
        headers=headers(giver),
    )
    assert res.status_code == 200
    assert res.json()["status"] == "IN_PROGRESS"
    assert res.json()["started_at"] is not None

    res = client.patch(f"/sessions/{ts.id}", json={"status": "COMPLETED"}, headers=headers(seeker))
    assert res.json()["status"] == "COMPLETED"


def test_update_session_rejects_unknown_status(client, seeker, giver, make_session, headers):
    ts = make_session(seeker, giver)
    res = client.patch(f"/sessions/{ts.id}", json={"status": "PAUSED"}, headers=headers(seeker))
    assert res.status_code == 422
