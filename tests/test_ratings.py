import pytest


def rating_body(ts, rating=5):
    return {
        "session_id": ts.id,
        "rating": rating,
        "felt_less_alone": True,
        "time_felt_heavy": False,
        "would_sit_again": True,
        "feedback": "Felt calm",
    }


@pytest.fixture
def completed(seeker, giver, make_session):
    return make_session(seeker, giver, status="COMPLETED")


def test_rate_completed_session(client, session, seeker, giver, completed, headers):
    res = client.post("/ratings/", json=rating_body(completed, 4), headers=headers(seeker))

    assert res.status_code == 200
    assert res.json()["rating"] == 4

    session.refresh(giver)
    assert giver.presence_rating == 4
    assert giver.total_sessions == 43


def test_presence_rating_is_mean_over_sessions(client, session, seeker, giver, make_user, make_session, headers):
    other = make_user("TIME_SEEKER")
    first = make_session(seeker, giver, status="COMPLETED")
    second = make_session(other, giver, status="COMPLETED")

    client.post("/ratings/", json=rating_body(first, 5), headers=headers(seeker))
    client.post("/ratings/", json=rating_body(second, 2), headers=headers(other))

    session.refresh(giver)
    assert giver.presence_rating == pytest.approx(3.5)


def test_giver_rating_does_not_count_session_twice(client, session, seeker, giver, completed, headers):
    client.post("/ratings/", json=rating_body(completed, 5), headers=headers(seeker))
    client.post("/ratings/", json=rating_body(completed, 5), headers=headers(giver))

    session.refresh(giver)
    assert giver.total_sessions == 43


def test_cannot_rate_twice(client, seeker, completed, headers):
    client.post("/ratings/", json=rating_body(completed), headers=headers(seeker))
    res = client.post("/ratings/", json=rating_body(completed), headers=headers(seeker))
    assert res.status_code == 400


def test_cannot_rate_unfinished_session(client, seeker, giver, make_session, headers):
    ts = make_session(seeker, giver)
    res = client.post("/ratings/", json=rating_body(ts), headers=headers(seeker))
    assert res.status_code == 404


def test_outsider_cannot_rate(client, make_user, completed, headers):
    res = client.post("/ratings/", json=rating_body(completed), headers=headers(make_user()))
    assert res.status_code == 404


@pytest.mark.parametrize("value", [0, 6])
def test_rating_range(client, seeker, completed, headers, value):
    res = client.post("/ratings/", json=rating_body(completed, value), headers=headers(seeker))
    assert res.status_code == 422


def test_list_ratings(client, seeker, completed, headers):
    client.post("/ratings/", json=rating_body(completed), headers=headers(seeker))

    mine = client.get("/ratings/", headers=headers(seeker)).json()
    assert len(mine) == 1

    for_session = client.get(f"/ratings/?session_id={completed.id}", headers=headers(seeker)).json()
    assert [r["session_id"] for r in for_session] == [completed.id]
