def test_get_public_profile(client, giver):
    res = client.get(f"/users/{giver.id}")

    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Sarah Chen"
    assert body["city"] == "Mumbai"
    assert "email" not in body
    assert "phone" not in body


def test_get_unknown_user(client):
    assert client.get("/users/999").status_code == 404


def test_update_own_profile(client, seeker, headers):
    res = client.patch(
        "/users/me",
        json={"bio": "Thinking out loud", "latitude": 12.97, "longitude": 77.59, "city": "Bangalore"},
        headers=headers(seeker),
    )

    assert res.status_code == 200
    body = res.json()
    assert body["bio"] == "Thinking out loud"
    assert body["city"] == "Bangalore"
    # untouched fields keep their values
    assert body["name"] == "Alex Johnson"


def test_update_profile_validates_ranges(client, seeker, headers):
    res = client.patch("/users/me", json={"silence_comfort": 11}, headers=headers(seeker))
    assert res.status_code == 422


def test_delete_account_disables_it(client, session, giver, headers):
    res = client.delete("/users/me", headers=headers(giver))
    assert res.status_code == 204

    session.refresh(giver)
    assert giver.is_disabled
    assert not giver.is_available
    assert client.get(f"/users/{giver.id}").status_code == 404
    assert client.get("/auth/me", headers=headers(giver)).status_code == 401


def test_update_profile_ignores_null_for_required_fields(client, session, seeker, headers):
    res = client.patch(
        "/users/me",
        json={"name": None, "is_available": None, "bio": "Still here"},
        headers=headers(seeker),
    )

    assert res.status_code == 200
    assert res.json()["name"] == "Alex Johnson"
    assert res.json()["bio"] == "Still here"
    session.refresh(seeker)
    assert seeker.is_available is True
