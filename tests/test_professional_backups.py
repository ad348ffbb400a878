def backup(name, **kwargs):
    return {"name": name, "profession": "Counselor", "phone": "+91-8000000000", **kwargs}


def test_only_admins_manage_backups(client, seeker, headers):
    res = client.post("/professional-backups/", json=backup("Dr. A"), headers=headers(seeker))
    assert res.status_code == 403


def test_list_filters_and_orders(client, seeker, admin, headers):
    client.post(
        "/professional-backups/",
        json=backup("Slow", specialization="Crisis support", priority=1, response_time=60),
        headers=headers(admin),
    )
    client.post(
        "/professional-backups/",
        json=backup("Fast", specialization="crisis", priority=1, response_time=10),
        headers=headers(admin),
    )
    client.post(
        "/professional-backups/",
        json=backup("Grief", specialization="Grief", priority=2, response_time=5),
        headers=headers(admin),
    )

    listed = client.get("/professional-backups/", headers=headers(seeker)).json()
    assert [b["name"] for b in listed] == ["Fast", "Slow", "Grief"]

    crisis = client.get("/professional-backups/?specialization=CRISIS", headers=headers(seeker)).json()
    assert [b["name"] for b in crisis] == ["Fast", "Slow"]

    limited = client.get("/professional-backups/?limit=1", headers=headers(seeker)).json()
    assert len(limited) == 1


def test_availability_filter(client, seeker, moderator, headers):
    created = client.post("/professional-backups/", json=backup("Busy"), headers=headers(moderator)).json()
    client.put(
        f"/professional-backups/{created['id']}",
        json={"is_available": False},
        headers=headers(moderator),
    )

    assert client.get("/professional-backups/?available=true", headers=headers(seeker)).json() == []
    assert len(client.get("/professional-backups/", headers=headers(seeker)).json()) == 1


def test_delete_is_soft(client, seeker, admin, headers):
    created = client.post("/professional-backups/", json=backup("Gone"), headers=headers(admin)).json()

    assert client.delete(f"/professional-backups/{created['id']}", headers=headers(admin)).status_code == 204
    assert client.get("/professional-backups/", headers=headers(seeker)).json() == []
