import logging


def contact(name="Mom", is_primary=False):
    return {"name": name, "relationship": "parent", "phone": "+91-9000000000", "is_primary": is_primary}


def test_create_and_list(client, seeker, headers):
    client.post("/emergency-contacts/", json=contact("Friend"), headers=headers(seeker))
    res = client.post("/emergency-contacts/", json=contact("Mom", True), headers=headers(seeker))

    assert res.status_code == 200
    assert res.json()["priority"] == 1

    listed = client.get("/emergency-contacts/", headers=headers(seeker)).json()
    assert [c["name"] for c in listed] == ["Mom", "Friend"]
    assert listed[1]["priority"] == 2


def test_new_primary_demotes_old(client, seeker, headers):
    client.post("/emergency-contacts/", json=contact("Mom", True), headers=headers(seeker))
    client.post("/emergency-contacts/", json=contact("Dad", True), headers=headers(seeker))

    listed = client.get("/emergency-contacts/", headers=headers(seeker)).json()
    primaries = [c["name"] for c in listed if c["is_primary"]]
    assert primaries == ["Dad"]


def test_update_to_primary(client, seeker, headers):
    mom = client.post("/emergency-contacts/", json=contact("Mom", True), headers=headers(seeker)).json()
    dad = client.post("/emergency-contacts/", json=contact("Dad"), headers=headers(seeker)).json()

    res = client.put(
        f"/emergency-contacts/{dad['id']}",
        json={"is_primary": True},
        headers=headers(seeker),
    )
    assert res.status_code == 200
    assert res.json()["is_primary"]

    listed = {c["id"]: c for c in client.get("/emergency-contacts/", headers=headers(seeker)).json()}
    assert not listed[mom["id"]]["is_primary"]


def test_contacts_are_private(client, seeker, giver, headers):
    created = client.post("/emergency-contacts/", json=contact(), headers=headers(seeker)).json()

    assert client.get("/emergency-contacts/", headers=headers(giver)).json() == []
    res = client.put(
        f"/emergency-contacts/{created['id']}", json={"name": "Hacked"}, headers=headers(giver)
    )
    assert res.status_code == 404


def test_delete_is_soft(client, session, seeker, headers):
    created = client.post("/emergency-contacts/", json=contact(), headers=headers(seeker)).json()

    res = client.delete(f"/emergency-contacts/{created['id']}", headers=headers(seeker))

    assert res.status_code == 204
    assert client.get("/emergency-contacts/", headers=headers(seeker)).json() == []
    assert client.delete(f"/emergency-contacts/{created['id']}", headers=headers(seeker)).status_code == 404


def test_update_ignores_null_for_required_fields(client, seeker, headers):
    created = client.post("/emergency-contacts/", json=contact("Mom"), headers=headers(seeker)).json()

    res = client.put(
        f"/emergency-contacts/{created['id']}",
        json={"name": None, "phone": None, "relationship": "Mother"},
        headers=headers(seeker),
    )

    assert res.status_code == 200
    assert res.json()["name"] == "Mom"
    assert res.json()["phone"] == created["phone"]
    assert res.json()["relationship"] == "Mother"


def test_add_and_remove_are_logged(client, seeker, headers, caplog):
    caplog.set_level(logging.INFO, logger="routers.emergency_contacts")

    created = client.post("/emergency-contacts/", json=contact(), headers=headers(seeker)).json()
    client.delete(f"/emergency-contacts/{created['id']}", headers=headers(seeker))

    messages = [r.getMessage() for r in caplog.records if r.name == "routers.emergency_contacts"]
    assert messages == [
        f"User {seeker.id} added emergency contact {created['id']}",
        f"User {seeker.id} removed emergency contact {created['id']}",
    ]
