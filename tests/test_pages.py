def test_landing_page(client):
    res = client.get("/")

    assert res.status_code == 200
    assert "TimeRent" in res.text


def test_landing_redirects_logged_in_users(client, seeker, headers):
    res = client.get("/", headers=headers(seeker), follow_redirects=False)

    assert res.status_code == 303
    assert res.headers["location"] == "/dashboard"


def test_dashboard_requires_login(client):
    res = client.get("/dashboard", follow_redirects=False)

    assert res.status_code == 303
    assert res.headers["location"] == "/login"


def test_dashboard_for_giver(client, giver, headers):
    res = client.get("/dashboard", headers=headers(giver))

    assert res.status_code == 200
    assert "Sarah Chen" in res.text
    assert "wallet-balance" in res.text


def test_static_files(client):
    assert client.get("/static/style.css").status_code == 200
