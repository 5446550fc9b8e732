from campus_eats.config import settings


def _signup(client, email="mina@sharif.edu", password="secret123", **extra):
    body = {
        "name": "Mina",
        "email": email,
        "phone": "09127778899",
        "password": password,
        "confirmPassword": password,
    }
    body.update(extra)
    return client.post("/auth/signup", json=body)


def _login(client, email="mina@sharif.edu", password="secret123"):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_signup_and_login(client):
    resp = _signup(client)
    assert resp.status_code == 201
    user = resp.json()
    assert user["email"] == "mina@sharif.edu"
    assert user["role"] == "user"
    assert user["emailVerified"] is False
    assert "password" not in user

    resp = _login(client)
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    resp = client.get("/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["id"] == user["id"]


def test_duplicate_email_conflicts(client):
    _signup(client)

    assert _signup(client, email="MINA@sharif.edu").status_code == 409


def test_password_mismatch_is_400(client):
    resp = _signup(client, confirmPassword="different")

    assert resp.status_code == 400


def test_wrong_password_is_401(client):
    _signup(client)

    assert _login(client, password="nope").status_code == 401


def test_admin_emails_get_admin_role(client, monkeypatch):
    monkeypatch.setattr(settings, "admin_emails", ["Boss@sharif.edu"])

    resp = _signup(client, email="boss@sharif.edu")

    assert resp.json()["role"] == "admin"


def test_profile_update_and_password_change(client, auth_headers, make_user):
    user = make_user("ali")
    headers = auth_headers(user)

    resp = client.put("/auth/user", json={"name": "Ali Karimi", "phone": "09350001122"}, headers=headers)
    assert resp.json()["name"] == "Ali Karimi"
    assert resp.json()["phone"] == "09350001122"

    resp = client.put(
        "/auth/password",
        json={"currentPassword": "wrong", "newPassword": "newpass1"},
        headers=headers,
    )
    assert resp.status_code == 400

    resp = client.put(
        "/auth/password",
        json={"currentPassword": "secret123", "newPassword": "newpass1"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert _login(client, email=user.email, password="newpass1").status_code == 200


def test_bad_token_is_401(client):
    resp = client.get("/auth/user", headers={"Authorization": "Bearer not-a-token"})

    assert resp.status_code == 401


def test_health_check(client):
    resp = client.get("/health/check")

    assert resp.status_code == 200
    assert resp.json()["database"] == "ok"


def _bearer(resp):
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_short_password_is_400(client):
    assert _signup(client, password="short12").status_code == 400


def test_logout_revokes_the_token(client):
    _signup(client)
    headers = _bearer(_login(client))

    resp = client.post("/auth/logout", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    assert client.get("/auth/user", headers=headers).status_code == 401
    assert client.post("/auth/logout", headers=headers).status_code == 401


def test_current_session(client):
    user = _signup(client).json()
    headers = _bearer(_login(client))

    resp = client.get("/auth/session", headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["authenticated"] is True
    assert body["user"]["id"] == user["id"]
    assert body["session"]["current"] is True
    assert body["session"]["expiresAt"] is not None


def test_sessions_list_and_revoke_others(client):
    _signup(client)
    laptop = _bearer(_login(client))
    phone = _bearer(_login(client))

    resp = client.get("/auth/sessions", headers=phone)
    assert resp.json()["total"] == 2
    assert [s["current"] for s in resp.json()["sessions"]] == [True, False]

    resp = client.delete("/auth/sessions", headers=phone)
    assert resp.status_code == 200
    assert resp.json()["revoked"] == 1

    assert client.get("/auth/user", headers=laptop).status_code == 401
    assert client.get("/auth/user", headers=phone).status_code == 200
    assert client.get("/auth/sessions", headers=phone).json()["total"] == 1


def test_password_change_signs_out_other_sessions(client, auth_headers, make_user):
    user = make_user("ali")
    current = auth_headers(user)
    other = auth_headers(user)

    resp = client.put(
        "/auth/password",
        json={"currentPassword": "secret123", "newPassword": "newpass12"},
        headers=current,
    )

    assert resp.status_code == 200
    assert client.get("/auth/user", headers=other).status_code == 401
    assert client.get("/auth/user", headers=current).status_code == 200


def test_new_password_must_be_long_enough(client, auth_headers, make_user):
    resp = client.put(
        "/auth/password",
        json={"currentPassword": "secret123", "newPassword": "short"},
        headers=auth_headers(make_user("ali")),
    )

    assert resp.status_code == 400


def test_preferences_are_merged(client, auth_headers, make_user):
    headers = auth_headers(make_user("ali"))

    assert client.get("/auth/preferences", headers=headers).json()["preferences"] == {}

    resp = client.put("/auth/preferences", json={"language": "fa", "theme": "dark"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["preferences"] == {"language": "fa", "theme": "dark"}

    resp = client.patch("/auth/preferences", json={"theme": "light"}, headers=headers)
    assert resp.json()["preferences"] == {"language": "fa", "theme": "light"}

    resp = client.get("/auth/preferences", headers=headers)
    assert resp.json()["preferences"] == {"language": "fa", "theme": "light"}
