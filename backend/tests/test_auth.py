from datetime import timedelta

from app.security.tokens import create_access_token

PASSWORD = "Rahasia123"


def _register(client, nisn_nip="1234567890", **extra):
    body = {"nama": "Siti Aminah", "nisn_nip": nisn_nip, "password": PASSWORD, **extra}
    return client.post("/api/auth/register", json=body)


def test_register_returns_token_and_voter_profile(client):
    r = _register(client, email="siti@example.com", kelas="XI", jurusan="RPL")
    assert r.status_code == 201
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["nisn_nip"] == "1234567890"
    assert body["user"]["role"] == "voter"
    assert "password" not in body["user"] and "password_hash" not in body["user"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "siti@example.com"


def test_register_cannot_choose_role(client):
    r = _register(client, role="admin")
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"


def test_register_duplicate_nisn_nip_conflicts(client):
    assert _register(client).status_code == 201
    r = _register(client)
    assert r.status_code == 409
    assert r.json()["error"] == "conflict"


def test_register_rejects_unknown_alias(client):
    r = client.post("/api/auth/register", json={"nama": "Budi", "nisn": "998877", "password": PASSWORD})
    assert r.status_code == 400


def test_register_rejects_weak_password(client):
    r = _register(client, password="onlyletters")
    assert r.status_code == 400


def test_login_success_and_failure(client):
    _register(client, nisn_nip="55501")

    ok = client.post("/api/auth/login", json={"nisn_nip": "55501", "password": PASSWORD})
    assert ok.status_code == 200
    assert ok.json()["user"]["nisn_nip"] == "55501"

    bad = client.post("/api/auth/login", json={"nisn_nip": "55501", "password": "Salah12345"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "invalid_credentials"

    missing = client.post("/api/auth/login", json={"nisn_nip": "00000", "password": PASSWORD})
    assert missing.status_code == 401
    assert missing.json()["detail"] == "invalid_credentials"


def test_login_is_rate_limited(client):
    for _ in range(5):
        r = client.post("/api/auth/login", json={"nisn_nip": "nobody", "password": "whatever1"})
        assert r.status_code == 401
    r = client.post("/api/auth/login", json={"nisn_nip": "nobody", "password": "whatever1"})
    assert r.status_code == 429
    assert r.json()["error"] == "too_many_requests"


def test_me_requires_token(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["detail"] == "unauthenticated"


def test_expired_token_is_reported_as_expired(client, make_user):
    user_id, _ = make_user("voter")
    token = create_access_token(user_id, "voter", expires_delta=timedelta(seconds=-30))
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "token_expired"


def test_tampered_token_is_invalid(client, make_user):
    user_id, _ = make_user("voter")
    token = create_access_token(user_id, "voter")
    forged = token.rsplit(".", 1)[0] + ".not-the-signature"
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "token_invalid"


def test_token_for_deleted_account_is_invalid(client):
    token = create_access_token(424242, "voter")
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "token_invalid"


def test_create_admin_requires_secret(client, settings_env):
    settings_env(ADMIN_SECRET="s3cret-bootstrap")
    body = {"nama": "Pak Guru", "nisn_nip": "198001012005", "password": PASSWORD}

    assert client.post("/api/auth/create-admin", json=body).status_code == 403
    wrong = client.post("/api/auth/create-admin", json=body, headers={"X-Admin-Secret": "nope"})
    assert wrong.status_code == 403

    r = client.post("/api/auth/create-admin", json=body, headers={"X-Admin-Secret": "s3cret-bootstrap"})
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "admin"


def test_create_admin_disabled_without_configured_secret(client, settings_env, monkeypatch):
    monkeypatch.delenv("ADMIN_SECRET", raising=False)
    settings_env()
    body = {"nama": "Pak Guru", "nisn_nip": "198001012006", "password": PASSWORD}
    r = client.post("/api/auth/create-admin", json=body, headers={"X-Admin-Secret": ""})
    assert r.status_code == 403


def test_update_own_profile(client):
    token = _register(client, nisn_nip="77701").json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    r = client.patch("/api/auth/me", json={"kelas": "XII", "email": "baru@example.com"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["kelas"] == "XII"
    assert r.json()["nama"] == "Siti Aminah"

    me = client.get("/api/auth/me", headers=headers).json()
    assert me["email"] == "baru@example.com"


def test_profile_update_rejects_role_and_null_name(client, make_user):
    _, headers = make_user("voter")
    assert client.patch("/api/auth/me", json={"role": "admin"}, headers=headers).status_code == 400
    assert client.patch("/api/auth/me", json={"nama": None}, headers=headers).status_code == 400
    assert client.get("/api/auth/me", headers=headers).json()["role"] == "voter"


def test_delete_own_account_removes_votes(client, make_user):
    _, headers = make_user("voter")
    assert client.post("/api/vote", json={"target_id": "A", "vote_type": 1}, headers=headers).status_code == 201

    assert client.delete("/api/auth/me", headers=headers).status_code == 204

    assert client.get("/api/auth/me", headers=headers).json()["detail"] == "token_invalid"
    assert client.get("/api/vote/results", params={"target_id": "A"}).json()["total"] == 0
