def test_register_login_and_me(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "Dana@Example.com", "password": "secret1", "full_name": "Dana"},
    )
    assert resp.status_code == 201
    token = resp.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "dana@example.com"
    assert me.json()["full_name"] == "Dana"

    login = client.post("/api/auth/login", json={"email": "dana@example.com", "password": "secret1"})
    assert login.status_code == 200
    assert login.json()["token_type"] == "bearer"


def test_register_rejects_duplicates_and_short_passwords(client):
    assert client.post("/api/auth/register", json={"email": "e@example.com", "password": "123"}).status_code == 400
    assert client.post("/api/auth/register", json={"email": "e@example.com", "password": "123456"}).status_code == 201
    assert client.post("/api/auth/register", json={"email": "E@example.com", "password": "123456"}).status_code == 409


def test_login_with_wrong_password(client):
    client.post("/api/auth/register", json={"email": "f@example.com", "password": "rightpass"})
    resp = client.post("/api/auth/login", json={"email": "f@example.com", "password": "wrongpass"})
    assert resp.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
