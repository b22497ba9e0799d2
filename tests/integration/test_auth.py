from app.services.auth_services import create_access_token, create_refresh_token


async def test_register_returns_token_and_user(client, register_user):
    response = await register_user(profile={"birthDate": "1990-06-15", "gender": "female"})
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["token"]
    user = body["data"]["user"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@mail.com"
    assert user["profile"]["birthDate"] == "1990-06-15"
    assert user["profile"]["gender"] == "female"
    assert "hashed_password" not in user
    assert "access_token" in response.headers.get("set-cookie", "")


async def test_register_duplicate_conflict(client, register_user):
    await register_user()
    response = await register_user(username="alice2")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "USER_EXISTS"


async def test_register_validation(client, register_user):
    response = await register_user(username="a!")
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["requestId"]

    response = await register_user(password="123")
    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "password"

    response = await register_user(email="not-an-email")
    assert response.status_code == 400


async def test_login_by_email(client, register_user):
    await register_user()
    response = await client.post("/api/auth/login", json={"email": "Alice@mail.com", "password": "secret123"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["token"]
    assert data["user"]["lastLoginAt"] is not None


async def test_login_bad_credentials(client, register_user):
    await register_user()
    response = await client.post("/api/auth/login", json={"email": "alice@mail.com", "password": "wrong-one"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


async def test_profile_requires_token(client):
    response = await client.get("/api/auth/profile")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"

    response = await client.get("/api/auth/profile", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


async def test_get_and_update_profile(client, auth_headers):
    response = await client.get("/api/auth/profile", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["username"] == "alice"

    response = await client.put(
        "/api/auth/profile",
        headers=auth_headers,
        json={"birthTime": "08:30", "birthPlace": "杭州"},
    )
    assert response.status_code == 200
    profile = response.json()["data"]["profile"]
    assert profile["birthTime"] == "08:30"
    assert profile["birthPlace"] == "杭州"


async def test_profile_of_deleted_user_is_not_found(client):
    token = create_access_token({"sub": "999", "email": "ghost@mail.com"})
    response = await client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


async def test_refresh_with_cookie(client, register_user):
    response = await register_user()
    user_id = response.json()["data"]["user"]["id"]
    refresh_token = create_refresh_token({"sub": str(user_id), "email": "alice@mail.com"})

    client.cookies.set("refresh_token", refresh_token)
    response = await client.post("/api/auth/refresh")
    assert response.status_code == 200
    assert response.json()["data"]["token"]


async def test_refresh_without_cookie(client):
    response = await client.post("/api/auth/refresh")
    assert response.status_code == 401


async def test_logout_clears_cookies(client):
    response = await client.post("/api/auth/logout")
    assert response.status_code == 200
    assert "access_token" in response.headers.get("set-cookie", "")
