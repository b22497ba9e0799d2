import pytest

TAROT = {"spreadType": "three_card", "question": "我的事业会顺利吗", "seed": 2024}
ASTROLOGY = {"birthDate": "1990-08-01", "question": "最近的感情运势"}
BAZI = {"birthDate": "1990-06-15", "birthTime": {"hour": 8, "minute": 0}, "gender": "male"}
YIJING = {"method": "numbers", "numbers": [3, 5, 7], "question": "是否应该换工作"}


@pytest.mark.parametrize(
    "service,payload",
    [("tarot", TAROT), ("astrology", ASTROLOGY), ("bazi", BAZI), ("yijing", YIJING)],
)
async def test_anonymous_reading(client, service, payload):
    response = await client.post(f"/api/divination/{service}", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["timestamp"]
    data = body["data"]
    assert data["serviceType"] == service
    assert 200 <= len(data["result"]["content"]) <= 5000
    assert data["result"]["advice"]
    assert "recordId" not in data


async def test_basic_mode(client):
    response = await client.post("/api/divination/yijing", json={**YIJING, "enhanced": False})
    assert response.status_code == 200
    assert response.json()["data"]["primaryHexagram"]["chineseName"]


async def test_seeded_tarot_is_repeatable(client):
    first = (await client.post("/api/divination/tarot", json=TAROT)).json()["data"]["cards"]
    second = (await client.post("/api/divination/tarot", json=TAROT)).json()["data"]["cards"]
    assert first == second


async def test_invalid_inputs(client):
    response = await client.post("/api/divination/tarot", json={"spreadType": "horseshoe"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    response = await client.post("/api/divination/astrology", json={"birthDate": "2999-01-01"})
    assert response.status_code == 400

    response = await client.post("/api/divination/bazi", json={**BAZI, "birthTime": {"hour": 24}})
    assert response.status_code == 400

    response = await client.post("/api/divination/yijing", json={"method": "numbers", "numbers": [1, 2]})
    assert response.status_code == 400

    response = await client.post("/api/divination/yijing", json={"method": "coins"})
    assert response.status_code == 400


async def test_bad_token_is_ignored_on_readings(client):
    response = await client.post(
        "/api/divination/tarot", json=TAROT, headers={"Authorization": "Bearer broken"}
    )
    assert response.status_code == 200
    assert "recordId" not in response.json()["data"]


async def test_authenticated_reading_is_saved(client, auth_headers):
    response = await client.post("/api/divination/bazi", json=BAZI, headers=auth_headers)
    assert response.status_code == 200
    record_id = response.json()["data"]["recordId"]

    response = await client.get(f"/api/divination/history/{record_id}", headers=auth_headers)
    assert response.status_code == 200
    record = response.json()["data"]
    assert record["serviceType"] == "bazi"
    assert record["inputData"]["birthDate"] == "1990-06-15"
    assert record["inputData"]["birthTime"] == {"hour": 8, "minute": 0}
    assert record["result"]["title"] == "生辰八字命理分析"


async def test_history_pagination_and_filter(client, auth_headers):
    for payload in (TAROT, TAROT, ASTROLOGY):
        service = "astrology" if payload is ASTROLOGY else "tarot"
        await client.post(f"/api/divination/{service}", json=payload, headers=auth_headers)

    response = await client.get("/api/divination/history", params={"limit": 2}, headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["records"]) == 2
    assert data["pagination"] == {"total": 3, "page": 1, "limit": 2, "totalPages": 2}
    # newest first
    assert data["records"][0]["serviceType"] == "astrology"
    assert set(data["records"][0]["result"]) == {"title", "summary"}

    response = await client.get(
        "/api/divination/history", params={"serviceType": "tarot"}, headers=auth_headers
    )
    assert response.json()["data"]["pagination"]["total"] == 2


async def test_history_limit_is_capped(client, auth_headers):
    response = await client.get("/api/divination/history", params={"limit": 500}, headers=auth_headers)
    assert response.json()["data"]["pagination"]["limit"] == 100


async def test_history_invalid_service_type(client, auth_headers):
    response = await client.get("/api/divination/history", params={"serviceType": "runes"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_SERVICE_TYPE"


async def test_history_requires_auth(client):
    response = await client.get("/api/divination/history")
    assert response.status_code == 401
    response = await client.get("/api/divination/stats")
    assert response.status_code == 401


async def test_history_is_cached_and_invalidated(client, auth_headers):
    await client.post("/api/divination/tarot", json=TAROT, headers=auth_headers)

    first = await client.get("/api/divination/history", headers=auth_headers)
    assert first.headers["X-Cache"] == "MISS"
    second = await client.get("/api/divination/history", headers=auth_headers)
    assert second.headers["X-Cache"] == "HIT"
    assert second.json() == first.json()

    await client.post("/api/divination/yijing", json=YIJING, headers=auth_headers)
    third = await client.get("/api/divination/history", headers=auth_headers)
    assert third.headers["X-Cache"] == "MISS"
    assert third.json()["data"]["pagination"]["total"] == 2


async def test_stats(client, auth_headers):
    for _ in range(2):
        await client.post("/api/divination/tarot", json=TAROT, headers=auth_headers)
    await client.post("/api/divination/yijing", json=YIJING, headers=auth_headers)

    response = await client.get("/api/divination/stats", headers=auth_headers)
    assert response.status_code == 200
    stats = response.json()["data"]
    assert stats["total"] == 3
    assert stats["byServiceType"][0]["serviceType"] == "tarot"
    assert stats["byServiceType"][0]["count"] == 2
    assert stats["byServiceType"][0]["lastPrediction"]


async def test_records_are_private(client, auth_headers, register_user):
    response = await client.post("/api/divination/tarot", json=TAROT, headers=auth_headers)
    record_id = response.json()["data"]["recordId"]

    other = await register_user(username="bob", email="bob@mail.com")
    other_headers = {"Authorization": f"Bearer {other.json()['data']['token']}"}

    response = await client.get(f"/api/divination/history/{record_id}", headers=other_headers)
    assert response.status_code == 404
    response = await client.delete(f"/api/divination/history/{record_id}", headers=other_headers)
    assert response.status_code == 404


async def test_delete_record(client, auth_headers):
    response = await client.post("/api/divination/tarot", json=TAROT, headers=auth_headers)
    record_id = response.json()["data"]["recordId"]

    response = await client.get(f"/api/divination/history/{record_id}", headers=auth_headers)
    assert response.headers["X-Cache"] == "MISS"

    response = await client.delete(f"/api/divination/history/{record_id}", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/divination/history/{record_id}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"
