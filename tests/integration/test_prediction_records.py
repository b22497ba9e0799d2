import pytest
from pydantic import ValidationError

from app.models.divination_models import PredictionResult
from app.services.auth_services import hash_password
from app.services.database import prediction_database_services as records
from app.services.database import user_database_services
from app.services.database.user_database_services import create_user, get_user_by_email

RESULT = PredictionResult(title="标题", content="内" * 300, summary="摘要", advice=["建议"], imagery="乾")


@pytest.fixture
async def user(test_db):
    return await create_user(test_db, "carol", "Carol@Mail.com", hash_password("secret123"))


async def test_create_user_lowercases_email_and_rejects_duplicates(test_db, user):
    assert user.email == "carol@mail.com"
    assert (await get_user_by_email(test_db, "CAROL@mail.com")).id == user.id
    with pytest.raises(ValueError):
        await create_user(test_db, "carol", "other@mail.com", hash_password("secret123"))
    with pytest.raises(ValueError):
        await create_user(test_db, "carol2", "carol@mail.com", hash_password("secret123"))


async def test_create_user_unique_index_conflict_is_a_duplicate(test_db, user, monkeypatch):
    check_available = user_database_services._check_available
    calls = []

    async def stale_check(db, username, email):
        # the first check runs before the other registration has committed
        calls.append(username)
        if len(calls) > 1:
            await check_available(db, username, email)

    monkeypatch.setattr(user_database_services, "_check_available", stale_check)
    with pytest.raises(ValueError, match="Email already registered"):
        await create_user(test_db, "carol2", "carol@mail.com", hash_password("secret123"))
    assert len(calls) == 2


async def test_create_and_fetch_record(test_db, user):
    record = await records.create_prediction_record(test_db, user.id, "yijing", {"method": "time"}, RESULT)
    assert record.id
    fetched = await records.get_record_by_id(test_db, user.id, record.id)
    assert fetched.result["imagery"] == "乾"
    assert await records.get_record_by_id(test_db, user.id + 1, record.id) is None


async def test_create_rejects_bad_input(test_db, user):
    with pytest.raises(ValueError):
        await records.create_prediction_record(test_db, user.id, "runes", {"a": 1}, RESULT)
    with pytest.raises(ValueError):
        await records.create_prediction_record(test_db, user.id, "tarot", {}, RESULT)


def test_result_bounds():
    with pytest.raises(ValidationError):
        PredictionResult(title="t", content="short", summary="s", advice=["a"])
    with pytest.raises(ValidationError):
        PredictionResult(title="t", content="x" * 300, summary="s", advice=[])


async def test_history_and_latest(test_db, user):
    for service in ("tarot", "bazi", "tarot"):
        await records.create_prediction_record(test_db, user.id, service, {"s": service}, RESULT)

    history = await records.get_user_history(test_db, user.id, page=2, limit=2)
    assert history["total"] == 3
    assert history["total_pages"] == 2
    assert len(history["records"]) == 1

    latest = await records.get_latest_by_service_type(test_db, user.id, "tarot")
    assert latest.id == max(r.id for r in (await records.get_user_history(test_db, user.id, "tarot"))["records"])


async def test_stats_and_delete_all(test_db, user):
    for service in ("tarot", "tarot", "astrology"):
        await records.create_prediction_record(test_db, user.id, service, {"s": service}, RESULT)

    stats = await records.get_user_stats(test_db, user.id)
    assert stats["total"] == 3
    assert [item["serviceType"] for item in stats["byServiceType"]] == ["tarot", "astrology"]

    assert await records.delete_all_user_records(test_db, user.id) == 3
    assert (await records.get_user_stats(test_db, user.id))["total"] == 0
