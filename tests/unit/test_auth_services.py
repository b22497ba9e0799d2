from datetime import timedelta

import pytest
from pydantic import ValidationError

from app.core.errors import AuthenticationError
from app.models.auth_models import PasswordValidationError, ProfileUpdate, UserCreate
from app.services.auth_services import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    validate_password,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = hash_password("secret123")
    assert isinstance(hashed, bytes)
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-password", hashed)


def test_password_length_rules():
    assert validate_password("123456")
    with pytest.raises(PasswordValidationError):
        validate_password("12345")
    with pytest.raises(PasswordValidationError):
        validate_password("x" * 101)


def test_access_token_claims():
    token = create_access_token({"sub": "42", "email": "bob@mail.com"})
    token_data = decode_token(token)
    assert token_data.user_id == 42
    assert token_data.email == "bob@mail.com"
    assert token_data.token_type == "access"


def test_refresh_token_is_not_an_access_token():
    token = create_refresh_token({"sub": "42"})
    assert decode_token(token, expected_type="refresh").user_id == 42
    with pytest.raises(AuthenticationError) as exc_info:
        decode_token(token)
    assert exc_info.value.code == "INVALID_TOKEN"


def test_expired_token():
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-10))
    with pytest.raises(AuthenticationError) as exc_info:
        decode_token(token)
    assert exc_info.value.code == "TOKEN_EXPIRED"


def test_garbage_token():
    with pytest.raises(AuthenticationError) as exc_info:
        decode_token("not-a-jwt")
    assert exc_info.value.code == "INVALID_TOKEN"


def test_username_rules():
    with pytest.raises(ValidationError):
        UserCreate(username="ab", email="a@mail.com", password="secret123")
    with pytest.raises(ValidationError):
        UserCreate(username="bad name!", email="a@mail.com", password="secret123")
    assert UserCreate(username="good_name1", email="a@mail.com", password="secret123").username == "good_name1"


def test_profile_birth_time_format():
    assert ProfileUpdate.model_validate({"birthTime": "08:30"}).birth_time == "08:30"
    with pytest.raises(ValidationError):
        ProfileUpdate.model_validate({"birthTime": "25:00"})
