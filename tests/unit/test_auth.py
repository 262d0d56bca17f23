from datetime import timedelta

import jwt
import pytest

from store_ratings.core.auth import TokenError, create_access_token, decode_access_token
from store_ratings.core.config import get_settings


def test_create_and_decode_token_roundtrip() -> None:
    token = create_access_token("user-123", email="user@ratings-test.com")

    payload = decode_access_token(token)

    assert payload["sub"] == "user-123"
    assert payload["email"] == "user@ratings-test.com"
    assert "roles" not in payload


def test_expired_token_is_rejected() -> None:
    token = create_access_token("user-123", expires_delta=timedelta(seconds=-10))

    with pytest.raises(TokenError):
        decode_access_token(token)


def test_token_signed_with_other_secret_is_rejected() -> None:
    settings = get_settings()
    token = jwt.encode(
        {"sub": "user-123", "exp": 4102444800},
        "a-completely-different-signing-secret-value",
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(TokenError):
        decode_access_token(token)


def test_token_without_subject_is_rejected() -> None:
    settings = get_settings()
    token = jwt.encode({"exp": 4102444800}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    with pytest.raises(TokenError):
        decode_access_token(token)


def test_oversized_subject_is_rejected() -> None:
    token = create_access_token("u" * 65)

    with pytest.raises(TokenError):
        decode_access_token(token)


def test_subject_at_column_width_is_accepted() -> None:
    assert decode_access_token(create_access_token("u" * 64))["sub"] == "u" * 64
