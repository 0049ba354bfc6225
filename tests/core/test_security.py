"""Tests for access token handling."""

from datetime import timedelta

import pytest

from app.core.exceptions import AuthenticationError
from app.core.security import create_access_token, create_token_for_user, verify_token


def test_token_round_trip_carries_identity():
    token = create_token_for_user("user-1", "host@example.com", "host")

    payload = verify_token(token)

    assert payload["sub"] == "user-1"
    assert payload["role"] == "host"
    assert payload["type"] == "access"


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))

    with pytest.raises(AuthenticationError):
        verify_token(token)


def test_wrong_token_type_is_rejected():
    token = create_access_token({"sub": "user-1"})

    with pytest.raises(AuthenticationError):
        verify_token(token, token_type="refresh")
