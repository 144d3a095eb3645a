"""
Tests for the hashing and signing primitives.
"""
from datetime import timedelta

import pytest

from clinic_auth.config import settings
from clinic_auth.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
    verify_token_hash,
)
from clinic_auth.exceptions import TokenConfigurationError


def test_password_hash_round_trip():
    hashed = hash_password("Secret1!")
    assert hashed != "Secret1!"
    assert verify_password("Secret1!", hashed)
    assert not verify_password("Secret2!", hashed)


def test_token_hashes_are_salted():
    assert hash_token("some-token") != hash_token("some-token")


def test_token_hash_covers_whole_token():
    # JWTs for the same user share a long prefix; bcrypt alone only reads 72 bytes
    prefix = "x" * 100
    stored = hash_token(prefix + "first")
    assert verify_token_hash(prefix + "first", stored)
    assert not verify_token_hash(prefix + "second", stored)


def test_unparseable_token_hash_does_not_verify():
    assert verify_token_hash("token", "not-a-hash") is False


def test_signed_token_round_trip():
    token = create_token({"sub": "7", "email": "a@example.com"}, "secret-a", timedelta(minutes=5), ACCESS_TOKEN_TYPE)
    payload = decode_token(token, "secret-a", ACCESS_TOKEN_TYPE)
    assert payload["sub"] == "7"
    assert payload["email"] == "a@example.com"
    assert payload["type"] == ACCESS_TOKEN_TYPE
    assert payload["exp"] > payload["iat"]


def test_tokens_minted_together_differ():
    claims = {"sub": "7", "email": "a@example.com"}
    first = create_token(claims, "secret-a", timedelta(minutes=5), REFRESH_TOKEN_TYPE)
    second = create_token(claims, "secret-a", timedelta(minutes=5), REFRESH_TOKEN_TYPE)
    assert first != second


def test_decode_rejects_wrong_secret():
    token = create_token({"sub": "7"}, "secret-a", timedelta(minutes=5), ACCESS_TOKEN_TYPE)
    assert decode_token(token, "secret-b", ACCESS_TOKEN_TYPE) is None


def test_decode_rejects_wrong_type():
    token = create_token({"sub": "7"}, "secret-a", timedelta(minutes=5), REFRESH_TOKEN_TYPE)
    assert decode_token(token, "secret-a", ACCESS_TOKEN_TYPE) is None


def test_decode_rejects_expired_token():
    token = create_token({"sub": "7"}, "secret-a", timedelta(seconds=-30), ACCESS_TOKEN_TYPE)
    assert decode_token(token, "secret-a", ACCESS_TOKEN_TYPE) is None


def test_decode_rejects_garbage():
    assert decode_token("not.a.jwt", "secret-a", ACCESS_TOKEN_TYPE) is None


def test_signing_misconfiguration_is_fatal(monkeypatch):
    monkeypatch.setattr(settings, "algorithm", "NOT-AN-ALGORITHM")
    with pytest.raises(TokenConfigurationError):
        create_token({"sub": "7"}, "secret-a", timedelta(minutes=5), ACCESS_TOKEN_TYPE)
