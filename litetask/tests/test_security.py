"""
Credential and token tests.
Covers: password hashing, secret loading, token issue/verify, tamper and expiry detection.
"""
from __future__ import annotations

import base64
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import (
    InvalidPasswordException,
    InvalidSignatureException,
    MalformedTokenException,
    TokenExpiredException,
    UnauthorizedException,
)
from app.core.security import (
    MIN_SECRET_BYTES,
    create_session_token,
    decode_session_token,
    hash_password,
    load_secret,
    validate_password_strength,
    verify_password,
)

SECRET = b"k" * MIN_SECRET_BYTES
OTHER_SECRET = b"z" * MIN_SECRET_BYTES


class TestPasswordHashing:
    @pytest.mark.parametrize("password", ["secret1", "Пароль-123", "with spaces  ", "x" * 60])
    def test_verify_matches_own_hash(self, password: str) -> None:
        hashed = hash_password(password)
        assert hashed != password
        assert verify_password(password, hashed)

    @pytest.mark.parametrize(
        ("password", "other"),
        [("secret1", "secret2"), ("secret1", "Secret1"), ("abcdef", "abcdefg"), ("abcdef", "")],
    )
    def test_verify_rejects_other_password(self, password: str, other: str) -> None:
        assert not verify_password(other, hash_password(password))

    def test_hashes_are_salted(self) -> None:
        assert hash_password("secret1") != hash_password("secret1")

    def test_password_policy_keeps_password_as_typed(self) -> None:
        assert validate_password_strength("  secret  ") == "  secret  "
        with pytest.raises(InvalidPasswordException):
            validate_password_strength("        ")
        with pytest.raises(InvalidPasswordException):
            validate_password_strength("  abc  ")


class TestLoadSecret:
    def test_base64_secret_is_decoded(self) -> None:
        raw = bytes(range(40))
        assert load_secret(base64.b64encode(raw).decode()) == raw

    def test_long_raw_secret_is_used_verbatim(self) -> None:
        value = "not base64 but long enough: " + "!" * 10
        assert load_secret(value) == value.encode()

    def test_short_secret_is_replaced_with_random_bytes(self) -> None:
        first = load_secret("short")
        second = load_secret("short")
        assert len(first) == MIN_SECRET_BYTES
        assert first != second

    def test_missing_secret_generates_random_bytes(self) -> None:
        assert len(load_secret(None)) == MIN_SECRET_BYTES


class TestSessionToken:
    @pytest.mark.parametrize("role", ["admin", "user", "blocked"])
    def test_round_trip_claims(self, role: str) -> None:
        token = create_session_token(42, role, secret=SECRET)
        claims = decode_session_token(token, secret=SECRET)
        assert claims.user_id == 42
        assert claims.role == role

    def test_expiry_horizon_defaults_to_thirty_days(self) -> None:
        token = create_session_token(1, "user", secret=SECRET)
        claims = decode_session_token(token, secret=SECRET)
        remaining = claims.expires_at - datetime.now(timezone.utc)
        assert timedelta(days=29, hours=23) < remaining <= timedelta(days=30)

    def test_expired_token_is_rejected(self) -> None:
        token = create_session_token(
            1, "user", secret=SECRET, expires_delta=timedelta(seconds=-5)
        )
        with pytest.raises(TokenExpiredException):
            decode_session_token(token, secret=SECRET)

    def test_every_signature_character_is_protected(self) -> None:
        token = create_session_token(7, "admin", secret=SECRET)
        head, payload, signature = token.split(".")
        for index, char in enumerate(signature):
            replacement = "A" if char != "A" else "B"
            tampered = signature[:index] + replacement + signature[index + 1:]
            with pytest.raises(InvalidSignatureException):
                decode_session_token(f"{head}.{payload}.{tampered}", secret=SECRET)

    def test_wrong_secret_is_rejected(self) -> None:
        token = create_session_token(7, "user", secret=SECRET)
        with pytest.raises(InvalidSignatureException):
            decode_session_token(token, secret=OTHER_SECRET)

    def test_tampered_payload_is_rejected(self) -> None:
        admin_token = create_session_token(1, "admin", secret=SECRET)
        user_token = create_session_token(2, "user", secret=SECRET)
        head, _, signature = user_token.split(".")
        forged = f"{head}.{admin_token.split('.')[1]}.{signature}"
        with pytest.raises(InvalidSignatureException):
            decode_session_token(forged, secret=SECRET)

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a..c", "a.b.c.d", "###.###.###"])
    def test_malformed_tokens(self, token: str) -> None:
        with pytest.raises(MalformedTokenException):
            decode_session_token(token, secret=SECRET)

    def test_failures_share_the_unauthenticated_outcome(self) -> None:
        expired = create_session_token(1, "user", secret=SECRET, expires_delta=timedelta(seconds=-1))
        for token in ("garbage", expired, create_session_token(1, "user", secret=OTHER_SECRET)):
            with pytest.raises(UnauthorizedException) as exc_info:
                decode_session_token(token, secret=SECRET)
            assert exc_info.value.status_code == 401
