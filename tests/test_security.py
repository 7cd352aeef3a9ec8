"""Password hashing and token round trips."""
import uuid
from datetime import timedelta

import jwt
import pytest

from fintrack.core.errors import TokenExpired, Unauthorized
from fintrack.core.security import create_access_token, decode_access_token, get_password_hash, verify_password


class TestPasswords:

    def test_hash_is_salted_argon2(self):
        first = get_password_hash("correct-horse")
        second = get_password_hash("correct-horse")
        assert first.startswith("$argon2")
        assert first != second

    def test_verify(self):
        hashed = get_password_hash("correct-horse")
        assert verify_password("correct-horse", hashed) is True
        assert verify_password("wrong-horse", hashed) is False


class TestTokens:

    def test_round_trip(self, settings):
        user_id = uuid.uuid4()
        claims = decode_access_token(create_access_token(user_id, "a@example.com", settings), settings)
        assert claims.user_id == user_id
        assert claims.email == "a@example.com"

    def test_default_expiry_is_seven_days(self, settings):
        token = create_access_token(uuid.uuid4(), "a@example.com", settings)
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_expired(self, settings):
        token = create_access_token(uuid.uuid4(), "a@example.com", settings, expires_delta=timedelta(seconds=-1))
        with pytest.raises(TokenExpired):
            decode_access_token(token, settings)

    def test_wrong_secret(self, settings):
        token = jwt.encode({"sub": str(uuid.uuid4()), "exp": 4102444800}, "another-secret-key-of-decent-length", "HS256")
        with pytest.raises(Unauthorized):
            decode_access_token(token, settings)

    def test_subject_must_be_uuid(self, settings):
        token = jwt.encode({"sub": "42", "exp": 4102444800}, settings.SECRET_KEY, "HS256")
        with pytest.raises(Unauthorized):
            decode_access_token(token, settings)
