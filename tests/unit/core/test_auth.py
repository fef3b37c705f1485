"""Unit tests for authentication utilities"""
import pytest
from datetime import timedelta
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from rankriot.core.auth import (
    AuthError,
    create_access_token,
    decode_access_token,
    get_current_user,
)
from rankriot.core.config import settings


class TestTokenGeneration:
    """Tests for JWT token generation"""

    def test_create_access_token(self):
        """Test creating access token"""
        token = create_access_token({"sub": "user-123", "email": "a@example.com"})

        assert isinstance(token, str)
        assert len(token) > 0

    def test_token_carries_audience(self):
        """Test tokens are issued for the managed auth audience"""
        payload = decode_access_token(create_access_token({"sub": "user-123"}))
        assert payload["aud"] == "authenticated"
        assert "exp" in payload

    def test_decode_access_token_invalid(self):
        """Test decoding invalid token raises error"""
        with pytest.raises(AuthError):
            decode_access_token("invalid.token.here")

    def test_expired_token(self):
        """Test expired tokens are rejected"""
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(minutes=-5))
        with pytest.raises(AuthError):
            decode_access_token(token)

    def test_wrong_audience(self):
        """Test tokens for another audience are rejected"""
        token = jwt.encode(
            {"sub": "user-123", "aud": "anon"},
            settings.secret_key,
            algorithm=settings.algorithm,
        )
        with pytest.raises(AuthError):
            decode_access_token(token)


class TestGetCurrentUser:
    """Tests for the current user dependency"""

    async def test_valid_token(self):
        """Test the user id and email come from the token"""
        token = create_access_token({"sub": "user-123", "email": "a@example.com"})
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        user = await get_current_user(credentials)

        assert user == {"user_id": "user-123", "email": "a@example.com", "auth_type": "jwt"}

    async def test_missing_subject(self):
        """Test tokens without a subject are rejected"""
        token = create_access_token({"email": "a@example.com"})
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials)
        assert exc_info.value.status_code == 401

    async def test_invalid_token(self):
        """Test garbage tokens are rejected with 401"""
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="not-a-jwt")
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials)
        assert exc_info.value.headers["WWW-Authenticate"] == "Bearer"
