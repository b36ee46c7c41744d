"""
Tests for token authentication and role checks.
"""

from unittest.mock import patch

import pytest
from fastapi import HTTPException

from app.core.auth import authenticate_token, require_roles
from app.core.security import create_access_token, create_refresh_token


class TestAuthenticateToken:
    @pytest.mark.asyncio
    async def test_valid_access_token(self):
        token = create_access_token(
            "u1",
            {"email": "a@b.com", "role": "teacher", "school_id": "s1", "name": "A B"},
        )
        with patch("app.core.auth.is_token_revoked", return_value=False):
            user = await authenticate_token(token)

        assert user.id == "u1"
        assert user.role == "teacher"
        assert user.school_id == "s1"
        assert user.token_id
        assert user.seconds_until_expiry() > 0

    @pytest.mark.asyncio
    async def test_refresh_token_is_not_accepted(self):
        with pytest.raises(HTTPException) as exc_info:
            await authenticate_token(create_refresh_token("u1"))
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "INVALID_TOKEN_TYPE"

    @pytest.mark.asyncio
    async def test_revoked_token_is_rejected(self):
        token = create_access_token("u1", {"role": "teacher"})
        with patch("app.core.auth.is_token_revoked", return_value=True):
            with pytest.raises(HTTPException) as exc_info:
                await authenticate_token(token)
        assert exc_info.value.detail["error"] == "TOKEN_REVOKED"

    @pytest.mark.asyncio
    async def test_garbage_token(self):
        with pytest.raises(HTTPException) as exc_info:
            await authenticate_token("not-a-jwt")
        assert exc_info.value.detail["error"] == "INVALID_TOKEN"


class TestRequireRoles:
    @pytest.mark.asyncio
    async def test_allowed_role_passes(self, admin):
        dependency = require_roles("school_admin", "sub_admin")
        assert await dependency(user=admin) is admin

    @pytest.mark.asyncio
    async def test_other_role_is_forbidden(self, teacher):
        dependency = require_roles("school_admin")
        with pytest.raises(HTTPException) as exc_info:
            await dependency(user=teacher)
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["error"] == "PERMISSION_DENIED"
