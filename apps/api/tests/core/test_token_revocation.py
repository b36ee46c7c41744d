"""
Tests for the token deny-list (in-memory fallback).
"""

from unittest.mock import patch

import pytest

from app.core import redis as redis_store
from app.core.redis import is_token_revoked, revoke_token


@pytest.fixture(autouse=True)
def memory_only():
    redis_store._revoked_tokens.clear()
    with patch.object(redis_store, "redis_client", None):
        yield
    redis_store._revoked_tokens.clear()


class TestRevocation:
    @pytest.mark.asyncio
    async def test_revoked_token_is_reported(self):
        await revoke_token("jti-1", 60)
        assert await is_token_revoked("jti-1") is True
        assert await is_token_revoked("jti-2") is False

    @pytest.mark.asyncio
    async def test_missing_token_id_is_never_revoked(self):
        assert await is_token_revoked(None) is False

    @pytest.mark.asyncio
    async def test_expired_entry_is_dropped(self):
        with patch("app.core.redis.time.time", return_value=1000.0):
            await revoke_token("jti-1", 10)
        with patch("app.core.redis.time.time", return_value=2000.0):
            assert await is_token_revoked("jti-1") is False
        assert "jti-1" not in redis_store._revoked_tokens
