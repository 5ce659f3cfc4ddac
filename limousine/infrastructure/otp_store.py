"""
Redis-backed store for the admin one-time login code.

Only a SHA-256 digest of the code is kept, under a single key with a TTL,
so issuing a new code replaces the previous one.  Verification is an
atomic compare-and-delete (Lua), making each code single-use even when
two requests present it at the same time.
"""

from __future__ import annotations

import hashlib
import secrets

import redis.asyncio as aioredis

OTP_KEY = "admin:otp"

_CONSUME_LUA = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


def _digest(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


class AdminOtpStore:
    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 300):
        self.redis = client
        self.ttl = ttl_seconds

    async def issue(self) -> str:
        """Generate an 8-digit code, store its digest and return the code."""
        code = str(10_000_000 + secrets.randbelow(90_000_000))
        await self.redis.set(OTP_KEY, _digest(code), ex=self.ttl)
        return code

    async def consume(self, code: str) -> bool:
        """Delete the stored digest if it matches *code*; True if this call did."""
        removed = await self.redis.eval(_CONSUME_LUA, 1, OTP_KEY, _digest(code))
        return bool(removed)
