"""JWT access tokens.

HS256 with the secret from settings.  Claims: ``sub`` (user id as a
string, ``"admin"`` for the admin), ``role``, ``userType``, ``email``,
``name``, ``iat`` and ``exp``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.domain.enums import Role
from limousine.domain.errors import UnauthorizedError


def create_access_token(
    subject: str,
    role: Role,
    email: str = "",
    name: str = "",
    expires_delta: Optional[timedelta] = None,
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.jwt_expiry_hours)

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(subject),
        "role": role.value,
        "userType": role.value,
        "email": email,
        "name": name,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; map failures to ``UnauthorizedError``."""
    try:
        return jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired") from None
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token") from None


def actor_from_token(token: str) -> Actor:
    payload = decode_access_token(token)
    try:
        role = Role(payload["role"])
        subject = payload["sub"]
    except (KeyError, ValueError):
        raise UnauthorizedError("Invalid token") from None

    if role == Role.ADMIN:
        user_id = None
    else:
        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            raise UnauthorizedError("Invalid token") from None
    return Actor(
        user_id=user_id,
        role=role,
        user_type=payload.get("userType", role.value),
    )
