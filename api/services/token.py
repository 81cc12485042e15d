"""Recruiter session tokens.

Tokens are HS256 JWTs issued by the identity provider (``issue_token`` mints
the same shape for development and tests). The ``sub`` claim is the
recruiter's user id; job ownership is checked against it.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from api.config.settings import settings

# Renew a session once less than this share of its lifetime remains
RENEW_FRACTION = 0.5

REGISTERED_CLAIMS = ("sub", "exp", "iat")


def issue_token(user_id: str, lifetime: Optional[timedelta] = None, **claims: Any) -> str:
    """Sign a session token for a recruiter.

    Args:
        user_id: Recruiter id, stored as ``sub``
        lifetime: Defaults to ACCESS_TOKEN_EXPIRE_MINUTES
        **claims: Extra claims such as ``email``
    """
    now = datetime.now(timezone.utc)
    lifetime = lifetime or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {**claims, "sub": user_id, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Validate a session token and return its claims.

    Raises:
        JWTError: expired, badly signed, or missing a subject
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise JWTError("Token has expired") from e
    except JWTError as e:
        raise JWTError(f"Invalid token: {e}") from e

    if not payload.get("sub"):
        raise JWTError("Token has no subject")
    return payload


def renew_token(payload: dict[str, Any]) -> Optional[str]:
    """A fresh token for the same recruiter once ``payload`` is past its renewal point."""
    exp = payload.get("exp")
    iat = payload.get("iat")
    if not exp or not iat:
        return None

    remaining = exp - datetime.now(timezone.utc).timestamp()
    if remaining >= (exp - iat) * RENEW_FRACTION:
        return None

    claims = {k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS}
    return issue_token(str(payload["sub"]), **claims)
