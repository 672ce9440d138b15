from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext


_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_JWT_ALG = "HS256"

# Part of the API contract: tokens live exactly one hour.
DEFAULT_TOKEN_TTL = timedelta(hours=1)


def hash_password(password: str) -> str:
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except ValueError:
        # Corrupt or foreign hash in the users table: treat as a mismatch.
        return False


def create_access_token(
    *,
    secret: str,
    user_id: int,
    role: str,
    now: datetime,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")

    exp = now + ttl
    payload: Dict[str, Any] = {
        "userId": int(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def decode_access_token(*, token: str, secret: str, now: datetime) -> Dict[str, Any]:
    """Verify signature and expiry against `now`.

    Raises jwt.InvalidTokenError (or its ExpiredSignatureError subclass).
    """
    if not token:
        raise jwt.InvalidTokenError("token_blank")
    if not secret:
        raise ValueError("jwt_secret_blank")

    # Expiry is checked against the caller's clock, not PyJWT's wall clock.
    payload = jwt.decode(
        token,
        secret,
        algorithms=[_JWT_ALG],
        options={"require": ["exp", "userId", "role"], "verify_exp": False, "verify_iat": False},
    )
    try:
        exp = int(payload["exp"])
    except (TypeError, ValueError) as e:
        raise jwt.InvalidTokenError("exp_not_int") from e
    if exp <= int(now.timestamp()):
        raise jwt.ExpiredSignatureError("Signature has expired")
    return payload


def expiry_of(payload: Dict[str, Any]) -> datetime:
    return datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
