from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from treasurer_dashboard.config import Config
from treasurer_dashboard.errors import Forbidden, Unauthenticated
from treasurer_dashboard.models import Identity

from .security import decode_access_token, expiry_of


_bearer = HTTPBearer(auto_error=False)

INVALID_TOKEN = "Invalid token"


def identity_from_token(*, token: str, secret: str, now: datetime) -> Identity:
    """Pure token check: (token, clock reading, secret) -> Identity.

    No store lookup; whatever the token says about role holds until it expires.
    """
    try:
        payload = decode_access_token(token=token, secret=secret, now=now)
    except jwt.InvalidTokenError:
        raise Unauthenticated(INVALID_TOKEN)

    try:
        user_id = int(payload["userId"])
    except (TypeError, ValueError):
        raise Unauthenticated(INVALID_TOKEN)

    role = payload["role"]
    if not isinstance(role, str):
        raise Unauthenticated(INVALID_TOKEN)

    return Identity(user_id=user_id, role=role, expires_at=expiry_of(payload))


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Identity:
    """Authenticate a request from `Authorization: Bearer <token>`.

    Secret and clock come from app.state (set by create_app), so tests can swap
    either without patching module globals.
    """

    cfg: Optional[Config] = getattr(request.app.state, "cfg", None)
    clock: Optional[Callable[[], datetime]] = getattr(request.app.state, "clock", None)
    if cfg is None or clock is None:
        raise RuntimeError("app.state is missing cfg/clock; build the app with create_app()")

    token = credentials.credentials if credentials is not None else ""
    if not token:
        raise Unauthenticated()

    identity = identity_from_token(token=token, secret=cfg.AUTH_JWT_SECRET, now=clock())
    request.state.identity = identity
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise Forbidden()
    return identity
