"""
Admin authentication.

There is a single administrator, configured through the environment:
- ADMIN_USERNAME
- ADMIN_PASSWORD_HASH (bcrypt) or ADMIN_PASSWORD (plain text)
"""

from __future__ import annotations

import logging
import os

from fastapi import HTTPException, status

from . import schemas, security

logger = logging.getLogger(__name__)


def admin_username() -> str:
    return os.environ.get("ADMIN_USERNAME", "").strip()


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def check_admin_credentials(username: str, password: str) -> bool:
    expected_user = admin_username()
    if not expected_user or (username or "").strip() != expected_user:
        return False

    password_hash = os.environ.get("ADMIN_PASSWORD_HASH", "").strip()
    if password_hash:
        return security.verify_password(password, password_hash)
    return security.verify_plain_password(password, os.environ.get("ADMIN_PASSWORD", ""))


def login(payload: schemas.LoginRequest) -> schemas.TokenResponse:
    if not check_admin_credentials(payload.username, payload.password):
        logger.warning("admin_login_failed username=%s", payload.username)
        raise _unauthorized("Invalid username or password.")

    token = security.build_access_token(username=admin_username())
    return schemas.TokenResponse(
        access_token=token,
        expires_in=security.access_token_expire_minutes() * 60,
    )


def get_admin_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise _unauthorized(str(exc)) from exc

    if payload.get("role") != security.ADMIN_ROLE:
        raise _unauthorized()

    subject = str(payload.get("sub") or "").strip()
    # A rotated ADMIN_USERNAME invalidates outstanding tokens.
    if not subject or subject != admin_username():
        raise _unauthorized()
    return {"username": subject, "role": security.ADMIN_ROLE}
