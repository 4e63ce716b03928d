"""Sign-in check for dashboard API callers.

Requests carry a Google ID token (``Authorization: Bearer ...``) issued to
the dashboard's OAuth client. Local development can skip verification with
``DASH_DEV_AUTH_BYPASS=1`` and an ``X-User-Email`` header naming the user.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import List, Optional

from fastapi import Header, HTTPException, status
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

logger = logging.getLogger(__name__)

DEV_BYPASS_ENV = "DASH_DEV_AUTH_BYPASS"
CLIENT_ID_ENV = "GOOGLE_CLIENT_ID"
AUDIENCE_ENV = "GOOGLE_OAUTH_AUDIENCE"
ALLOWED_EMAILS_ENV = "DASH_ALLOWED_EMAILS"


class AuthError(HTTPException):
    def __init__(self, detail: str, code: int = status.HTTP_401_UNAUTHORIZED) -> None:
        super().__init__(status_code=code, detail=detail)


def _split_env_list(name: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


@lru_cache
def _audiences() -> tuple[str, ...]:
    """Accepted token audiences; the sign-in client id when none are listed."""
    return tuple(_split_env_list(AUDIENCE_ENV) or _split_env_list(CLIENT_ID_ENV))


@lru_cache
def _allowed_emails() -> frozenset[str]:
    return frozenset(email.lower() for email in _split_env_list(ALLOWED_EMAILS_ENV))


def _check_allowed(email: str) -> str:
    allowed = _allowed_emails()
    if allowed and email.lower() not in allowed:
        logger.warning(f"Rejected sign-in from {email}")
        raise AuthError("This account is not allowed to use the dashboard.", status.HTTP_403_FORBIDDEN)
    return email


def verify_id_token(token: str) -> str:
    """Email claim of a valid Google ID token.

    Raises:
        AuthError: no audience is configured, the token fails verification
            for every audience, or it has no email claim.
    """
    audiences = _audiences()
    if not audiences:
        raise AuthError(f"Sign-in is not configured; set {CLIENT_ID_ENV} or {AUDIENCE_ENV}.")

    transport = google_requests.Request()
    last_error: Optional[ValueError] = None
    for audience in audiences:
        try:
            claims = id_token.verify_oauth2_token(token, transport, audience)
        except ValueError as exc:
            last_error = exc
            continue
        email = claims.get("email")
        if not email:
            raise AuthError("ID token has no email claim.")
        return email
    raise AuthError(f"Invalid token: {last_error}")


def get_current_user(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    dev_user: Optional[str] = Header(default=None, alias="X-User-Email"),
) -> str:
    """FastAPI dependency returning the signed-in user's email."""
    if os.getenv(DEV_BYPASS_ENV) == "1":
        if not dev_user:
            raise AuthError(f"{DEV_BYPASS_ENV} is set but the X-User-Email header is missing.")
        return _check_allowed(dev_user)

    scheme, _, token = (authorization or "").partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise AuthError("Missing Bearer token.")
    return _check_allowed(verify_id_token(token.strip()))
