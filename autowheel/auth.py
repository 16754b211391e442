# autowheel/auth.py
"""Static admin credential check with in-memory bearer tokens."""
import os
import secrets
import threading
from typing import Optional

from fastapi import Header, HTTPException

from .utils import logger

DEFAULT_ADMIN_EMAIL = "admin@auto-wheel.com"
DEFAULT_ADMIN_PASSWORD = "admin123"

_tokens = {}
_lock = threading.Lock()


def admin_user() -> dict:
    email = os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    return {"id": "1", "name": "Admin User", "email": email, "role": "admin"}


def check_credentials(email: str, password: str) -> bool:
    expected_email = os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    expected_password = os.getenv("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)
    return (
        secrets.compare_digest(email.strip().lower(), expected_email.lower())
        and secrets.compare_digest(password, expected_password)
    )


def issue_token() -> str:
    token = secrets.token_urlsafe(32)
    with _lock:
        _tokens[token] = admin_user()
    return token


def verify_token(token: Optional[str]) -> Optional[dict]:
    if not token:
        return None
    with _lock:
        return _tokens.get(token)


def revoke_token(token: Optional[str]) -> None:
    with _lock:
        _tokens.pop(token, None)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def require_admin(authorization: Optional[str] = Header(None)) -> dict:
    user = verify_token(bearer_token(authorization))
    if user is None:
        logger.warning("Rejected admin request without a valid token")
        raise HTTPException(status_code=401, detail="Admin login required")
    return user
