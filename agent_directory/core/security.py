from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from agent_directory.config import settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode()


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _encode(subject: str, claims: dict[str, Any], expires_in: timedelta, secret: str, token_type: str) -> str:
    expire = datetime.now(timezone.utc) + expires_in
    payload = {**claims, "sub": subject, "exp": expire, "type": token_type}
    return jwt.encode(payload, secret, algorithm=settings.algorithm)


def create_access_token(subject: str, claims: dict[str, Any] | None = None) -> str:
    return _encode(
        subject,
        claims or {},
        timedelta(minutes=settings.access_token_expire_minutes),
        settings.secret_key,
        ACCESS_TOKEN,
    )


def create_refresh_token(subject: str, claims: dict[str, Any] | None = None) -> str:
    return _encode(
        subject,
        claims or {},
        timedelta(days=settings.refresh_token_expire_days),
        settings.refresh_secret_key,
        REFRESH_TOKEN,
    )


def decode_token(token: str, token_type: str = ACCESS_TOKEN) -> dict[str, Any] | None:
    """Returns the payload or None if invalid, expired, or of the wrong type."""
    secret = settings.refresh_secret_key if token_type == REFRESH_TOKEN else settings.secret_key
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type or not payload.get("sub"):
        return None
    return payload
