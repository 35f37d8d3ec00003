from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

# Use bcrypt_sha256 to avoid bcrypt 72-byte issues
_pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")

ADMIN_ROLE = "admin"

def hash_password(password: str) -> str:
    return _pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    return _pwd_context.verify(password, hashed)

def create_admin_token(
    *, admin_id: int, username: str, secret: str, issuer: str, expires_minutes: int
) -> tuple[str, int]:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes)
    payload: Dict[str, Any] = {
        "sub": str(admin_id),
        "username": username,
        "role": ADMIN_ROLE,
        "iss": issuer,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "jti": secrets.token_urlsafe(16),
    }
    token = jwt.encode(payload, secret, algorithm="HS256")
    return token, expires_minutes * 60

def decode_admin_token(token: str, *, secret: str, issuer: str) -> Dict[str, Any]:
    payload = jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        options={"require": ["exp", "iss", "sub"]},
    )
    if payload.get("role") != ADMIN_ROLE:
        raise jwt.InvalidTokenError("invalid role")
    return payload
