from __future__ import annotations
from typing import Any, AsyncGenerator, Dict
from fastapi import Depends, Header, HTTPException, Request, status
import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import Settings
from .core.security import decode_admin_token
from .db import session_scope
from .repositories import AdminUserRepository

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings

async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async for s in session_scope(request.app.state.session_maker):
        yield s

def admin_id(claims: Dict[str, Any]) -> int:
    try:
        return int(claims["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

async def require_admin(
    request: Request,
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    token = authorization.split(" ", 1)[1].strip()
    settings: Settings = request.app.state.settings
    try:
        payload = decode_admin_token(
            token,
            secret=settings.admin_token_secret_effective,
            issuer=settings.token_issuer,
        )
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    admin = await AdminUserRepository(db).get_by_id(admin_id(payload))
    if admin is None or not admin.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin no longer active")
    return payload
