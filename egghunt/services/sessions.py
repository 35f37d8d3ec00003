from __future__ import annotations
import json
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import DEFAULT_SESSION_DAYS, Session
from ..repositories import SessionRepository, UserRepository

logger = logging.getLogger(__name__)

async def create(db: AsyncSession, *, user_id: int, expiration_days: int = DEFAULT_SESSION_DAYS) -> Session:
    if expiration_days <= 0:
        raise ValueError("expiration_days must be positive")
    if not await UserRepository(db).exists(user_id):
        raise ValueError(f"user {user_id} does not exist")
    return await SessionRepository(db).add(Session.start(user_id, expiration_days))

async def get(db: AsyncSession, session_id: str) -> Session | None:
    return await SessionRepository(db).get_by_id(session_id)

async def list_by_user(db: AsyncSession, user_id: int) -> list[Session]:
    return await SessionRepository(db).get_by_user(user_id)

async def validate(db: AsyncSession, session_id: str) -> bool:
    s = await get(db, session_id)
    return s is not None and s.is_valid()

async def extend(db: AsyncSession, session_id: str, *, days: int = DEFAULT_SESSION_DAYS) -> Session | None:
    if days <= 0:
        raise ValueError("days must be positive")
    repo = SessionRepository(db)
    s = await repo.get_by_id(session_id)
    if s is None:
        return None
    s.extend(days)
    return await repo.update(s)

async def deactivate(db: AsyncSession, session_id: str) -> Session | None:
    repo = SessionRepository(db)
    s = await repo.get_by_id(session_id)
    if s is None:
        return None
    s.deactivate()
    return await repo.update(s)

async def update_data(db: AsyncSession, session_id: str, data: str) -> Session | None:
    try:
        json.loads(data)
    except json.JSONDecodeError as e:
        raise ValueError("session data must be valid JSON") from e
    repo = SessionRepository(db)
    s = await repo.get_by_id(session_id)
    if s is None:
        return None
    s.update_data(data)
    return await repo.update(s)
