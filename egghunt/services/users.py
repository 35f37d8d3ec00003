from __future__ import annotations
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User
from ..repositories import UserRepository

logger = logging.getLogger(__name__)

class UserNameTakenError(ValueError):
    pass

async def create(db: AsyncSession, *, name: str) -> User:
    if not name or not name.strip():
        raise ValueError("name must not be empty")
    name = name.strip()
    repo = UserRepository(db)
    if await repo.name_exists(name):
        raise UserNameTakenError(f"user name '{name}' is already taken")
    user = await repo.add(User(name=name, is_active=True))
    logger.info("User %s registered", user.id)
    return user

async def get(db: AsyncSession, user_id: int) -> User | None:
    return await UserRepository(db).get_by_id(user_id)

async def list_active(db: AsyncSession) -> list[User]:
    return await UserRepository(db).get_active()

async def name_exists(db: AsyncSession, name: str) -> bool:
    return await UserRepository(db).name_exists(name.strip())

async def touch(db: AsyncSession, user_id: int) -> User | None:
    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if user is None:
        return None
    user.touch()
    return await repo.update(user)

async def deactivate(db: AsyncSession, user_id: int) -> User | None:
    repo = UserRepository(db)
    user = await repo.get_by_id(user_id)
    if user is None:
        return None
    user.deactivate()
    return await repo.update(user)
