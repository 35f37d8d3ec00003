from __future__ import annotations

from sqlalchemy import select

from ..models import User
from .base import Repository


class UserRepository(Repository[User]):
    model = User

    async def get_by_name(self, name: str) -> User | None:
        stmt = self._base_select().where(User.name == name).order_by(User.id).limit(1)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def name_exists(self, name: str) -> bool:
        stmt = select(User.id).where(User.name == name).limit(1)
        return (await self.session.execute(stmt)).scalar_one_or_none() is not None
