from __future__ import annotations

from ..models import AdminUser
from .base import Repository


class AdminUserRepository(Repository[AdminUser]):
    model = AdminUser

    async def get_by_username(self, username: str) -> AdminUser | None:
        stmt = self._base_select().where(AdminUser.username == username)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_by_email(self, email: str) -> AdminUser | None:
        stmt = self._base_select().where(AdminUser.email == email)
        return (await self.session.execute(stmt)).scalar_one_or_none()
