from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_

from ..models import Session, utcnow
from .base import Repository


class SessionRepository(Repository[Session]):
    model = Session

    async def get_by_user(self, user_id: int) -> list[Session]:
        stmt = self._base_select().where(Session.user_id == user_id).order_by(Session.created_at.desc())
        return await self._scalars(stmt)

    async def delete_by_user(self, user_id: int) -> int:
        res = await self.session.execute(
            delete(Session).where(Session.user_id == user_id).execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return int(res.rowcount or 0)

    async def delete_expired(self, now: datetime | None = None) -> int:
        """Bulk delete expired or deactivated sessions; returns rows removed."""
        now = now or utcnow()
        res = await self.session.execute(
            delete(Session)
            .where(or_(Session.expires_at <= now, Session.is_active.is_(False)))
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return int(res.rowcount or 0)
