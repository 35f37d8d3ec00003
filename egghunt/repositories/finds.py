from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from sqlalchemy import Select, delete, func, select

from ..models import Campaign, Find, QrCode, User
from .base import Repository

SortField = Literal["found_at", "user_id", "qr_code_id"]
SortDirection = Literal["asc", "desc"]

_SORT_COLUMNS = {
    "found_at": Find.found_at,
    "user_id": Find.user_id,
    "qr_code_id": Find.qr_code_id,
}


@dataclass
class FindHistoryFilter:
    start_date: datetime | None = None
    end_date: datetime | None = None
    user_id: int | None = None
    qr_code_id: int | None = None
    campaign_id: int | None = None
    skip: int = 0
    take: int = 50
    sort_by: SortField = "found_at"
    sort_direction: SortDirection = "desc"


class FindRepository(Repository[Find]):
    model = Find

    async def get_by_qr_code(self, qr_code_id: int) -> list[Find]:
        stmt = self._base_select().where(Find.qr_code_id == qr_code_id).order_by(Find.found_at.desc(), Find.id.desc())
        return await self._scalars(stmt)

    async def get_by_user(self, user_id: int) -> list[Find]:
        stmt = self._base_select().where(Find.user_id == user_id).order_by(Find.found_at.desc(), Find.id.desc())
        return await self._scalars(stmt)

    async def get_by_campaign(self, campaign_id: int) -> list[Find]:
        stmt = (
            self._base_select()
            .join(QrCode, QrCode.id == Find.qr_code_id)
            .where(QrCode.campaign_id == campaign_id)
            .order_by(Find.found_at.asc(), Find.id.asc())
        )
        return await self._scalars(stmt)

    async def get_by_user_and_campaign(self, user_id: int, campaign_id: int, take: int | None = None) -> list[Find]:
        stmt = (
            self._base_select()
            .join(QrCode, QrCode.id == Find.qr_code_id)
            .where(Find.user_id == user_id, QrCode.campaign_id == campaign_id)
            .order_by(Find.found_at.desc(), Find.id.desc())
        )
        if take:
            stmt = stmt.limit(take)
        return await self._scalars(stmt)

    async def get_first(self, qr_code_id: int, user_id: int) -> Find | None:
        stmt = (
            self._base_select()
            .where(Find.qr_code_id == qr_code_id, Find.user_id == user_id)
            .order_by(Find.found_at.asc(), Find.id.asc())
            .limit(1)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def count_by_qr_code(self, qr_code_id: int) -> int:
        stmt = select(func.count()).select_from(Find).where(Find.qr_code_id == qr_code_id)
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_by_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(Find).where(Find.user_id == user_id)
        return int((await self.session.execute(stmt)).scalar_one())

    async def delete_by_user(self, user_id: int) -> int:
        res = await self.session.execute(
            delete(Find).where(Find.user_id == user_id).execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return int(res.rowcount or 0)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _history_select(self, flt: FindHistoryFilter) -> Select[Any]:
        stmt = (
            select(Find, User.name, QrCode.title, Campaign.id, Campaign.name)
            .join(User, User.id == Find.user_id)
            .join(QrCode, QrCode.id == Find.qr_code_id)
            .join(Campaign, Campaign.id == QrCode.campaign_id)
        )
        if flt.start_date is not None:
            stmt = stmt.where(Find.found_at >= flt.start_date)
        if flt.end_date is not None:
            stmt = stmt.where(Find.found_at <= flt.end_date)
        if flt.user_id is not None:
            stmt = stmt.where(Find.user_id == flt.user_id)
        if flt.qr_code_id is not None:
            stmt = stmt.where(Find.qr_code_id == flt.qr_code_id)
        if flt.campaign_id is not None:
            stmt = stmt.where(QrCode.campaign_id == flt.campaign_id)
        return stmt

    async def history(self, flt: FindHistoryFilter) -> tuple[list[tuple[Find, str, str, int, str]], int]:
        """Rows of (find, user name, qr title, campaign id, campaign name) plus the unpaged total."""
        base = self._history_select(flt)
        total = int((await self.session.execute(select(func.count()).select_from(base.subquery()))).scalar_one())

        col = _SORT_COLUMNS.get(flt.sort_by, Find.found_at)
        order = col.asc() if flt.sort_direction == "asc" else col.desc()
        tie = Find.id.asc() if flt.sort_direction == "asc" else Find.id.desc()
        stmt = base.order_by(order, tie).offset(max(flt.skip, 0)).limit(max(flt.take, 0))
        rows = (await self.session.execute(stmt)).all()
        return [(r[0], r[1], r[2], r[3], r[4]) for r in rows], total
