from __future__ import annotations

from ..models import QrCode
from .base import Repository


class QrCodeRepository(Repository[QrCode]):
    model = QrCode

    async def get_by_code(self, code: str) -> QrCode | None:
        stmt = self._base_select().where(QrCode.code == code)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def code_exists(self, code: str) -> bool:
        return await self.get_by_code(code) is not None

    async def get_by_campaign(self, campaign_id: int, *, active_only: bool = False) -> list[QrCode]:
        stmt = self._base_select().where(QrCode.campaign_id == campaign_id)
        if active_only:
            stmt = stmt.where(QrCode.is_active.is_(True))
        stmt = stmt.order_by(QrCode.sort_order.asc(), QrCode.created_at.asc(), QrCode.id.asc())
        return await self._scalars(stmt)
