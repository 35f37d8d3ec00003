from __future__ import annotations

from ..models import Campaign
from .base import Repository


class CampaignRepository(Repository[Campaign]):
    model = Campaign

    async def get_active(self) -> list[Campaign]:
        stmt = self._base_select().where(Campaign.is_active.is_(True)).order_by(Campaign.created_at.desc(), Campaign.id.desc())
        return await self._scalars(stmt)
