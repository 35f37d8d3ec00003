from __future__ import annotations
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Campaign
from ..repositories import CampaignRepository

logger = logging.getLogger(__name__)

def _require(value: str, field: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{field} must not be empty")
    return value.strip()

async def list_active(db: AsyncSession) -> list[Campaign]:
    return await CampaignRepository(db).get_active()

async def list_all(db: AsyncSession) -> list[Campaign]:
    return await CampaignRepository(db).get_all()

async def get(db: AsyncSession, campaign_id: int) -> Campaign | None:
    return await CampaignRepository(db).get_by_id(campaign_id)

async def create(db: AsyncSession, *, name: str, description: str, created_by: str) -> Campaign:
    campaign = Campaign(
        name=_require(name, "name"),
        description=_require(description, "description"),
        created_by=_require(created_by, "created_by"),
        is_active=True,
    )
    campaign = await CampaignRepository(db).add(campaign)
    logger.info("Campaign %s created by %s", campaign.id, campaign.created_by)
    return campaign

async def update(db: AsyncSession, campaign_id: int, *, name: str, description: str) -> Campaign | None:
    repo = CampaignRepository(db)
    campaign = await repo.get_by_id(campaign_id)
    if campaign is None:
        return None
    campaign.update(_require(name, "name"), _require(description, "description"))
    return await repo.update(campaign)

async def set_active(db: AsyncSession, campaign_id: int, active: bool) -> Campaign | None:
    repo = CampaignRepository(db)
    campaign = await repo.get_by_id(campaign_id)
    if campaign is None:
        return None
    if active:
        campaign.activate()
    else:
        campaign.deactivate()
    return await repo.update(campaign)

async def delete(db: AsyncSession, campaign_id: int) -> bool:
    repo = CampaignRepository(db)
    campaign = await repo.get_by_id(campaign_id)
    if campaign is None:
        return False
    await repo.delete(campaign)
    logger.info("Campaign %s deleted", campaign_id)
    return True
