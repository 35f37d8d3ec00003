from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db, require_admin
from ..schemas import CampaignCreate, CampaignRead, CampaignUpdate
from ..services import campaigns as campaign_service

router = APIRouter(prefix="/api/campaigns", tags=["campaigns"])

def _found(obj):
    if obj is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return obj

@router.get("", response_model=list[CampaignRead])
async def list_campaigns(db: AsyncSession = Depends(get_db)):
    return await campaign_service.list_all(db)

@router.get("/active", response_model=list[CampaignRead])
async def list_active_campaigns(db: AsyncSession = Depends(get_db)):
    return await campaign_service.list_active(db)

@router.get("/{campaign_id}", response_model=CampaignRead)
async def get_campaign(campaign_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await campaign_service.get(db, campaign_id))

@router.post("", response_model=CampaignRead, status_code=201, dependencies=[Depends(require_admin)])
async def create_campaign(payload: CampaignCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await campaign_service.create(
            db, name=payload.name, description=payload.description, created_by=payload.created_by
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.put("/{campaign_id}", response_model=CampaignRead, dependencies=[Depends(require_admin)])
async def update_campaign(campaign_id: int, payload: CampaignUpdate, db: AsyncSession = Depends(get_db)):
    try:
        obj = await campaign_service.update(db, campaign_id, name=payload.name, description=payload.description)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _found(obj)

@router.post("/{campaign_id}/activate", response_model=CampaignRead, dependencies=[Depends(require_admin)])
async def activate_campaign(campaign_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await campaign_service.set_active(db, campaign_id, True))

@router.post("/{campaign_id}/deactivate", response_model=CampaignRead, dependencies=[Depends(require_admin)])
async def deactivate_campaign(campaign_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await campaign_service.set_active(db, campaign_id, False))

@router.delete("/{campaign_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete_campaign(campaign_id: int, db: AsyncSession = Depends(get_db)):
    if not await campaign_service.delete(db, campaign_id):
        raise HTTPException(status_code=404, detail="Campaign not found")
