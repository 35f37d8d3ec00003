from __future__ import annotations
from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db, require_admin
from ..models import as_utc
from ..repositories import CampaignRepository, FindHistoryFilter, QrCodeRepository, UserRepository
from ..schemas import (
    CampaignQrCodeStatistics,
    CampaignStatistics,
    FindHistory,
    QrCodeStatistics,
    SystemOverview,
    TimeBasedStatistics,
    TopPerformersStatistics,
    UserStatistics,
)
from ..services import statistics as stats

router = APIRouter(prefix="/api/statistics", tags=["statistics"], dependencies=[Depends(require_admin)])

async def _campaign_exists(db: AsyncSession, campaign_id: int) -> None:
    if not await CampaignRepository(db).exists(campaign_id):
        raise HTTPException(status_code=404, detail="Campaign not found")

@router.get("/overview", response_model=SystemOverview)
async def overview(db: AsyncSession = Depends(get_db)):
    return await stats.get_system_overview(db)

@router.get("/campaign/{campaign_id}", response_model=CampaignStatistics)
async def campaign(campaign_id: int, db: AsyncSession = Depends(get_db)):
    await _campaign_exists(db, campaign_id)
    return await stats.get_campaign_statistics(db, campaign_id)

@router.get("/campaign/{campaign_id}/qrcodes", response_model=CampaignQrCodeStatistics)
async def campaign_qr_codes(campaign_id: int, db: AsyncSession = Depends(get_db)):
    await _campaign_exists(db, campaign_id)
    return await stats.get_campaign_qr_code_statistics(db, campaign_id)

@router.get("/user/{user_id}", response_model=UserStatistics)
async def user(user_id: int, db: AsyncSession = Depends(get_db)):
    if not await UserRepository(db).exists(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return await stats.get_user_statistics(db, user_id)

@router.get("/qrcode/{qr_code_id}", response_model=QrCodeStatistics)
async def qr_code(qr_code_id: int, db: AsyncSession = Depends(get_db)):
    if not await QrCodeRepository(db).exists(qr_code_id):
        raise HTTPException(status_code=404, detail="QR code not found")
    return await stats.get_qr_code_statistics(db, qr_code_id)

@router.get("/top-performers", response_model=TopPerformersStatistics)
async def top_performers(limit: int | None = Query(None, ge=1, le=1000), db: AsyncSession = Depends(get_db)):
    return await stats.get_top_performers(db, limit=limit)

@router.get("/time-series", response_model=TimeBasedStatistics)
async def time_series(
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
):
    start_date, end_date = as_utc(start_date), as_utc(end_date)
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")
    return await stats.get_time_based_statistics(db, start=start_date, end=end_date)

@router.get("/find-history", response_model=FindHistory)
async def find_history(
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    user_id: int | None = Query(None, alias="userId"),
    qr_code_id: int | None = Query(None, alias="qrCodeId"),
    campaign_id: int | None = Query(None, alias="campaignId"),
    skip: int = Query(0, ge=0),
    take: int = Query(50, ge=1, le=500),
    sort_by: Literal["found_at", "user_id", "qr_code_id"] = Query("found_at", alias="sortBy"),
    sort_direction: Literal["asc", "desc"] = Query("desc", alias="sortDirection"),
    db: AsyncSession = Depends(get_db),
):
    flt = FindHistoryFilter(
        start_date=as_utc(start_date),
        end_date=as_utc(end_date),
        user_id=user_id,
        qr_code_id=qr_code_id,
        campaign_id=campaign_id,
        skip=skip,
        take=take,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
    return await stats.get_find_history(db, flt)
