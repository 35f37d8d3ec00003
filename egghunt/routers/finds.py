from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db
from ..schemas import CountResponse, FindCheckResponse, FindCreate, FindRead, FindRegistration
from ..services import finds as find_service

router = APIRouter(prefix="/api/finds", tags=["finds"])

@router.post("", response_model=FindRegistration, status_code=201)
async def register_find(payload: FindCreate, response: Response, db: AsyncSession = Depends(get_db)):
    try:
        obj, created = await find_service.register_once(
            db,
            qr_code_id=payload.qr_code_id,
            user_id=payload.user_id,
            ip_address=payload.ip_address,
            user_agent=payload.user_agent,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not created:
        response.status_code = 200
    return FindRegistration(find=FindRead.model_validate(obj), already_found=not created)

@router.get("/check", response_model=FindCheckResponse)
async def check_find(qr_code_id: int = Query(..., alias="qrCodeId"), user_id: int = Query(..., alias="userId"), db: AsyncSession = Depends(get_db)):
    existing = await find_service.get_existing_find(db, qr_code_id=qr_code_id, user_id=user_id)
    return FindCheckResponse(
        qr_code_id=qr_code_id,
        user_id=user_id,
        found=existing is not None,
        find=FindRead.model_validate(existing) if existing else None,
    )

@router.get("/qrcode/{qr_code_id}", response_model=list[FindRead])
async def finds_for_qr_code(qr_code_id: int, db: AsyncSession = Depends(get_db)):
    return await find_service.list_by_qr_code(db, qr_code_id)

@router.get("/user/{user_id}", response_model=list[FindRead])
async def finds_for_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await find_service.list_by_user(db, user_id)

@router.get("/user/{user_id}/count", response_model=CountResponse)
async def count_for_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return CountResponse(count=await find_service.count_by_user(db, user_id))

@router.get("/user/{user_id}/by-campaign", response_model=list[FindRead])
async def finds_for_user_in_campaign(
    user_id: int,
    campaign_id: int = Query(..., alias="campaignId"),
    take: int | None = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await find_service.list_by_user_and_campaign(db, user_id=user_id, campaign_id=campaign_id, take=take)
