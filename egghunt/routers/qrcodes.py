from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..deps import get_db, get_settings_dep, require_admin
from ..schemas import QrCodeCreate, QrCodePublic, QrCodeRead, QrCodeUpdate, SortOrderUpdate
from ..services import qr_codes as qr_service

router = APIRouter(prefix="/api/qrcodes", tags=["qrcodes"])

def _found(obj):
    if obj is None:
        raise HTTPException(status_code=404, detail="QR code not found")
    return obj

@router.get("/campaign/{campaign_id}", response_model=list[QrCodeRead], dependencies=[Depends(require_admin)])
async def list_for_campaign(campaign_id: int, active_only: bool = False, db: AsyncSession = Depends(get_db)):
    return await qr_service.list_by_campaign(db, campaign_id, active_only=active_only)

@router.get("/by-code/{code}", response_model=QrCodePublic)
async def get_by_code(code: str, db: AsyncSession = Depends(get_db)):
    return _found(await qr_service.get_by_code(db, code))

@router.get("/{qr_code_id}", response_model=QrCodeRead, dependencies=[Depends(require_admin)])
async def get_qr_code(qr_code_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await qr_service.get(db, qr_code_id))

@router.get("/{qr_code_id}/image.png", dependencies=[Depends(require_admin)])
async def qr_code_png(
    qr_code_id: int,
    box_size: int = Query(10, ge=1, le=40),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    obj = _found(await qr_service.get(db, qr_code_id))
    png = qr_service.render_png(obj, base_url=settings.public_base_url, box_size=box_size)
    return Response(content=png, media_type="image/png")

@router.post("", response_model=QrCodeRead, status_code=201, dependencies=[Depends(require_admin)])
async def create_qr_code(payload: QrCodeCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await qr_service.create(
            db,
            campaign_id=payload.campaign_id,
            title=payload.title,
            description=payload.description,
            internal_notes=payload.internal_notes,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.put("/{qr_code_id}", response_model=QrCodeRead, dependencies=[Depends(require_admin)])
async def update_qr_code(qr_code_id: int, payload: QrCodeUpdate, db: AsyncSession = Depends(get_db)):
    try:
        obj = await qr_service.update(
            db, qr_code_id, title=payload.title, description=payload.description, internal_notes=payload.internal_notes
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _found(obj)

@router.put("/{qr_code_id}/sort-order", response_model=QrCodeRead, dependencies=[Depends(require_admin)])
async def set_sort_order(qr_code_id: int, payload: SortOrderUpdate, db: AsyncSession = Depends(get_db)):
    return _found(await qr_service.set_sort_order(db, qr_code_id, payload.sort_order))

@router.post("/{qr_code_id}/activate", response_model=QrCodeRead, dependencies=[Depends(require_admin)])
async def activate_qr_code(qr_code_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await qr_service.set_active(db, qr_code_id, True))

@router.post("/{qr_code_id}/deactivate", response_model=QrCodeRead, dependencies=[Depends(require_admin)])
async def deactivate_qr_code(qr_code_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await qr_service.set_active(db, qr_code_id, False))

@router.delete("/{qr_code_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete_qr_code(qr_code_id: int, db: AsyncSession = Depends(get_db)):
    if not await qr_service.delete(db, qr_code_id):
        raise HTTPException(status_code=404, detail="QR code not found")
