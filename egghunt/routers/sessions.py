from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..deps import get_db, get_settings_dep
from ..schemas import SessionCreate, SessionDataUpdate, SessionExtend, SessionRead, SessionValidation
from ..services import sessions as session_service

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

def _found(obj):
    if obj is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return obj

@router.post("", response_model=SessionRead, status_code=201)
async def create_session(
    payload: SessionCreate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    try:
        return await session_service.create(
            db, user_id=payload.user_id, expiration_days=payload.expiration_days or settings.session_expiration_days
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{session_id}", response_model=SessionRead)
async def get_session(session_id: str, db: AsyncSession = Depends(get_db)):
    return _found(await session_service.get(db, session_id))

@router.get("/{session_id}/validate", response_model=SessionValidation)
async def validate_session(session_id: str, db: AsyncSession = Depends(get_db)):
    return SessionValidation(session_id=session_id, valid=await session_service.validate(db, session_id))

@router.post("/{session_id}/extend", response_model=SessionRead)
async def extend_session(session_id: str, payload: SessionExtend, db: AsyncSession = Depends(get_db)):
    return _found(await session_service.extend(db, session_id, days=payload.days))

@router.post("/{session_id}/deactivate", response_model=SessionRead)
async def deactivate_session(session_id: str, db: AsyncSession = Depends(get_db)):
    return _found(await session_service.deactivate(db, session_id))

@router.put("/{session_id}/data", response_model=SessionRead)
async def update_session_data(session_id: str, payload: SessionDataUpdate, db: AsyncSession = Depends(get_db)):
    try:
        obj = await session_service.update_data(db, session_id, payload.data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _found(obj)
