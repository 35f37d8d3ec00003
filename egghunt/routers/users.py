from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_db, require_admin
from ..schemas import AnonymizeResult, GdprDeleteResult, NameCheckRequest, NameCheckResponse, UserCreate, UserRead
from ..services import gdpr
from ..services import users as user_service

router = APIRouter(prefix="/api/users", tags=["users"])

def _found(obj):
    if obj is None:
        raise HTTPException(status_code=404, detail="User not found")
    return obj

@router.post("", response_model=UserRead, status_code=201)
async def create_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await user_service.create(db, name=payload.name)
    except user_service.UserNameTakenError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post("/check-name", response_model=NameCheckResponse)
async def check_name(payload: NameCheckRequest, db: AsyncSession = Depends(get_db)):
    return NameCheckResponse(name=payload.name, exists=await user_service.name_exists(db, payload.name))

@router.get("/active", response_model=list[UserRead], dependencies=[Depends(require_admin)])
async def list_active_users(db: AsyncSession = Depends(get_db)):
    return await user_service.list_active(db)

@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await user_service.get(db, user_id))

@router.put("/{user_id}/last-seen", response_model=UserRead)
async def touch_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await user_service.touch(db, user_id))

@router.post("/{user_id}/deactivate", response_model=UserRead, dependencies=[Depends(require_admin)])
async def deactivate_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await user_service.deactivate(db, user_id))

@router.post("/{user_id}/gdpr-delete", response_model=GdprDeleteResult, dependencies=[Depends(require_admin)])
async def gdpr_delete(user_id: int, delete_finds: bool = False, db: AsyncSession = Depends(get_db)):
    return _found(await gdpr.delete_user_data(db, user_id, delete_finds=delete_finds))

@router.post("/{user_id}/anonymize", response_model=AnonymizeResult, dependencies=[Depends(require_admin)])
async def anonymize(user_id: int, db: AsyncSession = Depends(get_db)):
    return _found(await gdpr.anonymize_user(db, user_id))
