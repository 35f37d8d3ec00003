from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..core.security import create_admin_token
from ..deps import get_db, get_settings_dep, require_admin, admin_id
from ..repositories import AdminUserRepository
from ..schemas import AdminRead, ChangePasswordRequest, LoginRequest, LoginResponse
from ..services import auth as auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    admin = await auth_service.authenticate(db, username=payload.username, password=payload.password)
    if admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token, expires_in = create_admin_token(
        admin_id=admin.id,
        username=admin.username,
        secret=settings.admin_token_secret_effective,
        issuer=settings.token_issuer,
        expires_minutes=settings.admin_token_ttl_minutes,
    )
    return LoginResponse(access_token=token, expires_in=expires_in, admin=AdminRead.model_validate(admin))

@router.get("/me", response_model=AdminRead)
async def me(claims: dict = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    admin = await AdminUserRepository(db).get_by_id(admin_id(claims))
    if admin is None or not admin.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin no longer active")
    return admin

@router.post("/change-password", status_code=204)
async def change_password(
    payload: ChangePasswordRequest,
    claims: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    ok = await auth_service.change_password(
        db,
        admin_id=admin_id(claims),
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    if not ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
