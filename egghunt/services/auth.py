from __future__ import annotations
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.security import hash_password, verify_password
from ..models import AdminUser
from ..repositories import AdminUserRepository

logger = logging.getLogger(__name__)

async def authenticate(db: AsyncSession, *, username: str, password: str) -> AdminUser | None:
    repo = AdminUserRepository(db)
    admin = await repo.get_by_username(username)
    if admin is None or not admin.is_active:
        return None
    if not verify_password(password, admin.password_hash):
        logger.warning("Failed admin login for %s", username)
        return None
    admin.record_login()
    return await repo.update(admin)

async def create_admin(db: AsyncSession, *, username: str, email: str, password: str) -> AdminUser:
    if not username or not username.strip():
        raise ValueError("username must not be empty")
    if not email or not email.strip():
        raise ValueError("email must not be empty")
    if not password:
        raise ValueError("password must not be empty")
    repo = AdminUserRepository(db)
    if await repo.get_by_username(username.strip()):
        raise ValueError("username already registered")
    if await repo.get_by_email(email.strip()):
        raise ValueError("email already registered")
    admin = AdminUser(
        username=username.strip(),
        email=email.strip(),
        password_hash=hash_password(password),
        is_active=True,
    )
    admin = await repo.add(admin)
    logger.info("Admin %s created", admin.username)
    return admin

async def change_password(db: AsyncSession, *, admin_id: int, current_password: str, new_password: str) -> bool:
    repo = AdminUserRepository(db)
    admin = await repo.get_by_id(admin_id)
    if admin is None or not verify_password(current_password, admin.password_hash):
        return False
    admin.update_password(hash_password(new_password))
    await repo.update(admin)
    return True

async def ensure_bootstrap_admin(db: AsyncSession, *, username: str, password: str, email: str) -> AdminUser:
    existing = await AdminUserRepository(db).get_by_username(username)
    if existing is not None:
        return existing
    return await create_admin(db, username=username, email=email, password=password)
