from __future__ import annotations
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Find, utcnow
from ..repositories import FindRepository, QrCodeRepository, UserRepository

logger = logging.getLogger(__name__)

async def register_find(
    db: AsyncSession,
    *,
    qr_code_id: int,
    user_id: int,
    ip_address: str,
    user_agent: str,
) -> Find:
    if not ip_address or not ip_address.strip():
        raise ValueError("ip_address must not be empty")
    if not user_agent or not user_agent.strip():
        raise ValueError("user_agent must not be empty")
    if not await QrCodeRepository(db).exists(qr_code_id):
        raise ValueError(f"qr code {qr_code_id} does not exist")
    users = UserRepository(db)
    user = await users.get_by_id(user_id)
    if user is None:
        raise ValueError(f"user {user_id} does not exist")

    user.touch()
    find = Find(
        qr_code_id=qr_code_id,
        user_id=user_id,
        found_at=utcnow(),
        ip_address=ip_address.strip(),
        user_agent=user_agent.strip(),
    )
    find = await FindRepository(db).add(find)
    logger.info("User %s found qr code %s", user_id, qr_code_id)
    return find

async def get_existing_find(db: AsyncSession, *, qr_code_id: int, user_id: int) -> Find | None:
    return await FindRepository(db).get_first(qr_code_id, user_id)

async def register_once(
    db: AsyncSession,
    *,
    qr_code_id: int,
    user_id: int,
    ip_address: str,
    user_agent: str,
) -> tuple[Find, bool]:
    # idempotent: if exists, return existing
    existing = await get_existing_find(db, qr_code_id=qr_code_id, user_id=user_id)
    if existing:
        return existing, False
    obj = await register_find(db, qr_code_id=qr_code_id, user_id=user_id, ip_address=ip_address, user_agent=user_agent)
    return obj, True

async def has_user_found(db: AsyncSession, *, qr_code_id: int, user_id: int) -> bool:
    return await get_existing_find(db, qr_code_id=qr_code_id, user_id=user_id) is not None

async def list_by_qr_code(db: AsyncSession, qr_code_id: int) -> list[Find]:
    return await FindRepository(db).get_by_qr_code(qr_code_id)

async def list_by_user(db: AsyncSession, user_id: int) -> list[Find]:
    return await FindRepository(db).get_by_user(user_id)

async def list_by_user_and_campaign(db: AsyncSession, *, user_id: int, campaign_id: int, take: int | None = None) -> list[Find]:
    return await FindRepository(db).get_by_user_and_campaign(user_id, campaign_id, take)

async def count_by_qr_code(db: AsyncSession, qr_code_id: int) -> int:
    return await FindRepository(db).count_by_qr_code(qr_code_id)

async def count_by_user(db: AsyncSession, user_id: int) -> int:
    return await FindRepository(db).count_by_user(user_id)
