from __future__ import annotations
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import qr
from ..models import QrCode
from ..repositories import CampaignRepository, QrCodeRepository

logger = logging.getLogger(__name__)

_CODE_ATTEMPTS = 5

async def list_by_campaign(db: AsyncSession, campaign_id: int, *, active_only: bool = False) -> list[QrCode]:
    return await QrCodeRepository(db).get_by_campaign(campaign_id, active_only=active_only)

async def get(db: AsyncSession, qr_code_id: int) -> QrCode | None:
    return await QrCodeRepository(db).get_by_id(qr_code_id)

async def get_by_code(db: AsyncSession, code: str) -> QrCode | None:
    return await QrCodeRepository(db).get_by_code(code.strip().lower())

async def _unique_code(repo: QrCodeRepository) -> str:
    for _ in range(_CODE_ATTEMPTS):
        code = qr.generate_code()
        if not await repo.code_exists(code):
            return code
    raise RuntimeError("could not allocate a unique qr code")

async def create(
    db: AsyncSession,
    *,
    campaign_id: int,
    title: str,
    description: str = "",
    internal_notes: str = "",
) -> QrCode:
    if not title or not title.strip():
        raise ValueError("title must not be empty")
    if not await CampaignRepository(db).exists(campaign_id):
        raise ValueError(f"campaign {campaign_id} does not exist")
    repo = QrCodeRepository(db)
    obj = QrCode(
        campaign_id=campaign_id,
        title=title.strip(),
        description=description or "",
        internal_notes=internal_notes or "",
        code=await _unique_code(repo),
        sort_order=0,
        is_active=True,
    )
    obj = await repo.add(obj)
    logger.info("QR code %s (%s) created for campaign %s", obj.id, obj.code, campaign_id)
    return obj

async def update(
    db: AsyncSession, qr_code_id: int, *, title: str, description: str = "", internal_notes: str = ""
) -> QrCode | None:
    if not title or not title.strip():
        raise ValueError("title must not be empty")
    repo = QrCodeRepository(db)
    obj = await repo.get_by_id(qr_code_id)
    if obj is None:
        return None
    obj.update(title.strip(), description or "", internal_notes or "")
    return await repo.update(obj)

async def set_sort_order(db: AsyncSession, qr_code_id: int, sort_order: int) -> QrCode | None:
    if sort_order < 0:
        raise ValueError("sort_order must not be negative")
    repo = QrCodeRepository(db)
    obj = await repo.get_by_id(qr_code_id)
    if obj is None:
        return None
    obj.set_sort_order(sort_order)
    return await repo.update(obj)

async def set_active(db: AsyncSession, qr_code_id: int, active: bool) -> QrCode | None:
    repo = QrCodeRepository(db)
    obj = await repo.get_by_id(qr_code_id)
    if obj is None:
        return None
    if active:
        obj.activate()
    else:
        obj.deactivate()
    return await repo.update(obj)

async def delete(db: AsyncSession, qr_code_id: int) -> bool:
    repo = QrCodeRepository(db)
    obj = await repo.get_by_id(qr_code_id)
    if obj is None:
        return False
    await repo.delete(obj)
    return True

def render_png(qr_code: QrCode, *, base_url: str, box_size: int = 10) -> bytes:
    return qr.render_png(qr.scan_url(base_url, qr_code.code), box_size=box_size)
