from __future__ import annotations
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories import FindRepository, SessionRepository, UserRepository
from ..schemas import AnonymizeResult, GdprDeleteResult

logger = logging.getLogger(__name__)

async def delete_user_data(db: AsyncSession, user_id: int, *, delete_finds: bool = False) -> GdprDeleteResult | None:
    users = UserRepository(db)
    user = await users.get_by_id(user_id)
    if user is None:
        return None
    deleted_sessions = await SessionRepository(db).delete_by_user(user_id)
    deleted_finds = await FindRepository(db).delete_by_user(user_id) if delete_finds else 0
    # cascades any remaining finds
    await users.delete(user)
    logger.info("GDPR delete for user %s: %d sessions, %d finds", user_id, deleted_sessions, deleted_finds)
    return GdprDeleteResult(
        user_id=user_id,
        deleted_sessions=deleted_sessions,
        deleted_finds=deleted_finds,
        user_deleted=True,
    )

def anonymized_name(user_id: int) -> str:
    return f"Anonymized_User_{user_id}_{uuid.uuid4().hex[:8]}"

async def anonymize_user(db: AsyncSession, user_id: int) -> AnonymizeResult | None:
    users = UserRepository(db)
    user = await users.get_by_id(user_id)
    if user is None:
        return None
    deleted_sessions = await SessionRepository(db).delete_by_user(user_id)
    user.name = anonymized_name(user_id)
    await users.update(user)
    logger.info("User %s anonymized", user_id)
    return AnonymizeResult(user_id=user_id, new_name=user.name, deleted_sessions=deleted_sessions)
