from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Campaign, Find, QrCode, User, as_utc, utcnow
from ..repositories import (
    CampaignRepository,
    FindHistoryFilter,
    FindRepository,
    QrCodeRepository,
    UserRepository,
)
from ..schemas import (
    CampaignQrCodeStatistics,
    CampaignStatistics,
    FindHistory,
    FindHistoryItem,
    QrCodeFinder,
    QrCodeStatistics,
    SystemOverview,
    TimeBasedStatistics,
    TopPerformersStatistics,
    UserStatistics,
)
from . import buckets

logger = logging.getLogger(__name__)


def completion_rate(total_finds: int, total_qr_codes: int) -> float:
    if total_qr_codes <= 0:
        return 0.0
    return total_finds / total_qr_codes


def _span(finds: Sequence[Find]) -> tuple[datetime | None, datetime | None]:
    if not finds:
        return None, None
    stamps = [as_utc(f.found_at) for f in finds]
    return min(stamps), max(stamps)


# ----------------------------------------------------------------------
# Pure aggregation over already loaded rows
# ----------------------------------------------------------------------

def qr_code_statistics(
    qr_code: QrCode,
    finds: Iterable[Find],
    users_by_id: Mapping[int, User],
    *,
    campaign_name: str = "",
    now: datetime | None = None,
) -> QrCodeStatistics:
    own = [f for f in finds if f.qr_code_id == qr_code.id and f.user_id in users_by_id]
    ordered = sorted(own, key=lambda f: as_utc(f.found_at), reverse=True)
    first, last = _span(own)
    return QrCodeStatistics(
        qr_code_id=qr_code.id,
        title=qr_code.title,
        campaign_id=qr_code.campaign_id,
        campaign_name=campaign_name,
        find_count=len(own),
        unique_finders=len({f.user_id for f in own}),
        is_found=len(own) > 0,
        first_find_date=first,
        last_find_date=last,
        finders=[
            QrCodeFinder(
                user_id=f.user_id,
                user_name=users_by_id[f.user_id].name,
                found_at=as_utc(f.found_at),
                ip_address=f.ip_address,
            )
            for f in ordered
        ],
        generated_at=now or utcnow(),
    )


def campaign_qr_code_statistics(
    campaign: Campaign,
    qr_codes: Iterable[QrCode],
    finds: Iterable[Find],
    users_by_id: Mapping[int, User],
    *,
    now: datetime | None = None,
) -> CampaignQrCodeStatistics:
    now = now or utcnow()
    finds = list(finds)
    per_qr = [
        qr_code_statistics(q, finds, users_by_id, campaign_name=campaign.name, now=now)
        for q in qr_codes
        if q.campaign_id == campaign.id
    ]
    # stable: equal counts keep qr code order
    per_qr.sort(key=lambda s: -s.find_count)
    found = sum(1 for s in per_qr if s.is_found)
    return CampaignQrCodeStatistics(
        campaign_id=campaign.id,
        campaign_name=campaign.name,
        total_qr_codes=len(per_qr),
        found_qr_codes=found,
        unfound_qr_codes=len(per_qr) - found,
        total_finds=sum(s.find_count for s in per_qr),
        qr_codes=per_qr,
        generated_at=now,
    )


def campaign_statistics(
    campaign: Campaign,
    qr_codes: Iterable[QrCode],
    finds: Iterable[Find],
    users_by_id: Mapping[int, User],
    *,
    now: datetime | None = None,
) -> CampaignStatistics:
    own_qr = [q for q in qr_codes if q.campaign_id == campaign.id]
    qr_ids = {q.id for q in own_qr}
    own = [f for f in finds if f.qr_code_id in qr_ids and f.user_id in users_by_id]
    return CampaignStatistics(
        campaign_id=campaign.id,
        campaign_name=campaign.name,
        total_qr_codes=len(qr_ids),
        active_qr_codes=sum(1 for q in own_qr if q.is_active),
        total_finds=len(own),
        unique_finders=len({f.user_id for f in own}),
        completion_rate=completion_rate(len(own), len(qr_ids)),
        generated_at=now or utcnow(),
    )


def user_statistics(
    user: User,
    finds: Iterable[Find],
    *,
    known_qr_code_ids: set[int] | None = None,
    now: datetime | None = None,
) -> UserStatistics:
    own = [
        f for f in finds
        if f.user_id == user.id and (known_qr_code_ids is None or f.qr_code_id in known_qr_code_ids)
    ]
    first, last = _span(own)
    return UserStatistics(
        user_id=user.id,
        user_name=user.name,
        first_seen=as_utc(user.first_seen),
        last_seen=as_utc(user.last_seen),
        is_active=bool(user.is_active),
        total_finds=len(own),
        unique_qr_codes_found=len({f.qr_code_id for f in own}),
        first_find_date=first,
        last_find_date=last,
        generated_at=now or utcnow(),
    )


def _recency_key(s: UserStatistics) -> tuple[bool, float]:
    if s.last_find_date is None:
        return True, 0.0
    return False, -s.last_find_date.timestamp()


def top_performers(
    users: Iterable[User],
    finds: Iterable[Find],
    *,
    known_qr_code_ids: set[int] | None = None,
    limit: int | None = None,
    now: datetime | None = None,
) -> TopPerformersStatistics:
    now = now or utcnow()
    finds = list(finds)
    per_user = [user_statistics(u, finds, known_qr_code_ids=known_qr_code_ids, now=now) for u in users]

    by_total = sorted(per_user, key=lambda s: -s.total_finds)
    by_unique = sorted(per_user, key=lambda s: -s.unique_qr_codes_found)
    by_recent = sorted(per_user, key=_recency_key)
    if limit is not None:
        by_total, by_unique, by_recent = by_total[:limit], by_unique[:limit], by_recent[:limit]
    return TopPerformersStatistics(
        top_by_total_finds=by_total,
        top_by_unique_qr_codes=by_unique,
        most_recent_activity=by_recent,
        generated_at=now,
    )


def system_overview(
    campaigns: Sequence[Campaign],
    qr_codes: Sequence[QrCode],
    users: Sequence[User],
    finds: Sequence[Find],
    *,
    now: datetime | None = None,
) -> SystemOverview:
    active_qr_ids = {q.id for q in qr_codes if q.is_active}
    return SystemOverview(
        total_campaigns=len(campaigns),
        active_campaigns=sum(1 for c in campaigns if c.is_active),
        total_qr_codes=len(qr_codes),
        total_users=len(users),
        active_users=sum(1 for u in users if u.is_active),
        total_finds=len(finds),
        completed_finds=sum(1 for f in finds if f.qr_code_id in active_qr_ids),
        generated_at=now or utcnow(),
    )


def time_based_statistics(
    finds: Iterable[Find],
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    known_user_ids: set[int] | None = None,
    known_qr_code_ids: set[int] | None = None,
    now: datetime | None = None,
) -> TimeBasedStatistics:
    window = [
        f for f in finds
        if buckets.in_range(f.found_at, start, end)
        and (known_user_ids is None or f.user_id in known_user_ids)
        and (known_qr_code_ids is None or f.qr_code_id in known_qr_code_ids)
    ]
    return TimeBasedStatistics(
        start_date=as_utc(start),
        end_date=as_utc(end),
        daily=buckets.daily(window),
        weekly=buckets.weekly(window),
        monthly=buckets.monthly(window),
        generated_at=now or utcnow(),
    )


# ----------------------------------------------------------------------
# Loaders
# ----------------------------------------------------------------------

async def _users_by_id(db: AsyncSession, finds: Sequence[Find]) -> dict[int, User]:
    users = await UserRepository(db).many_by_ids(sorted({f.user_id for f in finds}))
    return {u.id: u for u in users}


async def get_system_overview(db: AsyncSession) -> SystemOverview:
    return system_overview(
        await CampaignRepository(db).get_all(),
        await QrCodeRepository(db).get_all(),
        await UserRepository(db).get_all(),
        await FindRepository(db).get_all(),
    )


async def get_campaign_statistics(db: AsyncSession, campaign_id: int) -> CampaignStatistics:
    campaign = await CampaignRepository(db).get_by_id(campaign_id)
    if campaign is None:
        logger.debug("campaign %s not found, returning empty statistics", campaign_id)
        return CampaignStatistics(campaign_id=campaign_id, generated_at=utcnow())
    qr_codes = await QrCodeRepository(db).get_by_campaign(campaign_id)
    finds = await FindRepository(db).get_by_campaign(campaign_id)
    return campaign_statistics(campaign, qr_codes, finds, await _users_by_id(db, finds))


async def get_campaign_qr_code_statistics(db: AsyncSession, campaign_id: int) -> CampaignQrCodeStatistics:
    campaign = await CampaignRepository(db).get_by_id(campaign_id)
    if campaign is None:
        logger.debug("campaign %s not found, returning empty qr statistics", campaign_id)
        return CampaignQrCodeStatistics(campaign_id=campaign_id, generated_at=utcnow())
    qr_codes = await QrCodeRepository(db).get_by_campaign(campaign_id)
    finds = await FindRepository(db).get_by_campaign(campaign_id)
    return campaign_qr_code_statistics(campaign, qr_codes, finds, await _users_by_id(db, finds))


async def get_qr_code_statistics(db: AsyncSession, qr_code_id: int) -> QrCodeStatistics:
    qr = await QrCodeRepository(db).get_by_id(qr_code_id)
    if qr is None:
        logger.debug("qr code %s not found, returning empty statistics", qr_code_id)
        return QrCodeStatistics(qr_code_id=qr_code_id, generated_at=utcnow())
    campaign = await CampaignRepository(db).get_by_id(qr.campaign_id)
    finds = await FindRepository(db).get_by_qr_code(qr_code_id)
    return qr_code_statistics(
        qr, finds, await _users_by_id(db, finds),
        campaign_name=campaign.name if campaign else "",
    )


async def get_user_statistics(db: AsyncSession, user_id: int) -> UserStatistics:
    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        logger.debug("user %s not found, returning empty statistics", user_id)
        return UserStatistics(user_id=user_id, generated_at=utcnow())
    finds = await FindRepository(db).get_by_user(user_id)
    qr_ids = {q.id for q in await QrCodeRepository(db).many_by_ids(sorted({f.qr_code_id for f in finds}))}
    return user_statistics(user, finds, known_qr_code_ids=qr_ids)


async def get_top_performers(db: AsyncSession, *, limit: int | None = None) -> TopPerformersStatistics:
    users = await UserRepository(db).get_all()
    finds = await FindRepository(db).get_all()
    qr_ids = {q.id for q in await QrCodeRepository(db).get_all()}
    return top_performers(users, finds, known_qr_code_ids=qr_ids, limit=limit)


async def get_time_based_statistics(
    db: AsyncSession, *, start: datetime | None = None, end: datetime | None = None
) -> TimeBasedStatistics:
    user_ids = {u.id for u in await UserRepository(db).get_all()}
    qr_ids = {q.id for q in await QrCodeRepository(db).get_all()}
    return time_based_statistics(
        await FindRepository(db).get_all(),
        start=start, end=end, known_user_ids=user_ids, known_qr_code_ids=qr_ids,
    )


async def get_find_history(db: AsyncSession, flt: FindHistoryFilter) -> FindHistory:
    rows, total = await FindRepository(db).history(flt)
    items = [
        FindHistoryItem(
            find_id=f.id,
            found_at=as_utc(f.found_at),
            ip_address=f.ip_address,
            user_agent=f.user_agent,
            user_id=f.user_id,
            user_name=user_name,
            qr_code_id=f.qr_code_id,
            qr_code_title=qr_title,
            campaign_id=campaign_id,
            campaign_name=campaign_name,
        )
        for f, user_name, qr_title, campaign_id, campaign_name in rows
    ]
    return FindHistory(items=items, total_count=total, skip=flt.skip, take=flt.take, generated_at=utcnow())
