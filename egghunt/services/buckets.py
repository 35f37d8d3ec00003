"""
Calendar bucketing of finds for the time series statistics.

All bucketing happens in UTC; naive timestamps are read as UTC. Buckets that
would be empty are not emitted, and every series is sorted by bucket start.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable

from ..models import Find, as_utc
from ..schemas import TimeBucket

BucketKey = Callable[[datetime], datetime]


def day_start(dt: datetime) -> datetime:
    dt = as_utc(dt)
    return datetime(dt.year, dt.month, dt.day, tzinfo=timezone.utc)


def week_start(dt: datetime) -> datetime:
    """Monday of the ISO week containing ``dt``."""
    d = day_start(dt)
    return d - timedelta(days=d.weekday())


def month_start(dt: datetime) -> datetime:
    dt = as_utc(dt)
    return datetime(dt.year, dt.month, 1, tzinfo=timezone.utc)


def in_range(found_at: datetime, start: datetime | None, end: datetime | None) -> bool:
    found_at = as_utc(found_at)
    if start is not None and found_at < as_utc(start):
        return False
    if end is not None and found_at > as_utc(end):
        return False
    return True


def bucket_finds(finds: Iterable[Find], key: BucketKey) -> list[TimeBucket]:
    counts: dict[datetime, int] = defaultdict(int)
    users: dict[datetime, set[int]] = defaultdict(set)
    codes: dict[datetime, set[int]] = defaultdict(set)
    for f in finds:
        k = key(f.found_at)
        counts[k] += 1
        users[k].add(f.user_id)
        codes[k].add(f.qr_code_id)
    return [
        TimeBucket(date=k, count=counts[k], unique_finders=len(users[k]), unique_qr_codes=len(codes[k]))
        for k in sorted(counts)
    ]


def daily(finds: Iterable[Find]) -> list[TimeBucket]:
    return bucket_finds(finds, day_start)


def weekly(finds: Iterable[Find]) -> list[TimeBucket]:
    return bucket_finds(finds, week_start)


def monthly(finds: Iterable[Find]) -> list[TimeBucket]:
    return bucket_finds(finds, month_start)
