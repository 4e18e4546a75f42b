# cocoa_scoring/scoring/lifecycle.py
"""
Contest Lifecycle Gate
----------------------
Derives a contest's status from its dates at day granularity:

    today <  start_date          → upcoming
    start_date <= today <= end   → active      (end date inclusive)
    today >  end_date            → completed

New scores are only accepted while a contest is active. Published rankings
are unaffected by status.
"""
from datetime import date, datetime, timezone
from typing import Optional, Union

from cocoa_scoring.models.enumerations import ContestStatus

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def contest_status(
    start_date: DateLike,
    end_date: DateLike,
    today: Optional[DateLike] = None,
) -> ContestStatus:
    start = _as_date(start_date)
    end = _as_date(end_date)
    current = _as_date(today) if today is not None else today_utc()

    if current < start:
        return ContestStatus.UPCOMING
    if current > end:
        return ContestStatus.COMPLETED
    return ContestStatus.ACTIVE


def accepts_scores(
    start_date: DateLike,
    end_date: DateLike,
    today: Optional[DateLike] = None,
) -> bool:
    return contest_status(start_date, end_date, today) == ContestStatus.ACTIVE
