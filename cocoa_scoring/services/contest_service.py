"""
Contest Service - Cocoa Contest Scoring Engine
cocoa_scoring/services/contest_service.py

Contest status queries and the cleanup delete.
"""

from datetime import date
from typing import Optional

import structlog

from cocoa_scoring.core.exceptions import EntityNotFoundException
from cocoa_scoring.models.contest import ContestDeleteResponse, ContestStatusResponse
from cocoa_scoring.models.enumerations import ContestStatus
from cocoa_scoring.scoring.lifecycle import contest_status, today_utc
from cocoa_scoring.services.cache import invalidate_results
from cocoa_scoring.services.ranking_service import drop_contest_locks
from cocoa_scoring.services.redis_cache import RedisCache

logger = structlog.get_logger(__name__)


class ContestService:
    def __init__(self, contest_repo, cache: Optional[RedisCache] = None):
        self.contest_repo = contest_repo
        self.cache = cache

    def status(self, contest_id: str, today: Optional[date] = None) -> ContestStatusResponse:
        contest = self.contest_repo.get_by_id(contest_id)
        if not contest:
            raise EntityNotFoundException("Contest", contest_id)

        as_of = today or today_utc()
        status = contest_status(contest.start_date, contest.end_date, as_of)
        return ContestStatusResponse(
            contest_id=contest.id,
            name=contest.name,
            status=status,
            start_date=contest.start_date,
            end_date=contest.end_date,
            accepts_scores=status == ContestStatus.ACTIVE,
            as_of=as_of,
        )

    def delete(self, contest_id: str) -> ContestDeleteResponse:
        """Cascade-delete a contest and drop its cached results."""
        if not self.contest_repo.get_by_id(contest_id):
            raise EntityNotFoundException("Contest", contest_id)

        result = self.contest_repo.delete_cascade(contest_id)
        invalidate_results(self.cache, contest_id)
        drop_contest_locks(contest_id)
        return result
