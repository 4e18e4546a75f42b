"""
Contests Router - Cocoa Contest Scoring Engine
cocoa_scoring/routers/contests.py

Endpoints:
  GET    /api/v1/contests/{contest_id}/status
  GET    /api/v1/contests/{contest_id}/physical-stats
  DELETE /api/v1/contests/{contest_id}
"""

from fastapi import APIRouter, Depends

from cocoa_scoring.core.dependencies import get_contest_service, get_physical_service
from cocoa_scoring.core.exceptions import RepositoryException, ScoringException
from cocoa_scoring.models.contest import ContestDeleteResponse, ContestStatusResponse
from cocoa_scoring.models.physical_evaluation import PhysicalEvaluationStats
from cocoa_scoring.routers.errors import raise_for_domain_error
from cocoa_scoring.services.contest_service import ContestService
from cocoa_scoring.services.physical_service import PhysicalEvaluationService

router = APIRouter(prefix="/api/v1/contests", tags=["Contests"])


@router.get(
    "/{contest_id}/status",
    response_model=ContestStatusResponse,
    summary="Contest lifecycle status",
    description="upcoming / active / completed, derived from the contest dates (UTC).",
)
async def get_contest_status(
    contest_id: str,
    service: ContestService = Depends(get_contest_service),
) -> ContestStatusResponse:
    try:
        return service.status(contest_id)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)


@router.get(
    "/{contest_id}/physical-stats",
    response_model=PhysicalEvaluationStats,
    summary="Physical screening statistics",
)
async def get_physical_stats(
    contest_id: str,
    service: PhysicalEvaluationService = Depends(get_physical_service),
) -> PhysicalEvaluationStats:
    try:
        return service.stats(contest_id)
    except RepositoryException as e:
        raise_for_domain_error(e)


@router.delete(
    "/{contest_id}",
    response_model=ContestDeleteResponse,
    summary="Delete contest",
    description="Removes the contest with its samples, evaluations and published results.",
)
async def delete_contest(
    contest_id: str,
    service: ContestService = Depends(get_contest_service),
) -> ContestDeleteResponse:
    try:
        return service.delete(contest_id)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)
