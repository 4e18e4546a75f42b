"""
Rankings Router - Cocoa Contest Scoring Engine
cocoa_scoring/routers/rankings.py

Ranking recompute, published top-N results and the outlier comparison
report.

Endpoints:
  POST /api/v1/rankings/recompute?contest_id=&stage=         (no contest_id: all contests)
  GET  /api/v1/rankings/outlier-report?contest_id=&stage=
  GET  /api/v1/results/top?contest_id=&limit=&stage=        (no contest_id: all contests)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from cocoa_scoring.config import settings
from cocoa_scoring.core.dependencies import get_ranking_service
from cocoa_scoring.core.exceptions import RepositoryException, ScoringException
from cocoa_scoring.models.enumerations import EvaluationStage
from cocoa_scoring.models.result import (
    OutlierReportResponse,
    RecomputeResponse,
    TopResultsResponse,
)
from cocoa_scoring.routers.errors import raise_for_domain_error
from cocoa_scoring.services.ranking_service import RankingService

router = APIRouter(prefix="/api/v1", tags=["Rankings"])


@router.post(
    "/rankings/recompute",
    response_model=RecomputeResponse,
    summary="Recompute contest ranking",
    description=(
        "Rebuild and publish the ranking of one contest and stage, or of every "
        "contest when contest_id is omitted. Idempotent; safe to retry after a 503."
    ),
)
async def recompute_ranking(
    contest_id: Optional[str] = Query(None, min_length=1),
    stage: EvaluationStage = Query(EvaluationStage.SENSORY),
    service: RankingService = Depends(get_ranking_service),
) -> RecomputeResponse:
    try:
        return service.recompute(contest_id, stage)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)


@router.get(
    "/rankings/outlier-report",
    response_model=OutlierReportResponse,
    summary="Outlier filtering comparison",
    description="Filtered vs unfiltered averages and ranks for every ranked sample.",
)
async def outlier_report(
    contest_id: str = Query(..., min_length=1),
    stage: EvaluationStage = Query(EvaluationStage.SENSORY),
    service: RankingService = Depends(get_ranking_service),
) -> OutlierReportResponse:
    try:
        return service.outlier_report(contest_id, stage)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)


@router.get(
    "/results/top",
    response_model=TopResultsResponse,
    summary="Published top-N results",
    description=(
        "Reads the last published ranking; never triggers a recompute. Without "
        "contest_id, returns every contest's top-N ordered by contest then rank."
    ),
)
async def top_results(
    contest_id: Optional[str] = Query(None, min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.TOP_N_MAX),
    stage: EvaluationStage = Query(EvaluationStage.SENSORY),
    service: RankingService = Depends(get_ranking_service),
) -> TopResultsResponse:
    try:
        return service.get_top(contest_id, stage, limit)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)
