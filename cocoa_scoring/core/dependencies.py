"""
Dependencies - Cocoa Contest Scoring Engine
cocoa_scoring/core/dependencies.py

FastAPI dependency injection for repositories and services.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends

from cocoa_scoring.repositories.contest_repository import ContestRepository
from cocoa_scoring.repositories.evaluation_repository import EvaluationRepository
from cocoa_scoring.repositories.physical_evaluation_repository import PhysicalEvaluationRepository
from cocoa_scoring.repositories.sample_repository import SampleRepository
from cocoa_scoring.repositories.top_result_repository import TopResultRepository
from cocoa_scoring.services.cache import get_cache
from cocoa_scoring.services.contest_service import ContestService
from cocoa_scoring.services.evaluation_service import EvaluationService
from cocoa_scoring.services.physical_service import PhysicalEvaluationService
from cocoa_scoring.services.ranking_service import RankingService
from cocoa_scoring.services.redis_cache import RedisCache


@lru_cache()
def get_sample_repository() -> SampleRepository:
    """Get cached SampleRepository instance."""
    return SampleRepository()


@lru_cache()
def get_contest_repository() -> ContestRepository:
    """Get cached ContestRepository instance."""
    return ContestRepository()


@lru_cache()
def get_physical_evaluation_repository() -> PhysicalEvaluationRepository:
    """Get cached PhysicalEvaluationRepository instance."""
    return PhysicalEvaluationRepository()


@lru_cache()
def get_evaluation_repository() -> EvaluationRepository:
    """Get cached EvaluationRepository instance."""
    return EvaluationRepository()


@lru_cache()
def get_top_result_repository() -> TopResultRepository:
    """Get cached TopResultRepository instance."""
    return TopResultRepository()


def get_results_cache() -> Optional[RedisCache]:
    """Redis cache for published results, or None when Redis is down."""
    return get_cache()


def get_ranking_service(
    evaluation_repo: EvaluationRepository = Depends(get_evaluation_repository),
    top_result_repo: TopResultRepository = Depends(get_top_result_repository),
    cache: Optional[RedisCache] = Depends(get_results_cache),
) -> RankingService:
    return RankingService(evaluation_repo, top_result_repo, cache)


def get_physical_service(
    sample_repo: SampleRepository = Depends(get_sample_repository),
    physical_repo: PhysicalEvaluationRepository = Depends(get_physical_evaluation_repository),
) -> PhysicalEvaluationService:
    return PhysicalEvaluationService(sample_repo, physical_repo)


def get_evaluation_service(
    sample_repo: SampleRepository = Depends(get_sample_repository),
    contest_repo: ContestRepository = Depends(get_contest_repository),
    evaluation_repo: EvaluationRepository = Depends(get_evaluation_repository),
    ranking_service: RankingService = Depends(get_ranking_service),
) -> EvaluationService:
    return EvaluationService(sample_repo, contest_repo, evaluation_repo, ranking_service)


def get_contest_service(
    contest_repo: ContestRepository = Depends(get_contest_repository),
    cache: Optional[RedisCache] = Depends(get_results_cache),
) -> ContestService:
    return ContestService(contest_repo, cache)
