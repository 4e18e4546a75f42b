"""
Ranking Service - Cocoa Contest Scoring Engine
cocoa_scoring/services/ranking_service.py

Recomputes and publishes per-contest rankings:

  1. Load approved evaluations of the contest (or of every contest) and stage
  2. Rank with ContestRankingAggregator (outlier filter per sample)
  3. Replace each contest's TOP_RESULTS rows in its own transaction
  4. Invalidate cached top-N pages

Recompute is a single-writer critical section per (contest, stage) within
the process, and idempotent: rerunning it on unchanged data republishes the
same rows.
"""

import threading
from dataclasses import asdict
from typing import Dict, List, Optional, Tuple

import redis
import structlog

from cocoa_scoring.config import Settings, settings as default_settings
from cocoa_scoring.core.exceptions import RankingRecomputeException, RepositoryException
from cocoa_scoring.models.enumerations import EvaluationStage
from cocoa_scoring.models.result import (
    OutlierComparisonEntry,
    OutlierReportResponse,
    RecomputeResponse,
    TopResult,
    TopResultsResponse,
)
from cocoa_scoring.scoring.outlier_filter import OutlierConfig, filtering_enabled
from cocoa_scoring.scoring.ranking import ContestRanking, ContestRankingAggregator
from cocoa_scoring.services.cache import invalidate_results, results_key
from cocoa_scoring.services.redis_cache import RedisCache

logger = structlog.get_logger(__name__)

_locks_guard = threading.Lock()
_contest_locks: Dict[Tuple[str, str], threading.Lock] = {}


def contest_lock(contest_id: str, stage: EvaluationStage) -> threading.Lock:
    """Process-local lock serializing recomputes of one (contest, stage)."""
    key = (contest_id, EvaluationStage(stage).value)
    with _locks_guard:
        if key not in _contest_locks:
            _contest_locks[key] = threading.Lock()
        return _contest_locks[key]


def drop_contest_locks(contest_id: str) -> None:
    """Forget the recompute locks of a deleted contest."""
    with _locks_guard:
        for key in [k for k in _contest_locks if k[0] == contest_id]:
            del _contest_locks[key]


class RankingService:
    """Recompute, publish and read contest rankings."""

    def __init__(
        self,
        evaluation_repo,
        top_result_repo,
        cache: Optional[RedisCache] = None,
        app_settings: Optional[Settings] = None,
    ):
        self.evaluation_repo = evaluation_repo
        self.top_result_repo = top_result_repo
        self.cache = cache
        self.settings = app_settings or default_settings

    def aggregator_for(self, stage: EvaluationStage) -> ContestRankingAggregator:
        return ContestRankingAggregator(
            config=OutlierConfig.for_stage(stage, self.settings),
            filtering_enabled=filtering_enabled(stage, self.settings),
        )

    def rank(self, contest_id: str, stage: EvaluationStage) -> ContestRanking:
        """Full ranked list without publishing it."""
        evaluations = self.evaluation_repo.list_scored_by_contest(contest_id, stage)
        return self.aggregator_for(stage).rank_contest(contest_id, evaluations, stage)

    def _publish(self, ranking: ContestRanking, stage: EvaluationStage) -> int:
        rows = [
            TopResult(
                sample_id=a.sample_id,
                contest_id=ranking.contest_id,
                stage=stage,
                average_score=a.average_score,
                evaluations_count=a.evaluations_count,
                latest_evaluation_date=a.latest_evaluation_date,
                rank=a.rank,
            )
            for a in ranking.ranked
        ]
        self.top_result_repo.replace_for_contest(ranking.contest_id, stage, rows)
        return len(rows)

    def recompute(
        self, contest_id: Optional[str], stage: EvaluationStage
    ) -> RecomputeResponse:
        """
        Rebuild and publish the ranking of one contest, or of every contest
        when contest_id is None.

        Raises:
            RankingRecomputeException: Loading or replacing failed. The
                previously published rows of a failed contest are left as
                they were.
        """
        stage = EvaluationStage(stage)
        if not contest_id:
            return self.recompute_all(stage)

        with contest_lock(contest_id, stage):
            try:
                ranked = self._publish(self.rank(contest_id, stage), stage)
            except RepositoryException as e:
                logger.error(
                    "ranking_recompute_failed",
                    contest_id=contest_id,
                    stage=stage.value,
                    error=str(e),
                )
                raise RankingRecomputeException(contest_id, str(e)) from e

        invalidate_results(self.cache, contest_id, stage)

        return RecomputeResponse(
            contest_id=contest_id,
            stage=stage,
            ranked_samples=ranked,
            published=min(ranked, self.settings.TOP_N_DEFAULT),
            contests=[contest_id],
            filtering_enabled=filtering_enabled(stage, self.settings),
        )

    def recompute_all(self, stage: EvaluationStage) -> RecomputeResponse:
        """
        Re-rank every contest from one snapshot of approved evaluations.

        Each contest is replaced in its own transaction. Contests holding
        published rows but no approved scores any more are cleared. A failed
        contest does not stop the rest; all failures are raised together
        once every contest has been attempted.
        """
        stage = EvaluationStage(stage)
        try:
            evaluations = self.evaluation_repo.list_scored(stage)
            published_before = self.top_result_repo.published_contests(stage)
        except RepositoryException as e:
            logger.error("ranking_recompute_all_failed", stage=stage.value, error=str(e))
            raise RankingRecomputeException(None, str(e)) from e

        rankings = self.aggregator_for(stage).rank_all(evaluations, stage)
        for stale in published_before:
            if stale not in rankings:
                rankings[stale] = ContestRanking(contest_id=stale, stage=stage, ranked=[])

        done: List[str] = []
        failed: Dict[str, str] = {}
        ranked = published = 0
        for contest_id in sorted(rankings):
            with contest_lock(contest_id, stage):
                try:
                    count = self._publish(rankings[contest_id], stage)
                except RepositoryException as e:
                    failed[contest_id] = str(e)
                    continue
            done.append(contest_id)
            ranked += count
            published += min(count, self.settings.TOP_N_DEFAULT)
            invalidate_results(self.cache, contest_id, stage)

        logger.info(
            "all_contests_recomputed",
            stage=stage.value,
            contests=len(done),
            failed=len(failed),
            ranked_samples=ranked,
        )

        if failed:
            logger.error(
                "ranking_recompute_failed",
                stage=stage.value,
                failed_contests=sorted(failed),
            )
            raise RankingRecomputeException(
                None,
                "; ".join(f"{cid}: {reason}" for cid, reason in sorted(failed.items())),
                failed_contests=sorted(failed),
            )

        return RecomputeResponse(
            stage=stage,
            ranked_samples=ranked,
            published=published,
            contests=done,
            filtering_enabled=filtering_enabled(stage, self.settings),
        )

    def get_top(
        self,
        contest_id: Optional[str],
        stage: EvaluationStage,
        limit: Optional[int] = None,
    ) -> TopResultsResponse:
        """
        Published top-N for a contest, or for every contest (ordered by
        contest then rank) when contest_id is None. Never triggers a recompute.
        """
        stage = EvaluationStage(stage)
        limit = limit or self.settings.TOP_N_DEFAULT
        key = results_key(stage, contest_id, limit)

        if self.cache:
            try:
                cached = self.cache.get(key, TopResultsResponse)
                if cached:
                    return cached
            except redis.RedisError as e:
                logger.warning("results_cache_read_failed", key=key, error=str(e))

        if contest_id:
            results = self.top_result_repo.get_top(contest_id, stage, limit)
        else:
            results = self.top_result_repo.get_top_all(stage, limit)

        response = TopResultsResponse(
            contest_id=contest_id or None,
            stage=stage,
            limit=limit,
            results=results,
        )

        if self.cache:
            try:
                self.cache.set(key, response, self.settings.CACHE_TTL_RESULTS)
            except redis.RedisError as e:
                logger.warning("results_cache_write_failed", key=key, error=str(e))

        return response

    def outlier_report(self, contest_id: str, stage: EvaluationStage) -> OutlierReportResponse:
        """Filtered vs unfiltered aggregates for every ranked sample."""
        stage = EvaluationStage(stage)
        aggregator = self.aggregator_for(stage)
        evaluations = self.evaluation_repo.list_scored_by_contest(contest_id, stage)
        comparison = aggregator.compare_filtering(contest_id, evaluations, stage)

        config = asdict(aggregator.config)
        config["strategy"] = aggregator.config.strategy.value
        config["enabled"] = aggregator.filtering_enabled

        return OutlierReportResponse(
            contest_id=contest_id,
            stage=stage,
            outlier_config=config,
            total_samples=len(comparison.rows),
            samples_with_outliers=comparison.samples_with_outliers,
            total_outliers=comparison.total_outliers,
            average_difference=round(comparison.average_difference, 3),
            max_difference=round(comparison.max_difference, 3),
            ranking_changes=comparison.ranking_changes,
            rows=[
                OutlierComparisonEntry(
                    sample_id=r.sample_id,
                    unfiltered_average=r.unfiltered_average,
                    filtered_average=r.filtered_average,
                    difference=r.difference,
                    outliers_detected=r.outliers_detected,
                    evaluations_count=r.evaluations_count,
                    standard_deviation=r.standard_deviation,
                    unfiltered_rank=r.unfiltered_rank,
                    filtered_rank=r.filtered_rank,
                )
                for r in comparison.rows
            ],
        )
