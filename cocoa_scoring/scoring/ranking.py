# cocoa_scoring/scoring/ranking.py
"""
Contest Ranking Aggregator
--------------------------
Turns the approved per-judge evaluations of one stage into a dense ranking
per contest.

Pipeline:
    1. keep Approved evaluations only
    2. partition by contest_id (no cross-contest leakage)
    3. group by sample, outlier-filter the judges' scores
    4. average_score = filtered average rounded to 2 dp (ROUND_HALF_UP)
    5. sort: average_score desc, latest evaluation desc, sample_id asc
    6. rank = 1..k (unique, contiguous)

The full ranked list is kept; publication truncates to top-N.

Awards: rank 1 → Gold Medal + Best in Show, 2 → Silver Medal, 3 → Bronze Medal.
"""
import structlog
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from cocoa_scoring.models.enumerations import EvaluationStage, Verdict
from cocoa_scoring.scoring.outlier_filter import (
    DEFAULT_OUTLIER_CONFIG,
    EvaluationScore,
    FilteredResult,
    OutlierConfig,
    filter_outliers,
)
from cocoa_scoring.scoring.utils import mean, sample_std_dev, to_decimal

logger = structlog.get_logger(__name__)

AWARDS_BY_RANK: Dict[int, List[str]] = {
    1: ["Gold Medal", "Best in Show"],
    2: ["Silver Medal"],
    3: ["Bronze Medal"],
}


def awards_for_rank(rank: int) -> List[str]:
    return list(AWARDS_BY_RANK.get(rank, []))


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class ScoredEvaluation:
    """The slice of a stored evaluation the aggregator needs."""
    id: str
    sample_id: str
    contest_id: str
    overall_quality: float
    evaluated_at: datetime
    verdict: Verdict = Verdict.APPROVED


@dataclass
class SampleAggregate:
    """One sample's aggregate within its contest."""
    sample_id: str
    contest_id: str
    average_score: float
    original_average: float
    evaluations_count: int
    outlier_count: int
    standard_deviation: float
    latest_evaluation_date: datetime
    rank: int = 0

    @property
    def awards(self) -> List[str]:
        return awards_for_rank(self.rank)


@dataclass
class ContestRanking:
    """Full ranked list for one (contest, stage)."""
    contest_id: str
    stage: EvaluationStage
    ranked: List[SampleAggregate] = field(default_factory=list)

    def top(self, n: int) -> List[SampleAggregate]:
        return self.ranked[:n]


@dataclass
class OutlierComparisonRow:
    sample_id: str
    contest_id: str
    unfiltered_average: float
    filtered_average: float
    difference: float
    outliers_detected: int
    evaluations_count: int
    standard_deviation: float
    unfiltered_rank: int
    filtered_rank: int


@dataclass
class OutlierComparison:
    """Filtered vs unfiltered aggregates for one contest and stage."""
    contest_id: str
    stage: EvaluationStage
    rows: List[OutlierComparisonRow] = field(default_factory=list)

    @property
    def samples_with_outliers(self) -> int:
        return sum(1 for r in self.rows if r.outliers_detected > 0)

    @property
    def total_outliers(self) -> int:
        return sum(r.outliers_detected for r in self.rows)

    @property
    def average_difference(self) -> float:
        return mean([abs(r.difference) for r in self.rows])

    @property
    def max_difference(self) -> float:
        return max((abs(r.difference) for r in self.rows), default=0.0)

    @property
    def ranking_changes(self) -> int:
        return sum(1 for r in self.rows if r.unfiltered_rank != r.filtered_rank)


class ContestRankingAggregator:
    """Rank samples per contest from approved judge evaluations."""

    def __init__(
        self,
        config: Optional[OutlierConfig] = None,
        filtering_enabled: bool = True,
    ):
        self.config = config or DEFAULT_OUTLIER_CONFIG
        self.filtering_enabled = filtering_enabled

    def _filter(self, evaluations: List[ScoredEvaluation]) -> FilteredResult:
        scores = [EvaluationScore(score=e.overall_quality, id=e.id) for e in evaluations]
        if self.filtering_enabled:
            return filter_outliers(scores, self.config)

        values = [s.score for s in scores]
        avg = mean(values)
        return FilteredResult(
            filtered_average=avg,
            original_average=avg,
            total_count=len(values),
            outlier_count=0,
            standard_deviation=sample_std_dev(values, avg),
            mean=avg,
        )

    def aggregate_sample(
        self,
        sample_id: str,
        contest_id: str,
        evaluations: List[ScoredEvaluation],
    ) -> SampleAggregate:
        # Stable judge order makes the float sums reproducible
        ordered = sorted(evaluations, key=lambda e: (_utc(e.evaluated_at), e.id))
        result = self._filter(ordered)
        return SampleAggregate(
            sample_id=sample_id,
            contest_id=contest_id,
            average_score=float(to_decimal(result.filtered_average)),
            original_average=float(to_decimal(result.original_average)),
            evaluations_count=result.total_count,
            outlier_count=result.outlier_count,
            standard_deviation=result.standard_deviation,
            latest_evaluation_date=max(_utc(e.evaluated_at) for e in ordered),
        )

    @staticmethod
    def assign_ranks(aggregates: Iterable[SampleAggregate]) -> List[SampleAggregate]:
        """Sort and number 1..k in place; returns the sorted list."""
        ranked = sorted(
            aggregates,
            key=lambda a: (
                -a.average_score,
                -a.latest_evaluation_date.timestamp(),
                a.sample_id,
            ),
        )
        for position, aggregate in enumerate(ranked, start=1):
            aggregate.rank = position
        return ranked

    def rank_contest(
        self,
        contest_id: str,
        evaluations: Iterable[ScoredEvaluation],
        stage: EvaluationStage = EvaluationStage.SENSORY,
    ) -> ContestRanking:
        """
        Rank one contest. Evaluations from other contests are ignored.

        Args:
            contest_id: Partition key.
            evaluations: Stored evaluations of a single stage.
            stage: Stage label carried on the result.

        Returns:
            ContestRanking with every ranked sample (not truncated).
        """
        by_sample: Dict[str, List[ScoredEvaluation]] = defaultdict(list)
        for e in evaluations:
            if e.contest_id != contest_id or e.verdict != Verdict.APPROVED:
                continue
            by_sample[e.sample_id].append(e)

        aggregates = [
            self.aggregate_sample(sample_id, contest_id, evals)
            for sample_id, evals in by_sample.items()
        ]
        ranked = self.assign_ranks(aggregates)

        logger.info(
            "contest_ranked",
            contest_id=contest_id,
            stage=EvaluationStage(stage).value,
            ranked_samples=len(ranked),
            samples_with_outliers=sum(1 for a in ranked if a.outlier_count),
            filtering_enabled=self.filtering_enabled,
        )

        return ContestRanking(contest_id=contest_id, stage=EvaluationStage(stage), ranked=ranked)

    def rank_all(
        self,
        evaluations: Iterable[ScoredEvaluation],
        stage: EvaluationStage = EvaluationStage.SENSORY,
    ) -> Dict[str, ContestRanking]:
        """Rank every contest present in the input independently."""
        by_contest: Dict[str, List[ScoredEvaluation]] = defaultdict(list)
        for e in evaluations:
            by_contest[e.contest_id].append(e)
        return {
            contest_id: self.rank_contest(contest_id, evals, stage)
            for contest_id, evals in by_contest.items()
        }

    def compare_filtering(
        self,
        contest_id: str,
        evaluations: Iterable[ScoredEvaluation],
        stage: EvaluationStage = EvaluationStage.SENSORY,
    ) -> OutlierComparison:
        """Side-by-side filtered and unfiltered rankings for one contest."""
        evaluations = list(evaluations)
        filtered = ContestRankingAggregator(self.config, filtering_enabled=True)
        unfiltered = ContestRankingAggregator(self.config, filtering_enabled=False)

        filtered_ranking = filtered.rank_contest(contest_id, evaluations, stage)
        unfiltered_by_id = {
            a.sample_id: a
            for a in unfiltered.rank_contest(contest_id, evaluations, stage).ranked
        }

        rows = []
        for f in filtered_ranking.ranked:
            u = unfiltered_by_id[f.sample_id]
            rows.append(
                OutlierComparisonRow(
                    sample_id=f.sample_id,
                    contest_id=contest_id,
                    unfiltered_average=u.average_score,
                    filtered_average=f.average_score,
                    difference=round(f.average_score - u.average_score, 2),
                    outliers_detected=f.outlier_count,
                    evaluations_count=f.evaluations_count,
                    standard_deviation=round(f.standard_deviation, 4),
                    unfiltered_rank=u.rank,
                    filtered_rank=f.rank,
                )
            )

        return OutlierComparison(contest_id=contest_id, stage=EvaluationStage(stage), rows=rows)
