"""
Evaluation Service - Cocoa Contest Scoring Engine
cocoa_scoring/services/evaluation_service.py

Sensory / final judge evaluation write path:

  1. Gate on the contest lifecycle (active only)
  2. Check the sample is approved or already evaluated
  3. Check the attribute scheme matches the sample category and stage
  4. Derive overall_quality (chocolate: weighted; cocoa: judge-given)
  5. MERGE the (sample, judge) row
  6. Move an approved sample to evaluated
  7. Recompute the contest ranking for that stage

A failed recompute leaves the stored evaluation in place and surfaces as
RankingRecomputeException; re-running the recompute is safe.
"""

import uuid
from datetime import datetime, timezone

import structlog

from cocoa_scoring.core.exceptions import (
    CategorySchemeMismatchException,
    ContestClosedException,
    EntityNotFoundException,
    EvaluationPreconditionException,
)
from cocoa_scoring.models.contest import Contest
from cocoa_scoring.models.enumerations import (
    ContestStatus,
    EvaluationStage,
    ProductCategory,
    SampleStatus,
    ScoringScheme,
)
from cocoa_scoring.models.evaluation import (
    ChocolateAttributes,
    EvaluationRecord,
    EvaluationResponse,
    EvaluationSubmission,
)
from cocoa_scoring.models.sample import JUDGEABLE_STATUSES, Sample
from cocoa_scoring.scoring.chocolate_scorer import ChocolateScorer
from cocoa_scoring.scoring.cocoa_scorer import CocoaScorer
from cocoa_scoring.scoring.lifecycle import contest_status
from cocoa_scoring.scoring.utils import to_decimal
from cocoa_scoring.services.ranking_service import RankingService

logger = structlog.get_logger(__name__)


def required_scheme(category: ProductCategory, stage: EvaluationStage) -> ScoringScheme:
    """Scheme a judge must use for a sample of this category at this stage."""
    if EvaluationStage(stage) == EvaluationStage.FINAL:
        return ScoringScheme.CHOCOLATE
    if ProductCategory(category) == ProductCategory.CHOCOLATE:
        return ScoringScheme.CHOCOLATE
    return ScoringScheme.COCOA


class EvaluationService:
    """Record and delete judge evaluations, keeping rankings current."""

    def __init__(
        self,
        sample_repo,
        contest_repo,
        evaluation_repo,
        ranking_service: RankingService,
    ):
        self.sample_repo = sample_repo
        self.contest_repo = contest_repo
        self.evaluation_repo = evaluation_repo
        self.ranking_service = ranking_service
        self.chocolate_scorer = ChocolateScorer()
        self.cocoa_scorer = CocoaScorer()

    def _get_sample(self, sample_id: str) -> Sample:
        sample = self.sample_repo.get_by_id(sample_id)
        if not sample:
            raise EntityNotFoundException("Sample", sample_id)
        return sample

    def _get_contest(self, contest_id: str) -> Contest:
        contest = self.contest_repo.get_by_id(contest_id)
        if not contest:
            raise EntityNotFoundException("Contest", contest_id)
        return contest

    def _require_active(self, contest: Contest) -> None:
        status = contest_status(contest.start_date, contest.end_date)
        if status != ContestStatus.ACTIVE:
            raise ContestClosedException(contest.id, status.value)

    def submit(
        self,
        sample_id: str,
        judge_id: str,
        stage: EvaluationStage,
        submission: EvaluationSubmission,
    ) -> EvaluationResponse:
        """
        Insert or replace one judge's evaluation of a sample.

        Raises:
            EntityNotFoundException: Unknown sample or contest.
            ContestClosedException: Contest is upcoming or completed.
            EvaluationPreconditionException: Sample not approved/evaluated.
            CategorySchemeMismatchException: Wrong tasting sheet for the sample.
            RankingRecomputeException: Stored, but the ranking was not refreshed.
        """
        stage = EvaluationStage(stage)
        sample = self._get_sample(sample_id)
        contest = self._get_contest(sample.contest_id)
        self._require_active(contest)

        if sample.status not in JUDGEABLE_STATUSES:
            raise EvaluationPreconditionException(
                f"Sample {sample_id} is '{sample.status.value}'; "
                f"{stage.value} evaluations require 'approved' or 'evaluated'"
            )

        attributes = submission.attributes
        expected = required_scheme(sample.category, stage)
        if attributes.scheme != expected.value:
            raise CategorySchemeMismatchException(sample.category.value, attributes.scheme)

        advisory = None
        group_totals = None
        breakdown = None
        if isinstance(attributes, ChocolateAttributes):
            result = self.chocolate_scorer.calculate(attributes)
            breakdown = result.breakdown_dict()
        else:
            result = self.cocoa_scorer.calculate(attributes)
            advisory = round(result.advisory_quality, 2)
            group_totals = result.totals_dict()

        existing = self.evaluation_repo.get(sample_id, judge_id, stage)
        now = datetime.now(timezone.utc)

        record = EvaluationRecord(
            id=existing.id if existing else str(uuid.uuid4()),
            sample_id=sample_id,
            contest_id=sample.contest_id,
            judge_id=judge_id,
            stage=stage,
            scheme=expected,
            overall_quality=float(to_decimal(result.overall_quality)),
            verdict=submission.verdict,
            disqualification_reasons=submission.disqualification_reasons,
            attributes=attributes,
            flavor_comments=submission.flavor_comments,
            producer_recommendations=submission.producer_recommendations,
            additional_positive=submission.additional_positive,
            evaluated_at=submission.evaluated_at or now,
            updated_at=now,
        )
        stored = self.evaluation_repo.upsert(record)

        if sample.status == SampleStatus.APPROVED:
            self.sample_repo.update_status(sample_id, SampleStatus.EVALUATED)

        logger.info(
            "evaluation_saved",
            sample_id=sample_id,
            judge_id=judge_id,
            stage=stage.value,
            overall_quality=stored.overall_quality,
            verdict=stored.verdict.value,
            replaced=existing is not None,
        )

        self.ranking_service.recompute(sample.contest_id, stage)

        return EvaluationResponse(
            **stored.model_dump(),
            advisory_quality=advisory,
            group_totals=group_totals,
            category_breakdown=breakdown,
        )

    def delete(self, sample_id: str, judge_id: str, stage: EvaluationStage) -> None:
        """Remove a judge's evaluation and refresh the contest ranking."""
        stage = EvaluationStage(stage)
        sample = self._get_sample(sample_id)

        if not self.evaluation_repo.delete(sample_id, judge_id, stage):
            raise EntityNotFoundException("Evaluation", f"{sample_id}/{judge_id}")

        logger.info(
            "evaluation_deleted",
            sample_id=sample_id,
            judge_id=judge_id,
            stage=stage.value,
        )
        self.ranking_service.recompute(sample.contest_id, stage)
