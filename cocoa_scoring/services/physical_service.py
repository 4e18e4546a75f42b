"""
Physical Evaluation Service - Cocoa Contest Scoring Engine
cocoa_scoring/services/physical_service.py

Physical screening write path:

  received / physical_evaluation
        │  submit_physical()  (rule engine)
        ├── disqualified      → sample DISQUALIFIED (terminal)
        └── passed            → sample PHYSICAL_EVALUATION
                                    │  approve_sample()  (director)
                                    └── sample APPROVED → open for judging
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from cocoa_scoring.core.exceptions import (
    EntityNotFoundException,
    EvaluationPreconditionException,
    InvalidStatusTransitionException,
)
from cocoa_scoring.models.enumerations import GlobalEvaluation, SampleStatus
from cocoa_scoring.models.physical_evaluation import (
    PhysicalEvaluationRecord,
    PhysicalEvaluationResponse,
    PhysicalEvaluationStats,
    PhysicalEvaluationSubmission,
)
from cocoa_scoring.models.sample import DISQUALIFIABLE_FROM, Sample, can_transition
from cocoa_scoring.scoring.physical_rules import PhysicalRuleEngine, physical_summary_scores

logger = structlog.get_logger(__name__)


class PhysicalEvaluationService:
    """Submit, read and approve physical evaluations."""

    def __init__(self, sample_repo, physical_repo):
        self.sample_repo = sample_repo
        self.physical_repo = physical_repo
        self.engine = PhysicalRuleEngine()

    def _get_sample(self, sample_id: str) -> Sample:
        sample = self.sample_repo.get_by_id(sample_id)
        if not sample:
            raise EntityNotFoundException("Sample", sample_id)
        return sample

    def _respond(self, record: PhysicalEvaluationRecord, status: SampleStatus) -> PhysicalEvaluationResponse:
        return PhysicalEvaluationResponse(
            **record.model_dump(),
            summary_scores=physical_summary_scores(record).as_dict(),
            sample_status=SampleStatus(status).value,
        )

    def submit(
        self,
        sample_id: str,
        submission: PhysicalEvaluationSubmission,
    ) -> PhysicalEvaluationResponse:
        """
        Run the rule engine, upsert the evaluation and move the sample on.

        Re-submitting corrects the previous evaluation as long as the sample
        has not been approved or disqualified.
        """
        sample = self._get_sample(sample_id)
        if sample.status not in DISQUALIFIABLE_FROM:
            raise EvaluationPreconditionException(
                f"Sample {sample_id} is '{sample.status.value}'; physical evaluation "
                f"requires 'received' or 'physical_evaluation'"
            )

        result = self.engine.evaluate(submission)
        target = (
            SampleStatus.PHYSICAL_EVALUATION
            if result.passed
            else SampleStatus.DISQUALIFIED
        )
        if not can_transition(sample.status, target):
            raise InvalidStatusTransitionException(sample_id, sample.status.value, target.value)

        record = PhysicalEvaluationRecord(
            **submission.model_dump(),
            sample_id=sample_id,
            global_evaluation=result.global_evaluation,
            disqualification_reasons=result.disqualification_reasons,
            warnings=result.warnings,
            evaluated_at=datetime.now(timezone.utc),
        )
        stored = self.physical_repo.upsert(record)
        self.sample_repo.update_status(sample_id, target)

        logger.info(
            "physical_evaluation_saved",
            sample_id=sample_id,
            global_evaluation=result.global_evaluation.value,
            new_status=target.value,
        )
        return self._respond(stored, target)

    def get(self, sample_id: str) -> PhysicalEvaluationResponse:
        sample = self._get_sample(sample_id)
        record = self.physical_repo.get_by_sample_id(sample_id)
        if not record:
            raise EntityNotFoundException("PhysicalEvaluation", sample_id)
        return self._respond(record, sample.status)

    def approve(self, sample_id: str) -> Sample:
        """Director approval after a passed physical evaluation."""
        sample = self._get_sample(sample_id)
        if sample.status == SampleStatus.APPROVED:
            return sample

        record = self.physical_repo.get_by_sample_id(sample_id)
        if not record or record.global_evaluation != GlobalEvaluation.PASSED:
            raise EvaluationPreconditionException(
                f"Sample {sample_id} has no passed physical evaluation"
            )
        if sample.status != SampleStatus.PHYSICAL_EVALUATION or not can_transition(
            sample.status, SampleStatus.APPROVED
        ):
            raise InvalidStatusTransitionException(
                sample_id, sample.status.value, SampleStatus.APPROVED.value
            )

        updated = self.sample_repo.update_status(sample_id, SampleStatus.APPROVED)
        logger.info("sample_approved", sample_id=sample_id)
        return updated

    def stats(self, contest_id: Optional[str] = None) -> PhysicalEvaluationStats:
        """Counts of screened samples by status."""
        counts = self.sample_repo.status_counts(contest_id)
        screened = (
            SampleStatus.RECEIVED,
            SampleStatus.PHYSICAL_EVALUATION,
            SampleStatus.APPROVED,
            SampleStatus.DISQUALIFIED,
        )
        by_status = {s.value: int(counts.get(s.value, 0)) for s in screened}
        return PhysicalEvaluationStats(
            contest_id=contest_id,
            total=sum(by_status.values()),
            **by_status,
        )
