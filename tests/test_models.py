# tests/test_models.py

"""
Model Validation Tests - Tests for the Pydantic models and status rules
"""

from datetime import date, datetime, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from cocoa_scoring.models.contest import Contest
from cocoa_scoring.models.enumerations import (
    EvaluationStage,
    ProductCategory,
    SampleStatus,
    ScoringScheme,
    Verdict,
)
from cocoa_scoring.models.evaluation import (
    ChocolateAttributes,
    CocoaBeanAttributes,
    EvaluationAttributes,
    EvaluationSubmission,
)
from cocoa_scoring.models.physical_evaluation import PhysicalEvaluationSubmission
from cocoa_scoring.models.result import TopResult
from cocoa_scoring.models.sample import Sample, can_transition, internal_code
from cocoa_scoring.services.evaluation_service import required_scheme


# ENUMERATION TESTS


class TestSampleStatusEnum:
    """Tests for SampleStatus enumeration."""

    def test_all_statuses_exist(self):
        expected = [
            "submitted", "received", "physical_evaluation",
            "approved", "disqualified", "evaluated",
        ]
        assert [s.value for s in SampleStatus] == expected

    def test_verdict_values(self):
        assert [v.value for v in Verdict] == ["Approved", "Disqualified"]


# STATUS TRANSITIONS


class TestStatusTransitions:
    """Tests for can_transition()."""

    @pytest.mark.parametrize(
        "current, target",
        [
            (SampleStatus.SUBMITTED, SampleStatus.RECEIVED),
            (SampleStatus.RECEIVED, SampleStatus.PHYSICAL_EVALUATION),
            (SampleStatus.PHYSICAL_EVALUATION, SampleStatus.APPROVED),
            (SampleStatus.APPROVED, SampleStatus.EVALUATED),
            (SampleStatus.RECEIVED, SampleStatus.DISQUALIFIED),
            (SampleStatus.PHYSICAL_EVALUATION, SampleStatus.DISQUALIFIED),
            (SampleStatus.APPROVED, SampleStatus.APPROVED),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target) is True

    @pytest.mark.parametrize(
        "current, target",
        [
            (SampleStatus.APPROVED, SampleStatus.RECEIVED),
            (SampleStatus.EVALUATED, SampleStatus.APPROVED),
            (SampleStatus.DISQUALIFIED, SampleStatus.APPROVED),
            (SampleStatus.DISQUALIFIED, SampleStatus.RECEIVED),
            (SampleStatus.APPROVED, SampleStatus.DISQUALIFIED),
            (SampleStatus.SUBMITTED, SampleStatus.DISQUALIFIED),
        ],
    )
    def test_rejected(self, current, target):
        assert can_transition(current, target) is False

    def test_accepts_plain_strings(self):
        assert can_transition("received", "approved") is True


# SAMPLE / CONTEST


class TestSample:

    def test_internal_code(self):
        sample = Sample(
            id="5f2c-a1f",
            contest_id="c1",
            tracking_code="TRK-1",
            category=ProductCategory.BEAN,
            created_at=datetime(2024, 3, 15, tzinfo=timezone.utc),
        )
        assert sample.internal_code == "INT-202403-A1F"
        assert sample.model_dump()["internal_code"] == "INT-202403-A1F"

    def test_internal_code_helper_pads_month(self):
        assert internal_code("xyz123", datetime(2025, 1, 2)) == "INT-202501-123"

    def test_default_status_submitted(self):
        sample = Sample(id="s", contest_id="c", tracking_code="T", category="liquor")
        assert sample.status == SampleStatus.SUBMITTED

    def test_invalid_category(self):
        with pytest.raises(ValidationError):
            Sample(id="s", contest_id="c", tracking_code="T", category="cake")


class TestContest:

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Contest(id="c", name="X", start_date=date(2024, 6, 2), end_date=date(2024, 6, 1))
        assert "end_date must be >= start_date" in str(exc_info.value)

    def test_single_day_contest_valid(self):
        contest = Contest(id="c", name="X", start_date=date(2024, 6, 1), end_date=date(2024, 6, 1))
        assert contest.start_date == contest.end_date


# EVALUATION ATTRIBUTES


class TestEvaluationAttributes:
    """Tests for the chocolate / cocoa tagged union."""

    adapter = TypeAdapter(EvaluationAttributes)

    def test_discriminates_chocolate(self):
        attrs = self.adapter.validate_python({"scheme": "chocolate", "texture": {"body": 7}})
        assert isinstance(attrs, ChocolateAttributes)
        assert attrs.texture.body == 7
        assert attrs.flavor.sweetness == 0

    def test_discriminates_cocoa(self):
        attrs = self.adapter.validate_python({"scheme": "cocoa", "overall_quality": 6.5})
        assert isinstance(attrs, CocoaBeanAttributes)
        assert attrs.overall_quality == 6.5

    def test_unknown_scheme_rejected(self):
        with pytest.raises(ValidationError):
            self.adapter.validate_python({"scheme": "coffee"})

    def test_cocoa_requires_overall_quality(self):
        with pytest.raises(ValidationError):
            self.adapter.validate_python({"scheme": "cocoa", "cacao": 5})

    @pytest.mark.parametrize("value", [-0.1, 10.1])
    def test_score_out_of_range(self, value):
        with pytest.raises(ValidationError):
            ChocolateAttributes.model_validate({"texture": {"body": value}})

    def test_unknown_attribute_rejected(self):
        with pytest.raises(ValidationError):
            ChocolateAttributes.model_validate({"texture": {"crunch": 5}})

    def test_bounds_inclusive(self):
        attrs = ChocolateAttributes.model_validate({"texture": {"body": 10, "melting": 0}})
        assert attrs.texture.body == 10


class TestEvaluationSubmission:

    def test_defaults_to_approved(self):
        sub = EvaluationSubmission.model_validate({"attributes": {"scheme": "chocolate"}})
        assert sub.verdict == Verdict.APPROVED

    def test_disqualified_requires_reasons(self):
        with pytest.raises(ValidationError):
            EvaluationSubmission.model_validate(
                {"attributes": {"scheme": "chocolate"}, "verdict": "Disqualified"}
            )

    def test_disqualified_with_reasons(self):
        sub = EvaluationSubmission.model_validate(
            {
                "attributes": {"scheme": "chocolate"},
                "verdict": "Disqualified",
                "disqualification_reasons": ["Foreign matter"],
            }
        )
        assert sub.verdict == Verdict.DISQUALIFIED


class TestRequiredScheme:

    @pytest.mark.parametrize(
        "category, stage, expected",
        [
            (ProductCategory.BEAN, EvaluationStage.SENSORY, ScoringScheme.COCOA),
            (ProductCategory.LIQUOR, EvaluationStage.SENSORY, ScoringScheme.COCOA),
            (ProductCategory.CHOCOLATE, EvaluationStage.SENSORY, ScoringScheme.CHOCOLATE),
            (ProductCategory.BEAN, EvaluationStage.FINAL, ScoringScheme.CHOCOLATE),
            (ProductCategory.CHOCOLATE, EvaluationStage.FINAL, ScoringScheme.CHOCOLATE),
        ],
    )
    def test_scheme_by_category_and_stage(self, category, stage, expected):
        assert required_scheme(category, stage) == expected


# PHYSICAL / RESULTS


class TestPhysicalEvaluationSubmission:

    def test_humidity_required(self):
        with pytest.raises(ValidationError):
            PhysicalEvaluationSubmission()

    @pytest.mark.parametrize("field", ["percentage_humidity", "broken_grains", "purple_beans"])
    def test_percentages_capped(self, field):
        data = {"percentage_humidity": 7.0, field: 100.5}
        with pytest.raises(ValidationError):
            PhysicalEvaluationSubmission(**data)

    def test_negative_insects_rejected(self):
        with pytest.raises(ValidationError):
            PhysicalEvaluationSubmission(percentage_humidity=7.0, affected_grains_insects=-1)


class TestTopResult:

    def test_rank_starts_at_one(self):
        with pytest.raises(ValidationError):
            TopResult(
                sample_id="s",
                contest_id="c",
                average_score=8.0,
                evaluations_count=1,
                latest_evaluation_date=datetime.now(timezone.utc),
                rank=0,
            )
