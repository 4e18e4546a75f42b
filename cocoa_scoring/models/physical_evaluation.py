from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from typing import Optional, List, Dict

from cocoa_scoring.models.enumerations import GlobalEvaluation


class PhysicalMeasurements(BaseModel):
    """
    Raw physical inspection of a bean sample.

    Percentages are 0-100 of the inspected beans; the insect count is an
    absolute number of affected grains.
    """

    has_undesirable_aromas: bool = False
    undesirable_aromas: List[str] = Field(default_factory=list)
    # Non-critical odor checklists, recorded for the producer report
    typical_odors: List[str] = Field(default_factory=list)
    atypical_odors: List[str] = Field(default_factory=list)

    percentage_humidity: float = Field(
        ...,
        ge=0,
        le=100,
        description="Moisture content (%)"
    )

    broken_grains: float = Field(default=0, ge=0, le=100)
    violated_grains: bool = False
    flat_grains: float = Field(default=0, ge=0, le=100)

    affected_grains_insects: int = Field(default=0, ge=0)
    has_affected_grains: bool = False

    well_fermented_beans: float = Field(default=0, ge=0, le=100)
    lightly_fermented_beans: float = Field(default=0, ge=0, le=100)
    purple_beans: float = Field(default=0, ge=0, le=100)
    slaty_beans: float = Field(default=0, ge=0, le=100)
    internal_moldy_beans: float = Field(default=0, ge=0, le=100)
    over_fermented_beans: float = Field(default=0, ge=0, le=100)

    notes: Optional[str] = Field(default=None, max_length=4000)


class PhysicalEvaluationSubmission(PhysicalMeasurements):
    """Body of PUT /samples/{sample_id}/physical-evaluation."""

    evaluated_by: Optional[str] = Field(default=None, max_length=255)


class PhysicalEvaluationRecord(PhysicalEvaluationSubmission):
    """Stored physical evaluation: at most one per sample."""

    sample_id: str
    global_evaluation: GlobalEvaluation
    disqualification_reasons: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    evaluated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(from_attributes=True)


class PhysicalEvaluationResponse(PhysicalEvaluationRecord):
    """Stored evaluation plus the derived report scores."""

    summary_scores: Optional[Dict[str, float]] = None
    sample_status: Optional[str] = None


class PhysicalEvaluationStats(BaseModel):
    """Per-contest counts of samples by screening status."""

    contest_id: Optional[str] = None
    total: int = 0
    received: int = 0
    physical_evaluation: int = 0
    approved: int = 0
    disqualified: int = 0
