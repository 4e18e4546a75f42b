from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import datetime, timezone
from typing import Optional

from cocoa_scoring.models.enumerations import ProductCategory, SampleStatus

# Forward order of the judging pipeline; DISQUALIFIED sits outside it
STATUS_ORDER = (
    SampleStatus.SUBMITTED,
    SampleStatus.RECEIVED,
    SampleStatus.PHYSICAL_EVALUATION,
    SampleStatus.APPROVED,
    SampleStatus.EVALUATED,
)

DISQUALIFIABLE_FROM = frozenset({SampleStatus.RECEIVED, SampleStatus.PHYSICAL_EVALUATION})

# A sensory or final evaluation may only be recorded against these
JUDGEABLE_STATUSES = frozenset({SampleStatus.APPROVED, SampleStatus.EVALUATED})


def can_transition(current: SampleStatus, target: SampleStatus) -> bool:
    """Status only moves forward; disqualified is terminal."""
    current = SampleStatus(current)
    target = SampleStatus(target)

    if current == target:
        return True
    if current == SampleStatus.DISQUALIFIED:
        return False
    if target == SampleStatus.DISQUALIFIED:
        return current in DISQUALIFIABLE_FROM
    return STATUS_ORDER.index(target) > STATUS_ORDER.index(current)


def internal_code(sample_id: str, created_at: datetime) -> str:
    """Director-facing code, e.g. INT-202403-A1F."""
    return f"INT-{created_at.year}{created_at.month:02d}-{str(sample_id)[-3:].upper()}"


class SampleBase(BaseModel):
    """
    Base Pydantic model for a contest sample.
    """

    contest_id: str = Field(
        ...,
        min_length=1,
        description="Contest the sample is entered in (fixed for life)"
    )

    owner_id: Optional[str] = Field(
        default=None,
        description="Participant who submitted the sample"
    )

    tracking_code: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Unique external tracking code"
    )

    category: ProductCategory = Field(
        ...,
        description="Product category (bean, liquor, chocolate)"
    )


class Sample(SampleBase):
    """
    Sample as stored and returned by the API.
    """

    id: str = Field(..., min_length=1)

    status: SampleStatus = Field(
        default=SampleStatus.SUBMITTED,
        description="Current pipeline status"
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Submission timestamp (UTC)"
    )

    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def internal_code(self) -> str:
        return internal_code(self.id, self.created_at)

    model_config = ConfigDict(from_attributes=True)
