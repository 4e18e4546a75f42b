from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date
from typing import Optional

from cocoa_scoring.models.enumerations import ContestStatus


class Contest(BaseModel):
    """
    A judging contest. Status is derived from the dates and never stored.
    """

    id: str = Field(..., min_length=1)

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Contest display name"
    )

    start_date: date = Field(..., description="First day scores are accepted")
    end_date: date = Field(..., description="Last day scores are accepted (inclusive)")

    location: Optional[str] = Field(default=None, max_length=255)
    director_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_date_range(self):
        """Ensure end_date is not before start_date."""
        if self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        return self

    model_config = ConfigDict(from_attributes=True)


class ContestStatusResponse(BaseModel):
    """Response for GET /contests/{contest_id}/status."""

    contest_id: str
    name: str
    status: ContestStatus
    start_date: date
    end_date: date
    accepts_scores: bool
    as_of: date


class ContestDeleteResponse(BaseModel):
    """Counts of rows removed by a contest cleanup."""

    contest_id: str
    samples_deleted: int = 0
    evaluations_deleted: int = 0
    top_results_deleted: int = 0
