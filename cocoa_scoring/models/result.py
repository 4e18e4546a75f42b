from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cocoa_scoring.models.enumerations import EvaluationStage


class TopResult(BaseModel):
    """
    One published ranking row per (sample, contest, stage). Fully derived.
    """

    sample_id: str
    contest_id: str
    stage: EvaluationStage = EvaluationStage.SENSORY
    average_score: float = Field(..., ge=0, le=10)
    evaluations_count: int = Field(..., ge=1)
    latest_evaluation_date: datetime
    rank: int = Field(..., ge=1)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(from_attributes=True)


class TopResultEntry(TopResult):
    """Top-N read row joined with sample and contest display data."""

    tracking_code: Optional[str] = None
    category: Optional[str] = None
    contest_name: Optional[str] = None
    awards: List[str] = Field(default_factory=list)


class TopResultsResponse(BaseModel):
    """Response for GET /results/top. contest_id is None for the all-contests read."""

    contest_id: Optional[str] = None
    stage: EvaluationStage
    limit: int
    results: List[TopResultEntry] = Field(default_factory=list)


class RecomputeResponse(BaseModel):
    """Response for POST /rankings/recompute."""

    contest_id: Optional[str] = None
    stage: EvaluationStage
    ranked_samples: int
    published: int
    contests: List[str] = Field(default_factory=list)
    filtering_enabled: bool
    recomputed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class OutlierComparisonEntry(BaseModel):
    sample_id: str
    unfiltered_average: float
    filtered_average: float
    difference: float
    outliers_detected: int
    evaluations_count: int
    standard_deviation: float
    unfiltered_rank: int
    filtered_rank: int


class OutlierReportResponse(BaseModel):
    """Response for GET /rankings/outlier-report."""

    contest_id: str
    stage: EvaluationStage
    outlier_config: Dict[str, Any]
    total_samples: int
    samples_with_outliers: int
    total_outliers: int
    average_difference: float
    max_difference: float
    ranking_changes: int
    rows: List[OutlierComparisonEntry] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
