# cocoa_scoring/scoring/outlier_filter.py
"""
Outlier Filter
--------------
Turns the overall-quality scores several judges gave one sample into a single
robust aggregate, down-weighting (or excluding) judges whose score lies too
far from the group mean.

Algorithm:
    mean, std   = mean(scores), sample std (n − 1 divisor, 0 when n < 2)
    n < min_evaluations  → no filtering, filtered = original average
    outlier     ⇔ |score − mean| > sigma_threshold × std
    weight      = 0 (exclude) | weight_reduction_factor (reduce_weight) | 1.0
    filtered    = Σ(score × weight) / Σ weight   (original average if Σ weight = 0)

Defaults: sigma_threshold=2.0, min_evaluations=3, strategy=reduce_weight,
weight_reduction_factor=0.5.
"""
import structlog
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence

from cocoa_scoring.models.enumerations import EvaluationStage, OutlierStrategy
from cocoa_scoring.scoring.utils import mean, sample_std_dev, weighted_mean

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OutlierConfig:
    """Outlier detection parameters."""
    sigma_threshold: float = 2.0
    min_evaluations: int = 3
    strategy: OutlierStrategy = OutlierStrategy.REDUCE_WEIGHT
    weight_reduction_factor: float = 0.5

    def __post_init__(self):
        if self.sigma_threshold <= 0:
            raise ValueError(f"sigma_threshold must be > 0, got {self.sigma_threshold}")
        if self.min_evaluations < 1:
            raise ValueError(f"min_evaluations must be >= 1, got {self.min_evaluations}")
        if not 0.0 <= self.weight_reduction_factor <= 1.0:
            raise ValueError(
                f"weight_reduction_factor must be in [0, 1], got {self.weight_reduction_factor}"
            )
        # Accept plain strings from settings / query parameters
        object.__setattr__(self, "strategy", OutlierStrategy(self.strategy))

    @classmethod
    def for_stage(cls, stage: EvaluationStage, settings=None) -> "OutlierConfig":
        """Build the configured outlier parameters for initial or final results."""
        if settings is None:
            from cocoa_scoring.config import settings
        prefix = "INITIAL" if EvaluationStage(stage) == EvaluationStage.SENSORY else "FINAL"
        return cls(
            sigma_threshold=getattr(settings, f"{prefix}_OUTLIER_SIGMA_THRESHOLD"),
            min_evaluations=getattr(settings, f"{prefix}_OUTLIER_MIN_EVALUATIONS"),
            strategy=getattr(settings, f"{prefix}_OUTLIER_STRATEGY"),
            weight_reduction_factor=getattr(settings, f"{prefix}_OUTLIER_WEIGHT_REDUCTION_FACTOR"),
        )


DEFAULT_OUTLIER_CONFIG = OutlierConfig()


def filtering_enabled(stage: EvaluationStage, settings=None) -> bool:
    """Global switch AND the per-stage switch."""
    if settings is None:
        from cocoa_scoring.config import settings
    stage_flag = (
        settings.INITIAL_OUTLIER_ENABLED
        if EvaluationStage(stage) == EvaluationStage.SENSORY
        else settings.FINAL_OUTLIER_ENABLED
    )
    return settings.OUTLIER_FILTERING_ENABLED and stage_flag


@dataclass(frozen=True)
class EvaluationScore:
    """One judge's overall quality for a sample."""
    score: float
    id: Optional[str] = None


@dataclass(frozen=True)
class OutlierDetail:
    """Per-evaluation outcome of the filter."""
    score: float
    id: Optional[str]
    deviation_from_mean: float   # signed: score − mean
    was_filtered: bool
    applied_weight: float


@dataclass
class FilteredResult:
    """Output of filter_outliers()."""
    filtered_average: float
    original_average: float
    total_count: int
    outlier_count: int
    standard_deviation: float
    mean: float
    details: List[OutlierDetail] = field(default_factory=list)


def filter_outliers(
    evaluations: Sequence[EvaluationScore],
    config: Optional[OutlierConfig] = None,
    **overrides,
) -> FilteredResult:
    """
    Detect and down-weight outlier scores for one sample.

    Args:
        evaluations: One entry per contributing judge, in a stable order.
        config: Outlier parameters (defaults to DEFAULT_OUTLIER_CONFIG).
        **overrides: Individual OutlierConfig fields to override.

    Returns:
        FilteredResult with the filtered average and per-evaluation detail.

    Examples:
        >>> result = filter_outliers([EvaluationScore(s) for s in (8.5, 8.7, 8.6, 3.2)])
        >>> result.outlier_count
        0
    """
    cfg = config or DEFAULT_OUTLIER_CONFIG
    if overrides:
        cfg = replace(cfg, **overrides)

    scores = [float(e.score) for e in evaluations]
    original_average = mean(scores)
    avg = original_average
    std = sample_std_dev(scores, avg)

    if len(scores) < cfg.min_evaluations:
        return FilteredResult(
            filtered_average=original_average,
            original_average=original_average,
            total_count=len(scores),
            outlier_count=0,
            standard_deviation=std,
            mean=avg,
            details=[
                OutlierDetail(
                    score=s,
                    id=e.id,
                    deviation_from_mean=s - avg,
                    was_filtered=False,
                    applied_weight=1.0,
                )
                for s, e in zip(scores, evaluations)
            ],
        )

    threshold = cfg.sigma_threshold * std
    outlier_weight = (
        0.0 if cfg.strategy == OutlierStrategy.EXCLUDE else cfg.weight_reduction_factor
    )

    weights: List[float] = []
    outlier_count = 0
    details: List[OutlierDetail] = []

    for s, e in zip(scores, evaluations):
        # std 0: every score equals the mean up to float rounding
        is_outlier = std > 0 and abs(s - avg) > threshold
        weight = outlier_weight if is_outlier else 1.0
        if is_outlier:
            outlier_count += 1
        weights.append(weight)
        details.append(
            OutlierDetail(
                score=s,
                id=e.id,
                deviation_from_mean=s - avg,
                was_filtered=is_outlier,
                applied_weight=weight,
            )
        )

    filtered_average = (
        weighted_mean(scores, weights) if sum(weights) > 0 else original_average
    )

    if outlier_count:
        logger.debug(
            "outliers_filtered",
            total_count=len(scores),
            outlier_count=outlier_count,
            mean=round(avg, 4),
            standard_deviation=round(std, 4),
            threshold=round(threshold, 4),
            strategy=cfg.strategy.value,
            original_average=round(original_average, 4),
            filtered_average=round(filtered_average, 4),
        )

    return FilteredResult(
        filtered_average=filtered_average,
        original_average=original_average,
        total_count=len(scores),
        outlier_count=outlier_count,
        standard_deviation=std,
        mean=avg,
        details=details,
    )


def get_filtered_average(
    scores: Sequence[float],
    config: Optional[OutlierConfig] = None,
) -> float:
    """Filtered average of bare numeric scores."""
    evaluations = [EvaluationScore(score=s, id=f"eval_{i}") for i, s in enumerate(scores)]
    return filter_outliers(evaluations, config).filtered_average


def is_outlier(
    score: float,
    all_scores: Sequence[float],
    config: Optional[OutlierConfig] = None,
) -> bool:
    """Whether score would be flagged against all_scores."""
    cfg = config or DEFAULT_OUTLIER_CONFIG
    if len(all_scores) < cfg.min_evaluations:
        return False

    avg = mean(all_scores)
    std = sample_std_dev(all_scores, avg)
    return std > 0 and abs(score - avg) > cfg.sigma_threshold * std
