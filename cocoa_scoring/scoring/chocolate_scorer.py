# cocoa_scoring/scoring/chocolate_scorer.py
"""
Chocolate Scorer
----------------
Computes one judge's overall quality for the chocolate scheme from the five
weighted tasting categories.

Formula:
    category_score = mean(category attributes)        (missing → 0)
    overall        = Σ category_score × category_weight   clamped to [0, 10]

Category weights (sum = 1.0):
    flavor      0.40   sweetness, bitterness, acidity, flavor_intensity
    aroma       0.25   aroma_intensity, aroma_quality
    texture     0.20   smoothness, melting, body
    aftertaste  0.10   persistence, aftertaste_quality, final_balance
    appearance  0.05   color, gloss, surface_homogeneity

Descriptive notes (aroma.specific_notes, flavor.flavor_notes) never enter
the score.
"""
import structlog
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Sequence, Tuple

from cocoa_scoring.models.evaluation import ChocolateAttributes
from cocoa_scoring.scoring.utils import clamp, mean

logger = structlog.get_logger(__name__)

CHOCOLATE_CATEGORY_WEIGHTS: Dict[str, Decimal] = {
    "flavor":     Decimal("0.40"),
    "aroma":      Decimal("0.25"),
    "texture":    Decimal("0.20"),
    "aftertaste": Decimal("0.10"),
    "appearance": Decimal("0.05"),
}

CHOCOLATE_CATEGORY_ATTRIBUTES: Dict[str, Tuple[str, ...]] = {
    "appearance": ("color", "gloss", "surface_homogeneity"),
    "aroma":      ("aroma_intensity", "aroma_quality"),
    "texture":    ("smoothness", "melting", "body"),
    "flavor":     ("sweetness", "bitterness", "acidity", "flavor_intensity"),
    "aftertaste": ("persistence", "aftertaste_quality", "final_balance"),
}


@dataclass
class CategoryScore:
    """One category line of the scoring breakdown."""
    score: float           # category mean, 0-10
    weight: float
    weighted_score: float  # score × weight
    percentage: float      # weight × 100


@dataclass
class ChocolateScoreResult:
    """Output of ChocolateScorer.calculate()."""
    overall_quality: float
    breakdown: Dict[str, CategoryScore] = field(default_factory=dict)

    def breakdown_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            name: {
                "score": round(c.score, 4),
                "weight": c.weight,
                "weighted_score": round(c.weighted_score, 4),
                "percentage": c.percentage,
            }
            for name, c in self.breakdown.items()
        }


def _attribute_values(group, names: Sequence[str]) -> list:
    return [float(getattr(group, name, 0) or 0) for name in names]


def category_score(attributes: ChocolateAttributes, category: str) -> float:
    """Mean of one category's attributes."""
    group = getattr(attributes, category)
    return mean(_attribute_values(group, CHOCOLATE_CATEGORY_ATTRIBUTES[category]))


class ChocolateScorer:
    """Weighted five-category chocolate scorer."""

    def calculate(self, attributes: ChocolateAttributes) -> ChocolateScoreResult:
        """
        Args:
            attributes: Validated chocolate tasting sheet.

        Returns:
            ChocolateScoreResult with overall_quality in [0, 10] and the
            per-category breakdown.
        """
        breakdown: Dict[str, CategoryScore] = {}
        total = 0.0
        for category, weight in CHOCOLATE_CATEGORY_WEIGHTS.items():
            score = category_score(attributes, category)
            w = float(weight)
            breakdown[category] = CategoryScore(
                score=score,
                weight=w,
                weighted_score=score * w,
                percentage=float(weight * 100),
            )
            total += score * w

        overall = clamp(total)

        logger.debug(
            "chocolate_score_calculated",
            overall_quality=round(overall, 4),
            categories={k: round(v.score, 4) for k, v in breakdown.items()},
        )

        return ChocolateScoreResult(overall_quality=overall, breakdown=breakdown)


def final_rating(judge_scores: Sequence[float]) -> float:
    """Plain mean of several judges' overall scores, clamped to [0, 10]."""
    if not judge_scores:
        return 0.0
    return clamp(mean(judge_scores))
