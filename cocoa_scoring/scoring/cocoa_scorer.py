# cocoa_scoring/scoring/cocoa_scorer.py
"""
Cocoa Scorer
------------
Bean / liquor scheme. The judge submits overall_quality directly and that
value is what gets stored and ranked. Everything else here is for display.

Group totals (each clamped to [0, 10]):
    acidity      = frutal + acetic + lactic + mineral_butyric
    fresh_fruit  = berries + 0.8·citrus + 0.3·(yellow_pulp + dark + tropical)
    brown_fruit  = dry + 0.8·brown + 0.3·overripe
    vegetal      = grass_herb + 0.8·earthy
    floral       = orange_blossom + 0.8·flowers
    wood         = light + 0.8·dark + 0.3·resin
    spice        = spices + 0.8·tobacco + 0.3·umami
    nut          = kernel + 0.8·skin
    defects      = sum of the eight defects

Advisory quality:
    base    = mean(cacao, bitterness, astringency, caramel_panela, 8 group totals)
    penalty = 0.3 × defects_sum / 8
    bonus   = (sweetness − 5) × 0.05   only for chocolate-type tastings
    advisory = clamp(base − penalty + bonus)
"""
import structlog
from dataclasses import asdict, dataclass
from typing import Dict, Tuple

from cocoa_scoring.models.evaluation import CocoaBeanAttributes
from cocoa_scoring.scoring.utils import clamp, mean

logger = structlog.get_logger(__name__)

# group name → ((sub-attribute, weight), ...)
GROUP_WEIGHTS: Dict[str, Tuple[Tuple[str, float], ...]] = {
    "acidity": (("frutal", 1.0), ("acetic", 1.0), ("lactic", 1.0), ("mineral_butyric", 1.0)),
    "fresh_fruit": (
        ("berries", 1.0), ("citrus", 0.8),
        ("yellow_pulp", 0.3), ("dark", 0.3), ("tropical", 0.3),
    ),
    "brown_fruit": (("dry", 1.0), ("brown", 0.8), ("overripe", 0.3)),
    "vegetal": (("grass_herb", 1.0), ("earthy", 0.8)),
    "floral": (("orange_blossom", 1.0), ("flowers", 0.8)),
    "wood": (("light", 1.0), ("dark", 0.8), ("resin", 0.3)),
    "spice": (("spices", 1.0), ("tobacco", 0.8), ("umami", 0.3)),
    "nut": (("kernel", 1.0), ("skin", 0.8)),
}

DEFECT_FIELDS = (
    "dirty", "animal", "rotten", "smoke", "humid", "moldy", "overfermented", "other",
)

DEFECT_PENALTY_FACTOR = 0.3
SWEETNESS_BONUS_FACTOR = 0.05


@dataclass
class CocoaGroupTotals:
    acidity: float
    fresh_fruit: float
    brown_fruit: float
    vegetal: float
    floral: float
    wood: float
    spice: float
    nut: float
    defects: float


@dataclass
class CocoaScoreResult:
    """Output of CocoaScorer.calculate()."""
    overall_quality: float      # stored and ranked
    advisory_quality: float     # display only
    group_totals: CocoaGroupTotals

    def totals_dict(self) -> Dict[str, float]:
        return {k: round(v, 4) for k, v in asdict(self.group_totals).items()}


def defects_sum(attributes: CocoaBeanAttributes) -> float:
    return sum(float(getattr(attributes.defects, name)) for name in DEFECT_FIELDS)


def group_totals(attributes: CocoaBeanAttributes) -> CocoaGroupTotals:
    totals = {
        group: clamp(
            sum(float(getattr(getattr(attributes, group), name)) * w for name, w in weights)
        )
        for group, weights in GROUP_WEIGHTS.items()
    }
    return CocoaGroupTotals(defects=clamp(defects_sum(attributes)), **totals)


def advisory_quality(attributes: CocoaBeanAttributes, totals: CocoaGroupTotals = None) -> float:
    """Display-only quality derived from the tasting sheet."""
    totals = totals or group_totals(attributes)
    positives = [
        attributes.cacao,
        attributes.bitterness,
        attributes.astringency,
        attributes.caramel_panela,
        totals.acidity,
        totals.fresh_fruit,
        totals.brown_fruit,
        totals.vegetal,
        totals.floral,
        totals.wood,
        totals.spice,
        totals.nut,
    ]
    base = mean([float(v) for v in positives])

    # Raw defect sum (unclamped) normalized over the eight defect fields
    penalty = (defects_sum(attributes) / len(DEFECT_FIELDS)) * DEFECT_PENALTY_FACTOR

    bonus = 0.0
    if attributes.evaluation_type == "chocolate" and attributes.sweetness is not None:
        bonus = (float(attributes.sweetness) - 5) * SWEETNESS_BONUS_FACTOR

    return clamp(base - penalty + bonus)


class CocoaScorer:
    """Direct-score cocoa scheme."""

    def calculate(self, attributes: CocoaBeanAttributes) -> CocoaScoreResult:
        totals = group_totals(attributes)
        advisory = advisory_quality(attributes, totals)
        overall = float(attributes.overall_quality)

        logger.debug(
            "cocoa_score_calculated",
            overall_quality=overall,
            advisory_quality=round(advisory, 4),
            defects_total=round(totals.defects, 4),
        )

        return CocoaScoreResult(
            overall_quality=overall,
            advisory_quality=advisory,
            group_totals=totals,
        )
