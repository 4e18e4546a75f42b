# cocoa_scoring/scoring/physical_rules.py
"""
Physical Evaluation Rule Engine
-------------------------------
Pass / disqualify decision for a bean sample's physical inspection.

Rules (independent, each may fire):
     1  undesirable aromas flagged and listed        disqualify
     2  humidity < 3.5% or > 8.0%                    disqualify
     3  broken grains > 10%                          disqualify
     4  violated grains                              disqualify
     5  flat grains > 15%                            warning only
     6  affected grains / insects >= 1               disqualify
     7  well + lightly fermented < 60%               disqualify
     8  purple beans > 15%                           disqualify
     9  slaty beans > 0%                             disqualify
    10  internal moldy beans > 0%                    disqualify
    11  over-fermented beans > 0%                    disqualify

global_evaluation = disqualified iff at least one reason fired.

Also derives the report-only physical summary scores (0-10):
    appearance = well_fermented / 10 − 0.1 × (slaty + purple)
    aroma      = 7.5 − 0.5 × max(0, humidity − 7) − (2 if undesirable aromas)
    defects    = min(10, broken + insects + moldy + over-fermented + slaty + purple)
    moisture   = 10 − 2 × |7 − humidity|
    overall    = 0.45 × appearance + 0.25 × aroma + 0.3 × moisture − 0.1 × defects
"""
import structlog
from dataclasses import asdict, dataclass, field
from typing import Dict, List

from cocoa_scoring.models.enumerations import GlobalEvaluation
from cocoa_scoring.models.physical_evaluation import PhysicalMeasurements
from cocoa_scoring.scoring.utils import clamp

logger = structlog.get_logger(__name__)

HUMIDITY_MIN = 3.5
HUMIDITY_MAX = 8.0
BROKEN_GRAINS_MAX = 10.0
FLAT_GRAINS_WARNING = 15.0
INSECTS_MAX = 1
FERMENTED_MIN = 60.0
PURPLE_BEANS_MAX = 15.0


def _pct(value: float) -> str:
    return str(float(value))


@dataclass
class PhysicalRuleResult:
    """Output of PhysicalRuleEngine.evaluate()."""
    global_evaluation: GlobalEvaluation
    disqualification_reasons: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.global_evaluation == GlobalEvaluation.PASSED


@dataclass
class PhysicalSummaryScores:
    appearance: float
    aroma: float
    defects: float
    moisture: float
    overall: float

    def as_dict(self) -> Dict[str, float]:
        return {k: round(v, 2) for k, v in asdict(self).items()}


class PhysicalRuleEngine:
    """Apply the eleven physical screening rules."""

    def evaluate(self, m: PhysicalMeasurements) -> PhysicalRuleResult:
        reasons: List[str] = []
        warnings: List[str] = []

        if m.has_undesirable_aromas and m.undesirable_aromas:
            reasons.append(
                f"Undesirable aromas detected: {', '.join(m.undesirable_aromas)}"
            )

        if m.percentage_humidity < HUMIDITY_MIN or m.percentage_humidity > HUMIDITY_MAX:
            reasons.append(
                f"Humidity ({_pct(m.percentage_humidity)}%) outside acceptable range (3.5%-8.0%)"
            )

        if m.broken_grains > BROKEN_GRAINS_MAX:
            reasons.append(
                f"Broken grains ({_pct(m.broken_grains)}%) exceeds maximum (10%)"
            )

        if m.violated_grains:
            reasons.append("Violated grains detected")

        if m.flat_grains > FLAT_GRAINS_WARNING:
            warnings.append(
                f"Flat grains ({_pct(m.flat_grains)}%) exceeds warning threshold (15%)"
            )

        if m.affected_grains_insects >= INSECTS_MAX:
            reasons.append(
                f"Affected grains/insects ({m.affected_grains_insects}) detected"
            )

        total_fermented = m.well_fermented_beans + m.lightly_fermented_beans
        if total_fermented < FERMENTED_MIN:
            reasons.append(
                f"Well-fermented + Lightly fermented ({_pct(total_fermented)}%) below minimum (60%)"
            )

        if m.purple_beans > PURPLE_BEANS_MAX:
            reasons.append(f"Purple beans ({_pct(m.purple_beans)}%) exceeds maximum (15%)")

        if m.slaty_beans > 0:
            reasons.append(f"Slaty beans ({_pct(m.slaty_beans)}%) exceeds maximum (0%)")

        if m.internal_moldy_beans > 0:
            reasons.append(
                f"Internal moldy beans ({_pct(m.internal_moldy_beans)}%) exceeds maximum (0%)"
            )

        if m.over_fermented_beans > 0:
            reasons.append(
                f"Over-fermented beans ({_pct(m.over_fermented_beans)}%) exceeds maximum (0%)"
            )

        global_evaluation = (
            GlobalEvaluation.DISQUALIFIED if reasons else GlobalEvaluation.PASSED
        )

        logger.info(
            "physical_evaluation_completed",
            global_evaluation=global_evaluation.value,
            reason_count=len(reasons),
            warning_count=len(warnings),
        )

        return PhysicalRuleResult(
            global_evaluation=global_evaluation,
            disqualification_reasons=reasons,
            warnings=warnings,
        )


def physical_summary_scores(m: PhysicalMeasurements) -> PhysicalSummaryScores:
    """Report-only 0-10 scores derived from a physical inspection."""
    humidity = float(m.percentage_humidity)

    appearance = clamp(m.well_fermented_beans / 10 - 0.1 * (m.slaty_beans + m.purple_beans))
    aroma = clamp(
        7.5 - max(0.0, humidity - 7) * 0.5 - (2 if m.has_undesirable_aromas else 0)
    )
    defects_raw = (
        m.broken_grains
        + m.affected_grains_insects
        + m.internal_moldy_beans
        + m.over_fermented_beans
        + m.slaty_beans
        + m.purple_beans
    )
    defects = min(10.0, round(defects_raw, 1))
    moisture = clamp(10 - abs(7 - humidity) * 2)
    overall = clamp(appearance * 0.45 + aroma * 0.25 + moisture * 0.3 - defects * 0.1)

    return PhysicalSummaryScores(
        appearance=appearance,
        aroma=aroma,
        defects=defects,
        moisture=moisture,
        overall=overall,
    )
