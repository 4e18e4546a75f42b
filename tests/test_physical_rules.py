# tests/test_physical_rules.py

"""
Physical Rule Engine Tests - Pass / disqualify decisions and summary scores
"""

import pytest

from cocoa_scoring.models.enumerations import GlobalEvaluation
from cocoa_scoring.models.physical_evaluation import PhysicalMeasurements
from cocoa_scoring.scoring.physical_rules import PhysicalRuleEngine, physical_summary_scores


def _measurements(passing_physical, **changes) -> PhysicalMeasurements:
    data = {k: v for k, v in passing_physical.items() if k != "evaluated_by"}
    data.update(changes)
    return PhysicalMeasurements(**data)


@pytest.fixture
def engine():
    return PhysicalRuleEngine()


class TestPhysicalRuleEngine:
    """Tests for the eleven screening rules."""

    def test_clean_sample_passes(self, engine, passing_physical):
        result = engine.evaluate(_measurements(passing_physical))

        assert result.global_evaluation == GlobalEvaluation.PASSED
        assert result.passed
        assert result.disqualification_reasons == []
        assert result.warnings == []

    def test_humidity_alone_disqualifies(self, engine, passing_physical):
        result = engine.evaluate(_measurements(passing_physical, percentage_humidity=9))

        assert result.global_evaluation == GlobalEvaluation.DISQUALIFIED
        assert result.disqualification_reasons == [
            "Humidity (9.0%) outside acceptable range (3.5%-8.0%)"
        ]

    @pytest.mark.parametrize("humidity", [3.5, 8.0])
    def test_humidity_bounds_inclusive(self, engine, passing_physical, humidity):
        result = engine.evaluate(_measurements(passing_physical, percentage_humidity=humidity))
        assert result.passed

    def test_flat_grains_only_warn(self, engine, passing_physical):
        result = engine.evaluate(_measurements(passing_physical, flat_grains=20))

        assert result.global_evaluation == GlobalEvaluation.PASSED
        assert result.warnings == ["Flat grains (20.0%) exceeds warning threshold (15%)"]

    def test_undesirable_aromas_need_flag_and_list(self, engine, passing_physical):
        flagged_only = engine.evaluate(
            _measurements(passing_physical, has_undesirable_aromas=True)
        )
        assert flagged_only.passed

        listed = engine.evaluate(
            _measurements(
                passing_physical,
                has_undesirable_aromas=True,
                undesirable_aromas=["smoke", "mold"],
            )
        )
        assert listed.disqualification_reasons == [
            "Undesirable aromas detected: smoke, mold"
        ]

    def test_single_insect_disqualifies(self, engine, passing_physical):
        result = engine.evaluate(_measurements(passing_physical, affected_grains_insects=1))
        assert result.disqualification_reasons == ["Affected grains/insects (1) detected"]

    def test_fermentation_minimum(self, engine, passing_physical):
        result = engine.evaluate(
            _measurements(passing_physical, well_fermented_beans=40, lightly_fermented_beans=10)
        )
        assert result.disqualification_reasons == [
            "Well-fermented + Lightly fermented (50.0%) below minimum (60%)"
        ]

    def test_zero_tolerance_defects(self, engine, passing_physical):
        result = engine.evaluate(
            _measurements(
                passing_physical,
                slaty_beans=0.5,
                internal_moldy_beans=1,
                over_fermented_beans=2,
            )
        )
        assert result.disqualification_reasons == [
            "Slaty beans (0.5%) exceeds maximum (0%)",
            "Internal moldy beans (1.0%) exceeds maximum (0%)",
            "Over-fermented beans (2.0%) exceeds maximum (0%)",
        ]

    def test_every_rule_reported(self, engine, passing_physical):
        result = engine.evaluate(
            _measurements(
                passing_physical,
                has_undesirable_aromas=True,
                undesirable_aromas=["smoke"],
                percentage_humidity=2,
                broken_grains=12,
                violated_grains=True,
                flat_grains=16,
                affected_grains_insects=3,
                well_fermented_beans=10,
                lightly_fermented_beans=10,
                purple_beans=20,
                slaty_beans=1,
                internal_moldy_beans=1,
                over_fermented_beans=1,
            )
        )
        assert len(result.disqualification_reasons) == 10
        assert len(result.warnings) == 1
        assert "Violated grains detected" in result.disqualification_reasons
        assert "Broken grains (12.0%) exceeds maximum (10%)" in result.disqualification_reasons
        assert "Purple beans (20.0%) exceeds maximum (15%)" in result.disqualification_reasons


class TestPhysicalSummaryScores:
    """Tests for the report-only summary scores."""

    def test_clean_sample(self, passing_physical):
        scores = physical_summary_scores(_measurements(passing_physical)).as_dict()

        # appearance 7 - 0.5, aroma 7.5, defects 2 + 5, moisture 10
        assert scores["appearance"] == 6.5
        assert scores["aroma"] == 7.5
        assert scores["defects"] == 7.0
        assert scores["moisture"] == 10.0
        assert scores["overall"] == pytest.approx(6.5 * 0.45 + 7.5 * 0.25 + 3.0 - 0.7, abs=0.01)

    def test_wet_sample_loses_aroma_and_moisture(self, passing_physical):
        scores = physical_summary_scores(
            _measurements(passing_physical, percentage_humidity=9, has_undesirable_aromas=True)
        )
        assert scores.aroma == pytest.approx(7.5 - 1.0 - 2)
        assert scores.moisture == pytest.approx(6.0)

    def test_scores_clamped(self, passing_physical):
        scores = physical_summary_scores(
            _measurements(passing_physical, broken_grains=50, percentage_humidity=0)
        )
        assert scores.defects == 10.0
        assert scores.moisture == 0.0
        assert 0.0 <= scores.overall <= 10.0
