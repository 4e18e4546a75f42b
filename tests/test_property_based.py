# tests/test_property_based.py
"""
Property-Based Tests - Hypothesis checks for the outlier filter, the
contest ranking aggregator and the chocolate scorer.
"""

from datetime import datetime, timedelta, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from cocoa_scoring.models.evaluation import ChocolateAttributes
from cocoa_scoring.scoring.chocolate_scorer import CHOCOLATE_CATEGORY_ATTRIBUTES, ChocolateScorer
from cocoa_scoring.scoring.outlier_filter import (
    EvaluationScore,
    OutlierConfig,
    filter_outliers,
)
from cocoa_scoring.scoring.ranking import ContestRankingAggregator, ScoredEvaluation

# ---------------------------------------------------------------------------
# Shared strategies
# ---------------------------------------------------------------------------

T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)
EPS = 1e-9

score_st = st.floats(min_value=0.0, max_value=10.0, allow_nan=False, allow_infinity=False)
config_st = st.builds(
    OutlierConfig,
    sigma_threshold=st.floats(min_value=0.5, max_value=5.0),
    min_evaluations=st.integers(min_value=1, max_value=6),
    strategy=st.sampled_from(["exclude", "reduce_weight"]),
    weight_reduction_factor=st.one_of(st.just(0.0), st.floats(min_value=0.01, max_value=1.0)),
)


@st.composite
def contest_evaluations(draw, contest_id="A"):
    """Draw scored evaluations for up to 6 samples, each with a unique id."""
    rows = draw(
        st.lists(
            st.tuples(
                st.sampled_from(["s1", "s2", "s3", "s4", "s5", "s6"]),
                score_st,
                st.integers(min_value=0, max_value=120),
            ),
            min_size=1,
            max_size=40,
        )
    )
    return [
        ScoredEvaluation(
            id=f"{contest_id}-e{i}",
            sample_id=sample_id,
            contest_id=contest_id,
            overall_quality=round(score, 2),
            evaluated_at=T0 + timedelta(minutes=minutes),
        )
        for i, (sample_id, score, minutes) in enumerate(rows)
    ]


def _summary(ranking):
    return [(a.sample_id, a.rank, a.average_score) for a in ranking.ranked]


# ---------------------------------------------------------------------------
# Outlier filter properties
# ---------------------------------------------------------------------------


class TestOutlierFilterProperties:

    @given(st.lists(score_st, min_size=1, max_size=30), config_st)
    @settings(max_examples=300)
    def test_filtered_average_within_score_range(self, scores, config):
        """A weighted mean with non-negative weights stays within [min, max]."""
        result = filter_outliers([EvaluationScore(s) for s in scores], config)
        assert min(scores) - EPS <= result.filtered_average <= max(scores) + EPS

    @given(st.lists(score_st, min_size=1, max_size=30), config_st)
    @settings(max_examples=300)
    def test_below_minimum_is_plain_mean(self, scores, config):
        """Fewer evaluations than min_evaluations leaves the average untouched."""
        config = OutlierConfig(
            sigma_threshold=config.sigma_threshold,
            min_evaluations=len(scores) + 1,
            strategy=config.strategy,
            weight_reduction_factor=config.weight_reduction_factor,
        )
        result = filter_outliers([EvaluationScore(s) for s in scores], config)
        assert result.outlier_count == 0
        assert result.filtered_average == result.original_average

    @given(score_st, st.integers(min_value=1, max_value=20))
    @settings(max_examples=200)
    def test_identical_scores_never_outliers(self, score, n):
        result = filter_outliers([EvaluationScore(score)] * n)
        assert result.outlier_count == 0
        assert abs(result.filtered_average - score) < EPS

    @given(st.lists(score_st, min_size=1, max_size=30))
    @settings(max_examples=200)
    def test_details_cover_every_evaluation(self, scores):
        result = filter_outliers([EvaluationScore(s) for s in scores])
        assert len(result.details) == len(scores)
        assert sum(d.was_filtered for d in result.details) == result.outlier_count


# ---------------------------------------------------------------------------
# Ranking properties
# ---------------------------------------------------------------------------


class TestRankingProperties:

    @given(contest_evaluations())
    @settings(max_examples=200)
    def test_ranks_are_one_to_k(self, evaluations):
        ranking = ContestRankingAggregator().rank_contest("A", evaluations)
        samples = {e.sample_id for e in evaluations}

        assert [a.rank for a in ranking.ranked] == list(range(1, len(samples) + 1))
        scores = [a.average_score for a in ranking.ranked]
        assert scores == sorted(scores, reverse=True)

    @given(contest_evaluations(), st.randoms(use_true_random=False))
    @settings(max_examples=200)
    def test_input_order_does_not_matter(self, evaluations, rnd):
        aggregator = ContestRankingAggregator()
        shuffled = list(evaluations)
        rnd.shuffle(shuffled)

        assert _summary(aggregator.rank_contest("A", evaluations)) == _summary(
            aggregator.rank_contest("A", shuffled)
        )

    @given(contest_evaluations())
    @settings(max_examples=100)
    def test_recompute_is_deterministic(self, evaluations):
        aggregator = ContestRankingAggregator()
        first = _summary(aggregator.rank_contest("A", evaluations))
        second = _summary(aggregator.rank_contest("A", evaluations))
        assert first == second

    @given(contest_evaluations("A"), contest_evaluations("B"))
    @settings(max_examples=200)
    def test_other_contest_never_affects_ranking(self, evals_a, evals_b):
        aggregator = ContestRankingAggregator()
        alone = _summary(aggregator.rank_contest("A", evals_a))
        mixed = _summary(aggregator.rank_contest("A", evals_a + evals_b))
        assert alone == mixed

    @given(contest_evaluations())
    @settings(max_examples=200)
    def test_averages_stay_on_score_scale(self, evaluations):
        for aggregate in ContestRankingAggregator().rank_contest("A", evaluations).ranked:
            assert 0.0 <= aggregate.average_score <= 10.0
            assert aggregate.evaluations_count >= 1


# ---------------------------------------------------------------------------
# Chocolate scorer properties
# ---------------------------------------------------------------------------


@st.composite
def chocolate_sheet(draw):
    return ChocolateAttributes.model_validate(
        {
            category: {name: draw(score_st) for name in names}
            for category, names in CHOCOLATE_CATEGORY_ATTRIBUTES.items()
        }
    )


class TestChocolateScorerProperties:

    @given(chocolate_sheet())
    @settings(max_examples=300)
    def test_overall_quality_bounded(self, attributes):
        result = ChocolateScorer().calculate(attributes)
        assert -EPS <= result.overall_quality <= 10.0 + EPS
