"""
Compare contest rankings with and without judge outlier filtering.

Reads the approved evaluations of a contest from Snowflake and prints, per
sample, the unfiltered and filtered averages, the number of outliers
detected and whether the sample's rank changed.

Usage:
    python -m cocoa_scoring.scripts.compare_filtering CONTEST_ID
    python -m cocoa_scoring.scripts.compare_filtering CONTEST_ID --stage final
    python -m cocoa_scoring.scripts.compare_filtering CONTEST_ID --sigma 1.5 --strategy exclude
"""

import argparse
import sys
from dataclasses import replace

import structlog

from cocoa_scoring.config import settings
from cocoa_scoring.core.exceptions import RepositoryException
from cocoa_scoring.core.logging import configure_logging
from cocoa_scoring.models.enumerations import EvaluationStage, OutlierStrategy
from cocoa_scoring.repositories.evaluation_repository import EvaluationRepository
from cocoa_scoring.scoring.outlier_filter import OutlierConfig
from cocoa_scoring.scoring.ranking import ContestRankingAggregator, OutlierComparison

logger = structlog.get_logger(__name__)


def format_report(comparison: OutlierComparison, config: OutlierConfig) -> str:
    lines = [
        "=" * 78,
        f"  Contest {comparison.contest_id}  "
        f"(sigma={config.sigma_threshold}, min={config.min_evaluations}, "
        f"strategy={config.strategy.value})",
        "=" * 78,
        f"  {'Sample':<36} {'Unfilt':>7} {'Filt':>7} {'Diff':>7} {'Out':>4} {'N':>3} {'Rank':>9}",
        f"  {'-'*36} {'-'*7} {'-'*7} {'-'*7} {'-'*4} {'-'*3} {'-'*9}",
    ]
    for r in comparison.rows:
        rank = f"{r.unfiltered_rank}->{r.filtered_rank}"
        lines.append(
            f"  {r.sample_id:<36} {r.unfiltered_average:>7.2f} {r.filtered_average:>7.2f} "
            f"{r.difference:>+7.3f} {r.outliers_detected:>4} {r.evaluations_count:>3} {rank:>9}"
        )
    lines += [
        "-" * 78,
        f"  Samples: {len(comparison.rows)}   with outliers: {comparison.samples_with_outliers}   "
        f"outliers: {comparison.total_outliers}",
        f"  Avg |diff|: {comparison.average_difference:.3f}   max |diff|: "
        f"{comparison.max_difference:.3f}   rank changes: {comparison.ranking_changes}",
        "=" * 78,
    ]
    return "\n".join(lines)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Compare rankings with and without outlier filtering")
    ap.add_argument("contest_id", help="Contest to analyse")
    ap.add_argument(
        "--stage",
        choices=[s.value for s in EvaluationStage],
        default=EvaluationStage.SENSORY.value,
    )
    ap.add_argument("--sigma", type=float, help="Override sigma threshold")
    ap.add_argument("--min-evaluations", type=int, help="Override minimum evaluations")
    ap.add_argument(
        "--strategy",
        choices=[s.value for s in OutlierStrategy],
        help="Override outlier strategy",
    )
    args = ap.parse_args(argv)

    configure_logging(log_format="console")
    stage = EvaluationStage(args.stage)

    config = OutlierConfig.for_stage(stage, settings)
    overrides = {}
    if args.sigma is not None:
        overrides["sigma_threshold"] = args.sigma
    if args.min_evaluations is not None:
        overrides["min_evaluations"] = args.min_evaluations
    if args.strategy:
        overrides["strategy"] = OutlierStrategy(args.strategy)
    if overrides:
        config = replace(config, **overrides)

    try:
        evaluations = EvaluationRepository().list_scored_by_contest(args.contest_id, stage)
    except RepositoryException as e:
        logger.error("evaluations_load_failed", contest_id=args.contest_id, error=str(e))
        return 1

    comparison = ContestRankingAggregator(config=config).compare_filtering(
        args.contest_id, evaluations, stage
    )
    print(format_report(comparison, config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
