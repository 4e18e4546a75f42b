"""
Top Result Repository - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/top_result_repository.py

Published rankings. Rows for a (contest, stage) are always replaced as a
whole inside one transaction, so readers see either the old or the new
ranking, never a mix.
"""

from typing import List

import structlog

from cocoa_scoring.models.enumerations import EvaluationStage
from cocoa_scoring.models.result import TopResult, TopResultEntry
from cocoa_scoring.repositories.base import BaseRepository
from cocoa_scoring.scoring.ranking import awards_for_rank

logger = structlog.get_logger(__name__)

_TOP_SELECT = """
    SELECT tr.SAMPLE_ID, tr.CONTEST_ID, tr.STAGE, tr.AVERAGE_SCORE,
           tr.EVALUATIONS_COUNT, tr.LATEST_EVALUATION_DATE, tr.RANK,
           tr.UPDATED_AT, s.TRACKING_CODE, s.CATEGORY, c.NAME AS CONTEST_NAME
    FROM TOP_RESULTS tr
    LEFT JOIN SAMPLES s ON s.ID = tr.SAMPLE_ID
    LEFT JOIN CONTESTS c ON c.ID = tr.CONTEST_ID
"""


class TopResultRepository(BaseRepository):
    """Repository for TopResult replace and top-N reads."""

    TABLE_NAME = "TOP_RESULTS"

    def replace_for_contest(
        self,
        contest_id: str,
        stage: EvaluationStage,
        results: List[TopResult],
    ) -> int:
        """
        Atomically replace a contest's published ranking for one stage.

        Args:
            contest_id: Partition key
            stage: sensory or final
            results: New rows, already ranked

        Returns:
            Number of rows written
        """
        stage_value = EvaluationStage(stage).value
        insert_sql = """
            INSERT INTO TOP_RESULTS (
                SAMPLE_ID, CONTEST_ID, STAGE, AVERAGE_SCORE, EVALUATIONS_COUNT,
                LATEST_EVALUATION_DATE, RANK, UPDATED_AT
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        """
        rows = [
            (
                r.sample_id,
                contest_id,
                stage_value,
                r.average_score,
                r.evaluations_count,
                r.latest_evaluation_date,
                r.rank,
                r.updated_at,
            )
            for r in results
        ]

        with self.transaction() as cur:
            cur.execute(
                "DELETE FROM TOP_RESULTS WHERE CONTEST_ID = %s AND STAGE = %s",
                (contest_id, stage_value),
            )
            if rows:
                cur.executemany(insert_sql, rows)

        logger.info(
            "top_results_replaced",
            contest_id=contest_id,
            stage=stage_value,
            rows=len(rows),
        )
        return len(rows)

    def get_top(
        self,
        contest_id: str,
        stage: EvaluationStage,
        limit: int,
    ) -> List[TopResultEntry]:
        """Published top-N joined with sample and contest display data."""
        sql = f"""
            {_TOP_SELECT}
            WHERE tr.CONTEST_ID = %s AND tr.STAGE = %s
            ORDER BY tr.RANK
            LIMIT %s
        """
        rows = self.execute_query(
            sql, (contest_id, EvaluationStage(stage).value, limit), fetch_all=True
        ) or []
        return self._to_entries(rows)

    def get_top_all(self, stage: EvaluationStage, limit: int) -> List[TopResultEntry]:
        """Top-N of every contest, ordered by contest then rank."""
        sql = f"""
            {_TOP_SELECT}
            WHERE tr.STAGE = %s AND tr.RANK <= %s
            ORDER BY tr.CONTEST_ID, tr.RANK
        """
        rows = self.execute_query(
            sql, (EvaluationStage(stage).value, limit), fetch_all=True
        ) or []
        return self._to_entries(rows)

    def published_contests(self, stage: EvaluationStage) -> List[str]:
        """Contest ids that currently hold published rows for a stage."""
        sql = "SELECT DISTINCT CONTEST_ID FROM TOP_RESULTS WHERE STAGE = %s"
        rows = self.execute_query(sql, (EvaluationStage(stage).value,), fetch_all=True) or []
        return [r["contest_id"] for r in self.rows_to_dicts(rows)]

    def _to_entries(self, rows) -> List[TopResultEntry]:
        entries = []
        for row in self.rows_to_dicts(rows):
            row["latest_evaluation_date"] = self.normalize_timestamp(row["latest_evaluation_date"])
            row["updated_at"] = self.normalize_timestamp(row["updated_at"])
            row["average_score"] = float(row["average_score"])
            row["awards"] = awards_for_rank(row["rank"])
            entries.append(TopResultEntry.model_validate(row))
        return entries
