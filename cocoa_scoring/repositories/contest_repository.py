"""
Contest Repository - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/contest_repository.py

Contest reads and the cascading cleanup delete.
"""

from typing import Optional

import structlog

from cocoa_scoring.models.contest import Contest, ContestDeleteResponse
from cocoa_scoring.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


class ContestRepository(BaseRepository):
    """Repository for Contest reads and cleanup."""

    TABLE_NAME = "CONTESTS"

    def get_by_id(self, contest_id: str) -> Optional[Contest]:
        sql = """
            SELECT ID, NAME, START_DATE, END_DATE, LOCATION, DIRECTOR_ID
            FROM CONTESTS
            WHERE ID = %s
        """
        row = self.execute_query(sql, (contest_id,), fetch_one=True)
        if not row:
            return None
        return Contest.model_validate(self.row_to_dict(row))

    def delete_cascade(self, contest_id: str) -> ContestDeleteResponse:
        """
        Delete a contest with its samples, evaluations and published results.

        Runs in one transaction; nothing is removed if any statement fails.
        """
        sample_subquery = "SELECT ID FROM SAMPLES WHERE CONTEST_ID = %s"

        with self.transaction() as cur:
            cur.execute("DELETE FROM TOP_RESULTS WHERE CONTEST_ID = %s", (contest_id,))
            top_results = cur.rowcount or 0

            evaluations = 0
            for table in ("SENSORY_EVALUATIONS", "FINAL_EVALUATIONS"):
                cur.execute(
                    f"DELETE FROM {table} WHERE SAMPLE_ID IN ({sample_subquery})",
                    (contest_id,),
                )
                evaluations += cur.rowcount or 0

            cur.execute(
                f"DELETE FROM PHYSICAL_EVALUATIONS WHERE SAMPLE_ID IN ({sample_subquery})",
                (contest_id,),
            )
            cur.execute("DELETE FROM SAMPLES WHERE CONTEST_ID = %s", (contest_id,))
            samples = cur.rowcount or 0

            cur.execute("DELETE FROM CONTESTS WHERE ID = %s", (contest_id,))

        logger.info(
            "contest_deleted",
            contest_id=contest_id,
            samples_deleted=samples,
            evaluations_deleted=evaluations,
            top_results_deleted=top_results,
        )

        return ContestDeleteResponse(
            contest_id=contest_id,
            samples_deleted=samples,
            evaluations_deleted=evaluations,
            top_results_deleted=top_results,
        )
