"""
Sample Repository - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/sample_repository.py

Data access layer for contest samples.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from cocoa_scoring.models.enumerations import SampleStatus
from cocoa_scoring.models.sample import Sample
from cocoa_scoring.repositories.base import BaseRepository

_COLUMNS = """
    ID, CONTEST_ID, OWNER_ID, TRACKING_CODE, CATEGORY, STATUS, CREATED_AT, UPDATED_AT
"""


class SampleRepository(BaseRepository):
    """Repository for Sample reads and status updates."""

    TABLE_NAME = "SAMPLES"

    def _to_model(self, row: Dict[str, Any]) -> Sample:
        data = self.row_to_dict(row)
        data["created_at"] = self.normalize_timestamp(data.get("created_at"))
        data["updated_at"] = self.normalize_timestamp(data.get("updated_at"))
        return Sample.model_validate(data)

    def get_by_id(self, sample_id: str) -> Optional[Sample]:
        """
        Retrieve a sample by ID.

        Args:
            sample_id: Sample identifier

        Returns:
            Sample or None if not found
        """
        sql = f"SELECT {_COLUMNS} FROM SAMPLES WHERE ID = %s"
        row = self.execute_query(sql, (sample_id,), fetch_one=True)
        return self._to_model(row) if row else None

    def update_status(self, sample_id: str, status: SampleStatus) -> Optional[Sample]:
        """Set the sample status; callers validate the transition first."""
        sql = """
            UPDATE SAMPLES
            SET STATUS = %s, UPDATED_AT = %s
            WHERE ID = %s
        """
        self.execute_query(
            sql,
            (SampleStatus(status).value, datetime.now(timezone.utc), sample_id),
            commit=True,
        )
        return self.get_by_id(sample_id)

    def status_counts(self, contest_id: Optional[str] = None) -> Dict[str, int]:
        """Number of samples per status, optionally for one contest."""
        sql = "SELECT STATUS, COUNT(*) AS N FROM SAMPLES"
        params: tuple = ()
        if contest_id:
            sql += " WHERE CONTEST_ID = %s"
            params = (contest_id,)
        sql += " GROUP BY STATUS"

        rows = self.execute_query(sql, params, fetch_all=True) or []
        return {r["status"]: int(r["n"]) for r in self.rows_to_dicts(rows)}
