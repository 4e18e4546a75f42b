"""
Physical Evaluation Repository - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/physical_evaluation_repository.py

At most one physical evaluation per sample (MERGE keyed on SAMPLE_ID).
"""

import json
from typing import Any, Dict, Optional

from cocoa_scoring.models.physical_evaluation import PhysicalEvaluationRecord
from cocoa_scoring.repositories.base import BaseRepository

_LIST_COLUMNS = (
    "undesirable_aromas",
    "typical_odors",
    "atypical_odors",
    "disqualification_reasons",
    "warnings",
)

_VALUE_COLUMNS = (
    "has_undesirable_aromas",
    "percentage_humidity",
    "broken_grains",
    "violated_grains",
    "flat_grains",
    "affected_grains_insects",
    "has_affected_grains",
    "well_fermented_beans",
    "lightly_fermented_beans",
    "purple_beans",
    "slaty_beans",
    "internal_moldy_beans",
    "over_fermented_beans",
    "notes",
    "evaluated_by",
    "evaluated_at",
    "global_evaluation",
)


class PhysicalEvaluationRepository(BaseRepository):
    """Repository for PhysicalEvaluation upserts and reads."""

    TABLE_NAME = "PHYSICAL_EVALUATIONS"

    def _to_model(self, row: Dict[str, Any]) -> PhysicalEvaluationRecord:
        data = self.row_to_dict(row)
        for col in _LIST_COLUMNS:
            value = data.get(col)
            data[col] = json.loads(value) if isinstance(value, str) else (value or [])
        data["evaluated_at"] = self.normalize_timestamp(data.get("evaluated_at"))
        return PhysicalEvaluationRecord.model_validate(data)

    def upsert(self, record: PhysicalEvaluationRecord) -> PhysicalEvaluationRecord:
        """
        Insert or replace the sample's physical evaluation.

        Args:
            record: Evaluation with derived global_evaluation / reasons / warnings

        Returns:
            The stored record
        """
        data = record.model_dump(mode="python")
        value_params = [
            data["global_evaluation"].value if col == "global_evaluation" else data[col]
            for col in _VALUE_COLUMNS
        ]
        list_params = [json.dumps(data[col]) for col in _LIST_COLUMNS]

        all_columns = ("sample_id",) + _VALUE_COLUMNS + _LIST_COLUMNS
        source_select = ", ".join(
            [f"%s AS {c}" for c in ("sample_id",) + _VALUE_COLUMNS]
            + [f"PARSE_JSON(%s) AS {c}" for c in _LIST_COLUMNS]
        )
        update_set = ", ".join(f"t.{c} = s.{c}" for c in all_columns[1:])
        insert_cols = ", ".join(all_columns)
        insert_vals = ", ".join(f"s.{c}" for c in all_columns)

        sql = f"""
            MERGE INTO PHYSICAL_EVALUATIONS t
            USING (SELECT {source_select}) s
            ON t.sample_id = s.sample_id
            WHEN MATCHED THEN UPDATE SET {update_set}
            WHEN NOT MATCHED THEN INSERT ({insert_cols}) VALUES ({insert_vals})
        """
        params = [record.sample_id] + value_params + list_params
        self.execute_query(sql, params, commit=True)

        return self.get_by_sample_id(record.sample_id) or record

    def get_by_sample_id(self, sample_id: str) -> Optional[PhysicalEvaluationRecord]:
        sql = f"""
            SELECT SAMPLE_ID, {", ".join(c.upper() for c in _VALUE_COLUMNS + _LIST_COLUMNS)}
            FROM PHYSICAL_EVALUATIONS
            WHERE SAMPLE_ID = %s
        """
        row = self.execute_query(sql, (sample_id,), fetch_one=True)
        return self._to_model(row) if row else None
