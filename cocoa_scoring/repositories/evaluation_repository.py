"""
Evaluation Repository - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/evaluation_repository.py

Sensory and final judge evaluations. Each stage has its own table; within a
table there is at most one row per (SAMPLE_ID, JUDGE_ID), declared UNIQUE
and guaranteed by writing through MERGE.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter

from cocoa_scoring.models.enumerations import EvaluationStage, Verdict
from cocoa_scoring.models.evaluation import EvaluationAttributes, EvaluationRecord
from cocoa_scoring.repositories.base import BaseRepository
from cocoa_scoring.scoring.ranking import ScoredEvaluation

STAGE_TABLES: Dict[EvaluationStage, str] = {
    EvaluationStage.SENSORY: "SENSORY_EVALUATIONS",
    EvaluationStage.FINAL: "FINAL_EVALUATIONS",
}

_attributes_adapter = TypeAdapter(EvaluationAttributes)

_COLUMNS = """
    ID, SAMPLE_ID, CONTEST_ID, JUDGE_ID, SCHEME, OVERALL_QUALITY, VERDICT,
    DISQUALIFICATION_REASONS, ATTRIBUTES, FLAVOR_COMMENTS,
    PRODUCER_RECOMMENDATIONS, ADDITIONAL_POSITIVE, EVALUATED_AT, UPDATED_AT
"""


def table_for(stage: EvaluationStage) -> str:
    return STAGE_TABLES[EvaluationStage(stage)]


class EvaluationRepository(BaseRepository):
    """Repository for sensory / final evaluation upserts and reads."""

    def _to_model(self, row: Dict[str, Any], stage: EvaluationStage) -> EvaluationRecord:
        data = self.row_to_dict(row)
        attributes = data.get("attributes")
        data["attributes"] = (
            _attributes_adapter.validate_json(attributes)
            if isinstance(attributes, str)
            else _attributes_adapter.validate_python(attributes)
        )
        reasons = data.get("disqualification_reasons")
        data["disqualification_reasons"] = (
            json.loads(reasons) if isinstance(reasons, str) else (reasons or [])
        )
        data["evaluated_at"] = self.normalize_timestamp(data.get("evaluated_at"))
        data["updated_at"] = self.normalize_timestamp(data.get("updated_at"))
        data["stage"] = EvaluationStage(stage)
        return EvaluationRecord.model_validate(data)

    def upsert(self, record: EvaluationRecord) -> EvaluationRecord:
        """
        Insert or replace the judge's evaluation of a sample.

        A second submission by the same judge overwrites the first; the row
        keeps its original ID.

        Args:
            record: Evaluation with overall_quality already derived

        Returns:
            The stored record
        """
        table = table_for(record.stage)
        sql = f"""
            MERGE INTO {table} t
            USING (
                SELECT %s AS id, %s AS sample_id, %s AS contest_id, %s AS judge_id,
                       %s AS scheme, %s AS overall_quality, %s AS verdict,
                       PARSE_JSON(%s) AS disqualification_reasons,
                       PARSE_JSON(%s) AS attributes,
                       %s AS flavor_comments, %s AS producer_recommendations,
                       %s AS additional_positive, %s AS evaluated_at, %s AS updated_at
            ) s
            ON t.sample_id = s.sample_id AND t.judge_id = s.judge_id
            WHEN MATCHED THEN UPDATE SET
                scheme = s.scheme,
                overall_quality = s.overall_quality,
                verdict = s.verdict,
                disqualification_reasons = s.disqualification_reasons,
                attributes = s.attributes,
                flavor_comments = s.flavor_comments,
                producer_recommendations = s.producer_recommendations,
                additional_positive = s.additional_positive,
                evaluated_at = s.evaluated_at,
                updated_at = s.updated_at
            WHEN NOT MATCHED THEN INSERT (
                id, sample_id, contest_id, judge_id, scheme, overall_quality, verdict,
                disqualification_reasons, attributes, flavor_comments,
                producer_recommendations, additional_positive, evaluated_at, updated_at
            ) VALUES (
                s.id, s.sample_id, s.contest_id, s.judge_id, s.scheme, s.overall_quality,
                s.verdict, s.disqualification_reasons, s.attributes, s.flavor_comments,
                s.producer_recommendations, s.additional_positive, s.evaluated_at, s.updated_at
            )
        """
        params = (
            record.id,
            record.sample_id,
            record.contest_id,
            record.judge_id,
            record.scheme.value,
            record.overall_quality,
            record.verdict.value,
            json.dumps(record.disqualification_reasons),
            _attributes_adapter.dump_json(record.attributes).decode(),
            record.flavor_comments,
            record.producer_recommendations,
            record.additional_positive,
            record.evaluated_at,
            record.updated_at,
        )
        self.execute_query(sql, params, commit=True)

        return self.get(record.sample_id, record.judge_id, record.stage) or record

    def get(
        self, sample_id: str, judge_id: str, stage: EvaluationStage
    ) -> Optional[EvaluationRecord]:
        sql = f"""
            SELECT {_COLUMNS}
            FROM {table_for(stage)}
            WHERE SAMPLE_ID = %s AND JUDGE_ID = %s
        """
        row = self.execute_query(sql, (sample_id, judge_id), fetch_one=True)
        return self._to_model(row, stage) if row else None

    def delete(self, sample_id: str, judge_id: str, stage: EvaluationStage) -> bool:
        sql = f"DELETE FROM {table_for(stage)} WHERE SAMPLE_ID = %s AND JUDGE_ID = %s"
        deleted = self.execute_query(sql, (sample_id, judge_id), commit=True)
        return bool(deleted)

    def list_scored_by_contest(
        self, contest_id: str, stage: EvaluationStage
    ) -> List[ScoredEvaluation]:
        """Approved, scored evaluations of one contest for ranking."""
        return self._list_scored(stage, contest_id)

    def list_scored(self, stage: EvaluationStage) -> List[ScoredEvaluation]:
        """Approved, scored evaluations of every contest for the all-contests recompute."""
        return self._list_scored(stage)

    def _list_scored(
        self, stage: EvaluationStage, contest_id: Optional[str] = None
    ) -> List[ScoredEvaluation]:
        sql = f"""
            SELECT ID, SAMPLE_ID, CONTEST_ID, OVERALL_QUALITY, EVALUATED_AT, VERDICT
            FROM {table_for(stage)}
            WHERE VERDICT = %s
              AND OVERALL_QUALITY IS NOT NULL
        """
        params: tuple = (Verdict.APPROVED.value,)
        if contest_id:
            sql += " AND CONTEST_ID = %s"
            params += (contest_id,)

        rows = self.execute_query(sql, params, fetch_all=True) or []
        return [
            ScoredEvaluation(
                id=r["id"],
                sample_id=r["sample_id"],
                contest_id=r["contest_id"],
                overall_quality=float(r["overall_quality"]),
                evaluated_at=self.normalize_timestamp(r["evaluated_at"]),
                verdict=Verdict(r["verdict"]),
            )
            for r in self.rows_to_dicts(rows)
        ]
