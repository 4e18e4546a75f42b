# tests/conftest.py

"""
Pytest Fixtures - Shared test configurations and data for models, services and APIs

In-memory repositories stand in for Snowflake. API tests swap them in through
app.dependency_overrides, so no database or Redis is needed.

FIXTURE ID REFERENCE:
- Contests: c0000000-... (active), c0000000-...-000000000002 (upcoming)
- Samples:  s1 (bean), s2 (liquor), s3 (chocolate) in the active contest
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from cocoa_scoring.core.dependencies import (
    get_contest_repository,
    get_evaluation_repository,
    get_physical_evaluation_repository,
    get_results_cache,
    get_sample_repository,
    get_top_result_repository,
)
from cocoa_scoring.core.exceptions import RepositoryException
from cocoa_scoring.main import app
from cocoa_scoring.models.contest import Contest, ContestDeleteResponse
from cocoa_scoring.models.enumerations import (
    EvaluationStage,
    ProductCategory,
    SampleStatus,
    Verdict,
)
from cocoa_scoring.models.evaluation import EvaluationRecord
from cocoa_scoring.models.physical_evaluation import PhysicalEvaluationRecord
from cocoa_scoring.models.result import TopResult, TopResultEntry
from cocoa_scoring.models.sample import Sample
from cocoa_scoring.scoring.ranking import ScoredEvaluation, awards_for_rank


ACTIVE_CONTEST_ID = "c0000000-0000-0000-0000-000000000001"
UPCOMING_CONTEST_ID = "c0000000-0000-0000-0000-000000000002"


# =============================================================================
# IN-MEMORY REPOSITORIES
# =============================================================================

class FakeSampleRepository:
    def __init__(self):
        self.samples: Dict[str, Sample] = {}

    def add(self, sample: Sample) -> Sample:
        self.samples[sample.id] = sample
        return sample

    def get_by_id(self, sample_id: str) -> Optional[Sample]:
        return self.samples.get(sample_id)

    def in_contest(self, contest_id: str) -> List[Sample]:
        return [s for s in self.samples.values() if s.contest_id == contest_id]

    def update_status(self, sample_id: str, status: SampleStatus) -> Optional[Sample]:
        sample = self.samples[sample_id].model_copy(
            update={"status": SampleStatus(status), "updated_at": datetime.now(timezone.utc)}
        )
        self.samples[sample_id] = sample
        return sample

    def status_counts(self, contest_id: Optional[str] = None) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for s in self.samples.values():
            if contest_id and s.contest_id != contest_id:
                continue
            counts[s.status.value] = counts.get(s.status.value, 0) + 1
        return counts


class FakePhysicalEvaluationRepository:
    def __init__(self):
        self.records: Dict[str, PhysicalEvaluationRecord] = {}

    def upsert(self, record: PhysicalEvaluationRecord) -> PhysicalEvaluationRecord:
        self.records[record.sample_id] = record
        return record

    def get_by_sample_id(self, sample_id: str) -> Optional[PhysicalEvaluationRecord]:
        return self.records.get(sample_id)


class FakeEvaluationRepository:
    def __init__(self):
        self.rows: Dict[Tuple[str, str, str], EvaluationRecord] = {}

    def upsert(self, record: EvaluationRecord) -> EvaluationRecord:
        key = (record.stage.value, record.sample_id, record.judge_id)
        existing = self.rows.get(key)
        if existing:
            record = record.model_copy(update={"id": existing.id})
        self.rows[key] = record
        return record

    def get(self, sample_id: str, judge_id: str, stage: EvaluationStage) -> Optional[EvaluationRecord]:
        return self.rows.get((EvaluationStage(stage).value, sample_id, judge_id))

    def rows_for_sample(self, sample_id: str, stage: EvaluationStage) -> List[EvaluationRecord]:
        stage = EvaluationStage(stage).value
        return sorted(
            (r for (st, sid, _), r in self.rows.items() if st == stage and sid == sample_id),
            key=lambda r: r.evaluated_at,
        )

    def delete(self, sample_id: str, judge_id: str, stage: EvaluationStage) -> bool:
        return self.rows.pop((EvaluationStage(stage).value, sample_id, judge_id), None) is not None

    def list_scored_by_contest(self, contest_id: str, stage: EvaluationStage) -> List[ScoredEvaluation]:
        return [e for e in self.list_scored(stage) if e.contest_id == contest_id]

    def list_scored(self, stage: EvaluationStage) -> List[ScoredEvaluation]:
        stage = EvaluationStage(stage).value
        return [
            ScoredEvaluation(
                id=r.id,
                sample_id=r.sample_id,
                contest_id=r.contest_id,
                overall_quality=r.overall_quality,
                evaluated_at=r.evaluated_at,
                verdict=r.verdict,
            )
            for (st, _, _), r in self.rows.items()
            if st == stage and r.verdict == Verdict.APPROVED
        ]


class FakeTopResultRepository:
    def __init__(self, samples: FakeSampleRepository):
        self.samples = samples
        self.rows: Dict[Tuple[str, str], List[TopResult]] = {}
        self.fail = False
        self.fail_contests: Set[str] = set()
        self.replace_calls = 0

    def replace_for_contest(self, contest_id: str, stage: EvaluationStage, results: List[TopResult]) -> int:
        self.replace_calls += 1
        if self.fail or contest_id in self.fail_contests:
            raise RepositoryException("Database error: simulated outage")
        self.rows[(contest_id, EvaluationStage(stage).value)] = list(results)
        return len(results)

    def get_top(self, contest_id: str, stage: EvaluationStage, limit: int) -> List[TopResultEntry]:
        rows = sorted(self.rows.get((contest_id, EvaluationStage(stage).value), []), key=lambda r: r.rank)
        return self._entries(rows[:limit])

    def get_top_all(self, stage: EvaluationStage, limit: int) -> List[TopResultEntry]:
        stage = EvaluationStage(stage).value
        rows = [r for (cid, st), rs in self.rows.items() if st == stage for r in rs if r.rank <= limit]
        return self._entries(sorted(rows, key=lambda r: (r.contest_id, r.rank)))

    def published_contests(self, stage: EvaluationStage) -> List[str]:
        stage = EvaluationStage(stage).value
        return [cid for (cid, st), rs in self.rows.items() if st == stage and rs]

    def _entries(self, rows: List[TopResult]) -> List[TopResultEntry]:
        entries = []
        for r in rows:
            sample = self.samples.get_by_id(r.sample_id)
            entries.append(
                TopResultEntry(
                    **r.model_dump(),
                    tracking_code=sample.tracking_code if sample else None,
                    category=sample.category.value if sample else None,
                    awards=awards_for_rank(r.rank),
                )
            )
        return entries


class FakeContestRepository:
    def __init__(self, samples, evaluations, physical, top_results):
        self.contests: Dict[str, Contest] = {}
        self.samples = samples
        self.evaluations = evaluations
        self.physical = physical
        self.top_results = top_results

    def add(self, contest: Contest) -> Contest:
        self.contests[contest.id] = contest
        return contest

    def get_by_id(self, contest_id: str) -> Optional[Contest]:
        return self.contests.get(contest_id)

    def delete_cascade(self, contest_id: str) -> ContestDeleteResponse:
        sample_ids = {s.id for s in self.samples.in_contest(contest_id)}
        eval_keys = [k for k in self.evaluations.rows if k[1] in sample_ids]
        for k in eval_keys:
            del self.evaluations.rows[k]
        for sid in sample_ids:
            self.physical.records.pop(sid, None)
            del self.samples.samples[sid]
        top_keys = [k for k in self.top_results.rows if k[0] == contest_id]
        top_count = sum(len(self.top_results.rows.pop(k)) for k in top_keys)
        self.contests.pop(contest_id, None)
        return ContestDeleteResponse(
            contest_id=contest_id,
            samples_deleted=len(sample_ids),
            evaluations_deleted=len(eval_keys),
            top_results_deleted=top_count,
        )


class FakeStore:
    """All in-memory repositories wired together."""

    def __init__(self):
        self.samples = FakeSampleRepository()
        self.physical = FakePhysicalEvaluationRepository()
        self.evaluations = FakeEvaluationRepository()
        self.top_results = FakeTopResultRepository(self.samples)
        self.contests = FakeContestRepository(
            self.samples, self.evaluations, self.physical, self.top_results
        )


# =============================================================================
# DATA FIXTURES
# =============================================================================

def make_sample(
    sample_id: str,
    category: ProductCategory = ProductCategory.BEAN,
    status: SampleStatus = SampleStatus.RECEIVED,
    contest_id: str = ACTIVE_CONTEST_ID,
) -> Sample:
    return Sample(
        id=sample_id,
        contest_id=contest_id,
        owner_id="owner-1",
        tracking_code=f"TRK-{sample_id.upper()}",
        category=category,
        status=status,
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def today() -> date:
    return datetime.now(timezone.utc).date()


@pytest.fixture
def store(today) -> FakeStore:
    """Store seeded with one active and one upcoming contest plus three samples."""
    s = FakeStore()
    s.contests.add(
        Contest(
            id=ACTIVE_CONTEST_ID,
            name="National Cocoa Quality Contest",
            start_date=today - timedelta(days=3),
            end_date=today + timedelta(days=3),
            location="Bogota",
        )
    )
    s.contests.add(
        Contest(
            id=UPCOMING_CONTEST_ID,
            name="Regional Chocolate Awards",
            start_date=today + timedelta(days=10),
            end_date=today + timedelta(days=12),
        )
    )
    s.samples.add(make_sample("s1", ProductCategory.BEAN))
    s.samples.add(make_sample("s2", ProductCategory.LIQUOR))
    s.samples.add(make_sample("s3", ProductCategory.CHOCOLATE))
    return s


@pytest.fixture
def client(store):
    """TestClient with every repository replaced by the in-memory store."""
    app.dependency_overrides[get_sample_repository] = lambda: store.samples
    app.dependency_overrides[get_contest_repository] = lambda: store.contests
    app.dependency_overrides[get_physical_evaluation_repository] = lambda: store.physical
    app.dependency_overrides[get_evaluation_repository] = lambda: store.evaluations
    app.dependency_overrides[get_top_result_repository] = lambda: store.top_results
    app.dependency_overrides[get_results_cache] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def passing_physical() -> dict:
    """Physical measurements that pass every rule without warnings."""
    return {
        "percentage_humidity": 7.0,
        "broken_grains": 2.0,
        "flat_grains": 5.0,
        "affected_grains_insects": 0,
        "well_fermented_beans": 70.0,
        "lightly_fermented_beans": 20.0,
        "purple_beans": 5.0,
        "slaty_beans": 0.0,
        "internal_moldy_beans": 0.0,
        "over_fermented_beans": 0.0,
        "evaluated_by": "lab-tech-1",
    }


@pytest.fixture
def chocolate_attributes() -> dict:
    """Chocolate sheet with every scored attribute at 8."""
    return {
        "scheme": "chocolate",
        "appearance": {"color": 8, "gloss": 8, "surface_homogeneity": 8},
        "aroma": {"aroma_intensity": 8, "aroma_quality": 8, "specific_notes": {"floral": 3}},
        "texture": {"smoothness": 8, "melting": 8, "body": 8},
        "flavor": {"sweetness": 8, "bitterness": 8, "acidity": 8, "flavor_intensity": 8},
        "aftertaste": {"persistence": 8, "aftertaste_quality": 8, "final_balance": 8},
    }


def cocoa_attributes(overall: float) -> dict:
    return {
        "scheme": "cocoa",
        "overall_quality": overall,
        "cacao": 7,
        "bitterness": 4,
        "astringency": 3,
        "fresh_fruit": {"berries": 2, "citrus": 5},
        "defects": {"moldy": 1},
    }


@pytest.fixture
def cocoa_attributes_factory():
    return cocoa_attributes
