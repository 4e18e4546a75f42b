"""
Samples Router - Cocoa Contest Scoring Engine
cocoa_scoring/routers/samples.py

Physical screening, director approval and judge evaluations of a sample.

Endpoints:
  PUT    /api/v1/samples/{sample_id}/physical-evaluation
  GET    /api/v1/samples/{sample_id}/physical-evaluation
  POST   /api/v1/samples/{sample_id}/approve
  PUT    /api/v1/samples/{sample_id}/evaluations/{judge_id}?stage=
  DELETE /api/v1/samples/{sample_id}/evaluations/{judge_id}?stage=
"""

from fastapi import APIRouter, Depends, Query, status

from cocoa_scoring.core.dependencies import get_evaluation_service, get_physical_service
from cocoa_scoring.core.exceptions import RepositoryException, ScoringException
from cocoa_scoring.models.enumerations import EvaluationStage
from cocoa_scoring.models.evaluation import EvaluationResponse, EvaluationSubmission
from cocoa_scoring.models.physical_evaluation import (
    PhysicalEvaluationResponse,
    PhysicalEvaluationSubmission,
)
from cocoa_scoring.models.sample import Sample
from cocoa_scoring.routers.errors import raise_for_domain_error
from cocoa_scoring.services.evaluation_service import EvaluationService
from cocoa_scoring.services.physical_service import PhysicalEvaluationService

router = APIRouter(prefix="/api/v1/samples", tags=["Samples"])


#  Physical Evaluation


@router.put(
    "/{sample_id}/physical-evaluation",
    response_model=PhysicalEvaluationResponse,
    summary="Submit physical evaluation",
    description=(
        "Runs the physical rule engine. A failing sample is disqualified "
        "(terminal); a passing sample moves to physical_evaluation and waits "
        "for director approval."
    ),
)
async def submit_physical_evaluation(
    sample_id: str,
    submission: PhysicalEvaluationSubmission,
    service: PhysicalEvaluationService = Depends(get_physical_service),
) -> PhysicalEvaluationResponse:
    try:
        return service.submit(sample_id, submission)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)


@router.get(
    "/{sample_id}/physical-evaluation",
    response_model=PhysicalEvaluationResponse,
    summary="Get physical evaluation",
)
async def get_physical_evaluation(
    sample_id: str,
    service: PhysicalEvaluationService = Depends(get_physical_service),
) -> PhysicalEvaluationResponse:
    try:
        return service.get(sample_id)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)


@router.post(
    "/{sample_id}/approve",
    response_model=Sample,
    summary="Approve sample for judging",
    description="Director approval after a passed physical evaluation.",
)
async def approve_sample(
    sample_id: str,
    service: PhysicalEvaluationService = Depends(get_physical_service),
) -> Sample:
    try:
        return service.approve(sample_id)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)


#  Judge Evaluations


@router.put(
    "/{sample_id}/evaluations/{judge_id}",
    response_model=EvaluationResponse,
    summary="Submit sensory or final evaluation",
    description=(
        "Insert or replace a judge's evaluation of the sample. The contest "
        "ranking for the stage is recomputed before the response is returned."
    ),
)
async def submit_evaluation(
    sample_id: str,
    judge_id: str,
    submission: EvaluationSubmission,
    stage: EvaluationStage = Query(EvaluationStage.SENSORY, description="sensory or final"),
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationResponse:
    try:
        return service.submit(sample_id, judge_id, stage, submission)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)


@router.delete(
    "/{sample_id}/evaluations/{judge_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an evaluation",
)
async def delete_evaluation(
    sample_id: str,
    judge_id: str,
    stage: EvaluationStage = Query(EvaluationStage.SENSORY, description="sensory or final"),
    service: EvaluationService = Depends(get_evaluation_service),
) -> None:
    try:
        service.delete(sample_id, judge_id, stage)
    except (ScoringException, RepositoryException) as e:
        raise_for_domain_error(e)
