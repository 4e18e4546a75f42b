"""
Error Handling - Cocoa Contest Scoring Engine
cocoa_scoring/routers/errors.py

Validation error messages, the RequestValidationError handler and the
mapping from domain exceptions to HTTP error responses.
"""

from datetime import datetime, timezone
from typing import NoReturn

import structlog
from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from cocoa_scoring.core.exceptions import (
    CategorySchemeMismatchException,
    ContestClosedException,
    DatabaseConnectionException,
    EntityNotFoundException,
    EvaluationPreconditionException,
    InvalidStatusTransitionException,
    RankingRecomputeException,
    RepositoryException,
)
from cocoa_scoring.models.result import ErrorResponse

logger = structlog.get_logger(__name__)


#  Validation Error Messages


FIELD_MESSAGES = {
    "percentage_humidity": {
        "missing": "Humidity percentage is required",
        "less_than_equal": "Humidity percentage must be between 0 and 100",
        "greater_than_equal": "Humidity percentage must be between 0 and 100",
    },
    "attributes": {
        "missing": "Evaluation attributes are required",
        "union_tag_invalid": "Attribute scheme must be 'chocolate' or 'cocoa'",
        "union_tag_not_found": "Attribute scheme is required ('chocolate' or 'cocoa')",
    },
    "attributes.cocoa.overall_quality": {
        "missing": "Overall quality is required for cocoa evaluations",
    },
    "verdict": {
        "enum": "Verdict must be 'Approved' or 'Disqualified'",
    },
    "stage": {
        "enum": "Stage must be 'sensory' or 'final'",
    },
    "limit": {
        "less_than_equal": "Limit exceeds the maximum number of results",
        "greater_than_equal": "Limit must be at least 1",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "less_than_equal": "Field '{field}' exceeds maximum allowed value",
    "greater_than_equal": "Field '{field}' is below minimum allowed value",
    "string_type": "Field '{field}' must be a string",
    "float_type": "Field '{field}' must be a number",
    "float_parsing": "Field '{field}' must be a valid number",
    "int_type": "Field '{field}' must be an integer",
    "int_parsing": "Field '{field}' must be a valid integer",
    "bool_type": "Field '{field}' must be a boolean",
    "bool_parsing": "Field '{field}' must be a boolean",
    "datetime": "Field '{field}' must be a valid ISO-8601 timestamp",
    "enum": "Field '{field}' has an unsupported value",
    "json_invalid": "Malformed JSON request body",
    "extra_forbidden": "Unknown field '{field}' is not allowed",
    "value_error": "Field '{field}' is invalid",
}


def get_validation_message(field: str, error_type: str) -> str:
    if field in FIELD_MESSAGES:
        for key in FIELD_MESSAGES[field]:
            if key in error_type:
                return FIELD_MESSAGES[field][key]
    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)
    return f"Invalid value for field '{field}'"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error_code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])
    if "json_invalid" in error_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error_code": "INVALID_REQUEST",
                "message": "Malformed JSON request body",
                "details": None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
    field = ".".join(str(l) for l in loc if l not in ("body", "query", "path"))
    message = get_validation_message(field, error_type)
    if error_type == "value_error" and err.get("msg"):
        message = str(err["msg"]).replace("Value error, ", "")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "VALIDATION_ERROR",
            "message": message,
            "details": {"field": field, "type": error_type} if field else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


#  Exception Helpers


def raise_error(status_code: int, error_code: str, message: str, details: dict = None) -> NoReturn:
    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error_code=error_code, message=message, details=details
        ).model_dump(mode="json"),
    )


def raise_not_found(entity: str, message: str) -> NoReturn:
    raise_error(status.HTTP_404_NOT_FOUND, f"{entity.upper()}_NOT_FOUND", message)


def raise_for_domain_error(e: Exception) -> NoReturn:
    """Translate a service-layer exception into an HTTP error response."""
    if isinstance(e, EntityNotFoundException):
        entity = "".join(
            f"_{c}" if c.isupper() and i else c for i, c in enumerate(e.entity_type)
        )
        raise_not_found(entity, str(e))
    if isinstance(e, InvalidStatusTransitionException):
        raise_error(
            status.HTTP_409_CONFLICT,
            "INVALID_STATUS_TRANSITION",
            str(e),
            {"current": e.current, "target": e.target},
        )
    if isinstance(e, ContestClosedException):
        raise_error(
            status.HTTP_409_CONFLICT,
            "CONTEST_NOT_ACTIVE",
            str(e),
            {"status": e.status},
        )
    if isinstance(e, CategorySchemeMismatchException):
        raise_error(
            status.HTTP_400_BAD_REQUEST,
            "SCHEME_MISMATCH",
            str(e),
            {"category": e.category, "scheme": e.scheme},
        )
    if isinstance(e, EvaluationPreconditionException):
        raise_error(status.HTTP_400_BAD_REQUEST, "PRECONDITION_FAILED", str(e))
    if isinstance(e, RankingRecomputeException):
        raise_error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "RECOMPUTE_FAILED",
            "Ranking recompute failed; retry the request",
            {"contest_id": e.contest_id, "failed_contests": e.failed_contests},
        )
    if isinstance(e, DatabaseConnectionException):
        raise_error(status.HTTP_503_SERVICE_UNAVAILABLE, "DATABASE_UNAVAILABLE", str(e))
    if isinstance(e, RepositoryException):
        logger.error("repository_error", error=str(e))
        raise_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", "Database operation failed")
    raise e
