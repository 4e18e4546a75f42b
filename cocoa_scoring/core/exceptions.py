"""
Custom Exceptions - Cocoa Contest Scoring Engine
cocoa_scoring/core/exceptions.py

Repository exceptions plus the domain errors raised by the evaluation
write path and the ranking recompute.
"""

from typing import List, Optional


class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class EntityNotFoundException(RepositoryException):
    """Entity not found in database."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    def __init__(self, message: str = "Entity already exists"):
        self.message = message
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)


class ForeignKeyViolationException(RepositoryException):
    """Foreign key constraint violation."""

    def __init__(self, message: str = "Foreign key constraint violation"):
        self.message = message
        super().__init__(message)


class ScoringException(Exception):
    """Base exception for evaluation and ranking rules."""

    pass


class InvalidStatusTransitionException(ScoringException):
    """Sample status may only move forward; disqualified is terminal."""

    def __init__(self, sample_id: str, current: str, target: str):
        self.sample_id = sample_id
        self.current = current
        self.target = target
        super().__init__(
            f"Sample {sample_id} cannot move from '{current}' to '{target}'"
        )


class EvaluationPreconditionException(ScoringException):
    """Evaluation submitted against a sample that is not ready for it."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ContestClosedException(ScoringException):
    """Contest is not accepting new scores."""

    def __init__(self, contest_id: str, status: str):
        self.contest_id = contest_id
        self.status = status
        super().__init__(
            f"Contest {contest_id} is {status} and does not accept new scores"
        )


class CategorySchemeMismatchException(ScoringException):
    """Submitted attribute scheme does not match the sample's product category."""

    def __init__(self, category: str, scheme: str):
        self.category = category
        self.scheme = scheme
        super().__init__(
            f"Scoring scheme '{scheme}' cannot be used for '{category}' samples"
        )


class RankingRecomputeException(ScoringException):
    """Recompute failed; previously published ranks were left untouched."""

    def __init__(
        self,
        contest_id: Optional[str],
        reason: str,
        failed_contests: Optional[List[str]] = None,
    ):
        self.contest_id = contest_id
        self.reason = reason
        self.failed_contests = failed_contests or ([contest_id] if contest_id else [])
        if contest_id:
            target = f"contest {contest_id}"
        elif self.failed_contests:
            target = "contests " + ", ".join(self.failed_contests)
        else:
            target = "all contests"
        super().__init__(f"Ranking recompute failed for {target}: {reason}")
