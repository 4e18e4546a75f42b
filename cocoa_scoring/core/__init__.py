"""
Core Package - Cocoa Contest Scoring Engine
cocoa_scoring/core/__init__.py

Core infrastructure: dependencies, exceptions, logging.

Dependencies are imported from cocoa_scoring.core.dependencies directly;
they pull in the repositories, which themselves import the exceptions here.
"""

from cocoa_scoring.core.exceptions import (
    CategorySchemeMismatchException,
    ContestClosedException,
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    EvaluationPreconditionException,
    ForeignKeyViolationException,
    InvalidStatusTransitionException,
    RankingRecomputeException,
    RepositoryException,
    ScoringException,
)

__all__ = [
    "CategorySchemeMismatchException",
    "ContestClosedException",
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "EvaluationPreconditionException",
    "ForeignKeyViolationException",
    "InvalidStatusTransitionException",
    "RankingRecomputeException",
    "RepositoryException",
    "ScoringException",
]
