"""
Repositories Package - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/__init__.py

Data access layer for Snowflake database operations.
"""

from cocoa_scoring.repositories.base import BaseRepository
from cocoa_scoring.repositories.contest_repository import ContestRepository
from cocoa_scoring.repositories.evaluation_repository import EvaluationRepository
from cocoa_scoring.repositories.physical_evaluation_repository import PhysicalEvaluationRepository
from cocoa_scoring.repositories.sample_repository import SampleRepository
from cocoa_scoring.repositories.top_result_repository import TopResultRepository

__all__ = [
    "BaseRepository",
    "ContestRepository",
    "EvaluationRepository",
    "PhysicalEvaluationRepository",
    "SampleRepository",
    "TopResultRepository",
]
