"""
Repository classes for database operations.

Each repository handles CRUD and aggregate queries for its entity type.
"""

from .tracking import TrackingRepository, get_tracking_repository
from .solves import SolvedProblemRepository, get_solved_problem_repository

__all__ = [
    "TrackingRepository",
    "get_tracking_repository",
    "SolvedProblemRepository",
    "get_solved_problem_repository",
]
