"""
Operations Layer

This package provides the data-entry boundary: business logic operations that
validate input, enforce the arena's storage invariants and insert records.

Architecture:
- Database layer: Pure data access and record loading
- Operations layer: Validation, invariants and multi-step inserts
- Services layer: Fetch a cycle's records and run the pure scoring core
- Command layer: Discord integration and user interface

Each operations module focuses on a specific domain:
- PlayerOperations: Player registration and admin edits
- CycleOperations: Competition cycle lifecycle (exactly one active)
- SubmissionOperations: Player-facing check-ins and achievement submissions
- AdminOperations: Admin-only point entry (presentations, activities, penalties, awards)
"""

from .base import BaseOperations
from .player_operations import PlayerOperations
from .cycle_operations import CycleOperations
from .submission_operations import SubmissionOperations
from .admin_operations import AdminOperations

__all__ = [
    'BaseOperations', 'PlayerOperations', 'CycleOperations',
    'SubmissionOperations', 'AdminOperations'
]
