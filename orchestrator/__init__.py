"""
Orchestration package for coordinating migration pipeline stages.

This package sequences the migration stages: Read -> Extract -> Convert ->
Fetch media -> Write -> Report, one published post at a time.
"""

from .migration_orchestrator import MigrationOrchestrator
from .migration_report import MigrationReport

__all__ = [
    'MigrationOrchestrator',
    'MigrationReport'
]
