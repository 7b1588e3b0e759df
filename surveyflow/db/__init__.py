"""Database bootstrap utilities for the survey form service.

Exposes engine construction and a migrations runner that applies SQL files
from the project's migrations/ directory. The DB layer only backs the session
and response collaborators; the form engine itself never touches it.
"""

from surveyflow.db.base import dispose_engine, get_engine
from surveyflow.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "dispose_engine",
    "apply_migrations",
]
