"""FastAPI application package for the survey form service.

Exposes the application factory. The validation engine, pagination state
machine and form controller live in `surveyflow/logic/`; route handlers in
`surveyflow/routes/` only orchestrate them.
"""

from __future__ import annotations

from surveyflow.main import create_app

__all__ = ["create_app"]
