"""APIRouter registration for the survey form service."""

from __future__ import annotations

from fastapi import APIRouter

from surveyflow.routes.forms import router as forms_router
from surveyflow.routes.surveys import router as surveys_router

api_router = APIRouter()
api_router.include_router(surveys_router, tags=["Surveys", "Catalogs"])
api_router.include_router(forms_router, tags=["Forms"])

__all__ = ["api_router"]
