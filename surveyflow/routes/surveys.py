"""Routes for registering survey configurations and option catalogs.

Configuration and catalog persistence live elsewhere; these endpoints accept
the loaded documents and keep them in the in-memory registries that open forms
read from.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from surveyflow.logic import inmemory_state
from surveyflow.logic.events import report_error
from surveyflow.logic.problem_factory import (
    problem_storage_unavailable,
    problem_survey_config_invalid,
    problem_survey_not_found,
)
from surveyflow.logic.repository_responses import list_survey_responses
from surveyflow.models.catalogs import CatalogLists
from surveyflow.models.survey import SurveyConfig

router = APIRouter()
logger = logging.getLogger(__name__)


@router.put("/surveys/{survey_id}", summary="Register a survey configuration")
def put_survey(survey_id: str, config: SurveyConfig):
    if config.id != survey_id:
        raise HTTPException(
            status_code=422,
            detail=problem_survey_config_invalid(f"body id {config.id} does not match path id {survey_id}"),
        )
    inmemory_state.SURVEY_CONFIGS[survey_id] = config
    field_count = sum(
        len(s.fields) + sum(len(sub.fields) for sub in s.subsections) for s in config.sections
    )
    logger.info("survey_registered survey_id=%s sections=%s fields=%s", survey_id, len(config.sections), field_count)
    return {"survey_id": survey_id, "sections": len(config.sections), "fields": field_count}


@router.get("/surveys/{survey_id}", summary="Get a registered survey configuration")
def get_survey(survey_id: str):
    config = inmemory_state.SURVEY_CONFIGS.get(survey_id)
    if config is None:
        raise HTTPException(status_code=404, detail=problem_survey_not_found(survey_id))
    return config.model_dump(by_alias=True)


@router.put("/catalogs", summary="Load or replace option catalogs")
def put_catalogs(lists: CatalogLists):
    """Replace the catalogs and fill newly available defaults in open forms."""
    lookups = inmemory_state.CATALOGS.project(lists)
    refreshed = 0
    # Snapshot: forms may be opened or closed by other requests meanwhile
    for open_form in list(inmemory_state.OPEN_FORMS.values()):
        with open_form.lock:
            if open_form.controller.lookups is not lookups:
                open_form.controller.attach_catalogs(lookups)
                refreshed += 1
    return {
        "rating_scales": len(lookups.rating_scales),
        "radio_option_sets": len(lookups.radio_option_sets),
        "select_option_sets": len(lookups.select_option_sets),
        "multi_select_option_sets": len(lookups.multi_select_option_sets),
        "forms_refreshed": refreshed,
    }


@router.get("/surveys/{survey_id}/responses", summary="List stored responses for a survey")
def get_survey_responses(survey_id: str):
    if survey_id not in inmemory_state.SURVEY_CONFIGS:
        raise HTTPException(status_code=404, detail=problem_survey_not_found(survey_id))
    try:
        items = list_survey_responses(survey_id)
    except SQLAlchemyError as exc:
        report_error("list_responses_failed", exc, survey_id=survey_id)
        raise HTTPException(
            status_code=503, detail=problem_storage_unavailable("response store is unavailable")
        ) from exc
    return {"items": items}


__all__ = ["router", "put_survey", "get_survey", "put_catalogs", "get_survey_responses"]
