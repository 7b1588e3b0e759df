"""Routes driving one respondent's form-filling session.

Handlers stay orchestration-only: they resolve the open form, call the form
controller, save session progress as a best-effort side effect, and return
the outcome together with a fresh form snapshot.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError

from surveyflow.config import load_config
from surveyflow.logic import inmemory_state, repository_sessions
from surveyflow.logic.errors import SurveyConfigError, UnknownFieldError
from surveyflow.logic.events import report_error
from surveyflow.logic.form_controller import SurveyFormController
from surveyflow.logic.problem_factory import (
    problem_field_not_found,
    problem_form_not_found,
    problem_survey_config_invalid,
    problem_survey_not_found,
)
from surveyflow.logic.repository_responses import insert_survey_response
from surveyflow.logic.restoration import AnswerRestorer
from surveyflow.models.requests import FieldChangeRequest, OpenFormRequest
from surveyflow.models.survey import SurveyConfig

router = APIRouter()
logger = logging.getLogger(__name__)


def _open_form_or_404(form_id: str) -> inmemory_state.OpenForm:
    open_form = inmemory_state.OPEN_FORMS.get(form_id)
    if open_form is None:
        raise HTTPException(status_code=404, detail=problem_form_not_found(form_id))
    open_form.touch()
    return open_form


def _build_controller(config: SurveyConfig) -> SurveyFormController:
    cfg = load_config()
    allow_back: Optional[bool] = None
    if "allow_back_navigation" not in config.paginator_config.model_fields_set:
        allow_back = cfg.forms.allow_back_navigation_default
    descriptive: Optional[bool] = None
    if "use_descriptive_ids" not in config.model_fields_set:
        descriptive = cfg.forms.use_descriptive_ids
    return SurveyFormController(
        config,
        inmemory_state.CATALOGS.lookups,
        allow_back_navigation=allow_back,
        use_descriptive_ids=descriptive,
    )


def _save_progress(form_id: str, open_form: inmemory_state.OpenForm) -> None:
    if not open_form.session_id:
        return
    controller = open_form.controller
    try:
        repository_sessions.save_progress(
            open_form.session_id,
            controller.form_data,
            controller.paginator.current_section_index,
        )
    except SQLAlchemyError as exc:
        report_error("session_save_failed", exc, form_id=form_id, session_id=open_form.session_id)


def _envelope(form_id: str, open_form: inmemory_state.OpenForm, outcome: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "form": open_form.controller.snapshot(form_id, open_form.session_id).model_dump(),
    }
    if outcome is not None:
        body["outcome"] = outcome.model_dump()
    return body


@router.post("/forms", status_code=201, summary="Open a form-filling session")
def open_form(payload: OpenFormRequest):
    """Open a form for a registered survey.

    With a `session_id`, previously saved answers and page are restored once.
    Without one, a new session is started when sessions are enabled. Session
    storage failures never block the form; it proceeds with defaults.
    """
    config = inmemory_state.SURVEY_CONFIGS.get(payload.survey_id)
    if config is None:
        raise HTTPException(status_code=404, detail=problem_survey_not_found(payload.survey_id))
    try:
        controller = _build_controller(config)
    except SurveyConfigError as exc:
        raise HTTPException(status_code=422, detail=problem_survey_config_invalid(str(exc))) from exc

    cfg = load_config()
    inmemory_state.expire_idle_forms(cfg.forms.idle_ttl_seconds)
    # Without sessions a client-sent session id is ignored, so nothing is written to it
    open_form = inmemory_state.OpenForm(
        controller=controller,
        restorer=AnswerRestorer(controller),
        session_id=payload.session_id if cfg.sessions.enabled else None,
    )
    if cfg.sessions.enabled:
        if payload.session_id:
            open_form.restorer.restore(repository_sessions, payload.session_id)
        else:
            try:
                open_form.session_id = repository_sessions.create_session(config.id)
            except SQLAlchemyError as exc:
                report_error("session_create_failed", exc, survey_id=config.id)

    form_id = str(uuid.uuid4())
    inmemory_state.OPEN_FORMS[form_id] = open_form
    logger.info("form_opened form_id=%s survey_id=%s session_id=%s", form_id, config.id, open_form.session_id)
    return _envelope(form_id, open_form)


@router.get("/forms/{form_id}", summary="Get the current form snapshot")
def get_form(form_id: str):
    open_form = _open_form_or_404(form_id)
    with open_form.lock:
        return _envelope(form_id, open_form)


@router.delete("/forms/{form_id}", status_code=204, summary="Close a form-filling session")
def close_form(form_id: str):
    _open_form_or_404(form_id)
    inmemory_state.OPEN_FORMS.pop(form_id, None)
    return Response(status_code=204)


@router.patch("/forms/{form_id}/fields/{field_id}", summary="Change one field value")
def change_field(form_id: str, field_id: str, payload: FieldChangeRequest):
    open_form = _open_form_or_404(form_id)
    with open_form.lock:
        try:
            outcome = open_form.controller.set_field_value(field_id, payload.value)
        except UnknownFieldError as exc:
            raise HTTPException(status_code=404, detail=problem_field_not_found(field_id)) from exc
        _save_progress(form_id, open_form)
        return _envelope(form_id, open_form, outcome)


@router.post("/forms/{form_id}/next", summary="Validate the current section and advance")
def go_next(form_id: str):
    open_form = _open_form_or_404(form_id)
    with open_form.lock:
        outcome = open_form.controller.go_to_next()
        if outcome.moved:
            _save_progress(form_id, open_form)
        return _envelope(form_id, open_form, outcome)


@router.post("/forms/{form_id}/previous", summary="Go back one section")
def go_previous(form_id: str):
    open_form = _open_form_or_404(form_id)
    with open_form.lock:
        outcome = open_form.controller.go_to_previous()
        if outcome.moved:
            _save_progress(form_id, open_form)
        return _envelope(form_id, open_form, outcome)


@router.post("/forms/{form_id}/sections/{index}", summary="Jump to a visited section")
def go_to_section(form_id: str, index: int):
    open_form = _open_form_or_404(form_id)
    with open_form.lock:
        outcome = open_form.controller.navigate_to_section(index)
        if outcome.moved:
            _save_progress(form_id, open_form)
        return _envelope(form_id, open_form, outcome)


@router.get("/forms/{form_id}/section-validity", summary="Per-section validity badges")
def get_section_validity(form_id: str):
    open_form = _open_form_or_404(form_id)
    with open_form.lock:
        return {"section_validity": open_form.controller.section_validity()}


@router.post("/forms/{form_id}/submit", summary="Validate the whole form and store the response")
def submit_form(form_id: str):
    open_form = _open_form_or_404(form_id)
    controller = open_form.controller

    def _store(payload: Dict[str, Any]) -> None:
        insert_survey_response(controller.config.id, open_form.session_id, payload)

    with open_form.lock:
        outcome = controller.submit(_store)
        if outcome.submitted and open_form.session_id:
            try:
                repository_sessions.complete_session(open_form.session_id)
            except SQLAlchemyError as exc:
                report_error("session_complete_failed", exc, session_id=open_form.session_id)
        body = _envelope(form_id, open_form, outcome)
    if outcome.submitted:
        # A stored response closes the form
        inmemory_state.OPEN_FORMS.pop(form_id, None)
    return body


@router.post("/forms/{form_id}/reset", summary="Reset the form to its defaults")
def reset_form(form_id: str):
    open_form = _open_form_or_404(form_id)
    with open_form.lock:
        open_form.controller.reset()
        return _envelope(form_id, open_form)


__all__ = [
    "router",
    "open_form",
    "get_form",
    "close_form",
    "change_field",
    "go_next",
    "go_previous",
    "go_to_section",
    "get_section_validity",
    "submit_form",
    "reset_form",
]
