"""Progressive-disclosure form controller.

Owns the form state (`form_data`, `errors`) and the section paginator for one
form-filling session, and decides when validation errors become visible:

- before any attempt to proceed, field changes never add errors;
- once a section has been validated (the respondent tried to advance past
  it), or after the first submit attempt, or for a field that already shows
  an error, every change re-validates that field immediately.

Advancing is gated on section validity, submitting on whole-form validity.
A refused transition leaves the paginator where it was and reports the field
the rendering layer should scroll to and focus.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Set, Tuple

from surveyflow.logic.defaults import apply_default_values
from surveyflow.logic.descriptive_ids import transform_to_descriptive_ids
from surveyflow.logic.errors import SurveyConfigError, UnknownFieldError
from surveyflow.logic.events import (
    FIELD_FOCUS_REQUESTED,
    RESPONSE_SUBMITTED,
    SECTION_CHANGED,
    SUBMISSION_FAILED,
    publish,
    report_error,
)
from surveyflow.logic.field_validation import validate_field_value
from surveyflow.logic.pagination import SectionPaginator
from surveyflow.logic.section_validation import (
    first_invalid_field,
    first_invalid_location,
    section_fields,
    section_validity_map,
    validate_all_fields,
    validate_section,
)
from surveyflow.models.catalogs import CatalogLookups
from surveyflow.models.response_types import (
    FieldChangeOutcome,
    FormSnapshot,
    NavigationOutcome,
    SubmitOutcome,
)
from surveyflow.models.survey import SurveyConfig

logger = logging.getLogger(__name__)

SubmitHandler = Callable[[Dict[str, Any]], Any]


class SurveyFormController:
    def __init__(
        self,
        config: SurveyConfig,
        lookups: CatalogLookups | None = None,
        *,
        allow_back_navigation: Optional[bool] = None,
        use_descriptive_ids: Optional[bool] = None,
    ) -> None:
        if not config.sections:
            raise SurveyConfigError(f"survey {config.id} has no sections")
        self.config = config
        self.lookups = lookups or CatalogLookups()
        if allow_back_navigation is None:
            allow_back_navigation = config.paginator_config.allow_back_navigation
        self.use_descriptive_ids = (
            config.use_descriptive_ids if use_descriptive_ids is None else use_descriptive_ids
        )
        self.paginator = SectionPaginator(
            len(config.sections),
            allow_back_navigation=allow_back_navigation,
            on_section_change=self._on_section_change,
        )
        # Duplicate ids are a configuration error; the last declaration wins
        self._fields: Dict[str, Tuple[int, Any]] = {}
        for index, section in enumerate(config.sections):
            for field in section_fields(section):
                self._fields[field.id] = (index, field)

        self.form_data: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}
        self.has_submitted = False
        self.validated_sections: Set[int] = set()
        self.touched_fields: Set[str] = set()
        apply_default_values(self.form_data, config, self.lookups)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_field(self, field_id: str) -> bool:
        return field_id in self._fields

    def section_index_of(self, field_id: str) -> int:
        try:
            return self._fields[field_id][0]
        except KeyError:
            raise UnknownFieldError(field_id) from None

    def should_show_errors(self, field_id: str) -> bool:
        """Whether a change to `field_id` is validated and surfaced now."""
        index = self.section_index_of(field_id)
        return self.has_submitted or index in self.validated_sections or field_id in self.errors

    def section_validity(self) -> Dict[int, bool]:
        return section_validity_map(self.form_data, self.config, self.lookups)

    def snapshot(self, form_id: str, session_id: Optional[str] = None) -> FormSnapshot:
        return FormSnapshot(
            form_id=form_id,
            survey_id=self.config.id,
            session_id=session_id,
            form_data=dict(self.form_data),
            errors=dict(self.errors),
            pagination=self.paginator.state,
            has_submitted=self.has_submitted,
            validated_sections=sorted(self.validated_sections),
            section_validity=self.section_validity(),
        )

    # ------------------------------------------------------------------
    # Field state
    # ------------------------------------------------------------------

    def set_field_value(self, field_id: str, value: Any) -> FieldChangeOutcome:
        """Record a respondent change and live-validate it when errors are shown."""
        if field_id not in self._fields:
            raise UnknownFieldError(field_id)
        _index, field = self._fields[field_id]
        show = self.should_show_errors(field_id)
        self.form_data[field_id] = value
        self.touched_fields.add(field_id)
        if not show:
            return FieldChangeOutcome(field_id=field_id, validated=False)
        error = validate_field_value(field, value, self.lookups)
        if error:
            self.errors[field_id] = error
        else:
            self.errors.pop(field_id, None)
        return FieldChangeOutcome(field_id=field_id, validated=True, error=error)

    def load_answers(self, answers: Mapping[str, Any]) -> list[str]:
        """Write saved answers into the form without validating them.

        Fields the respondent already edited in this visit and ids that are no
        longer part of the survey are skipped.
        """
        applied: list[str] = []
        for field_id, value in answers.items():
            if field_id in self.touched_fields:
                continue
            if field_id not in self._fields:
                logger.info("saved_answer_skipped_unknown_field survey_id=%s field_id=%s", self.config.id, field_id)
                continue
            self.form_data[field_id] = value
            applied.append(field_id)
        return applied

    def attach_catalogs(self, lookups: CatalogLookups) -> Dict[str, Any]:
        """Swap in freshly loaded catalogs and fill defaults they provide."""
        self.lookups = lookups
        return apply_default_values(self.form_data, self.config, self.lookups)

    def reset(self) -> None:
        self.form_data = {}
        self.errors = {}
        self.has_submitted = False
        self.validated_sections = set()
        self.touched_fields = set()
        self.paginator.reset()
        apply_default_values(self.form_data, self.config, self.lookups)
        logger.info("form_reset survey_id=%s", self.config.id)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _on_section_change(self, index: int) -> None:
        publish(SECTION_CHANGED, {"survey_id": self.config.id, "index": index})

    def _request_focus(self, field_id: Optional[str]) -> None:
        if field_id is not None:
            publish(FIELD_FOCUS_REQUESTED, {"survey_id": self.config.id, "field_id": field_id})

    def _navigation(self, moved: bool, reason: Optional[str] = None, focus: Optional[str] = None) -> NavigationOutcome:
        return NavigationOutcome(
            moved=moved,
            current_section_index=self.paginator.current_section_index,
            errors=dict(self.errors),
            focus_field_id=focus,
            reason=reason,
        )

    def go_to_next(self) -> NavigationOutcome:
        """Validate the current section and advance only when it is valid."""
        index = self.paginator.current_section_index
        section = self.config.sections[index]
        self.validated_sections.add(index)
        result = validate_section(index, self.form_data, self.config, self.lookups)
        if not result.is_valid:
            self.errors.update(result.errors)
            focus = first_invalid_field(section, result.errors)
            logger.info(
                "advance_blocked survey_id=%s index=%s invalid=%s",
                self.config.id,
                index,
                sorted(result.errors),
            )
            self._request_focus(focus)
            return self._navigation(False, reason="section_invalid", focus=focus)

        for field in section_fields(section):
            self.errors.pop(field.id, None)
        if not self.paginator.go_to_next():
            return self._navigation(False, reason="last_section")
        return self._navigation(True)

    def go_to_previous(self) -> NavigationOutcome:
        if not self.paginator.allow_back_navigation:
            return self._navigation(False, reason="back_navigation_disabled")
        if not self.paginator.go_to_previous():
            return self._navigation(False, reason="first_section")
        return self._navigation(True)

    def navigate_to_section(self, index: int) -> NavigationOutcome:
        """Step-indicator click: only visited sections (or the current one)."""
        if not self.paginator.can_navigate_to(index):
            return self._navigation(False, reason="section_not_reachable")
        moved = index != self.paginator.current_section_index
        self.paginator.go_to_section(index)
        return self._navigation(moved)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def build_submission_payload(self) -> Dict[str, Any]:
        if self.use_descriptive_ids:
            return transform_to_descriptive_ids(self.form_data, self.config)
        return dict(self.form_data)

    def _submit_outcome(self, submitted: bool, **kwargs: Any) -> SubmitOutcome:
        return SubmitOutcome(
            submitted=submitted,
            current_section_index=self.paginator.current_section_index,
            errors=dict(self.errors),
            **kwargs,
        )

    def submit(self, on_submit: SubmitHandler) -> SubmitOutcome:
        """Validate the whole form and hand the payload to `on_submit`.

        Only available on the last section. An invalid form jumps to the first
        section holding an invalid field. A failing `on_submit` is reported and
        leaves the respondent where they are so they can retry.
        """
        if not self.paginator.is_last_section:
            return self._submit_outcome(False, reason="not_last_section")
        self.has_submitted = True
        result = validate_all_fields(self.form_data, self.config, self.lookups)
        if not result.is_valid:
            self.errors = dict(result.errors)
            location = first_invalid_location(self.config, self.errors)
            focus = None
            if location is not None:
                target, focus = location
                self.paginator.go_to_section(target)
                self._request_focus(focus)
            logger.info(
                "submit_blocked survey_id=%s invalid=%s",
                self.config.id,
                sorted(self.errors),
            )
            return self._submit_outcome(False, focus_field_id=focus, reason="form_invalid")

        self.errors = {}
        payload = self.build_submission_payload()
        try:
            on_submit(payload)
        except Exception as exc:
            report_error("submission_failed", exc, survey_id=self.config.id)
            publish(SUBMISSION_FAILED, {"survey_id": self.config.id})
            return self._submit_outcome(False, payload=payload, reason="submission_failed")
        publish(RESPONSE_SUBMITTED, {"survey_id": self.config.id, "keys": sorted(payload)})
        return self._submit_outcome(True, payload=payload)


__all__ = ["SurveyFormController", "SubmitHandler"]
