"""HTTP contract of the form service, exercised through FastAPI's TestClient."""

from __future__ import annotations

import threading

from surveyflow.logic import inmemory_state, repository_sessions
from surveyflow.logic.field_validation import MSG_REQUIRED
from surveyflow.models.requests import FieldChangeRequest
from surveyflow.routes import forms as form_routes

PROBLEM = "application/problem+json"


def _register(client, survey_doc, catalog_doc=None) -> None:
    resp = client.put(f"/api/v1/surveys/{survey_doc['id']}", json=survey_doc)
    assert resp.status_code == 200, resp.text
    if catalog_doc is not None:
        assert client.put("/api/v1/catalogs", json=catalog_doc).status_code == 200


def _open(client, survey_id="team-survey", session_id=None) -> dict:
    body = {"survey_id": survey_id}
    if session_id:
        body["session_id"] = session_id
    resp = client.post("/api/v1/forms", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["form"]


def _patch(client, form_id, field_id, value):
    return client.patch(f"/api/v1/forms/{form_id}/fields/{field_id}", json={"value": value})


def test_health_reports_db_and_request_id(client) -> None:
    resp = client.get("/health", headers={"X-Request-Id": "req-123"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["db"] is True
    assert resp.headers["x-request-id"] == "req-123"


def test_register_survey_summary(client, survey_doc) -> None:
    resp = client.put("/api/v1/surveys/team-survey", json=survey_doc)
    assert resp.json() == {"survey_id": "team-survey", "sections": 3, "fields": 9}
    fetched = client.get("/api/v1/surveys/team-survey").json()
    assert fetched["sections"][1]["fields"][0]["multiSelectOptionSetId"] == "tools"


def test_register_survey_rejects_mismatched_or_malformed_body(client, survey_doc) -> None:
    resp = client.put("/api/v1/surveys/other-id", json=survey_doc)
    assert resp.status_code == 422
    assert resp.json()["code"] == "SURVEY_CONFIG_INVALID"

    resp = client.put("/api/v1/surveys/team-survey", json={"id": "team-survey", "sections": []})
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith(PROBLEM)
    assert resp.json()["code"] == "REQUEST_INVALID"


def test_unknown_ids_are_problem_404s(client, survey_doc) -> None:
    resp = client.post("/api/v1/forms", json={"survey_id": "nope"})
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith(PROBLEM)
    assert resp.json()["code"] == "SURVEY_NOT_FOUND"

    assert client.get("/api/v1/forms/missing").json()["code"] == "FORM_NOT_FOUND"

    _register(client, survey_doc)
    form_id = _open(client)["form_id"]
    resp = _patch(client, form_id, "not_a_field", "x")
    assert resp.status_code == 404
    assert resp.json()["code"] == "FIELD_NOT_FOUND"


def test_open_form_applies_defaults_and_starts_session(client, survey_doc, catalog_doc) -> None:
    _register(client, survey_doc, catalog_doc)
    form = _open(client)
    assert form["form_data"] == {"f_role": "pm"}
    assert form["errors"] == {}
    assert form["pagination"]["current_section_index"] == 0
    assert form["pagination"]["total_sections"] == 3
    assert repository_sessions.get_session(form["session_id"])["status"] == repository_sessions.STATUS_STARTED


def test_blocked_advance_then_full_submission(client, survey_doc, catalog_doc, valid_answers) -> None:
    _register(client, survey_doc, catalog_doc)
    form_id = _open(client)["form_id"]

    body = client.post(f"/api/v1/forms/{form_id}/next").json()
    assert body["outcome"]["moved"] is False
    assert body["outcome"]["focus_field_id"] == "f_name"
    assert body["form"]["errors"] == {"f_name": MSG_REQUIRED, "f_email": MSG_REQUIRED}

    events = client.get("/__test__/events").json()
    assert any(e["type"] == "field.focus_requested" for e in events)

    for field_id, value in valid_answers.items():
        assert _patch(client, form_id, field_id, value).status_code == 200
    assert client.post(f"/api/v1/forms/{form_id}/next").json()["outcome"]["moved"] is True
    assert client.post(f"/api/v1/forms/{form_id}/next").json()["outcome"]["moved"] is True

    body = client.post(f"/api/v1/forms/{form_id}/submit").json()
    assert body["outcome"]["submitted"] is True
    assert body["form"]["has_submitted"] is True
    payload = body["outcome"]["payload"]
    assert payload["team_info_email_address"] == "ada@example.com"

    stored = client.get("/api/v1/surveys/team-survey/responses").json()["items"]
    assert [item["payload"] for item in stored] == [payload]
    session = repository_sessions.get_session(body["form"]["session_id"])
    assert session["status"] == repository_sessions.STATUS_COMPLETED

    # A stored response closes the form
    assert client.get(f"/api/v1/forms/{form_id}").status_code == 404


def test_live_validation_after_attempt(client, survey_doc, catalog_doc) -> None:
    _register(client, survey_doc, catalog_doc)
    form_id = _open(client)["form_id"]

    first = _patch(client, form_id, "f_email", "bad").json()
    assert first["outcome"]["validated"] is False
    assert first["form"]["errors"] == {}

    client.post(f"/api/v1/forms/{form_id}/next")
    second = _patch(client, form_id, "f_email", "still-bad").json()
    assert second["outcome"]["error"] == "Please enter a valid email address"


def test_section_validity_and_navigation_guards(client, survey_doc, catalog_doc, valid_answers) -> None:
    _register(client, survey_doc, catalog_doc)
    form_id = _open(client)["form_id"]

    validity = client.get(f"/api/v1/forms/{form_id}/section-validity").json()["section_validity"]
    assert validity == {"0": False, "1": False, "2": False}

    resp = client.post(f"/api/v1/forms/{form_id}/sections/2").json()
    assert resp["outcome"]["moved"] is False
    assert resp["outcome"]["reason"] == "section_not_reachable"

    for field_id in ("f_name", "f_email"):
        _patch(client, form_id, field_id, valid_answers[field_id])
    client.post(f"/api/v1/forms/{form_id}/next")
    back = client.post(f"/api/v1/forms/{form_id}/previous").json()
    assert back["outcome"]["moved"] is True
    forward = client.post(f"/api/v1/forms/{form_id}/sections/1").json()
    assert forward["outcome"]["moved"] is True
    assert forward["form"]["pagination"]["visited_sections"] == [0, 1]


def test_submit_refused_off_last_section(client, survey_doc, catalog_doc) -> None:
    _register(client, survey_doc, catalog_doc)
    form_id = _open(client)["form_id"]
    body = client.post(f"/api/v1/forms/{form_id}/submit").json()
    assert body["outcome"]["submitted"] is False
    assert body["outcome"]["reason"] == "not_last_section"
    assert client.get("/api/v1/surveys/team-survey/responses").json()["items"] == []


def test_resumed_session_restores_answers_and_page(client, survey_doc, catalog_doc, valid_answers) -> None:
    _register(client, survey_doc, catalog_doc)
    form = _open(client)
    form_id, session_id = form["form_id"], form["session_id"]
    _patch(client, form_id, "f_name", "Ada")
    _patch(client, form_id, "f_email", "ada@example.com")
    client.post(f"/api/v1/forms/{form_id}/next")
    client.delete(f"/api/v1/forms/{form_id}")

    resumed = _open(client, session_id=session_id)
    assert resumed["session_id"] == session_id
    assert resumed["form_data"]["f_name"] == "Ada"
    assert resumed["form_data"]["f_role"] == "pm"
    assert resumed["pagination"]["current_section_index"] == 1
    assert resumed["errors"] == {}


def test_catalogs_loaded_after_open_fill_defaults(client, survey_doc, catalog_doc) -> None:
    _register(client, survey_doc)
    form_id = _open(client)["form_id"]
    assert client.get(f"/api/v1/forms/{form_id}").json()["form"]["form_data"] == {}

    summary = client.put("/api/v1/catalogs", json=catalog_doc).json()
    assert summary["forms_refreshed"] == 1
    assert summary["multi_select_option_sets"] == 1
    assert client.get(f"/api/v1/forms/{form_id}").json()["form"]["form_data"] == {"f_role": "pm"}


def test_reset_and_close(client, survey_doc, catalog_doc) -> None:
    _register(client, survey_doc, catalog_doc)
    form_id = _open(client)["form_id"]
    _patch(client, form_id, "f_role", "dev")
    client.post(f"/api/v1/forms/{form_id}/next")

    form = client.post(f"/api/v1/forms/{form_id}/reset").json()["form"]
    assert form["form_data"] == {"f_role": "pm"}
    assert form["errors"] == {}
    assert form["validated_sections"] == []

    assert client.delete(f"/api/v1/forms/{form_id}").status_code == 204
    assert client.get(f"/api/v1/forms/{form_id}").status_code == 404


def test_reset_state_endpoint_clears_registries(client, survey_doc) -> None:
    _register(client, survey_doc)
    assert client.post("/__test__/reset-state").status_code == 204
    assert client.get("/api/v1/surveys/team-survey").status_code == 404


def test_huge_integer_answer_is_validated_not_crashed(client, survey_doc, catalog_doc) -> None:
    _register(client, survey_doc, catalog_doc)
    form_id = _open(client)["form_id"]
    client.post(f"/api/v1/forms/{form_id}/next")

    resp = _patch(client, form_id, "f_size", 10**400)
    assert resp.status_code == 200, resp.text
    assert resp.json()["outcome"]["error"] == "Must be no more than 500"


def test_session_id_is_ignored_when_sessions_disabled(client, survey_doc, catalog_doc, monkeypatch) -> None:
    _register(client, survey_doc, catalog_doc)
    session_id = repository_sessions.create_session("team-survey")
    monkeypatch.setenv("SESSIONS_ENABLED", "0")

    form = _open(client, session_id=session_id)
    assert form["session_id"] is None
    _patch(client, form["form_id"], "f_name", "Ada")
    client.post(f"/api/v1/forms/{form['form_id']}/next")

    assert repository_sessions.get_session(session_id)["status"] == repository_sessions.STATUS_STARTED
    assert not repository_sessions.get_saved_answers(session_id)


def test_idle_forms_expire_when_new_forms_open(client, survey_doc, monkeypatch) -> None:
    _register(client, survey_doc)
    stale_id = _open(client)["form_id"]
    inmemory_state.OPEN_FORMS[stale_id].last_used -= 7200
    monkeypatch.setenv("FORMS_IDLE_TTL_SECONDS", "3600")

    fresh_id = _open(client)["form_id"]
    assert client.get(f"/api/v1/forms/{stale_id}").status_code == 404
    assert client.get(f"/api/v1/forms/{fresh_id}").status_code == 200
    assert inmemory_state.expire_idle_forms(0) == []


def test_catalog_refresh_tolerates_forms_opened_meanwhile(client, survey_doc, catalog_doc, monkeypatch) -> None:
    _register(client, survey_doc)
    form_id = _open(client)["form_id"]
    open_form = inmemory_state.OPEN_FORMS[form_id]
    attach = open_form.controller.attach_catalogs

    def _attach_while_another_form_opens(lookups):
        inmemory_state.OPEN_FORMS["opened-meanwhile"] = open_form
        return attach(lookups)

    monkeypatch.setattr(open_form.controller, "attach_catalogs", _attach_while_another_form_opens)
    resp = client.put("/api/v1/catalogs", json=catalog_doc)
    assert resp.status_code == 200, resp.text
    assert resp.json()["forms_refreshed"] == 1
    assert "opened-meanwhile" in inmemory_state.OPEN_FORMS


def test_field_change_waits_for_the_form_lock(client, survey_doc, catalog_doc) -> None:
    _register(client, survey_doc, catalog_doc)
    form_id = _open(client)["form_id"]
    open_form = inmemory_state.OPEN_FORMS[form_id]
    results: list[dict] = []

    def _change() -> None:
        results.append(form_routes.change_field(form_id, "f_name", FieldChangeRequest(value="Ada")))

    worker = threading.Thread(target=_change)
    with open_form.lock:
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert "f_name" not in open_form.controller.form_data
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert results[0]["form"]["form_data"]["f_name"] == "Ada"
