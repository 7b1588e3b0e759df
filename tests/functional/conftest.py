from __future__ import annotations

"""Functional test bootstrap.

Points the service at a shared in-memory SQLite database before any
`surveyflow` import resolves the engine, applies the SQL migrations once per
session and resets in-memory registries, buffered events and stored rows
between tests. Shared survey and catalog documents live here as fixtures.
"""

import os

import pytest

os.environ["TEST_DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
# Migrations are applied explicitly below rather than at app startup
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"
os.environ["SURVEYFLOW_TEST_SUPPORT"] = "1"
os.environ.setdefault("SESSIONS_ENABLED", "1")


def _survey_doc() -> dict:
    return {
        "id": "team-survey",
        "title": "Team Survey",
        "sections": [
            {
                "id": "s-team",
                "title": "Team Info",
                "order": 0,
                "fields": [
                    {
                        "id": "f_name",
                        "type": "text",
                        "label": "Full Name",
                        "required": True,
                        "validation": [{"type": "min", "value": 2}],
                    },
                    {"id": "f_email", "type": "email", "label": "Email Address", "required": True},
                    {
                        "id": "f_size",
                        "type": "number",
                        "label": "Team Size",
                        "validation": [{"type": "min", "value": 1}, {"type": "max", "value": 500}],
                    },
                ],
            },
            {
                "id": "s-prefs",
                "title": "Preferences",
                "order": 1,
                "fields": [
                    {
                        "id": "f_tools",
                        "type": "multiselect",
                        "label": "Tools",
                        "required": True,
                        "multiSelectOptionSetId": "tools",
                    },
                    {"id": "f_role", "type": "radio", "label": "Role", "radioOptionSetId": "roles"},
                ],
                "subsections": [
                    {
                        "id": "sub-feedback",
                        "title": "Feedback",
                        "fields": [
                            {
                                "id": "f_rating",
                                "type": "rating",
                                "label": "Overall Rating",
                                "required": True,
                                "ratingScaleId": "five",
                            },
                            {
                                "id": "f_comments",
                                "type": "textarea",
                                "label": "Comments",
                                "validation": [{"type": "max", "value": 20}],
                            },
                        ],
                    }
                ],
            },
            {
                "id": "s-wrap",
                "title": "Wrap Up",
                "order": 2,
                "fields": [
                    {
                        "id": "f_contact",
                        "type": "select",
                        "label": "Contact Method",
                        "options": [
                            {"value": "email", "label": "Email"},
                            {"value": "phone", "label": "Phone"},
                        ],
                    },
                    {"id": "f_consent", "type": "checkbox", "label": "I Agree", "required": True},
                ],
            },
        ],
    }


def _catalog_doc() -> dict:
    return {
        "ratingScales": [
            {
                "id": "five",
                "name": "One to five",
                "options": [{"value": str(i), "label": str(i), "order": i} for i in range(1, 6)],
            }
        ],
        "radioOptionSets": [
            {
                "id": "roles",
                "name": "Roles",
                "options": [
                    {"value": "dev", "label": "Developer", "order": 1},
                    {"value": "pm", "label": "Product Manager", "order": 2, "isDefault": True},
                ],
            }
        ],
        "selectOptionSets": [],
        "multiSelectOptionSets": [
            {
                "id": "tools",
                "name": "Tools",
                "minSelections": 1,
                "maxSelections": 2,
                "options": [
                    {"value": "a", "label": "Alpha", "order": 1},
                    {"value": "b", "label": "Beta", "order": 2},
                    {"value": "c", "label": "Gamma", "order": 3},
                ],
            }
        ],
    }


VALID_ANSWERS = {
    "f_name": "Ada",
    "f_email": "ada@example.com",
    "f_tools": ["a"],
    "f_rating": "4",
    "f_consent": True,
}


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap() -> None:
    """Session-level bootstrap: apply migrations once for the shared DB."""
    from surveyflow.db.base import dispose_engine, get_engine
    from surveyflow.db.migrations_runner import apply_migrations

    apply_migrations(get_engine(os.environ["TEST_DATABASE_URL"]))
    yield
    dispose_engine()


@pytest.fixture(autouse=True)
def clean_state(functional_sqlite_bootstrap):
    from sqlalchemy import text as sql_text

    from surveyflow.db.base import get_engine
    from surveyflow.logic import events, inmemory_state

    inmemory_state.clear_state()
    events.EVENT_BUFFER.clear()
    with get_engine().begin() as conn:
        conn.execute(sql_text("DELETE FROM survey_response"))
        conn.execute(sql_text("DELETE FROM survey_session"))
    yield
    inmemory_state.clear_state()
    events.EVENT_BUFFER.clear()


@pytest.fixture
def survey_doc() -> dict:
    return _survey_doc()


@pytest.fixture
def catalog_doc() -> dict:
    return _catalog_doc()


@pytest.fixture
def survey_config(survey_doc):
    from surveyflow.models.survey import SurveyConfig

    return SurveyConfig.model_validate(survey_doc)


@pytest.fixture
def lookups(catalog_doc):
    from surveyflow.models.catalogs import CatalogLists, CatalogLookups

    return CatalogLookups.from_lists(CatalogLists.model_validate(catalog_doc))


@pytest.fixture
def valid_answers() -> dict:
    return dict(VALID_ANSWERS)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from surveyflow.main import create_app

    with TestClient(create_app()) as c:
        yield c
