from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from surveyflow.config import load_config
from surveyflow.db.base import get_engine
from surveyflow.db.migrations_runner import apply_migrations
from surveyflow.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from surveyflow.http.request_id import RequestIdMiddleware
from surveyflow.logging_setup import configure_logging
from surveyflow.middleware.cors import apply_cors
from surveyflow.routes import api_router

logger = logging.getLogger(__name__)


def _health() -> dict:
    try:
        with get_engine().connect() as conn:
            conn.execute(sql_text("SELECT 1"))
        return {"status": "ok", "db": True}
    except SQLAlchemyError as e:
        logger.error("Health DB check failed", exc_info=True)
        return {"status": "degraded", "db": False, "reason": str(e)}


def create_app() -> FastAPI:
    configure_logging()
    cfg = load_config()
    app = FastAPI(title="Survey form service")

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)
    apply_cors(app)

    # Migrations run at startup, never at import
    @app.on_event("startup")
    def _apply_migrations() -> None:
        if not cfg.sessions.auto_apply_migrations:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
            return
        try:
            apply_migrations(get_engine())
        except SQLAlchemyError:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise

    app.include_router(api_router, prefix="/api/v1")
    if os.getenv("SURVEYFLOW_TEST_SUPPORT", "").strip().lower() in {"1", "true", "yes", "on"}:
        from surveyflow.routes.test_support import router as test_support_router
        app.include_router(test_support_router)

    @app.get("/health")
    def health():
        return _health()

    return app

