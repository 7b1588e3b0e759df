"""Architectural tests for the survey form service.

Static, file/AST-based checks on the package layout: the engine in
`surveyflow/logic/` stays framework-free, SQL lives in repository modules,
problem payloads come from the factory and routers are mounted by the app
factory. These tests never import application code.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, List

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
PKG_DIR = PROJECT_ROOT / "surveyflow"
LOGIC_DIR = PKG_DIR / "logic"
MODELS_DIR = PKG_DIR / "models"
ROUTES_DIR = PKG_DIR / "routes"

_WEB_MODULES = ("fastapi", "starlette")


def _iter_py_files(root: Path) -> Iterable[Path]:
    for path in sorted(root.rglob("*.py")):
        if "__pycache__" in path.parts:
            continue
        yield path


def _parse_ast(path: Path) -> ast.AST:
    try:
        return ast.parse(path.read_text(encoding="utf-8"))
    except SyntaxError as exc:
        pytest.fail(f"Syntax error in {path}: {exc}")


def _imported_modules(tree: ast.AST) -> List[str]:
    names: List[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.append(node.module)
    return names


def _rel(path: Path) -> str:
    return str(path.relative_to(PROJECT_ROOT))


def test_engine_and_models_do_not_import_web_framework() -> None:
    offenders = []
    for root in (LOGIC_DIR, MODELS_DIR):
        for py in _iter_py_files(root):
            for mod in _imported_modules(_parse_ast(py)):
                if mod.split(".")[0] in _WEB_MODULES:
                    offenders.append(f"{_rel(py)} imports {mod}")
    assert not offenders, "Engine modules must stay framework-free: " + "; ".join(offenders)


def test_sql_statements_live_in_repositories_and_db_package() -> None:
    allowed_dirs = {PKG_DIR / "db"}
    offenders = []
    for py in _iter_py_files(PKG_DIR):
        if py.parent in allowed_dirs or py.name.startswith("repository_") or py.name == "main.py":
            continue
        # Routes may catch SQLAlchemy errors but never issue statements
        for node in ast.walk(_parse_ast(py)):
            if (
                isinstance(node, ast.ImportFrom)
                and node.module == "sqlalchemy"
                and any(alias.name == "text" for alias in node.names)
            ):
                offenders.append(_rel(py))
    assert not offenders, f"SQL issued outside repository modules: {offenders}"


def test_modules_that_log_define_a_module_logger() -> None:
    offenders = []
    for py in _iter_py_files(PKG_DIR):
        tree = _parse_ast(py)
        uses_logger = any(
            isinstance(n, ast.Attribute) and isinstance(n.value, ast.Name) and n.value.id == "logger"
            for n in ast.walk(tree)
        )
        if not uses_logger:
            continue
        defines_logger = any(
            isinstance(n, ast.Assign)
            and any(isinstance(t, ast.Name) and t.id == "logger" for t in n.targets)
            and isinstance(n.value, ast.Call)
            and isinstance(n.value.func, ast.Attribute)
            and n.value.func.attr == "getLogger"
            for n in tree.body
        )
        if not defines_logger:
            offenders.append(_rel(py))
    assert not offenders, f"Modules log without `logger = logging.getLogger(__name__)`: {offenders}"


def test_no_bare_except_clauses() -> None:
    offenders = []
    for py in _iter_py_files(PKG_DIR):
        for node in ast.walk(_parse_ast(py)):
            if isinstance(node, ast.ExceptHandler) and node.type is None:
                offenders.append(f"{_rel(py)}:{node.lineno}")
    assert not offenders, f"Bare except clauses found: {offenders}"


def test_route_handlers_use_problem_factory() -> None:
    """Route modules must not build problem payloads carrying a `code` inline."""
    offenders = []
    for py in _iter_py_files(ROUTES_DIR):
        for node in ast.walk(_parse_ast(py)):
            if not isinstance(node, ast.Dict):
                continue
            keys = {k.value for k in node.keys if isinstance(k, ast.Constant)}
            if {"status", "code"} <= keys:
                offenders.append(f"{_rel(py)}:{node.lineno}")
    assert not offenders, f"Inline problem payloads in routes: {offenders}"


def test_app_factory_mounts_versioned_api_router() -> None:
    main_py = PKG_DIR / "main.py"
    tree = _parse_ast(main_py)
    factory = [n for n in tree.body if isinstance(n, ast.FunctionDef) and n.name == "create_app"]
    assert factory, "surveyflow/main.py must define create_app()"

    mounted = False
    for node in ast.walk(factory[0]):
        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Attribute)
            and node.func.attr == "include_router"
            and node.args
            and isinstance(node.args[0], ast.Name)
            and node.args[0].id == "api_router"
        ):
            prefixes = [
                kw.value.value
                for kw in node.keywords
                if kw.arg == "prefix" and isinstance(kw.value, ast.Constant)
            ]
            mounted = prefixes == ["/api/v1"]
    assert mounted, "create_app() must include api_router under /api/v1"


def test_api_router_includes_every_route_module() -> None:
    init_tree = _parse_ast(ROUTES_DIR / "__init__.py")
    imported = set(_imported_modules(init_tree))
    expected = {"surveyflow.routes.forms", "surveyflow.routes.surveys"}
    assert expected <= imported, f"routes/__init__.py must import {sorted(expected - imported)}"


def test_form_routes_delegate_to_controller() -> None:
    """Form routes orchestrate only; validation stays in the engine."""
    tree = _parse_ast(ROUTES_DIR / "forms.py")
    imported = set(_imported_modules(tree))
    assert "surveyflow.logic.field_validation" not in imported
    assert "surveyflow.logic.section_validation" not in imported
    assert "surveyflow.logic.form_controller" in imported
