"""
Test Configuration
==================

Pytest configuration with fixtures shared by unit and integration tests.
"""

import os

os.environ.setdefault("HTMLLINT_ENVIRONMENT", "testing")
os.environ.setdefault("HTMLLINT_LOG_LEVEL", "WARNING")

from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from html_linter.config.settings import Settings, get_settings
from html_linter.core.engine.linter import HTMLLinter
from html_linter.models.schemas import LintConfig
from tests.utils.data_generators import HTMLDocumentGenerator, MarkdownNoteGenerator


@pytest.fixture
def settings() -> Settings:
    """The process-wide settings instance (patch attributes with monkeypatch)."""
    return get_settings()


@pytest.fixture
def linter() -> HTMLLinter:
    """Linter using the recommended preset."""
    return HTMLLinter(LintConfig(extends=["recommended"]))


@pytest.fixture
def clean_page() -> str:
    return HTMLDocumentGenerator.generate_clean_page()


@pytest.fixture
def problem_page() -> str:
    return HTMLDocumentGenerator.generate_problem_page()


@pytest.fixture
def note_generator() -> MarkdownNoteGenerator:
    return MarkdownNoteGenerator()


@pytest.fixture
def site_dir(tmp_path: Path, clean_page: str, problem_page: str) -> Path:
    """A small site: two HTML pages, a Markdown note and an ignored vendor file."""
    (tmp_path / "index.html").write_text(clean_page, encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "broken.html").write_text(problem_page, encoding="utf-8")
    (tmp_path / "docs" / "note.md").write_text(
        MarkdownNoteGenerator.generate_note({"Images": '<img src="a.png">'}),
        encoding="utf-8",
    )
    (tmp_path / "vendor").mkdir()
    (tmp_path / "vendor" / "lib.html").write_text("<center>old</center>", encoding="utf-8")
    (tmp_path / "readme.txt").write_text("not html", encoding="utf-8")
    return tmp_path


@pytest.fixture
def fastapi_client() -> Generator[TestClient, None, None]:
    """FastAPI test client on a fresh app."""
    from html_linter.api.main import create_app

    with TestClient(create_app(), raise_server_exceptions=False) as client:
        yield client
