"""Pytest configuration and shared fixtures for ai-prompts tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from ai_prompts.config.app import HOME_ENV_VAR, TEMPLATES_DIR_ENV_VAR
from ai_prompts.templates.models import ParameterSchema, TemplateDefinition

GREETING_TEMPLATE = """---
name: greeting
description: Greet someone
parameters:
  name:
    description: Who to greet
    required: true
    type: string
  excited:
    description: Add an exclamation mark
    required: false
    default: "false"
    type: boolean
---
Hello {{name}}{{#if excited}}!{{/if}}
"""

STATIC_TEMPLATE = """---
name: static
description: A template without parameters
parameters: {}
---
Just some static text.
"""


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep tests away from the user's real config and templates directory."""
    home = tmp_path / "ai-prompts-home"
    monkeypatch.setenv(HOME_ENV_VAR, str(home))
    monkeypatch.delenv(TEMPLATES_DIR_ENV_VAR, raising=False)
    return home


@pytest.fixture
def write_template(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes a template file under tmp_path/templates."""

    def _write(relative_path: str, content: str) -> Path:
        path = tmp_path / "templates" / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def templates_dir(tmp_path: Path, write_template: Callable[[str, str], Path]) -> Path:
    """A templates directory holding the greeting and static templates."""
    write_template("greeting.md", GREETING_TEMPLATE)
    write_template("nested/static.md", STATIC_TEMPLATE)
    return tmp_path / "templates"


@pytest.fixture
def make_definition() -> Callable[..., TemplateDefinition]:
    """Factory for in-memory template definitions."""

    def _make(
        source: str = "",
        parameters: dict[str, dict[str, Any]] | None = None,
        name: str = "sample",
        description: str = "Sample template",
    ) -> TemplateDefinition:
        return TemplateDefinition(
            name=name,
            description=description,
            source=source,
            parameters={
                key: ParameterSchema.model_validate(value)
                for key, value in (parameters or {}).items()
            },
        )

    return _make
