"""Tests for the template CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from ai_prompts import __version__
from ai_prompts.cli import cli
from ai_prompts.config.app import TEMPLATES_DIR_ENV_VAR

pytestmark = pytest.mark.unit


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


def invoke(runner: CliRunner, templates_dir: Path, *args: str, **kwargs):
    return runner.invoke(cli, ["--templates-dir", str(templates_dir), *args], **kwargs)


class TestCliGroup:
    """Tests for the top-level command group."""

    def test_help_shows_commands(self, runner: CliRunner):
        """Test that help lists every command."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("list", "ls", "info", "generate", "gen"):
            assert command in result.output

    def test_version(self, runner: CliRunner):
        """Test the version option."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_config_file(self, runner: CliRunner, tmp_path: Path):
        """Test that a bad config file fails with a clear error."""
        config = tmp_path / "config.yaml"
        config.write_text("logging:\n  level: loud\n")

        result = runner.invoke(cli, ["--config", str(config), "list"])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output


class TestListCommand:
    """Tests for ai-prompts list."""

    def test_lists_templates(self, runner: CliRunner, templates_dir: Path):
        """Test listing templates from a directory."""
        result = invoke(runner, templates_dir, "list")

        assert result.exit_code == 0
        assert "Available templates (2):" in result.output
        assert result.output.index("greeting") < result.output.index("static")
        assert "Parameters: 1 required, 1 optional" in result.output

    def test_ls_alias(self, runner: CliRunner, templates_dir: Path):
        """Test that ls is an alias for list."""
        result = invoke(runner, templates_dir, "ls")
        assert result.exit_code == 0
        assert "greeting" in result.output

    def test_json_output(self, runner: CliRunner, templates_dir: Path):
        """Test the JSON listing."""
        result = invoke(runner, templates_dir, "list", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [item["name"] for item in data] == ["greeting", "static"]

    def test_reports_discovery_errors(
        self, runner: CliRunner, templates_dir: Path, write_template
    ):
        """Test that discovery errors go to stderr."""
        write_template("broken.md", "---\nname: broken\n---\nbody")

        result = invoke(runner, templates_dir, "list")

        assert result.exit_code == 0
        assert "Found 1 error while discovering templates" in result.output
        assert "broken.md" in result.output
        assert "greeting" in result.output

    def test_empty_directory(self, runner: CliRunner, tmp_path: Path):
        """Test the message for a directory without templates."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = invoke(runner, empty, "list")

        assert result.exit_code == 0
        assert "No templates found in" in result.output
        assert "(from option --templates-dir=" in result.output

    def test_missing_directory(self, runner: CliRunner, tmp_path: Path):
        """Test that a missing directory fails and names where it came from."""
        result = invoke(runner, tmp_path / "missing", "list")

        assert result.exit_code == 1
        assert "missing or unreadable" in result.output
        assert "--templates-dir" in result.output

    def test_missing_directory_from_environment(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that the error names the environment variable as the source."""
        monkeypatch.setenv(TEMPLATES_DIR_ENV_VAR, str(tmp_path / "missing"))

        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 1
        assert TEMPLATES_DIR_ENV_VAR in result.output

    def test_environment_variable_selects_directory(
        self, runner: CliRunner, templates_dir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that AI_PROMPTS_TEMPLATES_DIR selects the directory."""
        monkeypatch.setenv(TEMPLATES_DIR_ENV_VAR, str(templates_dir))

        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "greeting" in result.output

    def test_bundled_templates_by_default(self, runner: CliRunner):
        """Test that bundled templates are listed by default."""
        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 0
        assert "code-review" in result.output
        assert "explain" in result.output


class TestInfoCommand:
    """Tests for ai-prompts info."""

    def test_shows_parameters(self, runner: CliRunner, templates_dir: Path):
        """Test that info shows the template parameters."""
        result = invoke(runner, templates_dir, "info", "greeting")

        assert result.exit_code == 0
        assert "Template: greeting" in result.output
        assert "name (string, required)" in result.output
        assert "excited (boolean, optional)" in result.output

    def test_unknown_template(self, runner: CliRunner, templates_dir: Path):
        """Test that info on an unknown template lists the available ones."""
        result = invoke(runner, templates_dir, "info", "missing")

        assert result.exit_code == 1
        assert 'Template "missing" not found.' in result.output
        assert "Available templates: greeting, static" in result.output


class TestGenerateCommand:
    """Tests for ai-prompts generate."""

    def test_interactive_generation(self, runner: CliRunner, templates_dir: Path):
        """Test generating a prompt with prompted values."""
        result = invoke(runner, templates_dir, "generate", "greeting", input="Ada\ny\n")

        assert result.exit_code == 0
        assert "Hello Ada!" in result.output
        assert "Collected parameters for template 'greeting':" in result.output

    def test_optional_boolean_default(self, runner: CliRunner, templates_dir: Path):
        """Test that a blank optional boolean uses its default."""
        result = invoke(runner, templates_dir, "gen", "greeting", input="Ada\n\n")

        assert result.exit_code == 0
        assert "Hello Ada" in result.output
        assert "Hello Ada!" not in result.output

    def test_required_parameter_left_blank(self, runner: CliRunner, templates_dir: Path):
        """Test that a blank required parameter fails generation."""
        result = invoke(runner, templates_dir, "generate", "greeting", input="\n")

        assert result.exit_code == 1
        assert "Parameter 'name' is required" in result.output
        assert "Parameter collection failed" in result.output

    def test_writes_output_file(self, runner: CliRunner, templates_dir: Path, tmp_path: Path):
        """Test writing the prompt to a file."""
        output = tmp_path / "out" / "nested" / "prompt.md"

        result = invoke(
            runner, templates_dir, "generate", "greeting", "-o", str(output), input="Ada\nn\n"
        )

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == "Hello Ada"
        assert "Prompt saved to:" in result.output

    def test_non_interactive_without_parameters(self, runner: CliRunner, templates_dir: Path):
        """Test non-interactive generation of a template without parameters."""
        result = invoke(runner, templates_dir, "generate", "static", "--no-interactive")

        assert result.exit_code == 0
        assert "Just some static text." in result.output

    def test_non_interactive_with_required_parameters(
        self, runner: CliRunner, templates_dir: Path
    ):
        """Test that non-interactive generation refuses required parameters."""
        result = invoke(runner, templates_dir, "generate", "greeting", "--no-interactive")

        assert result.exit_code == 1
        assert "name" in result.output
        assert "--interactive" in result.output

    def test_unknown_template(self, runner: CliRunner, templates_dir: Path):
        """Test that generating an unknown template fails."""
        result = invoke(runner, templates_dir, "generate", "nope")

        assert result.exit_code == 1
        assert 'Template "nope" not found.' in result.output

    def test_render_failure(self, runner: CliRunner, templates_dir: Path, write_template):
        """Test that a template that fails to compile exits with an error."""
        write_template(
            "unclosed.md",
            "---\nname: unclosed\ndescription: d\nparameters: {}\n---\n{{#if a}}never closed",
        )

        result = invoke(runner, templates_dir, "generate", "unclosed", "--no-interactive")

        assert result.exit_code == 1
        assert "Prompt generation failed" in result.output
