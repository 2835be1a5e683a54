"""Tests for the template registry."""

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from ai_prompts.templates.discovery import DiscoveryResult
from ai_prompts.templates.errors import TemplateNotFoundError
from ai_prompts.templates.registry import TemplateRegistry

pytestmark = pytest.mark.unit


@pytest.fixture
def registry(templates_dir: Path) -> TemplateRegistry:
    return TemplateRegistry(templates_dir=templates_dir)


class TestDiscover:
    """Tests for TemplateRegistry.discover."""

    @pytest.mark.asyncio
    async def test_cached_result_is_identical(self, registry: TemplateRegistry):
        """Test that a second discover returns the cached result object."""
        first = await registry.discover()
        second = await registry.discover()
        assert first is second

    @pytest.mark.asyncio
    async def test_force_rescans(self, registry: TemplateRegistry):
        """Test that force=True runs a fresh discovery."""
        first = await registry.discover()
        forced = await registry.discover(force=True)
        assert forced is not first
        assert sorted(forced.templates) == sorted(first.templates)

    @pytest.mark.asyncio
    async def test_refresh_picks_up_new_templates(
        self, registry: TemplateRegistry, write_template
    ):
        """Test that refresh sees templates added after the first scan."""
        await registry.discover()
        write_template("new.md", "---\nname: new\ndescription: d\nparameters: {}\n---\nN")

        assert "new" not in (await registry.discover()).templates
        assert "new" in (await registry.refresh()).templates

    @pytest.mark.asyncio
    async def test_concurrent_discovery_runs_once(self, templates_dir: Path):
        """Test that concurrent discover calls share one scan."""
        registry = TemplateRegistry(templates_dir=templates_dir)
        calls = 0

        async def slow_discovery(*args, **kwargs):
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return DiscoveryResult()

        with patch("ai_prompts.templates.registry.discover_templates", side_effect=slow_discovery):
            results = await asyncio.gather(registry.discover(), registry.discover())

        assert calls == 1
        assert results[0] is results[1]

    @pytest.mark.asyncio
    async def test_failed_discovery_clears_inflight(self, templates_dir: Path):
        """Test that a failed discovery lets the next call retry."""
        registry = TemplateRegistry(templates_dir=templates_dir)

        with patch(
            "ai_prompts.templates.registry.discover_templates",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(RuntimeError):
                await registry.discover()

        result = await registry.discover()
        assert "greeting" in result.templates


class TestLookup:
    """Tests for template lookup."""

    @pytest.mark.asyncio
    async def test_get_template_discovers_lazily(self, registry: TemplateRegistry):
        """Test that get_template discovers on first use."""
        template = await registry.get_template("greeting")
        assert template.name == "greeting"

    @pytest.mark.asyncio
    async def test_get_template_not_found_lists_available(self, registry: TemplateRegistry):
        """Test that a missing template error names the available ones."""
        with pytest.raises(TemplateNotFoundError) as exc_info:
            await registry.get_template("missing")

        assert exc_info.value.available == ["greeting", "static"]
        assert str(exc_info.value) == (
            'Template "missing" not found. Available templates: greeting, static'
        )

    @pytest.mark.asyncio
    async def test_not_found_with_no_templates(self, tmp_path: Path):
        """Test the not-found error when nothing was discovered."""
        (tmp_path / "empty").mkdir()
        registry = TemplateRegistry(templates_dir=tmp_path / "empty")

        with pytest.raises(TemplateNotFoundError, match="No templates found."):
            await registry.get_template("anything")

    @pytest.mark.asyncio
    async def test_names_and_has_template(self, registry: TemplateRegistry):
        """Test name listing and membership checks."""
        assert registry.get_template_names_cached() == []
        assert await registry.get_template_names() == ["greeting", "static"]
        assert registry.get_template_names_cached() == ["greeting", "static"]
        assert await registry.has_template("static") is True
        assert await registry.has_template("nope") is False


class TestErrorsAndSummary:
    """Tests for discovery error reporting."""

    def test_summary_before_discovery(self, registry: TemplateRegistry):
        """Test the summary before any discovery has run."""
        summary = registry.get_discovery_summary()
        assert summary.discovered is False
        assert summary.template_count == 0
        assert registry.get_discovery_errors() == []
        assert registry.get_formatted_errors() == ""

    @pytest.mark.asyncio
    async def test_summary_with_errors(self, registry: TemplateRegistry, write_template):
        """Test the summary after discovery recorded errors."""
        write_template("bad.md", "---\nname: bad\n---\nbody")

        await registry.discover()
        summary = registry.get_discovery_summary()

        assert summary.discovered is True
        assert summary.template_count == 2
        assert summary.error_count == 1
        assert summary.has_errors is True
        assert registry.has_discovery_errors() is True
        assert "bad.md" in registry.get_formatted_errors()
