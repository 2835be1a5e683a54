"""In-memory registry of discovered templates."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from ai_prompts.templates.discovery import (
    DEFAULT_EXTENSION,
    DiscoveryError,
    DiscoveryResult,
    discover_templates,
    format_discovery_errors,
    get_template_names,
)
from ai_prompts.templates.errors import TemplateNotFoundError
from ai_prompts.templates.models import TemplateDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoverySummary:
    """Summary of the last discovery pass."""

    discovered: bool
    template_count: int
    error_count: int
    has_errors: bool


class TemplateRegistry:
    """Caches discovery results and resolves templates by name.

    The cached DiscoveryResult is only ever replaced as a whole, so readers
    see either the previous pass or the new one. Concurrent discover()
    calls share a single in-flight discovery.

    Usage:
        registry = TemplateRegistry(templates_dir=Path("templates"))
        template = await registry.get_template("code-review")
    """

    def __init__(
        self,
        templates_dir: str | Path | None = None,
        extension: str = DEFAULT_EXTENSION,
    ):
        """Initialize the registry.

        Args:
            templates_dir: Directory to discover (default: configured templates directory)
            extension: Template file extension
        """
        self.templates_dir = templates_dir
        self.extension = extension
        self._last_discovery: DiscoveryResult | None = None
        self._inflight: asyncio.Future[DiscoveryResult] | None = None

    async def discover(self, force: bool = False) -> DiscoveryResult:
        """Discover templates, returning the cached result unless forced.

        Args:
            force: Re-discover even if a result is cached

        Returns:
            DiscoveryResult of the last completed pass
        """
        if not force and self._last_discovery is not None:
            return self._last_discovery

        if self._inflight is not None:
            return await self._inflight

        inflight = asyncio.ensure_future(self._perform_discovery())
        self._inflight = inflight
        try:
            result = await inflight
        finally:
            self._inflight = None

        self._last_discovery = result
        logger.debug(
            f"Template discovery finished: {len(result.templates)} template(s), "
            f"{len(result.errors)} error(s)"
        )
        return result

    async def _perform_discovery(self) -> DiscoveryResult:
        return await discover_templates(self.templates_dir, self.extension)

    async def refresh(self) -> DiscoveryResult:
        """Re-discover templates, replacing the cached result."""
        return await self.discover(force=True)

    async def get_template(self, template_name: str) -> TemplateDefinition:
        """Get a template by name, discovering templates first if needed.

        Raises:
            TemplateNotFoundError: If the template doesn't exist
        """
        result = await self.discover()
        template = result.templates.get(template_name)
        if template is None:
            raise TemplateNotFoundError(template_name, get_template_names(result.templates))
        return template

    async def get_template_names(self) -> list[str]:
        """Get sorted template names, discovering templates first if needed."""
        result = await self.discover()
        return get_template_names(result.templates)

    def get_template_names_cached(self) -> list[str]:
        """Get sorted template names from the cache only (empty before discovery)."""
        if self._last_discovery is None:
            return []
        return get_template_names(self._last_discovery.templates)

    async def has_template(self, template_name: str) -> bool:
        result = await self.discover()
        return template_name in result.templates

    def get_discovery_errors(self) -> list[DiscoveryError]:
        """Errors from the last discovery pass, empty if none has run."""
        if self._last_discovery is None:
            return []
        return list(self._last_discovery.errors)

    def get_formatted_errors(self) -> str:
        return format_discovery_errors(self.get_discovery_errors())

    def has_discovery_errors(self) -> bool:
        return len(self.get_discovery_errors()) > 0

    def get_discovery_summary(self) -> DiscoverySummary:
        result = self._last_discovery
        if result is None:
            return DiscoverySummary(
                discovered=False,
                template_count=0,
                error_count=0,
                has_errors=False,
            )

        return DiscoverySummary(
            discovered=True,
            template_count=len(result.templates),
            error_count=len(result.errors),
            has_errors=len(result.errors) > 0,
        )
