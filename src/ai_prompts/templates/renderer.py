"""Template rendering.

Compiles template sources with Jinja2 (after translating the mustache-style
authoring syntax), renders them against collected parameters and
normalizes whitespace in the output. Every failure is reported as a failed
GenerationResult rather than raised.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError, Undefined

from ai_prompts.templates.errors import (
    ParameterValidationError,
    TemplateGenerationError,
)
from ai_prompts.templates.helpers import Helper, HelperRegistry, build_utils
from ai_prompts.templates.models import CollectedParameters, TemplateDefinition
from ai_prompts.templates.syntax import translate

logger = logging.getLogger(__name__)

DEFAULT_MAX_TEMPLATE_SIZE = 100_000

_EXCESS_BLANK_LINES = re.compile(r"\n\s*\n\s*\n")
_HORIZONTAL_WHITESPACE = re.compile(r"[ \t]+")


@dataclass(frozen=True)
class GenerationOptions:
    """Options for template generation."""

    include_helpers: bool = True
    custom_helpers: dict[str, Helper] | None = None
    strict: bool = False  # fail on references to undefined variables
    max_template_size: int = DEFAULT_MAX_TEMPLATE_SIZE
    no_escape: bool = True  # raw characters in values pass through unescaped


@dataclass(frozen=True)
class GenerationMetadata:
    template_name: str
    parameters_used: tuple[str, ...]
    elapsed_ms: float


@dataclass(frozen=True)
class GenerationResult:
    """Result of rendering one template.

    The render context is exposed as a read-only mapping.
    """

    output: str
    success: bool
    metadata: GenerationMetadata
    context: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    error: str | None = None


def format_value(value: Any) -> Any:
    """Print booleans as true/false, integral floats as ints and None as nothing."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if value is None:
        return ""
    return value


def cleanup_output(output: str) -> str:
    """Collapse runs of blank lines, trim, and squeeze spaces and tabs."""
    output = _EXCESS_BLANK_LINES.sub("\n\n", output)
    output = output.strip()
    return _HORIZONTAL_WHITESPACE.sub(" ", output)


class TemplateRenderer:
    """Compiles and renders template definitions.

    Compiled templates are cached by template name for the lifetime of the
    renderer; call clear_cache() after a definition changes under the same
    name.
    """

    def __init__(
        self,
        options: GenerationOptions | None = None,
        helpers: HelperRegistry | None = None,
    ):
        self.options = options or GenerationOptions()
        self.helpers = helpers or HelperRegistry()
        self._compiled: dict[str, Template] = {}
        self._environments: dict[tuple[bool, bool], Environment] = {}

    def _environment(self, options: GenerationOptions) -> Environment:
        key = (options.strict, options.no_escape)
        env = self._environments.get(key)
        if env is None:
            env = Environment(  # nosec B701 - rendering plain-text prompts, not HTML
                autoescape=not options.no_escape,
                undefined=StrictUndefined if options.strict else Undefined,
                trim_blocks=True,
                lstrip_blocks=True,
                keep_trailing_newline=True,
                finalize=format_value,
            )
            env.globals.update(self.helpers.as_dict())
            self._environments[key] = env
        return env

    def register_helpers(self, helpers: dict[str, Helper]) -> list[str]:
        """Register helpers, skipping names that are already registered."""
        registered = self.helpers.register_many(helpers)
        for env in self._environments.values():
            for name in registered:
                env.globals[name] = self.helpers.as_dict()[name]
        return registered

    def compile(self, definition: TemplateDefinition, options: GenerationOptions) -> Template:
        """Compile a template, using the cache when possible.

        Raises:
            TemplateGenerationError: If the source is invalid or too large
        """
        cache_key = definition.name
        cached = self._compiled.get(cache_key)
        if cached is not None:
            return cached

        source = getattr(definition, "source", None)
        if not isinstance(source, str):
            raise TemplateGenerationError(
                f"Invalid template content in '{definition.name}': template must be a string",
                definition.name,
            )

        if len(source) > options.max_template_size:
            raise TemplateGenerationError(
                f"Template '{definition.name}' is too large: {len(source)} characters "
                f"(max: {options.max_template_size})",
                definition.name,
            )

        try:
            compiled = self._environment(options).from_string(translate(source))
        except (TemplateGenerationError, TemplateError, RecursionError) as e:
            raise TemplateGenerationError(
                f"Failed to compile template '{definition.name}': {e}", definition.name
            ) from e

        self._compiled[cache_key] = compiled
        logger.debug(f"Compiled template '{definition.name}'")
        return compiled

    def prepare_context(
        self,
        definition: TemplateDefinition,
        parameters: CollectedParameters,
        options: GenerationOptions,
    ) -> dict[str, Any]:
        """Build the render context from parameters plus reserved entries.

        Raises:
            ParameterValidationError: If a required parameter is missing
        """
        context: dict[str, Any] = dict(parameters)
        context["_template"] = {
            "name": definition.name,
            "description": definition.description,
        }
        if options.include_helpers:
            context["_utils"] = build_utils()

        for name, schema in definition.parameters.items():
            if schema.required and name not in parameters:
                raise ParameterValidationError(
                    f"Required parameter '{name}' is missing from context", name
                )

        return context

    def render_compiled(self, compiled: Template, context: dict[str, Any], template_name: str) -> str:
        """Render a compiled template and normalize its output.

        Raises:
            TemplateGenerationError: If rendering fails
        """
        try:
            output = compiled.render(context)
        except Exception as e:
            raise TemplateGenerationError(
                f"Template rendering failed: {e}", template_name
            ) from e

        if not isinstance(output, str):
            raise TemplateGenerationError(
                "Template rendering produced non-string output", template_name
            )

        return cleanup_output(output)

    def render(
        self,
        definition: TemplateDefinition,
        parameters: CollectedParameters,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate a prompt from a template definition and collected parameters.

        Args:
            definition: Template to render
            parameters: Collected parameter values
            options: Per-call options used instead of the renderer's options

        Returns:
            GenerationResult; on failure output is empty and error is set
        """
        start = time.monotonic()
        merged = options or self.options

        try:
            if merged.custom_helpers:
                self.register_helpers(merged.custom_helpers)
            compiled = self.compile(definition, merged)
            context = self.prepare_context(definition, parameters, merged)
            output = self.render_compiled(compiled, context, definition.name)
        except (TemplateGenerationError, ParameterValidationError) as e:
            logger.warning(f"Template generation failed for '{definition.name}': {e}")
            return GenerationResult(
                output="",
                success=False,
                context=MappingProxyType({}),
                error=str(e),
                metadata=GenerationMetadata(
                    template_name=definition.name,
                    parameters_used=tuple(parameters),
                    elapsed_ms=(time.monotonic() - start) * 1000,
                ),
            )

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug(f"Generated prompt from '{definition.name}' in {elapsed_ms:.1f}ms")
        return GenerationResult(
            output=output,
            success=True,
            context=MappingProxyType(context),
            metadata=GenerationMetadata(
                template_name=definition.name,
                parameters_used=tuple(parameters),
                elapsed_ms=elapsed_ms,
            ),
        )

    def clear_cache(self) -> None:
        """Clear the compiled template cache."""
        self._compiled.clear()

    def get_cache_stats(self) -> dict[str, int]:
        return {
            "cached_templates": len(self._compiled),
            "registered_helpers": len(self.helpers),
        }

