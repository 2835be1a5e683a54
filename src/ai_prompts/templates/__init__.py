"""
Prompt template discovery, collection and rendering.

Provides:
- YAML frontmatter / YAML descriptor template files
- A cached registry over directory discovery
- Interactive, typed parameter collection
- Jinja2 rendering of mustache-style template sources
"""

from ai_prompts.templates.collector import (
    ClickPrompter,
    CollectionResult,
    Prompter,
    collect_parameters,
    default_parameters,
)
from ai_prompts.templates.discovery import (
    DiscoveryError,
    DiscoveryResult,
    discover_templates,
    format_discovery_errors,
    parse_frontmatter,
)
from ai_prompts.templates.errors import (
    ParameterValidationError,
    TemplateError,
    TemplateFileSystemError,
    TemplateGenerationError,
    TemplateLoadError,
    TemplateNotFoundError,
    TemplateValidationError,
)
from ai_prompts.templates.formatting import (
    format_collected_parameters,
    format_generated_prompt,
    format_template_info,
    format_template_summary,
    format_templates_json,
)
from ai_prompts.templates.helpers import HelperRegistry
from ai_prompts.templates.models import (
    CollectedParameters,
    ParameterSchema,
    TemplateDefinition,
)
from ai_prompts.templates.registry import DiscoverySummary, TemplateRegistry
from ai_prompts.templates.renderer import (
    GenerationOptions,
    GenerationResult,
    TemplateRenderer,
)

__all__ = [
    # Models
    "CollectedParameters",
    "ParameterSchema",
    "TemplateDefinition",
    # Discovery
    "DiscoveryError",
    "DiscoveryResult",
    "discover_templates",
    "format_discovery_errors",
    "parse_frontmatter",
    # Registry
    "DiscoverySummary",
    "TemplateRegistry",
    # Collection
    "ClickPrompter",
    "CollectionResult",
    "Prompter",
    "collect_parameters",
    "default_parameters",
    # Rendering
    "GenerationOptions",
    "GenerationResult",
    "HelperRegistry",
    "TemplateRenderer",
    # Formatting
    "format_collected_parameters",
    "format_generated_prompt",
    "format_template_info",
    "format_template_summary",
    "format_templates_json",
    # Errors
    "ParameterValidationError",
    "TemplateError",
    "TemplateFileSystemError",
    "TemplateGenerationError",
    "TemplateLoadError",
    "TemplateNotFoundError",
    "TemplateValidationError",
]
