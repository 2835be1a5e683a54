"""Template formatting helpers.

Functions for rendering templates, collected parameters and generated
prompts for display on the command line.
"""

import json
from collections.abc import Sequence

from ai_prompts.templates.models import CollectedParameters, TemplateDefinition
from ai_prompts.templates.renderer import GenerationResult

MAX_VALUE_DISPLAY_LENGTH = 50

RULE = "=" * 60


def format_templates_json(templates: Sequence[TemplateDefinition]) -> str:
    """Format a template list as a JSON string."""
    output = []
    for template in templates:
        item = {
            "name": template.name,
            "description": template.description,
            "parameters": {
                name: {
                    "description": param.description,
                    "required": param.required,
                    "type": param.type,
                    "default": param.effective_default(),
                }
                for name, param in template.parameters.items()
            },
            "source_path": template.source_path,
        }
        output.append(item)
    return json.dumps(output, indent=2)


def format_template_summary(template: TemplateDefinition) -> str:
    """Format a single template as a two-line list entry."""
    required = len(template.required_parameters())
    optional = len(template.optional_parameters())
    lines = [
        f"  {template.name}",
        f"    {template.description}",
    ]
    if template.parameters:
        lines.append(f"    Parameters: {required} required, {optional} optional")
    return "\n".join(lines)


def format_template_info(template: TemplateDefinition) -> str:
    """Format the full details of a template."""
    lines = [
        f"Template: {template.name}",
        f"Description: {template.description}",
    ]
    if template.source_path:
        lines.append(f"File: {template.source_path}")

    lines.append("")
    if not template.parameters:
        lines.append("Parameters: (none)")
        return "\n".join(lines)

    lines.append("Parameters:")
    for name, param in template.parameters.items():
        flag = "required" if param.required else "optional"
        lines.append(f"  {name} ({param.type}, {flag})")
        if param.description:
            lines.append(f"    {param.description}")
        default = param.effective_default()
        if default is not None:
            lines.append(f"    Default: {default!r}")
    return "\n".join(lines)


def format_collected_parameters(parameters: CollectedParameters, template_name: str) -> str:
    """Format collected parameters for display, truncating long values."""
    lines = [f"Collected parameters for template '{template_name}':"]

    if not parameters:
        lines.append("  (No parameters)")
        return "\n".join(lines)

    for name, value in parameters.items():
        display = str(value)
        if len(display) > MAX_VALUE_DISPLAY_LENGTH:
            display = display[: MAX_VALUE_DISPLAY_LENGTH - 3] + "..."
        lines.append(f"  • {name}: {display}")

    return "\n".join(lines)


def format_generated_prompt(result: GenerationResult) -> str:
    """Frame a generated prompt between rules with its template name."""
    return "\n".join(
        [
            RULE,
            f"Generated prompt ({result.metadata.template_name})",
            RULE,
            result.output,
            RULE,
        ]
    )
