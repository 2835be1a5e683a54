"""Template listing, inspection and prompt generation commands."""

import asyncio
import logging
import sys

import click

from ai_prompts.cli.utils import (
    get_registry,
    get_renderer,
    get_templates_dir,
    get_templates_dir_source,
    write_output,
)
from ai_prompts.config.app import validate_templates_directory
from ai_prompts.templates.collector import collect_parameters, default_parameters
from ai_prompts.templates.discovery import format_discovery_errors, get_template_names
from ai_prompts.templates.errors import ParameterValidationError, TemplateNotFoundError
from ai_prompts.templates.formatting import (
    format_collected_parameters,
    format_generated_prompt,
    format_template_info,
    format_template_summary,
    format_templates_json,
)
from ai_prompts.templates.models import CollectedParameters, TemplateDefinition

logger = logging.getLogger(__name__)


def _load_template(ctx: click.Context, template_name: str) -> TemplateDefinition:
    registry = get_registry(ctx)
    try:
        return asyncio.run(registry.get_template(template_name))
    except TemplateNotFoundError as e:
        errors = registry.get_formatted_errors()
        if errors:
            click.echo(errors, err=True)
        raise click.ClickException(str(e)) from e


@click.command("list")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def list_templates_cmd(ctx: click.Context, json_format: bool) -> None:
    """List available prompt templates."""
    templates_dir = get_templates_dir(ctx)
    if not validate_templates_directory(templates_dir):
        raise click.ClickException(
            f"Templates directory is missing or unreadable: {templates_dir} "
            f"(from {get_templates_dir_source(ctx)})"
        )

    registry = get_registry(ctx)
    result = asyncio.run(registry.discover())

    if result.errors:
        click.echo(format_discovery_errors(result.errors), err=True)

    templates = [result.templates[name] for name in get_template_names(result.templates)]

    if json_format:
        click.echo(format_templates_json(templates))
        return

    if not templates:
        click.echo(f"No templates found in {templates_dir} (from {get_templates_dir_source(ctx)})")
        return

    click.echo(f"Available templates ({len(templates)}):")
    for template in templates:
        click.echo(format_template_summary(template))


@click.command("info")
@click.argument("template_name")
@click.pass_context
def info_cmd(ctx: click.Context, template_name: str) -> None:
    """Show details and parameters of a template."""
    template = _load_template(ctx, template_name)
    click.echo(format_template_info(template))


@click.command("generate")
@click.argument("template_name")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write the prompt to a file instead of stdout",
)
@click.option(
    "--interactive/--no-interactive",
    default=True,
    help="Prompt for parameters (--no-interactive uses defaults only)",
)
@click.pass_context
def generate_cmd(
    ctx: click.Context, template_name: str, output: str | None, interactive: bool
) -> None:
    """Generate a prompt from a template."""
    template = _load_template(ctx, template_name)
    click.echo(f"Using template: {template.name}", err=True)
    click.echo(f"  {template.description}", err=True)

    parameters: CollectedParameters
    if interactive:
        collection = collect_parameters(template)
        if not collection.success:
            raise click.ClickException(f"Parameter collection failed: {collection.error}")
        parameters = dict(collection.parameters)
    else:
        required = template.required_parameters()
        if required:
            raise click.ClickException(
                f"Template '{template.name}' requires parameters that cannot be "
                f"collected without --interactive: {', '.join(required)}"
            )
        try:
            parameters = default_parameters(template)
        except ParameterValidationError as e:
            raise click.ClickException(f"Parameter collection failed: {e}") from e

    if parameters:
        click.echo(format_collected_parameters(parameters, template.name), err=True)

    result = get_renderer(ctx).render(template, parameters)
    if not result.success:
        raise click.ClickException(f"Prompt generation failed: {result.error}")

    if output:
        path = write_output(output, result.output)
        click.echo(f"Prompt saved to: {path}", err=True)
    elif sys.stdout.isatty():
        click.echo(format_generated_prompt(result))
    else:
        click.echo(result.output)

    click.echo(f"Length: {len(result.output)} characters", err=True)
