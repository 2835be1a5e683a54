"""
ai-prompts CLI entry point.
"""

import click

from ai_prompts import __version__
from ai_prompts.config.app import load_config

from .templates import generate_cmd, info_cmd, list_templates_cmd
from .utils import setup_logging


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to custom configuration file",
)
@click.option(
    "--templates-dir",
    type=click.Path(file_okay=False),
    help="Directory to search for templates (overrides AI_PROMPTS_TEMPLATES_DIR)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="ai-prompts")
@click.pass_context
def cli(ctx: click.Context, config: str | None, templates_dir: str | None, verbose: bool) -> None:
    """ai-prompts - Generate AI prompts from reusable templates."""
    ctx.ensure_object(dict)
    try:
        app_config = load_config(config)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    setup_logging(verbose, app_config.logging.level)

    # Store config in context for subcommands
    ctx.obj["config"] = app_config
    ctx.obj["templates_dir"] = templates_dir


# Register commands
cli.add_command(list_templates_cmd)
cli.add_command(list_templates_cmd, name="ls")
cli.add_command(info_cmd)
cli.add_command(generate_cmd)
cli.add_command(generate_cmd, name="gen")
