"""
Shared utilities for CLI commands.
"""

import logging
from pathlib import Path

import click

from ai_prompts.config.app import (
    AppConfig,
    get_templates_directory,
    get_templates_directory_source,
)
from ai_prompts.templates.registry import TemplateRegistry
from ai_prompts.templates.renderer import GenerationOptions, TemplateRenderer

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(verbose: bool = False, level: str = "warning") -> None:
    """
    Configure logging for CLI.

    Args:
        verbose: If True, enable DEBUG level logging
        level: Configured level used when not verbose
    """
    log_level = logging.DEBUG if verbose else LOG_LEVELS.get(level, logging.WARNING)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_templates_dir(ctx: click.Context) -> Path:
    """Resolve the templates directory, letting --templates-dir win over everything."""
    override: str | None = ctx.obj.get("templates_dir")
    if override:
        return Path(override).expanduser().resolve()
    config: AppConfig = ctx.obj["config"]
    return get_templates_directory(config)


def get_templates_dir_source(ctx: click.Context) -> str:
    """Describe where the templates directory used by this invocation comes from."""
    override: str | None = ctx.obj.get("templates_dir")
    if override:
        return f'option --templates-dir="{override}"'
    return get_templates_directory_source(ctx.obj["config"])


def get_registry(ctx: click.Context) -> TemplateRegistry:
    config: AppConfig = ctx.obj["config"]
    return TemplateRegistry(templates_dir=get_templates_dir(ctx), extension=config.extension)


def get_renderer(ctx: click.Context) -> TemplateRenderer:
    config: AppConfig = ctx.obj["config"]
    settings = config.generation
    options = GenerationOptions(
        include_helpers=settings.include_helpers,
        strict=settings.strict,
        max_template_size=settings.max_template_size,
        no_escape=settings.no_escape,
    )
    return TemplateRenderer(options=options)


def write_output(output_path: str | Path, content: str) -> Path:
    """
    Write generated content to a file, creating parent directories.

    Relative paths are resolved against the current working directory.

    Returns:
        The absolute path written
    """
    path = Path(output_path).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
