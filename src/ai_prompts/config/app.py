"""
Configuration management for ai-prompts.

Provides YAML-based configuration with CLI overrides,
configuration hierarchy (CLI > YAML > Defaults), and validation.
The templates directory additionally honours the
AI_PROMPTS_TEMPLATES_DIR environment variable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

TEMPLATES_DIR_ENV_VAR = "AI_PROMPTS_TEMPLATES_DIR"
HOME_ENV_VAR = "AI_PROMPTS_HOME"

# Bundled templates shipped with the package
DEFAULT_TEMPLATES_DIR = Path(__file__).parent.parent / "install" / "shared" / "templates"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Log level",
    )


class GenerationSettings(BaseModel):
    """Template rendering configuration."""

    max_template_size: int = Field(
        default=100_000,
        description="Maximum template source length in characters",
    )
    strict: bool = Field(
        default=False,
        description="Fail on references to undefined variables",
    )
    no_escape: bool = Field(
        default=True,
        description="Disable HTML escaping of interpolated values",
    )
    include_helpers: bool = Field(
        default=True,
        description="Expose the _utils helper functions to templates",
    )

    @field_validator("max_template_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate value is positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v


class AppConfig(BaseModel):
    """
    Main configuration for ai-prompts.

    Configuration is loaded with the following priority:
    1. CLI arguments (highest)
    2. YAML file (~/.ai-prompts/config.yaml)
    3. Defaults (lowest)

    The AI_PROMPTS_TEMPLATES_DIR environment variable takes precedence
    over templates_dir from any of these sources.
    """

    templates_dir: str | None = Field(
        default=None,
        description="Directory to search for templates (default: bundled templates)",
    )
    extension: str = Field(
        default=".md",
        description="File extension of template files",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )
    generation: GenerationSettings = Field(
        default_factory=GenerationSettings,
        description="Template rendering configuration",
    )

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Validate extension is non-empty and dotted."""
        if not v:
            raise ValueError("extension must not be empty")
        return v if v.startswith(".") else f".{v}"


def get_app_home() -> Path:
    """Get the ai-prompts home directory, respecting AI_PROMPTS_HOME.

    Returns:
        Path to home (~/.ai-prompts by default, or AI_PROMPTS_HOME if set)
    """
    home = os.environ.get(HOME_ENV_VAR)
    if home:
        return Path(home)
    return Path.home() / ".ai-prompts"


def default_config_file() -> Path:
    return get_app_home() / "config.yaml"


def get_templates_directory(config: AppConfig | None = None) -> Path:
    """
    Get the templates directory from environment variable, config or default.

    Args:
        config: Optional loaded configuration

    Returns:
        Absolute path to templates directory
    """
    env_dir = os.environ.get(TEMPLATES_DIR_ENV_VAR)
    if env_dir:
        templates_dir = Path(env_dir)
    elif config is not None and config.templates_dir:
        templates_dir = Path(config.templates_dir)
    else:
        templates_dir = DEFAULT_TEMPLATES_DIR

    return templates_dir.expanduser().resolve()


def get_templates_directory_source(config: AppConfig | None = None) -> str:
    """Describe where the templates directory is configured."""
    env_dir = os.environ.get(TEMPLATES_DIR_ENV_VAR)
    if env_dir:
        return f'environment variable {TEMPLATES_DIR_ENV_VAR}="{env_dir}"'
    if config is not None and config.templates_dir:
        return f'config templates_dir="{config.templates_dir}"'
    return "default location"


def validate_templates_directory(path: str | Path) -> bool:
    """Check that a templates directory exists and is readable."""
    directory = Path(path)
    return directory.is_dir() and os.access(directory, os.R_OK)


def load_yaml(config_file: str | Path) -> dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_file: Path to YAML configuration file

    Returns:
        Dictionary with parsed YAML content

    Raises:
        ValueError: If YAML is invalid or file format is wrong
    """
    config_path = Path(config_file).expanduser()

    if not config_path.exists():
        return {}

    file_ext = config_path.suffix.lower()
    if file_ext not in [".yaml", ".yml"]:
        raise ValueError(
            f"Config file must have .yaml or .yml extension, got: {file_ext}\n"
            f"File: {config_path}"
        )

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return data


def apply_cli_overrides(
    config_dict: dict[str, Any],
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Apply CLI argument overrides to config dictionary.

    None values are skipped so unset CLI options do not clobber the file.

    Args:
        config_dict: Configuration dictionary
        cli_overrides: Dictionary of CLI overrides, nested keys dotted ("logging.level")

    Returns:
        Configuration dictionary with CLI overrides applied
    """
    if cli_overrides is None:
        return config_dict

    for key, value in cli_overrides.items():
        if value is None:
            continue
        if "." in key:
            parts = key.split(".")
            current = config_dict
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = value
        else:
            config_dict[key] = value

    return config_dict


def load_config(
    config_file: str | Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration with hierarchy: CLI > YAML > Defaults.

    Args:
        config_file: Path to YAML config file (default: ~/.ai-prompts/config.yaml)
        cli_overrides: Dictionary of CLI argument overrides

    Returns:
        Validated AppConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = default_config_file()

    config_dict = load_yaml(config_file)
    config_dict = apply_cli_overrides(config_dict, cli_overrides)

    try:
        return AppConfig(**config_dict)
    except Exception as e:
        raise ValueError(
            f"Configuration validation failed: {e}\n"
            f"Please check your configuration file at {config_file}"
        ) from e
