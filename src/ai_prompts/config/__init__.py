"""
Configuration package for ai-prompts.

Pydantic config models and the YAML/environment loading helpers.
"""

from ai_prompts.config.app import (
    DEFAULT_TEMPLATES_DIR,
    TEMPLATES_DIR_ENV_VAR,
    AppConfig,
    GenerationSettings,
    LoggingSettings,
    get_templates_directory,
    get_templates_directory_source,
    load_config,
    validate_templates_directory,
)

__all__ = [
    "DEFAULT_TEMPLATES_DIR",
    "TEMPLATES_DIR_ENV_VAR",
    "AppConfig",
    "GenerationSettings",
    "LoggingSettings",
    "get_templates_directory",
    "get_templates_directory_source",
    "load_config",
    "validate_templates_directory",
]
