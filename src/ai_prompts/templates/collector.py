"""Interactive parameter collection.

Prompts for every declared parameter of a template in declaration order,
applies defaults and converts answers to their declared types. Collection
is all-or-nothing: a single invalid value fails the whole collection and
no partial parameters are returned.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

import click

from ai_prompts.templates.errors import ParameterValidationError
from ai_prompts.templates.models import (
    CollectedParameters,
    ParameterSchema,
    ParameterType,
    ParameterValue,
    TemplateDefinition,
)

logger = logging.getLogger(__name__)

TRUE_STRINGS = frozenset({"true", "yes", "1"})
FALSE_STRINGS = frozenset({"false", "no", "0"})

Validator = Callable[[Any], Any]


class Prompter(Protocol):
    """Asks the user for parameter values."""

    def ask(self, message: str, default: str | None, validate: Validator) -> Any: ...

    def confirm(self, message: str, default: bool | None) -> bool: ...


class ClickPrompter:
    """Prompter backed by click.prompt / click.confirm.

    Prompts are written to stderr so stdout only carries the generated prompt.
    """

    def ask(self, message: str, default: str | None, validate: Validator) -> Any:
        def value_proc(value: str) -> Any:
            try:
                return validate(value)
            except ParameterValidationError as e:
                raise click.BadParameter(str(e)) from e

        # An empty default lets click accept blank input and hand it to the validator
        return click.prompt(
            message,
            default=default if default is not None else "",
            show_default=False,
            value_proc=value_proc,
            err=True,
        )

    def confirm(self, message: str, default: bool | None) -> bool:
        return click.confirm(message, default=default, err=True)


@dataclass(frozen=True)
class CollectionResult:
    """Result of parameter collection, with parameters as a read-only mapping."""

    parameters: Mapping[str, ParameterValue] = field(
        default_factory=lambda: MappingProxyType({})
    )
    success: bool = True
    error: str | None = None


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def parse_number(name: str, value: Any) -> int | float:
    """Parse a number, preferring int for integral text.

    Raises:
        ParameterValidationError: If the value is not a number
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number: int | float = value
    else:
        text = str(value).strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                raise ParameterValidationError(
                    f"Invalid number value for parameter '{name}': {value}", name
                ) from None

    if isinstance(number, float) and math.isnan(number):
        raise ParameterValidationError(
            f"Invalid number value for parameter '{name}': {value}", name
        )
    return number


def parse_boolean(name: str, value: Any) -> bool:
    """Convert a boolean answer or default text to bool.

    Raises:
        ParameterValidationError: If a string is not a recognised boolean
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ParameterValidationError(
            f"Invalid boolean value for parameter '{name}': {value}", name
        )
    return bool(value)


def convert_parameter_value(name: str, value: Any, param_type: ParameterType) -> Any:
    """Convert a raw value to its declared type."""
    if param_type == "string":
        return str(value)
    if param_type == "number":
        return parse_number(name, value)
    if param_type == "boolean":
        return parse_boolean(name, value)
    raise ParameterValidationError(
        f"Unsupported parameter type for '{name}': {param_type}", name
    )


def validate_parameter_value(name: str, value: Any, schema: ParameterSchema) -> None:
    """Validate a candidate answer before it is accepted.

    Raises:
        ParameterValidationError: If the answer is not acceptable
    """
    if _is_empty(value):
        if schema.required:
            raise ParameterValidationError(f"Parameter '{name}' is required", name)
        return

    if schema.type == "string" and not isinstance(value, str):
        raise ParameterValidationError(f"Parameter '{name}' must be a string", name)
    if schema.type == "number":
        try:
            parse_number(name, value)
        except ParameterValidationError:
            raise ParameterValidationError(
                f"Parameter '{name}' must be a valid number", name
            ) from None
    if schema.type == "boolean" and not isinstance(value, bool):
        raise ParameterValidationError(f"Parameter '{name}' must be a boolean", name)


def create_validator(name: str, schema: ParameterSchema) -> Validator:
    def validate(value: Any) -> Any:
        validate_parameter_value(name, value, schema)
        return value

    return validate


def build_prompt_message(
    name: str,
    schema: ParameterSchema,
    show_descriptions: bool = True,
    prompt_prefix: str = "",
) -> str:
    """Build the prompt text: ``<prefix><name> (<description>) [<default>] *``."""
    message = f"{prompt_prefix}{name}"
    if show_descriptions and schema.description:
        message += f" ({schema.description})"
    default = schema.effective_default()
    if default is not None:
        message += f" [{default}]"
    if schema.required:
        message += " *"
    return message


def ask_parameter(
    prompter: Prompter,
    name: str,
    schema: ParameterSchema,
    show_descriptions: bool = True,
    prompt_prefix: str = "",
) -> Any:
    """Ask for one parameter using the prompt style of its type."""
    message = build_prompt_message(name, schema, show_descriptions, prompt_prefix)
    default = schema.effective_default()

    if schema.type == "boolean":
        confirm_default = default == "true" if default is not None else None
        return prompter.confirm(message, confirm_default)

    return prompter.ask(message, default, create_validator(name, schema))


def validate_and_convert_parameters(
    raw_answers: dict[str, Any],
    parameter_schemas: dict[str, ParameterSchema],
) -> CollectedParameters:
    """Apply defaults and convert every answer to its declared type.

    Optional parameters left empty without a default are omitted.

    Raises:
        ParameterValidationError: On the first missing or invalid value
    """
    parameters: CollectedParameters = {}

    for name, schema in parameter_schemas.items():
        final_value = raw_answers.get(name)
        default = schema.effective_default()
        if _is_empty(final_value) and default is not None:
            final_value = default

        if _is_empty(final_value):
            if schema.required:
                raise ParameterValidationError(f"Parameter '{name}' is required", name)
            continue

        parameters[name] = convert_parameter_value(name, final_value, schema.type)

    return parameters


def collect_parameters(
    definition: TemplateDefinition,
    *,
    show_descriptions: bool = True,
    prompt_prefix: str = "",
    prompter: Prompter | None = None,
) -> CollectionResult:
    """Collect parameters for a template using interactive prompts.

    Args:
        definition: Template whose parameters are collected
        show_descriptions: Include parameter descriptions in prompts
        prompt_prefix: Text prepended to every prompt
        prompter: Prompt implementation (default: ClickPrompter)

    Returns:
        CollectionResult; on failure parameters is empty and error is set
    """
    if not definition.parameters:
        logger.debug(f"Template '{definition.name}' declares no parameters")
        return CollectionResult(success=True)

    prompter = prompter or ClickPrompter()

    try:
        raw_answers = {
            name: ask_parameter(prompter, name, schema, show_descriptions, prompt_prefix)
            for name, schema in definition.parameters.items()
        }
        parameters = validate_and_convert_parameters(raw_answers, definition.parameters)
    except ParameterValidationError as e:
        logger.debug(f"Parameter collection failed for '{definition.name}': {e}")
        return CollectionResult(success=False, error=str(e))
    except click.Abort:
        return CollectionResult(success=False, error="Parameter collection aborted")

    return CollectionResult(parameters=MappingProxyType(parameters), success=True)


def default_parameters(definition: TemplateDefinition) -> CollectedParameters:
    """Collect parameters without prompting, using defaults only.

    Raises:
        ParameterValidationError: If a required parameter has no value
    """
    return validate_and_convert_parameters({}, definition.parameters)

