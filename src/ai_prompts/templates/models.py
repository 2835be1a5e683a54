"""Template definition models.

Template files are parsed into these models at the discovery boundary.
Field types are strict so that YAML scalars are not silently coerced: a
``required: "yes"`` or ``default: 5`` is a validation error, not a guess.
"""

from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
)

from ai_prompts.templates.errors import TemplateValidationError

ParameterType = Literal["string", "number", "boolean"]

ParameterValue = str | int | float | bool

# Collected values keyed by parameter name
CollectedParameters = dict[str, ParameterValue]


class ParameterSchema(BaseModel):
    """A single named input a template requires or accepts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    description: StrictStr
    required: StrictBool
    type: ParameterType
    default_value: StrictStr | None = Field(
        default=None,
        validation_alias=AliasChoices("default_value", "defaultValue", "default"),
        description="Default for optional parameters, coerced to the declared type at use time",
    )

    def effective_default(self) -> str | None:
        """Return the default that applies, which is never set for required parameters."""
        if self.required:
            return None
        return self.default_value


class TemplateDefinition(BaseModel):
    """A renderable prompt template and its parameters.

    Instances are frozen: fields cannot be reassigned. The parameters dict
    is shared with the registry and must be treated as read-only.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: StrictStr = Field(min_length=1)
    description: StrictStr
    source: StrictStr = Field(validation_alias=AliasChoices("source", "template"))
    parameters: dict[StrictStr, ParameterSchema]
    source_path: StrictStr | None = Field(
        default=None,
        description="File the template was loaded from",
    )

    def required_parameters(self) -> list[str]:
        return [name for name, param in self.parameters.items() if param.required]

    def optional_parameters(self) -> list[str]:
        return [name for name, param in self.parameters.items() if not param.required]


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into ``field: message`` fragments."""
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def validate_template_data(data: Any, source_path: str | None = None) -> TemplateDefinition:
    """Parse untyped template data into a TemplateDefinition.

    Raises:
        TemplateValidationError: If the data does not match the definition shape
    """
    if not isinstance(data, dict):
        raise TemplateValidationError(
            f"Template configuration must be a mapping, got {type(data).__name__}"
        )

    payload = dict(data)
    payload["source_path"] = source_path
    try:
        return TemplateDefinition.model_validate(payload)
    except ValidationError as e:
        details = describe_validation_error(e)
        raise TemplateValidationError(
            f"Template configuration does not match required structure: {details}",
            details=details.split("; "),
        ) from e
