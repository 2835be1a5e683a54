"""Exception types for template discovery, collection and rendering."""

from pathlib import Path


class TemplateError(Exception):
    """Base exception for template errors."""

    pass


class TemplateLoadError(TemplateError):
    """Raised when a template file cannot be read or parsed."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = str(path) if path else None
        super().__init__(f"{message}" + (f": {path}" if path else ""))


class TemplateValidationError(TemplateError):
    """Raised when template data does not match the definition shape."""

    def __init__(self, message: str, details: list[str] | None = None):
        self.details = details or []
        super().__init__(message)


class TemplateFileSystemError(TemplateError):
    """Raised when the templates directory cannot be read."""

    pass


class TemplateNotFoundError(TemplateError):
    """Raised when a template name is not known to the registry."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        if available:
            suggestion = f" Available templates: {', '.join(available)}"
        else:
            suggestion = " No templates found."
        super().__init__(f'Template "{name}" not found.{suggestion}')


class ParameterValidationError(TemplateError):
    """Raised when a parameter value fails validation."""

    def __init__(self, message: str, parameter_name: str | None = None):
        self.parameter_name = parameter_name
        super().__init__(message)


class TemplateGenerationError(TemplateError):
    """Raised when a template fails to compile or render."""

    def __init__(self, message: str, template_name: str | None = None):
        self.template_name = template_name
        super().__init__(message)
