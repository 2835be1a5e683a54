"""Template discovery.

Walks a templates directory, parses every candidate file into a
TemplateDefinition and collects per-file errors. A bad file never aborts
the pass: the result carries every template that loaded plus the errors
for the ones that did not.

Template files are descriptor files, not code:
- ``*.md`` (default): YAML frontmatter with name/description/parameters,
  the body after the frontmatter is the template source
- ``*.yaml`` / ``*.yml``: one mapping holding every field, including source
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import aiofiles
import yaml

from ai_prompts.config.app import get_templates_directory
from ai_prompts.templates.errors import (
    TemplateFileSystemError,
    TemplateLoadError,
    TemplateValidationError,
)
from ai_prompts.templates.models import TemplateDefinition, validate_template_data

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".md"

YAML_SUFFIXES = (".yaml", ".yml")

_FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)

DiscoveryErrorKind = Literal["load", "validation", "file-system"]


@dataclass(frozen=True)
class DiscoveryError:
    """Error encountered while discovering a template."""

    file_path: str
    kind: DiscoveryErrorKind
    message: str


@dataclass(frozen=True)
class DiscoveryResult:
    """Templates indexed by name plus the errors of one discovery pass."""

    templates: dict[str, TemplateDefinition] = field(default_factory=dict)
    errors: list[DiscoveryError] = field(default_factory=list)


def parse_frontmatter(content: str) -> tuple[Any, str]:
    """Parse YAML frontmatter from template content.

    Args:
        content: Raw file content

    Returns:
        Tuple of (frontmatter data, body content). Content without a
        frontmatter block yields an empty dict and the full content.

    Raises:
        TemplateLoadError: If the frontmatter is not valid YAML
    """
    match = _FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content

    try:
        frontmatter = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise TemplateLoadError(f"Invalid YAML frontmatter ({e})") from e

    if frontmatter is None:
        frontmatter = {}
    return frontmatter, content[match.end() :]


def parse_template_content(content: str, path: Path) -> Any:
    """Turn raw file content into untyped template data based on the file suffix."""
    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise TemplateLoadError(f"Invalid YAML ({e})", path) from e

    try:
        frontmatter, body = parse_frontmatter(content)
    except TemplateLoadError as e:
        raise TemplateLoadError(str(e), path) from e

    if isinstance(frontmatter, dict) and "source" not in frontmatter and "template" not in frontmatter:
        frontmatter = {**frontmatter, "source": body.strip()}
    return frontmatter


async def load_template_file(path: str | Path) -> TemplateDefinition:
    """Load and validate a template from a file.

    Raises:
        TemplateLoadError: If the file cannot be read or parsed
        TemplateValidationError: If the content is not a valid template
    """
    path = Path(path)
    try:
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateLoadError(f"Failed to read template file ({e})", path) from e

    data = parse_template_content(content, path)
    return validate_template_data(data, source_path=str(path))


def find_template_files(
    directory: Path,
    extension: str = DEFAULT_EXTENSION,
    _visited: set[Path] | None = None,
) -> list[Path]:
    """Recursively find template files below a directory.

    Raises:
        TemplateFileSystemError: If any directory cannot be read
    """
    visited = _visited if _visited is not None else set()
    visited.add(directory.resolve())

    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        raise TemplateFileSystemError(f"Failed to read directory {directory}: {e}") from e

    files: list[Path] = []
    for entry in entries:
        try:
            is_dir = entry.is_dir()
            is_file = not is_dir and entry.is_file()
            resolved = entry.resolve() if is_dir else None
        except (OSError, RuntimeError) as e:
            raise TemplateFileSystemError(f"Failed to inspect {entry}: {e}") from e

        if is_dir:
            if resolved in visited:
                logger.debug(f"Skipping already visited directory {entry}")
                continue
            files.extend(find_template_files(entry, extension, visited))
        elif is_file and entry.name.endswith(extension):
            files.append(entry)

    return files


async def discover_templates(
    templates_dir: str | Path | None = None,
    extension: str = DEFAULT_EXTENSION,
) -> DiscoveryResult:
    """Discover and load all templates from a templates directory.

    Files are loaded one at a time in path order. Duplicate names are not
    an error: the template loaded last wins.

    Args:
        templates_dir: Directory to search (default: configured templates directory)
        extension: File extension to search for

    Returns:
        DiscoveryResult with templates and any errors
    """
    if templates_dir is None:
        directory = get_templates_directory()
    else:
        directory = Path(templates_dir).expanduser().resolve()

    templates: dict[str, TemplateDefinition] = {}
    errors: list[DiscoveryError] = []

    try:
        template_files = find_template_files(directory, extension)
    except TemplateFileSystemError as e:
        logger.warning(f"Failed to access templates directory {directory}: {e}")
        errors.append(
            DiscoveryError(
                file_path=str(directory),
                kind="file-system",
                message=f"Failed to access templates directory: {e}",
            )
        )
        return DiscoveryResult(templates={}, errors=errors)

    for path in template_files:
        try:
            template = await load_template_file(path)
        except TemplateValidationError as e:
            logger.warning(f"Invalid template {path}: {e}")
            errors.append(DiscoveryError(file_path=str(path), kind="validation", message=str(e)))
            continue
        except TemplateLoadError as e:
            logger.warning(f"Failed to load template {path}: {e}")
            errors.append(
                DiscoveryError(
                    file_path=str(path),
                    kind="load",
                    message=f"Failed to load template: {e}",
                )
            )
            continue

        if template.name in templates:
            logger.warning(
                f"Template '{template.name}' from {path} replaces the one from "
                f"{templates[template.name].source_path}"
            )
        templates[template.name] = template

    logger.debug(f"Discovered {len(templates)} template(s) with {len(errors)} error(s) in {directory}")
    return DiscoveryResult(templates=templates, errors=errors)


def get_template(
    templates: dict[str, TemplateDefinition], template_name: str
) -> TemplateDefinition | None:
    return templates.get(template_name)


def get_template_names(templates: dict[str, TemplateDefinition]) -> list[str]:
    """Return template names sorted lexicographically."""
    return sorted(templates)


def format_discovery_errors(errors: list[DiscoveryError]) -> str:
    """Format discovery errors for user display."""
    if not errors:
        return ""

    lines = [
        f"Found {len(errors)} error{'' if len(errors) == 1 else 's'} while discovering templates:",
        "",
    ]
    for error in errors:
        lines.append(f"• {error.file_path}")
        lines.append(f"  {error.kind.upper()}: {error.message}")
        lines.append("")

    return "\n".join(lines)
