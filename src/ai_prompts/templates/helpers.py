"""Helper functions available to templates.

Helpers are callable from template source (``{{upper name}}``). The
``_utils`` mapping is injected into every render context unless disabled
(``{{_utils.truncate description 40}}``).
"""

import json
import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

logger = logging.getLogger(__name__)

Helper = Callable[..., Any]


def _capitalize_first(value: Any) -> str:
    s = str(value)
    return s[:1].upper() + s[1:]


def _length(value: Any) -> int:
    try:
        return len(value)
    except TypeError:
        return 0


DEFAULT_HELPERS: dict[str, Helper] = {
    # String manipulation
    "upper": lambda value: str(value).upper(),
    "lower": lambda value: str(value).lower(),
    "capitalize": _capitalize_first,
    # Comparison
    "eq": lambda a, b: a == b,
    "ne": lambda a, b: a != b,
    "gt": lambda a, b: a > b,
    "lt": lambda a, b: a < b,
    # Utility
    "json": lambda value: json.dumps(value, indent=2, default=str),
    "length": _length,
    "default": lambda value, fallback: value or fallback,
}


class HelperRegistry:
    """Named template helpers, each name registered at most once.

    Registering a name that is already present is a no-op, so the first
    definition of a helper wins for the lifetime of the registry.
    """

    def __init__(self, include_defaults: bool = True):
        self._helpers: dict[str, Helper] = {}
        if include_defaults:
            self.register_many(DEFAULT_HELPERS)

    def register(self, name: str, helper: Helper) -> bool:
        """Register a helper.

        Returns:
            True if registered, False if the name was already taken
        """
        if name in self._helpers:
            logger.debug(f"Helper '{name}' already registered, skipping")
            return False
        self._helpers[name] = helper
        return True

    def register_many(self, helpers: dict[str, Helper]) -> list[str]:
        """Register several helpers, returning the names actually registered."""
        return [name for name, helper in helpers.items() if self.register(name, helper)]

    def names(self) -> list[str]:
        return sorted(self._helpers)

    def as_dict(self) -> dict[str, Helper]:
        return dict(self._helpers)

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def __len__(self) -> int:
        return len(self._helpers)


def format_date(value: date | datetime | str, fmt: str = "%Y-%m-%d") -> str:
    """Format a date, datetime or ISO-8601 string."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime(fmt)


def truncate(value: Any, length: int) -> str:
    """Cut text to ``length`` characters, adding an ellipsis when cut."""
    s = str(value)
    return s[:length] + "..." if len(s) > length else s


def build_utils() -> dict[str, Helper]:
    """Build the ``_utils`` mapping exposed to template authors."""
    return {
        "format_date": format_date,
        "to_upper_case": lambda value: str(value).upper(),
        "to_lower_case": lambda value: str(value).lower(),
        "capitalize": lambda value: str(value)[:1].upper() + str(value)[1:].lower(),
        "truncate": truncate,
    }
