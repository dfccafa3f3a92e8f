"""Interpolation of ``{path:default}`` tokens against item variables.

A token is ``{`` key, optionally ``:`` default, then ``}``. The key is a
dotted path looked up segment by segment. Unresolvable tokens fall back to
their default, or are left in the text verbatim when no default is given.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

TOKEN_PATTERN = re.compile(r"\{([^}:]+)(?::([^}]*))?\}")

_MISSING = object()


def get_nested(variables: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted ``path`` in ``variables``.

    Mappings are traversed by key, lists and tuples by plain non-negative
    index (no sign, padding or underscores). A ``None`` value counts as
    missing, so it takes the default instead of rendering as ``null``.
    Returns ``_MISSING`` as soon as a segment cannot be followed.
    """
    current: Any = variables
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not (segment.isascii() and segment.isdigit()) or int(segment) >= len(current):
                return _MISSING
            current = current[int(segment)]
        else:
            return _MISSING
        if current is None:
            return _MISSING
    return current


def format_value(value: Any) -> str:
    """Render a resolved value as template text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def interpolate(template: str, variables: Mapping[str, Any]) -> str:
    """Replace every token in ``template`` using ``variables``."""

    def _replace(match: re.Match[str]) -> str:
        key, default = match.group(1), match.group(2)
        value = get_nested(variables, key)
        if value is not _MISSING:
            return format_value(value)
        # empty default behaves like no default
        return default or match.group(0)

    return TOKEN_PATTERN.sub(_replace, template)


__all__ = ["TOKEN_PATTERN", "format_value", "get_nested", "interpolate"]
