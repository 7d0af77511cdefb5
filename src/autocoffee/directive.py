"""Inline compile directives.

A source file may pin its own compile options on its first line (or the
second, when the first is a shebang)::

    # out: ../lib/$1.js, bare: false, sourcemap: true

Recognized keys are ``out``, ``bare``, ``compress``, ``sourcemap``,
``inlinemap`` and ``header``. ``$1`` and ``$2`` in ``out`` expand to the
source file's stem and extension.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Any

from autocoffee.types import CompileParams

__all__ = [
    "DIRECTIVE_KEYS",
    "get_param",
    "parse_directive",
    "replace_placeholders",
    "to_boolean_value",
    "to_string_value",
]

logger = logging.getLogger(__name__)

DIRECTIVE_KEYS = ("out", "bare", "compress", "sourcemap", "inlinemap", "header")

_SHEBANG_RE = re.compile(r"^#!")
_COMMENT_RE = re.compile(r"^\s*#\s*(.*)")


def to_boolean_value(value: Any, default: bool = False) -> bool:
    """Coerce a directive or config value to a bool.

    Strings are true only when they equal ``"true"``; ``None`` yields
    *default*; anything else follows Python truthiness.
    """
    if isinstance(value, str):
        value = value == "true"
    if isinstance(value, bool):
        return value
    if value is None:
        return bool(default)
    return bool(value)


def to_string_value(value: Any, default: str = "") -> str:
    """Render any value as text for messages and path handling."""
    if isinstance(value, str):
        return value
    if value is None:
        return str(default)
    if isinstance(value, BaseException):
        return str(value) or type(value).__name__
    return str(value)


def get_param(param_string: str, key: str) -> str:
    """Return the trimmed value for *key*, or ``""`` if it is absent."""
    match = re.search(rf"\b{re.escape(key)}\s*:\s*([^,]+)", param_string)
    if match is None:
        return ""
    return match.group(1).strip()


def replace_placeholders(out_path: str, source_path: str) -> str:
    """Expand ``$1`` (source stem) and ``$2`` (extension without the dot)."""
    name = posixpath.basename(source_path.replace("\\", "/"))
    stem, ext = posixpath.splitext(name)
    return out_path.replace("$1", stem).replace("$2", ext[1:])


def _directive_line(text: str) -> str:
    lines = text.splitlines()
    if not lines:
        return ""
    first = lines[0]
    if _SHEBANG_RE.match(first):
        return lines[1] if len(lines) > 1 else ""
    return first


def parse_directive(text: str, source_path: str) -> CompileParams | None:
    """Parse the inline directive of a source file.

    Returns ``None`` when the directive line is not a comment or names none
    of the recognized keys. Otherwise every option comes from the directive:
    a missing ``out`` is an empty string and a missing flag is ``False``.
    """
    match = _COMMENT_RE.match(_directive_line(text))
    if match is None:
        return None
    param_string = match.group(1).strip()
    if not param_string:
        return None

    values = {key: get_param(param_string, key) for key in DIRECTIVE_KEYS}
    if not any(values.values()):
        logger.debug("Leading comment in %s is not a directive", source_path)
        return None

    params = CompileParams(
        output=replace_placeholders(values["out"], source_path),
        bare=to_boolean_value(values["bare"]),
        compress=to_boolean_value(values["compress"]),
        source_map=to_boolean_value(values["sourcemap"]),
        inline_map=to_boolean_value(values["inlinemap"]),
        header=to_boolean_value(values["header"]),
    )
    logger.debug("Inline directive for %s: %s", source_path, params)
    return params
