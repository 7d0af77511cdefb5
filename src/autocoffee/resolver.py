"""Output path resolution.

Turns a saved source file, its workspace root and an optional output
template into the directory and file names a compile writes to. Everything
here is string manipulation on ``/``-separated paths; nothing touches the
filesystem, so the same template resolves identically on every platform.

Template forms, with ``/ws`` as the root and ``/ws/src/app.coffee`` saved::

    (none)            -> /ws/src/app.js
    $/dist/           -> /ws/dist/app.js
    dist/bundle.js    -> /ws/dist/bundle.js
    bundle.js         -> /ws/src/bundle.js
    ./lib/            -> /ws/src/lib/app.js
    ../../etc/        -> OutputPathError
"""

from __future__ import annotations

import logging
import posixpath
import re

from autocoffee.exceptions import OutputPathError
from autocoffee.types import ResolvedOutput

__all__ = [
    "fix_path",
    "is_within",
    "relative_to_root",
    "resolve_output",
]

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"\s*[\\/]\s*")


def fix_path(path: str) -> str:
    """Normalize every separator to ``/`` and drop whitespace around them."""
    return _SEPARATOR_RE.sub("/", path)


def is_within(path: str, root: str) -> bool:
    """Return True if *path* is *root* or lies beneath it.

    Both arguments must already be ``/``-separated. The comparison respects
    segment boundaries, so ``/ws2`` is not inside ``/ws``.
    """
    root = root.rstrip("/")
    if not root:
        return path.startswith("/")
    return path == root or path.startswith(root + "/")


def relative_to_root(path: str, root: str) -> str | None:
    """Return *path* relative to *root* without leading or trailing slashes.

    Returns ``None`` when *path* is outside *root*.
    """
    path = fix_path(path)
    root = fix_path(root).rstrip("/")
    if not is_within(path, root):
        return None
    return path[len(root) :].strip("/")


def _source_dir(source_path: str) -> str:
    return posixpath.dirname(source_path)


def _canonical(path: str) -> str:
    # normpath keeps a leading "//", which would never match a root prefix
    normalized = posixpath.normpath(path)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def resolve_output(
    source_path: str,
    workspace_root: str,
    output: str | None = None,
) -> ResolvedOutput:
    """Compute where the compiled form of *source_path* is written.

    Args:
        source_path: Absolute path of the saved source file.
        workspace_root: Absolute path of the workspace folder containing it.
        output: Output template from a directive or the configuration.
            Empty or ``None`` places the output beside the source.

    Returns:
        The canonical output directory and file names.

    Raises:
        OutputPathError: If the canonical directory is outside the root.
    """
    source_path = fix_path(source_path)
    root = _canonical(fix_path(workspace_root))
    source_dir = _source_dir(source_path)

    template = (output or "").strip()
    output_dir = template if template else source_dir + "/"
    output_dir = fix_path(output_dir)

    if output_dir.startswith("$"):
        output_dir = root.rstrip("/") + "/" + output_dir[1:]

    output_name = ""
    if output_dir.endswith(".js"):
        output_name = posixpath.basename(output_dir)
        output_dir = posixpath.dirname(output_dir) or "."

    if output_dir.startswith("."):
        output_dir = source_dir + "/" + output_dir

    if not output_dir.startswith("/") and not is_within(output_dir.rstrip("/"), root):
        output_dir = "/" + output_dir

    output_dir = output_dir.rstrip("/") + "/"

    if not is_within(output_dir.rstrip("/"), root):
        output_dir = root.rstrip("/") + output_dir

    canonical = _canonical(output_dir)
    if not is_within(canonical, root):
        logger.warning("Output %s for %s escapes workspace %s", canonical, source_path, root)
        raise OutputPathError(canonical, root)

    if not output_name:
        stem, _ext = posixpath.splitext(posixpath.basename(source_path))
        output_name = stem + ".js"

    return ResolvedOutput(
        output_dir=canonical,
        output_file_name=output_name,
        source_map_file_name=output_name + ".map",
    )
