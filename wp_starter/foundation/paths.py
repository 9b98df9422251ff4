"""Path normalization and project-root resolution."""

from __future__ import annotations

import os
import re
from pathlib import Path

_PREFIX_RE = re.compile(r"^([0-9a-z]{2,}:(?://(?:[a-z]:)?)?|[a-z]:)", re.IGNORECASE)
_DRIVE_RE = re.compile(r"(^|://)([a-z]):$", re.IGNORECASE)


def normalize_path(path: str) -> str:
    """Normalize separators and redundant segments of a path.

    Backslashes become forward slashes, empty and `.` segments are removed, UNC
    (`//`), drive (`C:`) and protocol (`scheme://`) prefixes are preserved. `..`
    segments are kept as they are.
    """

    path = path.replace("\\", "/")

    absolute = ""
    if path.startswith("//") and len(path) > 2:
        absolute = "//"
        path = path[2:]

    prefix = ""
    match = _PREFIX_RE.match(path)
    if match:
        prefix = match.group(1)
        path = path[len(prefix) :]

    if path.startswith("/"):
        absolute = "/"
        path = path[1:]

    parts = [chunk for chunk in path.split("/") if chunk not in ("", ".")]
    prefix = _DRIVE_RE.sub(lambda m: m.group(1) + m.group(2).upper(), prefix)

    return prefix + absolute + "/".join(parts)


def is_absolute_path(path: str) -> bool:
    return path.startswith("/") or path[1:3] in (":/", ":\\") or "://" in path


class Paths:
    """Project root holder used to resolve paths relative to the project."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = normalize_path(str(Path(root).resolve()))

    def root(self, relative: str = "") -> str:
        if not relative:
            return self._root
        return normalize_path(f"{self._root}/{relative}")

    def __repr__(self) -> str:
        return f"Paths(root={self._root!r})"
