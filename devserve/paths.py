"""Request path to on-disk path resolution, confined to the serving root."""
from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import Optional

DEFAULT_DOCUMENT = "index.html"

_LEADING_PARENTS = re.compile(r"^(\.\.(/|$))+")


def sanitize_path(pathname: str) -> str:
    """Normalize ``pathname`` and drop anything that would climb above the root.

    The result is always relative: ``""`` stands for the root itself.
    """
    normalized = posixpath.normpath(pathname.replace("\\", "/"))
    normalized = normalized.lstrip("/")
    normalized = _LEADING_PARENTS.sub("", normalized)
    if normalized in ("", "."):
        return ""
    return normalized


def strip_prefix(pathname: str, prefix: str = "") -> Optional[str]:
    if not prefix:
        return pathname
    if not pathname.startswith(prefix):
        return None
    return pathname[len(prefix):]


def is_within(root: Path, candidate: Path) -> bool:
    root_abs = os.path.abspath(root)
    candidate_abs = os.path.abspath(candidate)
    return os.path.commonpath([root_abs, candidate_abs]) == root_abs


def resolve_path(pathname: str, root: str | Path, prefix: str = "") -> Optional[Path]:
    """Join a sanitized request path onto ``root``.

    Returns None when a required ``prefix`` is configured and the path does not
    carry it, or when the path holds a NUL byte. Directories are not expanded
    here; see ``resolve_file``.
    """
    stripped = strip_prefix(pathname, prefix)
    if stripped is None or "\x00" in stripped:
        return None
    root_path = Path(root)
    relative = sanitize_path(stripped)
    candidate = root_path / relative if relative else root_path
    if not is_within(root_path, candidate):
        return None
    return candidate


def resolve_file(pathname: str, root: str | Path, prefix: str = "") -> Optional[Path]:
    """Like ``resolve_path`` but re-resolves directories to their default document."""
    candidate = resolve_path(pathname, root, prefix)
    if candidate is None:
        return None
    if candidate.is_dir():
        candidate = candidate / DEFAULT_DOCUMENT
    return candidate
