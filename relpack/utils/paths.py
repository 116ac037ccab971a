# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for relpack.

Config paths are relative to the project root (the repository being
released). Everything that touches disk resolves through here so that the
pipeline never depends on whatever directory the user happened to be in.
"""

from pathlib import Path
from typing import Optional


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """
    Walk up from `start` (default: the current directory) to the nearest
    directory holding a package.json.

    The release script is always run from inside the repository it packages,
    and that repository is identified by its npm manifest.

    Raises:
        RuntimeError: If no package.json is found in any ancestor directory.
    """
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / "package.json").is_file():
            return candidate
    raise RuntimeError(
        f"Cannot find project root. No package.json found in {current} or any ancestor directory."
    )


def resolve_under(root: Path, relative: str) -> Path:
    """Resolve a config path against `root`; absolute paths pass through unchanged."""
    candidate = Path(relative)
    if candidate.is_absolute():
        return candidate
    return (root / candidate).resolve()


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and parents) if it doesn't exist. Returns the path for chaining.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path
