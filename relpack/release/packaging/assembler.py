# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Distribution directory assembly.

Builds one package's on-disk contents under <build_root>/<package_name>/:

    build/<package_name>/
    ├─ README.md       # fixed pointer to the project homepage
    ├─ package.json    # derived manifest (written by the populate routine)
    └─ ...             # artifacts produced by the populate routine

What goes in besides the README is up to the caller-supplied `populate`
routine (run the bundler, copy compiled binding files, write the manifest).
After it returns, the directory is checked for stray archives.

The working directory is never touched here; everything is addressed by
absolute path.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ReleaseIOError
from relpack.release.validation.archives import validate_no_archives
from relpack.utils.filesystem import atomic_write, remove_tree
from relpack.utils.paths import ensure_directory

_logger: logging.Logger = get_logger(__name__)

README_NAME = "README.md"

Populate = Callable[[Path], None]


def render_readme(homepage: str) -> str:
    return f"See {homepage}\n"


def assemble_distribution(
    build_root: Path,
    package_name: str,
    clean: bool,
    populate: Populate,
    homepage: str,
) -> Path:
    """
    Create and fill the distribution directory for one package.

    With `clean` set, any previous directory for the package is removed
    first, so two runs with the same inputs and a deterministic `populate`
    produce the same bytes.

    Args:
        build_root: Shared build-output root.
        package_name: Directory name under `build_root`.
        clean: Remove the previous directory before assembling.
        populate: Called with the directory path to produce the artifacts.
        homepage: URL the README points to.

    Returns:
        Absolute path of the distribution directory.

    Raises:
        ReleaseIOError: If the directory or README cannot be written.
        NestedArchiveError: If `populate` left an archive at the top level.
    """
    dist_dir = (build_root / package_name).resolve()

    try:
        if clean and remove_tree(dist_dir):
            _logger.info("Removed previous package dir", extra={"dist_dir": str(dist_dir)})
        ensure_directory(dist_dir)
        atomic_write(dist_dir / README_NAME, render_readme(homepage))
    except OSError as err:
        raise ReleaseIOError(f"Cannot prepare package dir {dist_dir}: {err}") from err

    _logger.info(
        "Populating package dir",
        extra={"package": package_name, "dist_dir": str(dist_dir)},
    )
    populate(dist_dir)

    validate_no_archives(dist_dir)

    _logger.info(
        "Package dir assembled",
        extra={
            "package": package_name,
            "dist_dir": str(dist_dir),
            "file_count": len(list(dist_dir.iterdir())),
        },
    )
    return dist_dir
