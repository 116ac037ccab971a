# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Version-aliased names for the build outputs.

For each package, build/<name>-<version> becomes a symlink to build/<name>.
The link target is stored relative (just "<name>"), so the build directory
can be moved or archived without breaking the aliases. Existing links are
replaced atomically, which makes re-running the finalizer harmless.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ReleaseIOError
from relpack.utils.filesystem import atomic_symlink

_logger: logging.Logger = get_logger(__name__)


def alias_name(package_name: str, version: str) -> str:
    return f"{package_name}-{version}"


def create_release_aliases(
    build_root: Path,
    package_names: Sequence[str],
    version: str,
) -> list[Path]:
    """
    Create or refresh `<build_root>/<name>-<version>` -> `<name>` for each package.

    Returns:
        The alias paths, in the order of `package_names`.

    Raises:
        ReleaseIOError: If a target directory is missing or a link cannot be made.
    """
    aliases: list[Path] = []
    for name in package_names:
        target = build_root / name
        if not target.exists():
            raise ReleaseIOError(f"Cannot alias {name}: {target} does not exist")

        link = build_root / alias_name(name, version)
        try:
            atomic_symlink(link, name)
        except OSError as err:
            raise ReleaseIOError(f"Cannot create alias {link}: {err}") from err

        _logger.info("Release alias", extra={"alias": str(link), "target": name})
        aliases.append(link)
    return aliases
