# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Archive packing.

npm pack only works on the current directory, so this is the one place the
pipeline changes the process working directory. The change is scoped by
`working_directory` and undone on every exit path, failures included.

npm drops the archive next to the sources it just packed. It is moved out
to the top of the build root straight away: left in place, the next
clean-less rebuild would either pack it into the new archive or trip the
stray-archive check.
"""

import logging
import os
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ExternalToolError, ReleaseIOError
from relpack.release.tools.interfaces import PackageManager
from relpack.release.validation.archives import find_archives
from relpack.utils.filesystem import working_directory

_logger: logging.Logger = get_logger(__name__)


def pack_distribution(
    dist_dir: Path,
    build_root: Path,
    package_manager: PackageManager,
) -> Path:
    """
    Pack `dist_dir` and relocate the archive to `build_root`.

    Args:
        dist_dir: Assembled distribution directory.
        build_root: Shared build-output root that receives the archive.
        package_manager: Tool that writes exactly one archive into the cwd.

    Returns:
        Absolute path of the relocated archive.

    Raises:
        ExternalToolError: If packing fails or does not yield exactly one archive.
        ReleaseIOError: If the archive cannot be moved.
    """
    with working_directory(dist_dir) as packing_dir:
        _logger.info("npm pack", extra={"dist_dir": str(packing_dir)})
        package_manager.pack()
        produced = find_archives(packing_dir)

    if len(produced) != 1:
        raise ExternalToolError(
            f"Expected exactly one archive in {dist_dir} after packing, "
            f"found {len(produced)}: {[p.name for p in produced]}"
        )

    archive = produced[0]
    destination = (build_root / archive.name).resolve()
    try:
        os.replace(archive, destination)
    except OSError as err:
        raise ReleaseIOError(f"Cannot move {archive} to {destination}: {err}") from err

    _logger.info(
        "Archive packed",
        extra={"archive": str(destination), "size_bytes": destination.stat().st_size},
    )
    return destination
