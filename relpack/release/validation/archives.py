# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Stray archive detection for distribution directories.

A package directory must never contain an archive at its top level right
before it is packed. If one is there, it is either a leftover from an earlier
run or a packaging tool that wrote its output in the wrong place, and npm
would happily pack it inside the new archive.

Only immediate entries are checked. Subdirectories are package content and
may legitimately hold archives.
"""

import logging
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.exceptions import NestedArchiveError, ReleaseIOError

_logger: logging.Logger = get_logger(__name__)

DISALLOWED_ARCHIVE_SUFFIXES: tuple[str, ...] = (".tgz", ".tar.gz", ".zip")


def is_archive_name(name: str) -> bool:
    """Whether a file name ends in one of the disallowed archive suffixes."""
    return name.endswith(DISALLOWED_ARCHIVE_SUFFIXES)


def find_archives(directory: Path) -> list[Path]:
    """Immediate entries of `directory` whose names look like archives, sorted by name."""
    return sorted(entry for entry in directory.iterdir() if is_archive_name(entry.name))


def validate_no_archives(directory: Path) -> None:
    """
    Fail if `directory` holds an archive among its immediate entries.

    Raises:
        NestedArchiveError: Naming the first offending file.
        ReleaseIOError: If the directory cannot be listed.
    """
    try:
        archives = find_archives(directory)
    except OSError as err:
        raise ReleaseIOError(f"Cannot list package directory {directory}: {err}") from err

    if archives:
        _logger.error(
            "Bad filename in package dir",
            extra={"directory": str(directory), "files": [a.name for a in archives]},
        )
        raise NestedArchiveError(directory, archives[0].name)

    _logger.debug("No stray archives", extra={"directory": str(directory)})
