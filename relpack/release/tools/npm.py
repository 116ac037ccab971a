# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""npm-backed PackageManager."""

import logging
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.tools.interfaces import PackageManager
from relpack.release.tools.process import run_tool

_logger: logging.Logger = get_logger(__name__)


class NpmClient(PackageManager):
    """Drives the npm CLI. `executable` may be a path or a name on PATH."""

    def __init__(self, executable: str = "npm") -> None:
        self._executable = executable

    def pack(self) -> None:
        result = run_tool([self._executable, "pack"], capture=True)
        lines = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
        _logger.info("npm pack", extra={"reported": lines[-1] if lines else None})

    def install(self, archive: Path, work_dir: Path) -> None:
        run_tool([self._executable, "install", str(archive)], cwd=work_dir)
