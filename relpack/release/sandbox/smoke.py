# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Smoke test against the installed packages.

Drops the repository's example program into the sandbox and runs it. The
child gets the package-root variable pointed at the sandbox's isolated state
directory, so the run never reads or writes a real user's package state.

There is no partial credit: any non-zero exit fails the release.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ReleaseIOError
from relpack.release.sandbox.installer import Sandbox
from relpack.release.tools.process import run_tool

_logger: logging.Logger = get_logger(__name__)


def run_smoke_test(
    sandbox: Sandbox,
    script_source: str,
    script_name: str,
    command: Sequence[str],
    env: Mapping[str, str],
) -> None:
    """
    Write the example script into the sandbox and execute it.

    Args:
        sandbox: Provisioned sandbox with both packages installed.
        script_source: Contents of the example program.
        script_name: File name to write it under.
        command: Command line that runs it, relative to the sandbox.
        env: Variables merged over the current environment for the child.

    Raises:
        ReleaseIOError: If the script cannot be written.
        ExternalToolError: If the script exits non-zero or cannot be launched.
    """
    script_path = sandbox.path / script_name
    try:
        script_path.write_text(script_source, encoding="utf-8")
    except OSError as err:
        raise ReleaseIOError(f"Cannot write smoke test script {script_path}: {err}") from err

    _logger.info(
        "Running smoke test",
        extra={"command": list(command), "sandbox": str(sandbox.path), "env": dict(env)},
    )
    run_tool(command, cwd=sandbox.path, env=env)
    _logger.info("Smoke test passed", extra={"script": script_name})
