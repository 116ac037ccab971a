# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Single choke point for launching external tools.

Every npm, node and parcel invocation goes through `run_tool`. It runs the
command to completion (no timeout, the pipeline has no cancellation), turns
a non-zero exit or a missing executable into ExternalToolError, and logs the
outcome. Commands are always argument lists; shell=True is never used.

By default the tool's output is streamed to the inherited stdout/stderr so a
long npm install stays visible. Pass capture=True when the caller needs the
text, e.g. the archive name npm pack prints.
"""

import logging
import os
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Optional

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ExternalToolError

_logger: logging.Logger = get_logger(__name__)


def build_tool_env(extra: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """The current environment with `extra` layered on top."""
    env = dict(os.environ)
    if extra:
        env.update(extra)
    return env


def run_tool(
    command: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    capture: bool = False,
) -> subprocess.CompletedProcess[str]:
    """
    Run an external command and require it to succeed.

    Args:
        command: Executable and arguments.
        cwd: Working directory for the child. None inherits ours.
        env: Extra environment variables merged over os.environ.
        capture: Capture stdout/stderr as text instead of streaming them.

    Returns:
        The completed process (stdout/stderr are None unless captured).

    Raises:
        ExternalToolError: On a non-zero exit or if the executable is missing.
    """
    argv = [str(part) for part in command]
    start = time.monotonic()

    _logger.info(
        "Running external tool",
        extra={"command": argv, "cwd": str(cwd) if cwd is not None else os.getcwd()},
    )

    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            env=build_tool_env(env),
            capture_output=capture,
            text=True,
            check=False,
        )
    except FileNotFoundError as err:
        _logger.error("Executable not found", extra={"command": argv})
        raise ExternalToolError(f"Executable not found: {argv[0]}", command=argv) from err
    except OSError as err:
        raise ExternalToolError(f"Cannot launch {argv[0]}: {err}", command=argv) from err

    elapsed = time.monotonic() - start

    if result.returncode != 0:
        _logger.error(
            "External tool failed",
            extra={
                "command": argv,
                "exit_code": result.returncode,
                "elapsed_seconds": round(elapsed, 3),
                "stderr": (result.stderr or "").strip()[-2000:] if capture else None,
            },
        )
        raise ExternalToolError(
            f"{' '.join(argv)} exited with status {result.returncode}",
            command=argv,
            exit_code=result.returncode,
        )

    _logger.debug(
        "External tool finished",
        extra={"command": argv, "elapsed_seconds": round(elapsed, 3)},
    )
    return result
