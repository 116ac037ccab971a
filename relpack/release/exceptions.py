# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error taxonomy for the release pipeline.

None of these are recovered where they are raised. Every one aborts the
current pipeline state and travels up to the orchestrator, which wraps it in
a PipelineStageError so the CLI can name the stage that failed.
"""

from pathlib import Path
from typing import Optional, Sequence

from relpack.release.pipeline.states import PipelineState


class ReleaseError(Exception):
    """Base for all release pipeline errors."""


class ManifestParseError(ReleaseError):
    """Raised when a manifest is not a well-formed JSON object."""


class NestedArchiveError(ReleaseError):
    """Raised when an archive file sits where none is allowed."""

    def __init__(self, directory: Path, filename: str) -> None:
        super().__init__(f"Stray archive '{filename}' found in package directory {directory}")
        self.directory = directory
        self.filename = filename


class ExternalToolError(ReleaseError):
    """
    Raised when an external tool (bundler, binding compiler, npm, the smoke
    test script) exits non-zero, cannot be launched, or produces an unexpected
    number of outputs.
    """

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command is not None else None
        self.exit_code = exit_code


class ReleaseIOError(ReleaseError):
    """Raised when a filesystem read, write, rename or link fails."""


class PipelineStageError(ReleaseError):
    """A failure inside one pipeline state, carrying the state and the cause."""

    def __init__(self, stage: PipelineState, cause: BaseException) -> None:
        super().__init__(f"Stage '{stage.value}' failed: {cause}")
        self.stage = stage
        self.cause = cause
