# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Runs the repository's own native-binding build script."""

from collections.abc import Sequence
from pathlib import Path

from relpack.release.tools.interfaces import BindingBuilder
from relpack.release.tools.process import run_tool


class ScriptBindingBuilder(BindingBuilder):
    def __init__(self, command: Sequence[str], project_root: Path) -> None:
        self._command = list(command)
        self._project_root = project_root

    def build(self) -> None:
        run_tool(self._command, cwd=self._project_root)
