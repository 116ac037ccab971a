# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Parcel-backed Bundler.

Builds a browser-targeted bundle with a root public URL and no minification.
Debug builds only differ by NODE_ENV, which is what flips parcel (and the
code it bundles) between production and development behaviour.
"""

from collections.abc import Sequence
from pathlib import Path

from relpack.release.tools.interfaces import Bundler
from relpack.release.tools.process import run_tool


class ParcelBundler(Bundler):
    def __init__(self, command: Sequence[str], project_root: Path) -> None:
        self._command = list(command)
        self._project_root = project_root

    def build(self, entry_module: Path, out_dir: Path, production: bool) -> None:
        run_tool(
            [
                *self._command,
                str(entry_module),
                "--out-dir",
                str(out_dir),
                "--public-url",
                "/",
                "--target",
                "browser",
                "--no-minify",
            ],
            cwd=self._project_root,
            env={"NODE_ENV": "production" if production else "development"},
        )
