# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Abstract contracts for the external collaborators.

The pipeline never knows how bundling, compiling or packing is done. It
only relies on these narrow interfaces:

- Bundler.build(entry, out_dir, production)  -> writes files into out_dir
- BindingBuilder.build()                     -> compiles the native binding
- PackageManager.pack()                      -> writes one archive into the cwd
- PackageManager.install(archive, work_dir)  -> installs into work_dir

Concrete implementations drive the real CLIs; tests substitute fakes.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class Bundler(ABC):
    """Turns a source entry module into a deployable bundle."""

    @abstractmethod
    def build(self, entry_module: Path, out_dir: Path, production: bool) -> None:
        """
        Bundle `entry_module` into `out_dir`.

        The bundle is named after the entry module's stem, e.g. src/api.ts
        produces out_dir/api.js.
        """
        ...


class BindingBuilder(ABC):
    """Compiles the native binding into its configured output directory."""

    @abstractmethod
    def build(self) -> None:
        ...


class PackageManager(ABC):
    """Packs directories into archives and installs archives."""

    @abstractmethod
    def pack(self) -> None:
        """
        Pack the package in the current working directory.

        Operates relative to the process cwd, the way `npm pack` does; the
        caller is responsible for entering the right directory first.
        """
        ...

    @abstractmethod
    def install(self, archive: Path, work_dir: Path) -> None:
        """Install `archive` into the project at `work_dir`."""
        ...
