# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Populate routines for the two packages the pipeline ships.

Each factory returns a callable that fills a distribution directory and
writes its derived manifest. The assembler calls it; nothing here knows
about packing or installing.

primary (propel):
    <entry stem>.js from the bundler, renamed to the configured main file,
    with an export footer appended so the bundle works both as a browser
    global and as a CommonJS module.

binding (propel_mac):
    the JS loader shim, the compiled .node binding, and the platform's
    shared libraries. Its manifest pins the primary package at the exact
    release version.
"""

import logging
import shutil
import sys
from collections.abc import Sequence
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ExternalToolError, ReleaseIOError
from relpack.release.manifests.manifest import derive_manifest, write_manifest
from relpack.release.packaging.assembler import Populate
from relpack.release.tools.interfaces import Bundler

_logger: logging.Logger = get_logger(__name__)

MANIFEST_NAME = "package.json"

# The parcel bundle registers the entry module as module id 1.
_EXPORT_FOOTER = """
      if (typeof window !== "undefined") {{
        {global_name} = require(1);
      }} else {{
        module.exports = require(1);
      }}
    """


def render_export_footer(global_name: str) -> str:
    return _EXPORT_FOOTER.format(global_name=global_name)


def _copy_into(source: Path, dist_dir: Path) -> Path:
    destination = dist_dir / source.name
    try:
        shutil.copyfile(source, destination)
    except OSError as err:
        raise ReleaseIOError(f"Cannot copy {source} into {dist_dir}: {err}") from err
    _logger.debug("Copied artifact", extra={"source": str(source), "dest": str(destination)})
    return destination


def platform_libraries(
    posix_libraries: Sequence[str],
    windows_libraries: Sequence[str],
    platform: str | None = None,
) -> list[str]:
    """Shared libraries the binding needs on `platform` (default: this one)."""
    current = platform if platform is not None else sys.platform
    return list(windows_libraries if current == "win32" else posix_libraries)


def make_primary_populator(
    bundler: Bundler,
    entry_module: Path,
    main: str,
    package_name: str,
    source_manifest: Path,
    production: bool,
) -> Populate:
    """Populate routine that bundles `entry_module` and writes the primary manifest."""

    def populate(dist_dir: Path) -> None:
        bundler.build(entry_module, dist_dir, production)

        generated = dist_dir / f"{entry_module.stem}.js"
        main_file = dist_dir / main
        if not generated.is_file():
            raise ExternalToolError(f"Bundler did not produce {generated}")

        try:
            generated.replace(main_file)
            bundle = main_file.read_text(encoding="utf-8")
            main_file.write_text(bundle + render_export_footer(package_name), encoding="utf-8")
        except OSError as err:
            raise ReleaseIOError(f"Cannot finalize bundle {main_file}: {err}") from err

        manifest = derive_manifest(source_manifest, {"name": package_name, "main": main})
        write_manifest(manifest, dist_dir / MANIFEST_NAME)

    return populate


def make_binding_populator(
    package_name: str,
    loader: Path,
    binding_output_dir: Path,
    binding_file: str,
    libraries: Sequence[str],
    source_manifest: Path,
    primary_name: str,
    version: str,
) -> Populate:
    """Populate routine that copies the compiled binding and writes its manifest."""

    def populate(dist_dir: Path) -> None:
        _copy_into(loader, dist_dir)
        _copy_into(binding_output_dir / binding_file, dist_dir)
        for library in libraries:
            _copy_into(binding_output_dir / library, dist_dir)

        manifest = derive_manifest(
            source_manifest,
            {
                "name": package_name,
                "main": loader.name,
                "dependencies": {primary_name: version},
            },
        )
        write_manifest(manifest, dist_dir / MANIFEST_NAME)

    return populate
