# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Install sandbox for the packed archives.

The sandbox is a throwaway npm project under the system temp directory:

    $TEMP/<sandbox name>/
    ├─ package.json     # borrowed from a known-good template manifest
    ├─ <package root>/  # isolated state directory for the smoke test
    └─ node_modules/    # filled by `npm install <archive>`

It is wiped and recreated on every run so nothing carries over between
runs, and it is left in place afterwards for inspection.

The template manifest comes from an unrelated, well-formed package (tar's
package.json by default) rather than from one of our builds. A bare
manifest makes npm warn about missing description and repository fields
on every install.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ReleaseIOError
from relpack.release.manifests.manifest import derive_manifest, write_manifest
from relpack.release.tools.interfaces import PackageManager
from relpack.utils.filesystem import reset_directory

_logger: logging.Logger = get_logger(__name__)

# Checked in order; the first non-empty one wins.
TEMP_ENV_VARS: tuple[str, ...] = ("TEMP", "TMPDIR")
DEFAULT_TEMP_ROOT = Path("/tmp")


@dataclass(frozen=True)
class Sandbox:
    """A provisioned sandbox and its isolated package-root directory."""

    path: Path
    package_root: Path


def resolve_temp_root(environ: Mapping[str, str]) -> Path:
    """Pick the temp directory the sandbox lives under."""
    for name in TEMP_ENV_VARS:
        value = environ.get(name)
        if value:
            return Path(value)
    return DEFAULT_TEMP_ROOT


def provision_sandbox(
    temp_root: Path,
    template_manifest: Path,
    sandbox_name: str,
    package_root_name: str,
) -> Sandbox:
    """
    Recreate the sandbox directory from scratch.

    Args:
        temp_root: Directory the sandbox is created under.
        template_manifest: Manifest copied (minus dev-only keys) into the sandbox.
        sandbox_name: Fixed directory name of the sandbox.
        package_root_name: Name of the isolated state directory inside it.

    Returns:
        The provisioned Sandbox.

    Raises:
        ReleaseIOError: If the directories cannot be created or the template read.
        ManifestParseError: If the template is not a JSON object.
    """
    sandbox_dir = temp_root / sandbox_name
    try:
        reset_directory(sandbox_dir)
        package_root = sandbox_dir / package_root_name
        package_root.mkdir()
    except OSError as err:
        raise ReleaseIOError(f"Cannot provision sandbox {sandbox_dir}: {err}") from err

    write_manifest(derive_manifest(template_manifest), sandbox_dir / "package.json")

    sandbox = Sandbox(path=sandbox_dir.resolve(), package_root=package_root.resolve())
    _logger.info(
        "Sandbox provisioned",
        extra={"sandbox": str(sandbox.path), "package_root": str(sandbox.package_root)},
    )
    return sandbox


def install_tarball(sandbox: Sandbox, tarball: Path, package_manager: PackageManager) -> None:
    """
    Install one archive into the sandbox, exactly as an end user would.

    Install the primary package before the binding package; the binding's
    manifest pins the primary at an exact version.

    Raises:
        ExternalToolError: If the install fails.
    """
    _logger.info(
        "Installing archive",
        extra={"archive": str(tarball), "sandbox": str(sandbox.path)},
    )
    package_manager.install(tarball, sandbox.path)
    _logger.info("Installed archive", extra={"archive": tarball.name})
