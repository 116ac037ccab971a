# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release manifest derivation.

Every package.json that ships is derived from a source manifest (the
repository's own package.json, or a known-good template for the sandbox):

  1. copy the source mapping
  2. drop `dependencies`, `devDependencies` and `private` unconditionally
  3. shallow-merge the overrides on top; the override wins on collision

The repository's dev tooling therefore never leaks into a published package,
and the only dependencies a release declares are the ones the pipeline
passes in explicitly (the binding package pinning propel, for instance).

The pure transform and the file I/O are separate functions so the transform
can be tested without touching disk.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from relpack.logging.logger import get_logger
from relpack.release.exceptions import ManifestParseError, ReleaseIOError
from relpack.utils.filesystem import atomic_write

_logger: logging.Logger = get_logger(__name__)

# Keys that never survive into a derived manifest unless an override puts them back.
STRIPPED_KEYS: tuple[str, ...] = ("dependencies", "devDependencies", "private")


def transform_manifest(
    source: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Strip the development-only keys from `source` and merge `overrides`.

    The merge is shallow: an override value replaces the source value
    wholesale, nested mappings included. Neither input is mutated.
    """
    manifest = dict(source)
    for key in STRIPPED_KEYS:
        manifest.pop(key, None)
    if overrides:
        manifest.update(overrides)
    return manifest


def read_manifest(source_path: Path) -> dict[str, Any]:
    """
    Read and parse a JSON manifest.

    Raises:
        ReleaseIOError: If the file cannot be read.
        ManifestParseError: If it is not valid JSON or the root is not an object.
    """
    try:
        content = source_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ReleaseIOError(f"Cannot read manifest {source_path}: {err}") from err

    try:
        data = json.loads(content)
    except json.JSONDecodeError as err:
        raise ManifestParseError(f"Invalid JSON in manifest {source_path}: {err}") from err

    if not isinstance(data, dict):
        raise ManifestParseError(
            f"Manifest {source_path} must contain a JSON object, got {type(data).__name__}"
        )
    return data


def derive_manifest(
    source_path: Path,
    overrides: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Read the manifest at `source_path` and apply `transform_manifest` to it."""
    return transform_manifest(read_manifest(source_path), overrides)


def write_manifest(manifest: Mapping[str, Any], dest_path: Path) -> None:
    """
    Serialize a manifest with two-space indentation and write it atomically.

    Key order is preserved, so the same inputs always produce the same bytes.

    Raises:
        ReleaseIOError: If the file cannot be written.
    """
    content = json.dumps(dict(manifest), indent=2) + "\n"
    try:
        atomic_write(dest_path, content)
    except OSError as err:
        raise ReleaseIOError(f"Cannot write manifest {dest_path}: {err}") from err

    _logger.info(
        "Manifest written",
        extra={"path": str(dest_path), "package": manifest.get("name")},
    )


def resolve_version(source_path: Path) -> str:
    """
    Return the `version` field of the source manifest.

    This is resolved once per run and threaded into every derived manifest
    and release alias.

    Raises:
        ManifestParseError: If the field is missing, empty, or not a string.
    """
    data = read_manifest(source_path)
    version = data.get("version")
    if not isinstance(version, str) or not version.strip():
        raise ManifestParseError(f"Manifest {source_path} has no usable 'version' string")
    return version.strip()
