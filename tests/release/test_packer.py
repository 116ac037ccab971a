# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for archive packing and relocation.

The fake package manager writes its archive into whatever the current
directory is, so a correct result also proves the packer entered the
distribution directory.
"""

import json
import os
from pathlib import Path

import pytest

from relpack.release.exceptions import ExternalToolError
from relpack.release.packaging.packer import pack_distribution
from relpack.release.tools.interfaces import PackageManager


class _ExplodingPackageManager(PackageManager):
    def pack(self) -> None:
        raise ExternalToolError("npm pack exited with status 1", command=["npm", "pack"], exit_code=1)

    def install(self, archive: Path, work_dir: Path) -> None:
        raise AssertionError("not used")


class _ArchiveWriter(PackageManager):
    """Writes a fixed list of files into the cwd when packing."""

    def __init__(self, names: list[str]) -> None:
        self._names = names

    def pack(self) -> None:
        for name in self._names:
            Path(name).write_bytes(b"archive")

    def install(self, archive: Path, work_dir: Path) -> None:
        raise AssertionError("not used")


@pytest.fixture()
def dist_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "build" / "propel"
    directory.mkdir(parents=True)
    (directory / "package.json").write_text(
        json.dumps({"name": "propel", "version": "1.2.3"}), encoding="utf-8"
    )
    return directory


def test_archive_is_moved_to_build_root(dist_dir: Path, fake_package_manager) -> None:  # type: ignore[no-untyped-def]
    build_root = dist_dir.parent

    archive = pack_distribution(dist_dir, build_root, fake_package_manager)

    assert archive == (build_root / "propel-1.2.3.tgz").resolve()
    assert archive.is_file()
    assert archive.is_absolute()
    assert not (dist_dir / "propel-1.2.3.tgz").exists()
    assert fake_package_manager.packed == [dist_dir.resolve()]


def test_working_directory_restored_on_success(dist_dir: Path, fake_package_manager) -> None:  # type: ignore[no-untyped-def]
    before = os.getcwd()
    pack_distribution(dist_dir, dist_dir.parent, fake_package_manager)
    assert os.getcwd() == before


def test_working_directory_restored_on_failure(dist_dir: Path) -> None:
    before = os.getcwd()
    with pytest.raises(ExternalToolError):
        pack_distribution(dist_dir, dist_dir.parent, _ExplodingPackageManager())
    assert os.getcwd() == before


def test_no_archive_produced_fails(dist_dir: Path) -> None:
    with pytest.raises(ExternalToolError, match="exactly one archive"):
        pack_distribution(dist_dir, dist_dir.parent, _ArchiveWriter([]))


def test_two_archives_produced_fails(dist_dir: Path) -> None:
    with pytest.raises(ExternalToolError, match="found 2"):
        pack_distribution(dist_dir, dist_dir.parent, _ArchiveWriter(["a-1.tgz", "b-1.tgz"]))


def test_repacking_overwrites_previous_archive(dist_dir: Path, fake_package_manager) -> None:  # type: ignore[no-untyped-def]
    first = pack_distribution(dist_dir, dist_dir.parent, fake_package_manager)
    second = pack_distribution(dist_dir, dist_dir.parent, fake_package_manager)
    assert first == second
    assert len(list(dist_dir.parent.glob("*.tgz"))) == 1
