# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for distribution directory assembly.
"""

import os
from pathlib import Path

import pytest

from relpack.release.exceptions import NestedArchiveError
from relpack.release.packaging.assembler import README_NAME, assemble_distribution

HOMEPAGE = "http://propelml.org"


def _populate_fixed(dist_dir: Path) -> None:
    (dist_dir / "propel.js").write_text("console.log('hi');\n", encoding="utf-8")
    (dist_dir / "package.json").write_text('{\n  "name": "propel"\n}\n', encoding="utf-8")


def _snapshot(directory: Path) -> dict[str, bytes]:
    return {
        str(path.relative_to(directory)): path.read_bytes()
        for path in sorted(directory.rglob("*"))
        if path.is_file()
    }


def test_creates_directory_with_readme(tmp_path: Path) -> None:
    dist_dir = assemble_distribution(tmp_path, "propel", False, _populate_fixed, HOMEPAGE)

    assert dist_dir == (tmp_path / "propel").resolve()
    assert (dist_dir / README_NAME).read_text(encoding="utf-8") == f"See {HOMEPAGE}\n"
    assert (dist_dir / "propel.js").is_file()


def test_populate_receives_the_directory(tmp_path: Path) -> None:
    seen: list[Path] = []
    dist_dir = assemble_distribution(tmp_path, "propel", False, seen.append, HOMEPAGE)
    assert seen == [dist_dir]


def test_clean_assembly_is_byte_identical(tmp_path: Path) -> None:
    first = _snapshot(assemble_distribution(tmp_path, "propel", True, _populate_fixed, HOMEPAGE))
    second = _snapshot(assemble_distribution(tmp_path, "propel", True, _populate_fixed, HOMEPAGE))
    assert first == second


def test_clean_removes_previous_contents(tmp_path: Path) -> None:
    stale = tmp_path / "propel" / "stale.js"
    stale.parent.mkdir()
    stale.write_text("old", encoding="utf-8")

    assemble_distribution(tmp_path, "propel", True, _populate_fixed, HOMEPAGE)
    assert not stale.exists()


def test_without_clean_previous_contents_survive(tmp_path: Path) -> None:
    kept = tmp_path / "propel" / "kept.js"
    kept.parent.mkdir()
    kept.write_text("old", encoding="utf-8")

    assemble_distribution(tmp_path, "propel", False, _populate_fixed, HOMEPAGE)
    assert kept.exists()


def test_stray_archive_from_populate_fails(tmp_path: Path) -> None:
    def populate(dist_dir: Path) -> None:
        (dist_dir / "propel-0.0.1.tgz").write_bytes(b"old archive")

    with pytest.raises(NestedArchiveError):
        assemble_distribution(tmp_path, "propel", False, populate, HOMEPAGE)


def test_leftover_archive_survives_without_clean_and_fails(tmp_path: Path) -> None:
    leftover = tmp_path / "propel" / "propel-0.0.1.tgz"
    leftover.parent.mkdir()
    leftover.write_bytes(b"old archive")

    with pytest.raises(NestedArchiveError):
        assemble_distribution(tmp_path, "propel", False, _populate_fixed, HOMEPAGE)

    # A clean assembly clears it.
    assemble_distribution(tmp_path, "propel", True, _populate_fixed, HOMEPAGE)


class TestWorkingDirectoryUntouched:
    def test_on_success(self, tmp_path: Path) -> None:
        before = os.getcwd()
        assemble_distribution(tmp_path, "propel", True, _populate_fixed, HOMEPAGE)
        assert os.getcwd() == before

    def test_on_failure(self, tmp_path: Path) -> None:
        def populate(dist_dir: Path) -> None:
            raise RuntimeError("bundler exploded")

        before = os.getcwd()
        with pytest.raises(RuntimeError, match="bundler exploded"):
            assemble_distribution(tmp_path, "propel", True, populate, HOMEPAGE)
        assert os.getcwd() == before
