# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem helpers shared by the release stages.

Writes are atomic: content goes to a temp file in the target's directory and
is renamed over the target, so a crash leaves a stray temp file rather than a
half-written manifest. The same trick backs symlink replacement.

The one piece of process-wide state the pipeline touches is the working
directory. `working_directory` scopes that change and restores the previous
directory on every exit path. It is not reentrant across threads: the
working directory belongs to the whole process, so two concurrent scopes
would race. The pipeline is single-threaded and relies on that.
"""

import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_TMP_PREFIX = ".relpack_tmp_"


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write content to a file atomically.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False because the file must survive closing so it can be renamed.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=_TMP_PREFIX,
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        temp_fd.close()
        # NamedTemporaryFile is created 0600; published files must be world-readable.
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def atomic_symlink(link_path: Path, target: str) -> None:
    """
    Create or replace `link_path` as a symlink pointing at `target`.

    The new link is made under a temp name and renamed over the old one, so
    readers never observe a missing link. `target` is stored verbatim and is
    interpreted relative to the link's directory.

    Raises:
        IsADirectoryError: If `link_path` is a real directory.
        OSError: If the link cannot be created or renamed.
    """
    if link_path.is_dir() and not link_path.is_symlink():
        raise IsADirectoryError(f"Refusing to replace directory {link_path} with a symlink")

    temp_link = link_path.parent / f"{_TMP_PREFIX}{link_path.name}"
    if temp_link.is_symlink() or temp_link.exists():
        temp_link.unlink()

    os.symlink(target, temp_link)
    try:
        os.replace(temp_link, link_path)
    except BaseException:
        if temp_link.is_symlink():
            temp_link.unlink()
        raise


def reset_directory(path: Path) -> Path:
    """Delete `path` recursively if present, then recreate it empty."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def remove_tree(path: Path) -> bool:
    """
    Recursively delete a directory if it exists.

    Returns:
        True if something was removed, False if there was nothing there.
    """
    if not path.exists():
        return False
    shutil.rmtree(path)
    return True


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """
    Temporarily make `path` the process working directory.

    Usage:
        with working_directory(dist_dir):
            subprocess.run(["npm", "pack"])
        # back in the previous directory, even if npm blew up

    Yields:
        The absolute path that was entered.
    """
    previous = Path.cwd()
    target = path.resolve()
    os.chdir(target)
    try:
        yield target
    finally:
        os.chdir(previous)
