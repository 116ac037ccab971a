# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for relpack tests.

The pipeline talks to npm, parcel and node through small interfaces. Here
they are replaced by fakes that write plausible files and record how they
were called, so the full pipeline runs without a JavaScript toolchain.
The smoke test itself runs a tiny Python script with the current
interpreter.
"""

import json
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from relpack.config.schema import ReleaseConfig, SandboxConfig
from relpack.release.pipeline.orchestrator import ReleaseTools
from relpack.release.tools.interfaces import BindingBuilder, Bundler, PackageManager

SOURCE_MANIFEST = {
    "name": "propel-dev",
    "version": "1.2.3",
    "description": "Differential programming in JavaScript",
    "private": True,
    "dependencies": {"gamma": "^1.0.0"},
    "devDependencies": {"parcel-bundler": "^1.4.1"},
    "license": "MIT",
}

SMOKE_SCRIPT = textwrap.dedent("""\
    import os
    import sys

    root = os.environ.get("PROPEL_ROOT", "")
    sys.exit(0 if os.path.isdir(root) else 3)
""")


class FakeBundler(Bundler):
    """Writes `<entry stem>.js` into the output directory."""

    def __init__(self, stray_files: tuple[str, ...] = ()) -> None:
        self.calls: list[tuple[Path, Path, bool]] = []
        self._stray_files = stray_files

    def build(self, entry_module: Path, out_dir: Path, production: bool) -> None:
        self.calls.append((entry_module, out_dir, production))
        (out_dir / f"{entry_module.stem}.js").write_text(
            "// bundled\nparcelRequire = {};\n", encoding="utf-8"
        )
        for name in self._stray_files:
            (out_dir / name).write_bytes(b"stray")


class FakeBindingBuilder(BindingBuilder):
    """Drops the binding and every platform's libraries into build/Release."""

    def __init__(self, project_root: Path) -> None:
        self._output_dir = project_root / "build" / "Release"
        self.builds = 0

    def build(self) -> None:
        self.builds += 1
        self._output_dir.mkdir(parents=True, exist_ok=True)
        for name in (
            "tensorflow-binding.node",
            "libtensorflow.so",
            "libtensorflow_framework.so",
            "tensorflow.dll",
        ):
            (self._output_dir / name).write_bytes(name.encode("utf-8"))


class FakePackageManager(PackageManager):
    """
    `pack` writes <name>-<version>.tgz into the current directory, like npm.
    `install` records the archive and the directory it was installed into.
    """

    def __init__(self) -> None:
        self.packed: list[Path] = []
        self.installed: list[tuple[Path, Path]] = []

    def pack(self) -> None:
        cwd = Path.cwd()
        manifest = json.loads((cwd / "package.json").read_text(encoding="utf-8"))
        archive = cwd / f"{manifest['name']}-{manifest['version']}.tgz"
        archive.write_bytes(f"archive of {manifest['name']}".encode("utf-8"))
        self.packed.append(cwd)

    def install(self, archive: Path, work_dir: Path) -> None:
        self.installed.append((archive, work_dir))
        (work_dir / "node_modules").mkdir(exist_ok=True)


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    """A minimal propel checkout: manifest, sources, tar template, example script."""
    root = tmp_path / "propel"
    (root / "src").mkdir(parents=True)
    (root / "package.json").write_text(json.dumps(SOURCE_MANIFEST, indent=2), encoding="utf-8")
    (root / "src" / "api.ts").write_text("export const x = 1;\n", encoding="utf-8")
    (root / "src" / "load_tf_binding.js").write_text(
        "module.exports = require('./tensorflow-binding.node');\n", encoding="utf-8"
    )

    tar_dir = root / "node_modules" / "tar"
    tar_dir.mkdir(parents=True)
    (tar_dir / "package.json").write_text(
        json.dumps(
            {
                "name": "tar",
                "version": "4.0.0",
                "description": "tar for node",
                "repository": "https://github.com/npm/node-tar.git",
                "dependencies": {"minipass": "^2.0.0"},
                "devDependencies": {"tap": "^10.0.0"},
            },
            indent=2,
        ),
        encoding="utf-8",
    )

    (root / "example.py").write_text(SMOKE_SCRIPT, encoding="utf-8")
    return root


@pytest.fixture()
def release_config() -> ReleaseConfig:
    """Default layout, but the smoke test runs example.py with this interpreter."""
    return ReleaseConfig(
        sandbox=SandboxConfig(
            example_script="example.py",
            smoke_command=[sys.executable, "example.py"],
        )
    )


@pytest.fixture()
def make_tools(project_root: Path) -> Callable[..., ReleaseTools]:
    """Factory for fake tool sets; `stray_files` makes the bundler leave junk behind."""

    def _make(stray_files: tuple[str, ...] = ()) -> ReleaseTools:
        return ReleaseTools(
            bundler=FakeBundler(stray_files),
            binding_builder=FakeBindingBuilder(project_root),
            package_manager=FakePackageManager(),
        )

    return _make


@pytest.fixture()
def fake_tools(make_tools: Callable[..., ReleaseTools]) -> ReleaseTools:
    return make_tools()


@pytest.fixture()
def fake_package_manager() -> FakePackageManager:
    return FakePackageManager()


@pytest.fixture()
def sandbox_environ(tmp_path: Path) -> dict[str, str]:
    """Environment that puts the sandbox under the test's temp directory."""
    return {"TEMP": str(tmp_path / "tmp")}
