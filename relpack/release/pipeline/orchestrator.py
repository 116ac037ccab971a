# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
End-to-end release pipeline.

Sequences the stages in a fixed order:

    INIT → (CLEAN) → BUILD_NATIVE_BINDING → PACK_PRIMARY → PACK_SECONDARY
         → PROVISION_SANDBOX → INSTALL_PRIMARY → INSTALL_SECONDARY
         → SMOKE_TEST → FINALIZE → DONE

or, with --skip-build, INIT → FINALIZE → DONE.

Every external call runs to completion before the next stage starts.
Nothing runs in parallel: the binding manifest needs the version resolved
for the primary, and packing changes the process working directory.

Any exception inside a stage is wrapped in PipelineStageError naming that
stage and re-raised. The pipeline stops where it failed; there is no retry
and no rollback. Build and sandbox directories are left on disk either way.
"""

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional, TypeVar

from relpack.config.schema import ReleaseConfig
from relpack.logging.logger import get_logger
from relpack.release.exceptions import PipelineStageError, ReleaseIOError
from relpack.release.finalize.aliases import create_release_aliases
from relpack.release.manifests.manifest import resolve_version
from relpack.release.packaging.assembler import assemble_distribution
from relpack.release.packaging.packer import pack_distribution
from relpack.release.packaging.populators import (
    make_binding_populator,
    make_primary_populator,
    platform_libraries,
)
from relpack.release.pipeline.states import PipelineState, can_transition
from relpack.release.sandbox.installer import (
    Sandbox,
    install_tarball,
    provision_sandbox,
    resolve_temp_root,
)
from relpack.release.sandbox.smoke import run_smoke_test
from relpack.release.tools.binding import ScriptBindingBuilder
from relpack.release.tools.interfaces import BindingBuilder, Bundler, PackageManager
from relpack.release.tools.npm import NpmClient
from relpack.release.tools.parcel import ParcelBundler
from relpack.utils.filesystem import remove_tree
from relpack.utils.paths import ensure_directory, resolve_under

_logger: logging.Logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PipelineFlags:
    """Run options, parsed once from the command line."""

    clean: bool = False
    debug: bool = False
    skip_build: bool = False


@dataclass(frozen=True)
class ReleaseTools:
    """The external collaborators one pipeline run talks to."""

    bundler: Bundler
    binding_builder: BindingBuilder
    package_manager: PackageManager


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of a successful run."""

    version: str
    states: tuple[PipelineState, ...]
    tarballs: tuple[Path, ...]
    aliases: tuple[Path, ...]
    sandbox: Optional[Path]


def default_tools(config: ReleaseConfig, project_root: Path) -> ReleaseTools:
    """The real npm/parcel/node collaborators described by `config`."""
    return ReleaseTools(
        bundler=ParcelBundler(config.tools.bundler, project_root),
        binding_builder=ScriptBindingBuilder(config.tools.binding_build, project_root),
        package_manager=NpmClient(config.tools.npm),
    )


class ReleasePipeline:
    """
    One run of the release pipeline.

    Instances are single-use. `states` records every state entered, in
    order, and stays readable after a failure to show where the run halted.
    """

    def __init__(
        self,
        config: ReleaseConfig,
        flags: PipelineFlags,
        tools: ReleaseTools,
        project_root: Path,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._config = config
        self._flags = flags
        self._tools = tools
        self._project_root = project_root.resolve()
        self._environ: Mapping[str, str] = environ if environ is not None else os.environ
        self._build_root = resolve_under(self._project_root, config.build_dir)
        self._source_manifest = resolve_under(self._project_root, config.source_manifest)
        self._states: list[PipelineState] = []

    @property
    def states(self) -> tuple[PipelineState, ...]:
        return tuple(self._states)

    @property
    def build_root(self) -> Path:
        return self._build_root

    def _enter(self, state: PipelineState) -> None:
        if self._states and not can_transition(self._states[-1], state):
            raise RuntimeError(
                f"Illegal pipeline transition {self._states[-1].value} -> {state.value}"
            )
        self._states.append(state)
        _logger.info("Entering stage", extra={"stage": state.value})

    def _execute(self, state: PipelineState, action: Callable[[], T]) -> T:
        self._enter(state)
        try:
            outcome = action()
        except Exception as err:
            _logger.error(
                "Stage failed",
                extra={"stage": state.value, "error": str(err), "error_type": type(err).__name__},
            )
            raise PipelineStageError(state, err) from err
        _logger.debug("Stage complete", extra={"stage": state.value})
        return outcome

    def run(self) -> PipelineResult:
        """
        Drive the pipeline to DONE.

        Raises:
            PipelineStageError: Wrapping the first failure, tagged with its stage.
        """
        if self._states:
            raise RuntimeError("ReleasePipeline instances are single-use")

        version = self._execute(PipelineState.INIT, self._resolve_version)

        sandbox: Optional[Sandbox] = None
        if self._flags.skip_build:
            _logger.info("Skipping build, reusing previous archives", extra={"version": version})
            tarballs, aliases = self._execute(
                PipelineState.FINALIZE, lambda: self._finalize(version, None)
            )
        else:
            if self._flags.clean:
                self._execute(PipelineState.CLEAN, self._clean)

            self._execute(PipelineState.BUILD_NATIVE_BINDING, self._tools.binding_builder.build)

            primary_tarball = self._execute(PipelineState.PACK_PRIMARY, self._pack_primary)
            binding_tarball = self._execute(
                PipelineState.PACK_SECONDARY, lambda: self._pack_binding(version)
            )
            sandbox = self._execute(PipelineState.PROVISION_SANDBOX, self._provision)
            provisioned = sandbox
            pm = self._tools.package_manager
            self._execute(
                PipelineState.INSTALL_PRIMARY,
                lambda: install_tarball(provisioned, primary_tarball, pm),
            )
            self._execute(
                PipelineState.INSTALL_SECONDARY,
                lambda: install_tarball(provisioned, binding_tarball, pm),
            )
            self._execute(PipelineState.SMOKE_TEST, lambda: self._smoke_test(provisioned))

            tarballs, aliases = self._execute(
                PipelineState.FINALIZE,
                lambda: self._finalize(version, (primary_tarball, binding_tarball)),
            )

        self._enter(PipelineState.DONE)

        _logger.info("Package tested and ready", extra={"version": version})
        for tarball in tarballs:
            _logger.info("Ready to publish", extra={"command": f"npm publish {tarball}"})

        return PipelineResult(
            version=version,
            states=self.states,
            tarballs=tuple(tarballs),
            aliases=tuple(aliases),
            sandbox=sandbox.path if sandbox is not None else None,
        )

    def _resolve_version(self) -> str:
        version = resolve_version(self._source_manifest)
        _logger.info(
            "Resolved version",
            extra={"version": version, "flags": asdict(self._flags)},
        )
        return version

    def _clean(self) -> None:
        if remove_tree(self._build_root):
            _logger.info("Removed build root", extra={"build_root": str(self._build_root)})

    def _pack_primary(self) -> Path:
        cfg = self._config
        populate = make_primary_populator(
            bundler=self._tools.bundler,
            entry_module=resolve_under(self._project_root, cfg.primary.entry),
            main=cfg.primary.main,
            package_name=cfg.primary.name,
            source_manifest=self._source_manifest,
            production=not self._flags.debug,
        )
        return self._assemble_and_pack(cfg.primary.name, populate)

    def _pack_binding(self, version: str) -> Path:
        cfg = self._config
        binding = cfg.binding
        populate = make_binding_populator(
            package_name=binding.name,
            loader=resolve_under(self._project_root, binding.loader),
            binding_output_dir=resolve_under(self._project_root, binding.output_dir),
            binding_file=binding.binding_file,
            libraries=platform_libraries(binding.posix_libraries, binding.windows_libraries),
            source_manifest=self._source_manifest,
            primary_name=cfg.primary.name,
            version=version,
        )
        return self._assemble_and_pack(binding.name, populate)

    def _assemble_and_pack(self, package_name: str, populate: Callable[[Path], None]) -> Path:
        try:
            ensure_directory(self._build_root)
        except OSError as err:
            raise ReleaseIOError(f"Cannot create build root {self._build_root}: {err}") from err
        dist_dir = assemble_distribution(
            self._build_root,
            package_name,
            self._flags.clean,
            populate,
            self._config.homepage,
        )
        return pack_distribution(dist_dir, self._build_root, self._tools.package_manager)

    def _provision(self) -> Sandbox:
        sandbox_cfg = self._config.sandbox
        return provision_sandbox(
            temp_root=resolve_temp_root(self._environ),
            template_manifest=resolve_under(self._project_root, sandbox_cfg.manifest_template),
            sandbox_name=sandbox_cfg.name,
            package_root_name=sandbox_cfg.package_root,
        )

    def _smoke_test(self, sandbox: Sandbox) -> None:
        sandbox_cfg = self._config.sandbox
        script = resolve_under(self._project_root, sandbox_cfg.example_script)
        try:
            source = script.read_text(encoding="utf-8")
        except OSError as err:
            raise ReleaseIOError(f"Cannot read example script {script}: {err}") from err

        run_smoke_test(
            sandbox,
            script_source=source,
            script_name=script.name,
            command=sandbox_cfg.smoke_command,
            env={sandbox_cfg.package_root_env: str(sandbox.package_root)},
        )

    def _finalize(
        self,
        version: str,
        tarballs: Optional[tuple[Path, ...]],
    ) -> tuple[tuple[Path, ...], list[Path]]:
        if tarballs is None:
            tarballs = self._locate_previous_archives(version)
        cfg = self._config
        aliases = create_release_aliases(
            self._build_root, [cfg.primary.name, cfg.binding.name], version
        )
        return tarballs, aliases

    def _locate_previous_archives(self, version: str) -> tuple[Path, ...]:
        """
        Find the archives an earlier run left at their conventional paths.

        Only presence is checked, not contents.
        """
        cfg = self._config
        found: list[Path] = []
        for name in (cfg.primary.name, cfg.binding.name):
            archive = self._build_root / f"{name}-{version}{cfg.archive_extension}"
            if not archive.is_file():
                raise ReleaseIOError(
                    f"--skip-build needs {archive} from a previous run, but it does not exist"
                )
            if not (self._build_root / name).is_dir():
                raise ReleaseIOError(
                    f"--skip-build needs package dir {self._build_root / name}, but it does not exist"
                )
            found.append(archive)
        return tuple(found)
