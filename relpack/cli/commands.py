# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the relpack CLI.

Each handler returns an exit code; main() passes it to sys.exit. This is the
single place pipeline failures are turned into a process status, with a
structured log line naming the stage and the underlying cause.

No print() calls. Everything goes through the structured logger.
"""

import argparse
import logging
from pathlib import Path

from relpack.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR, VALIDATION_ERROR
from relpack.config.exceptions import ConfigError
from relpack.config.loader import load_config
from relpack.config.schema import RelpackConfig
from relpack.logging.logger import get_logger, set_log_file, set_log_level
from relpack.release.exceptions import (
    ManifestParseError,
    NestedArchiveError,
    PipelineStageError,
)
from relpack.utils.paths import resolve_project_root, resolve_under

# Stage failures caused by bad inputs rather than a broken tool or disk.
_VALIDATION_CAUSES = (ManifestParseError, NestedArchiveError)


def _load(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, RelpackConfig | None, logging.Logger]:
    """
    Shared setup: load config, then apply the log level and log file.

    Returns (exit_code, config, logger). If exit_code is not SUCCESS the
    caller returns it immediately.
    """
    logger = get_logger(f"relpack.cli.{command_name}", log_level=args.log_level)

    try:
        config = load_config(Path(args.config) if args.config is not None else None)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger

    # An explicit --log-level beats the config file.
    level = args.log_level if args.log_level is not None else config.global_config.log_level
    set_log_level(level)
    if config.global_config.log_file is not None:
        set_log_file(Path(config.global_config.log_file))

    return SUCCESS, config, logger


def _resolve_root(args: argparse.Namespace) -> Path:
    if args.project_root is not None:
        return Path(args.project_root).resolve()
    return resolve_project_root()


def handle_package(args: argparse.Namespace) -> int:
    """Build, pack, install, smoke-test and alias the release packages."""
    exit_code, config, logger = _load(args, "package")
    if exit_code != SUCCESS or config is None:
        return exit_code

    from relpack.release.pipeline.orchestrator import (
        PipelineFlags,
        ReleasePipeline,
        default_tools,
    )

    try:
        project_root = _resolve_root(args)
    except RuntimeError as err:
        logger.error("Project root not found", extra={"error": str(err)})
        return USER_ERROR

    flags = PipelineFlags(clean=args.clean, debug=args.debug, skip_build=args.skip_build)
    logger.info(
        "Starting release packaging",
        extra={
            "project_root": str(project_root),
            "clean": flags.clean,
            "debug": flags.debug,
            "skip_build": flags.skip_build,
        },
    )

    pipeline = ReleasePipeline(
        config.release,
        flags,
        default_tools(config.release, project_root),
        project_root,
    )

    try:
        result = pipeline.run()
    except PipelineStageError as err:
        logger.error(
            "Release packaging failed",
            extra={
                "stage": err.stage.value,
                "cause": str(err.cause),
                "cause_type": type(err.cause).__name__,
            },
        )
        if isinstance(err.cause, _VALIDATION_CAUSES):
            return VALIDATION_ERROR
        return RUNTIME_ERROR

    logger.info(
        "Release packaging complete",
        extra={
            "version": result.version,
            "tarballs": [str(t) for t in result.tarballs],
            "aliases": [str(a) for a in result.aliases],
        },
    )
    return SUCCESS


def handle_check(args: argparse.Namespace) -> int:
    """Check a package directory for stray archives without packing it."""
    exit_code, config, logger = _load(args, "check")
    if exit_code != SUCCESS or config is None:
        return exit_code

    from relpack.release.exceptions import ReleaseIOError
    from relpack.release.validation.archives import validate_no_archives

    try:
        project_root = _resolve_root(args)
    except RuntimeError as err:
        logger.error("Project root not found", extra={"error": str(err)})
        return USER_ERROR

    build_root = resolve_under(project_root, config.release.build_dir)
    names = args.packages or [config.release.primary.name, config.release.binding.name]

    failed = False
    for name in names:
        dist_dir = build_root / name
        if not dist_dir.is_dir():
            logger.error("Package dir not found", extra={"dist_dir": str(dist_dir)})
            failed = True
            continue
        try:
            validate_no_archives(dist_dir)
        except (NestedArchiveError, ReleaseIOError) as err:
            logger.error("Package dir check failed", extra={"error": str(err)})
            failed = True
            continue
        logger.info("Package dir clean", extra={"dist_dir": str(dist_dir)})

    return VALIDATION_ERROR if failed else SUCCESS
