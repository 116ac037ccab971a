# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for relpack.

Usage:
    relpack package [--clean] [--debug] [--skip-build]
    relpack package --config release.yaml --clean
    relpack check [PACKAGE ...]

The global options (--config, --log-level, --project-root) are inherited by
every subcommand through argparse's parent parser mechanism. Pipeline
switches are plain presence flags, parsed once into PipelineFlags.
"""

import argparse
import sys

from relpack.cli.commands import handle_check, handle_package
from relpack.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """Parent parser with the options every subcommand accepts."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config file).",
    )
    parent.add_argument(
        "--project-root",
        type=str,
        default=None,
        dest="project_root",
        help="Repository to package. Defaults to the nearest ancestor with a package.json.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    package_parser = subparsers.add_parser(
        "package",
        parents=[parent],
        help="Build, pack, install and smoke-test the release packages.",
    )
    package_parser.add_argument(
        "--clean",
        action="store_true",
        default=False,
        help="Wipe the build directory before building.",
    )
    package_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Bundle in development mode.",
    )
    package_parser.add_argument(
        "--skip-build",
        action="store_true",
        default=False,
        dest="skip_build",
        help="Reuse archives from a previous run and only refresh the version aliases.",
    )
    package_parser.set_defaults(func=handle_package)

    check_parser = subparsers.add_parser(
        "check",
        parents=[parent],
        help="Check package directories for stray archives.",
    )
    check_parser.add_argument(
        "packages",
        nargs="*",
        help="Package directory names under the build dir. Defaults to both packages.",
    )
    check_parser.set_defaults(func=handle_check)


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="relpack",
        description="relpack: build, verify and alias the propel npm packages.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
