# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for relpack.

Every section is a frozen pydantic model:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

The defaults describe the propel repository layout, so running without a
config file packages propel exactly the way its release script always has.
Paths are relative to the project root unless noted otherwise.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0",
        description="Schema version for compatibility tracking, e.g. '1.0.0'",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )


class PrimaryPackageConfig(BaseModel):
    """The browser/node bundle produced by the source bundler."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(default="propel", min_length=1)
    entry: str = Field(default="src/api.ts", description="Module handed to the bundler")
    main: str = Field(default="propel.js", description="Entry point file inside the package")


class BindingPackageConfig(BaseModel):
    """
    The native-binding companion package.

    Its manifest pins the primary package at the exact resolved version, so
    it must always be installed after the primary.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(default="propel_mac", min_length=1)
    loader: str = Field(
        default="src/load_tf_binding.js",
        description="JS shim that loads the compiled binding; becomes the package main",
    )
    output_dir: str = Field(
        default="build/Release",
        description="Where the binding compiler leaves its outputs",
    )
    binding_file: str = Field(default="tensorflow-binding.node")
    posix_libraries: list[str] = Field(
        default_factory=lambda: ["libtensorflow.so", "libtensorflow_framework.so"],
    )
    windows_libraries: list[str] = Field(default_factory=lambda: ["tensorflow.dll"])


class SandboxConfig(BaseModel):
    """Where and how the installed packages get smoke-tested."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(default="propel_npm_test", min_length=1)
    package_root: str = Field(
        default="propel_root",
        description="Sandbox subdirectory the smoke test treats as package-local state",
    )
    package_root_env: str = Field(default="PROPEL_ROOT", min_length=1)
    manifest_template: str = Field(
        default="node_modules/tar/package.json",
        description="Known-good manifest copied into the sandbox so npm does not warn",
    )
    example_script: str = Field(default="example.js")
    smoke_command: list[str] = Field(
        default_factory=lambda: ["node", "example.js", "2"],
        min_length=1,
    )


class ToolsConfig(BaseModel):
    """Command lines for the external collaborators."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    npm: str = Field(default="npm", min_length=1)
    bundler: list[str] = Field(
        default_factory=lambda: ["npx", "parcel", "build"],
        min_length=1,
    )
    binding_build: list[str] = Field(
        default_factory=lambda: ["node", "tools/build_tf_binding.js"],
        min_length=1,
    )


class ReleaseConfig(BaseModel):
    """Everything the release pipeline needs to know about the repository."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    build_dir: str = Field(default="build", description="Shared build-output root")
    homepage: str = Field(default="http://propelml.org")
    source_manifest: str = Field(default="package.json")
    archive_extension: str = Field(
        default=".tgz",
        description="Extension npm gives packed archives; used to find them under --skip-build",
    )
    primary: PrimaryPackageConfig = Field(default_factory=PrimaryPackageConfig)
    binding: BindingPackageConfig = Field(default_factory=BindingPackageConfig)
    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)


class RelpackConfig(BaseModel):
    """
    Top-level config container.

    A YAML file may hold only `global:`, only `release:`, both, or nothing
    at all; missing sections take their defaults.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        populate_by_name=True,
    )

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
