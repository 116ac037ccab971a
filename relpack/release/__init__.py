# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release pipeline subsystem for relpack.

Assembles distribution directories, packs them with npm, installs the
archives into an isolated sandbox, runs the example script against the
installed packages, and aliases the outputs by version. Bundling and
compiling are delegated to external tools; nothing here reimplements them.
"""
