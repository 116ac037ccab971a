# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
relpack: release packaging pipeline for the propel npm packages.

Builds the browser bundle and the native-binding companion package, packs
both, installs them into a throwaway sandbox, smoke-tests the result, and
publishes version-aliased names in the build directory.
"""

__version__ = "0.1.0"
