# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pipeline states and the legal transitions between them.

The pipeline is a straight line. Each state is reachable only from its
predecessor, CLEAN is optional, and --skip-build jumps from INIT directly to
FINALIZE. There are no backward edges: a failed run halts where it failed and
must be restarted from INIT.
"""

from enum import Enum


class PipelineState(str, Enum):
    INIT = "init"
    CLEAN = "clean"
    BUILD_NATIVE_BINDING = "build_native_binding"
    PACK_PRIMARY = "pack_primary"
    PACK_SECONDARY = "pack_secondary"
    PROVISION_SANDBOX = "provision_sandbox"
    INSTALL_PRIMARY = "install_primary"
    INSTALL_SECONDARY = "install_secondary"
    SMOKE_TEST = "smoke_test"
    FINALIZE = "finalize"
    DONE = "done"


ALLOWED_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.INIT: frozenset(
        {PipelineState.CLEAN, PipelineState.BUILD_NATIVE_BINDING, PipelineState.FINALIZE}
    ),
    PipelineState.CLEAN: frozenset({PipelineState.BUILD_NATIVE_BINDING}),
    PipelineState.BUILD_NATIVE_BINDING: frozenset({PipelineState.PACK_PRIMARY}),
    PipelineState.PACK_PRIMARY: frozenset({PipelineState.PACK_SECONDARY}),
    PipelineState.PACK_SECONDARY: frozenset({PipelineState.PROVISION_SANDBOX}),
    PipelineState.PROVISION_SANDBOX: frozenset({PipelineState.INSTALL_PRIMARY}),
    PipelineState.INSTALL_PRIMARY: frozenset({PipelineState.INSTALL_SECONDARY}),
    PipelineState.INSTALL_SECONDARY: frozenset({PipelineState.SMOKE_TEST}),
    PipelineState.SMOKE_TEST: frozenset({PipelineState.FINALIZE}),
    PipelineState.FINALIZE: frozenset({PipelineState.DONE}),
    PipelineState.DONE: frozenset(),
}


def can_transition(current: PipelineState, target: PipelineState) -> bool:
    """Whether `target` may directly follow `current`."""
    return target in ALLOWED_TRANSITIONS[current]
