# SPDX-License-Identifier: BUSL-1.1
"""Shared utilities for aostack."""

import sys


def die(msg: str, code: int = 1):
    """Print error message and exit."""
    print(f"Error: {msg}")
    sys.exit(code)


def load_run(workspace, stack_name: str):
    """Load settings, resolve the stack's configuration, and build the stack.

    Returns (settings, resolved, stack). Configuration errors propagate.
    """
    from aostack.config.resolver import resolve
    from aostack.topology.stack import build_stack

    settings = workspace.load_settings()
    store = workspace.load_store(stack_name)
    resolved = resolve(store, settings.prefix, settings.name)
    return settings, resolved, build_stack(settings, resolved)
