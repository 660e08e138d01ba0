# SPDX-License-Identifier: BUSL-1.1
"""Declarative cluster topology for the agent orchestrator."""

from aostack.topology.resources import ResourceSpec, to_manifest
from aostack.topology.stack import Stack, StackError, build_stack
from aostack.topology.render import (
    dump_manifests, render_manifests, render_resource, write_manifests,
)

__all__ = [
    "ResourceSpec", "to_manifest", "Stack", "StackError", "build_stack",
    "dump_manifests", "render_manifests", "render_resource", "write_manifests",
]
