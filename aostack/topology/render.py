# SPDX-License-Identifier: BUSL-1.1
"""Render a Stack into Kubernetes manifests."""

import logging
from pathlib import Path

import yaml

from aostack.config.values import MASK, Secret
from aostack.topology.resources import to_manifest


log = logging.getLogger(__name__)


def _materialize(value, show_secrets: bool):
    """Replace Secret handles inside ``value`` with content or the mask."""
    if isinstance(value, Secret):
        return value.reveal() if show_secrets else MASK
    if isinstance(value, dict):
        return {k: _materialize(v, show_secrets) for k, v in value.items()}
    if isinstance(value, list):
        return [_materialize(v, show_secrets) for v in value]
    return value


def render_resource(resource, show_secrets: bool = False) -> dict:
    """Return the manifest dict of a single resource."""
    return _materialize(to_manifest(resource), show_secrets)


def render_manifests(stack, show_secrets: bool = False) -> list:
    """Return manifest dicts in dependency order."""
    return [render_resource(r, show_secrets) for r in stack.order()]


def dump_manifests(manifests: list) -> str:
    """Serialize manifests as a multi-document YAML stream."""
    return yaml.safe_dump_all(manifests, default_flow_style=False, sort_keys=False)


def write_manifests(stack, out_dir: Path, show_secrets: bool = False) -> list:
    """Write one numbered YAML file per resource. Returns the written paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for i, resource in enumerate(stack.order(), start=1):
        manifest = render_resource(resource, show_secrets)
        path = out_dir / f"{i:02d}-{resource.urn}.yaml"
        with open(path, "w") as f:
            yaml.safe_dump(manifest, f, default_flow_style=False, sort_keys=False)
        paths.append(path)
    log.debug("wrote %d manifests to %s", len(paths), out_dir)
    return paths
