# SPDX-License-Identifier: BUSL-1.1
"""aostack describe — show the rendered manifest of one resource."""

import yaml

from aostack.config import ConfigError, Workspace
from aostack.topology import StackError
from aostack.topology.render import render_resource
from aostack.utils import die, load_run


def cmd_describe(args):
    ws = Workspace(args.dir)
    try:
        _settings, _resolved, stack = load_run(ws, args.stack)
    except (ConfigError, StackError) as exc:
        die(str(exc))

    resource = stack.get(args.name)
    if resource is None:
        die(f"Resource '{args.name}' not found. Run 'aostack preview' to list resources.")

    manifest = render_resource(resource)
    print(f"=== {resource.kind}: {resource.urn} ===\n")
    print(yaml.dump(manifest, default_flow_style=False, sort_keys=False))
    if resource.depends_on:
        print("Depends on:")
        for dep in resource.depends_on:
            print(f"  {dep}")
