# SPDX-License-Identifier: BUSL-1.1
"""aostack preview — list the resources a run would provision, in order."""

from aostack.config import ConfigError, Workspace
from aostack.topology import StackError
from aostack.utils import die, load_run


def cmd_preview(args):
    ws = Workspace(args.dir)
    try:
        _settings, _resolved, stack = load_run(ws, args.stack)
        ordered = stack.order()
    except (ConfigError, StackError) as exc:
        die(str(exc))

    rows = [
        (r.urn, r.kind, r.namespace or "-", ", ".join(r.depends_on) or "-")
        for r in ordered
    ]
    headers = ("RESOURCE", "KIND", "NAMESPACE", "DEPENDS ON")
    widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers)]

    def fmt(row):
        return "  ".join(f"{cell:<{widths[i]}}" for i, cell in enumerate(row)).rstrip()

    print(fmt(headers))
    for row in rows:
        print(fmt(row))
    print()
    print(f"{len(rows)} resources")
    for key, value in stack.outputs.items():
        print(f"Output {key}: {value}")
