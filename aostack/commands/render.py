# SPDX-License-Identifier: BUSL-1.1
"""aostack render — write Kubernetes manifests for a stack."""

import sys
from pathlib import Path

from aostack.config import ConfigError, Workspace
from aostack.config.validation import ValidationError, validate_project
from aostack.topology import StackError, dump_manifests, render_manifests, write_manifests
from aostack.utils import die, load_run


def cmd_render(args):
    ws = Workspace(args.dir)
    try:
        settings, resolved, stack = load_run(ws, args.stack)
        result = validate_project(settings, resolved, stack)
        result.raise_if_invalid()
    except (ConfigError, StackError, ValidationError) as exc:
        die(str(exc))

    for w in result.warnings:
        print(f"Warning: {w}", file=sys.stderr)
    if resolved.secrets and not args.show_secrets:
        print(
            "Warning: secret values are masked; pass --show-secrets to "
            "write them into the Secret manifest",
            file=sys.stderr,
        )

    if args.output:
        paths = write_manifests(stack, Path(args.output), show_secrets=args.show_secrets)
        print(f"Wrote {len(paths)} manifests to {args.output}")
        return

    sys.stdout.write(dump_manifests(render_manifests(stack, show_secrets=args.show_secrets)))
