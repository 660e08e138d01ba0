# SPDX-License-Identifier: BUSL-1.1
"""CLI argument parsing and command dispatch."""

import argparse
import sys

from aostack import __version__
from aostack.config.loader import default_stack
from aostack.logging_config import configure_logging


def _add_workspace_args(parser):
    parser.add_argument("--dir", help="Workspace directory (default: current directory)")
    parser.add_argument("-s", "--stack", default=default_stack(),
                        help="Stack name (default: $AOSTACK_STACK or 'dev')")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="aostack",
        description="aostack - Agent Orchestrator cluster provisioning",
    )
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging on stderr")
    sub = parser.add_subparsers(dest="command")

    # init
    p_init = sub.add_parser("init", help="Create aostack.yaml and an empty stack")
    _add_workspace_args(p_init)
    p_init.add_argument("--name", help="Configuration namespace (default: agent-orchestrator)")
    p_init.add_argument("--prefix", help="Setting name prefix (default: AO_)")
    p_init.add_argument("--force", action="store_true",
                        help="Re-initialize even if already configured")

    # config
    p_cfg = sub.add_parser("config", help="Show or edit stack configuration")
    _add_workspace_args(p_cfg)
    p_cfg.add_argument("--show-secrets", action="store_true",
                       help="Print secret values instead of masking them")
    cfg_sub = p_cfg.add_subparsers(dest="action")
    p_cfg_set = cfg_sub.add_parser("set", help="Set a configuration value")
    p_cfg_set.add_argument("key", help="Setting name, optionally <namespace>:<name>")
    p_cfg_set.add_argument("value", help="Setting value")
    p_cfg_set.add_argument("--secret", action="store_true",
                           help="Store the value as a secret")
    p_cfg_rm = cfg_sub.add_parser("rm", help="Remove a configuration value")
    p_cfg_rm.add_argument("key", help="Setting name, optionally <namespace>:<name>")

    # preview
    p_prev = sub.add_parser("preview", help="List resources in provisioning order")
    _add_workspace_args(p_prev)

    # render
    p_render = sub.add_parser("render", help="Render Kubernetes manifests")
    _add_workspace_args(p_render)
    p_render.add_argument("-o", "--output", metavar="DIR",
                          help="Write one file per resource into DIR instead of stdout")
    p_render.add_argument("--show-secrets", action="store_true",
                          help="Write secret values into the Secret manifest")

    # validate
    p_val = sub.add_parser("validate", help="Validate stack configuration and topology")
    _add_workspace_args(p_val)

    # describe
    p_desc = sub.add_parser("describe", help="Show the manifest of one resource")
    _add_workspace_args(p_desc)
    p_desc.add_argument("name", help="Logical resource name (see 'aostack preview')")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)

    # Lazy import commands to keep startup fast
    from aostack.commands import (
        cmd_init, cmd_config, cmd_preview, cmd_render, cmd_validate, cmd_describe,
    )

    commands = {
        "init": cmd_init,
        "config": cmd_config,
        "preview": cmd_preview,
        "render": cmd_render,
        "validate": cmd_validate,
        "describe": cmd_describe,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
