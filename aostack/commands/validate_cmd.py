# SPDX-License-Identifier: BUSL-1.1
"""aostack validate — validate stack configuration and topology."""

import sys

from aostack.config import ConfigError, Workspace
from aostack.config.validation import validate_project
from aostack.utils import die, load_run


def cmd_validate(args):
    ws = Workspace(args.dir)
    try:
        settings, resolved, stack = load_run(ws, args.stack)
    except ConfigError as exc:
        die(str(exc))

    print(f"Stack: {args.stack}")
    print(f"  Namespace:    {settings.name}")
    print(f"  Prefix:       {settings.prefix}")
    print(f"  Plain:        {len(resolved.plain_config)}")
    print(f"  Secrets:      {len(resolved.secrets)}")
    print(f"  Resources:    {len(stack)}")
    print()

    result = validate_project(settings, resolved, stack)

    if result.warnings:
        print("  Warnings:")
        for w in result.warnings:
            print(f"    ! {w}")
        print()

    if result.errors:
        print("  Errors:")
        for e in result.errors:
            print(f"    x {e}")
        print()
        print("  Result: INVALID")
        sys.exit(1)
    else:
        print("  Result: VALID")
