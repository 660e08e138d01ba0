# SPDX-License-Identifier: BUSL-1.1
"""aostack config — show or edit stack configuration."""

from aostack.config import ConfigError, Workspace, resolve
from aostack.utils import die


def cmd_config(args):
    ws = Workspace(args.dir)
    action = getattr(args, "action", None)

    if action == "set":
        try:
            ws.set_value(args.stack, args.key, args.value, secret=args.secret)
        except ConfigError as exc:
            die(str(exc))
        kind = "secret" if args.secret else "value"
        print(f"Set {kind} '{args.key}' in stack '{args.stack}'.")
        return
    if action == "rm":
        try:
            removed = ws.remove_value(args.stack, args.key)
        except ConfigError as exc:
            die(str(exc))
        if not removed:
            die(f"'{args.key}' is not set in stack '{args.stack}'.")
        print(f"Removed '{args.key}' from stack '{args.stack}'.")
        return

    try:
        settings = ws.load_settings()
        store = ws.load_store(args.stack)
        resolved = resolve(store, settings.prefix, settings.name)
    except ConfigError as exc:
        die(str(exc))

    show = getattr(args, "show_secrets", False)
    stacks = ws.list_stacks()
    print(f"Stack: {args.stack} ({ws.stack_path(args.stack)})")
    print(f"  namespace: {settings.name}")
    print(f"  prefix:    {settings.prefix}")
    print(f"  stacks:    {', '.join(stacks) if stacks else '(none)'}")
    print()
    if not resolved.names():
        print(f"  (no settings matching {settings.name}:{settings.prefix}*)")
        return

    width = max(len(n) for n in resolved.names())
    print(f"  {'NAME':<{width}}  {'KIND':<6}  VALUE")
    for name in sorted(resolved.names()):
        if name in resolved.plain_config:
            print(f"  {name:<{width}}  {'plain':<6}  {resolved.plain_config[name]}")
        else:
            handle = resolved.secrets[name]
            value = handle.reveal() if show else handle
            print(f"  {name:<{width}}  {'secret':<6}  {value}")
