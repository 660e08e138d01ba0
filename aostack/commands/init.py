# SPDX-License-Identifier: BUSL-1.1
"""aostack init — write the project settings file and an empty stack."""

from aostack.config import ProjectSettings, Workspace


def cmd_init(args):
    ws = Workspace(args.dir)

    if ws.is_initialized() and not getattr(args, "force", False):
        print("Workspace is already initialized.")
        print(f"  Settings: {ws.project_file}")
        print("  Use --force to re-initialize.")
        return

    settings = ProjectSettings()
    if getattr(args, "name", None):
        settings.name = args.name
    if getattr(args, "prefix", None):
        settings.prefix = args.prefix

    ws.save_settings(settings)
    print(f"[OK] Settings saved to {ws.project_file}")

    stack_path = ws.stack_path(args.stack)
    if not stack_path.exists():
        stack_path.write_text("config: {}\n")
        print(f"[OK] Created stack '{args.stack}' at {stack_path}")

    print()
    print("Next steps:")
    for name in settings.required:
        print(f"  aostack config set {name} <value> --secret")
    print("  aostack validate                     Check the configuration")
    print("  aostack render -o manifests/         Write Kubernetes manifests")
