# SPDX-License-Identifier: BUSL-1.1
"""Command implementations for aostack CLI."""

from aostack.commands.init import cmd_init
from aostack.commands.config_cmd import cmd_config
from aostack.commands.preview import cmd_preview
from aostack.commands.render import cmd_render
from aostack.commands.validate_cmd import cmd_validate
from aostack.commands.describe import cmd_describe
__all__ = [
    "cmd_init", "cmd_config", "cmd_preview", "cmd_render", "cmd_validate",
    "cmd_describe",
]
