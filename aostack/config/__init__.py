# SPDX-License-Identifier: BUSL-1.1
"""Configuration system — stack config loading, classification, and validation."""

from aostack.config.values import ABSENT, Plain, Secret, Sensitive
from aostack.config.resources import ProjectSettings
from aostack.config.loader import (
    Config, ConfigError, ConfigMissingError, ConfigStore, Workspace,
)
from aostack.config.resolver import ClassificationError, ResolvedConfiguration, resolve

__all__ = [
    "ABSENT", "Plain", "Secret", "Sensitive", "ProjectSettings",
    "Config", "ConfigError", "ConfigMissingError", "ConfigStore", "Workspace",
    "ClassificationError", "ResolvedConfiguration", "resolve",
]
