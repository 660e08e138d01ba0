# SPDX-License-Identifier: BUSL-1.1
"""Workspace file discovery, stack config loading, and saving."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from aostack.config.resources import (
    ProjectSettings,
    resource_from_dict,
    resource_to_dict,
)
from aostack.config.values import ABSENT, Plain, Secret, Sensitive


log = logging.getLogger(__name__)

PROJECT_FILE = "aostack.yaml"
STACKS_DIR = "stacks"
DEFAULT_STACK = "dev"


class ConfigError(Exception):
    """Raised when configuration cannot be read or interpreted."""


class ConfigMissingError(ConfigError):
    """Raised when a required configuration value is not available."""
    def __init__(self, key: str, secret: bool = False):
        self.key = key
        self.secret = secret
        kind = "secret " if secret else ""
        super().__init__(f"missing required {kind}configuration value '{key}'")


def qualify(key: str, namespace: str) -> str:
    """Return ``key`` as ``<namespace>:<name>`` unless it already has a namespace."""
    if ":" in key:
        return key
    return f"{namespace}:{key}"


class StackLoader(yaml.SafeLoader):
    """SafeLoader that keeps plain scalars as written.

    Only ``null`` is still resolved, so ``1.10`` stays "1.10" and ``no``
    stays "no" instead of becoming a float or a boolean.
    """


StackLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers
            if tag == "tag:yaml.org,2002:null"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def read_stack_file(path: Path) -> dict:
    """Parse a stack file and check its shape. Missing files read as empty."""
    if not path.exists():
        return {}
    with open(path) as f:
        try:
            data = yaml.load(f, Loader=StackLoader) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    if not isinstance(data.get("config") or {}, dict):
        raise ConfigError(f"{path}: 'config' must be a mapping")
    return data


def _classify(raw):
    """Map a raw stack-file value to its lookup result."""
    if isinstance(raw, bool):
        return Plain("true" if raw else "false")
    if isinstance(raw, (str, int, float)):
        return Plain(str(raw))
    if isinstance(raw, dict) and isinstance(raw.get("secure"), str):
        value = raw["secure"]
        return Sensitive(Secret(lambda: value))
    return ABSENT


class ConfigStore:
    """Read-only snapshot of fully-qualified configuration entries.

    Entries map ``<namespace>:<name>`` keys to raw values as they appear in
    a stack file: scalars are plain, ``{secure: ...}`` mappings are
    sensitive, anything else cannot be classified.
    """

    def __init__(self, entries: Optional[dict] = None, project: str = ""):
        self.project = project
        self._entries = {}
        for key, raw in (entries or {}).items():
            key = str(key)
            if project:
                key = qualify(key, project)
            if key in self._entries:
                raise ConfigError(f"configuration key '{key}' is set more than once")
            self._entries[key] = raw

    @classmethod
    def load(cls, path: Path, project: str) -> "ConfigStore":
        """Load the ``config:`` section of a stack file."""
        entries = read_stack_file(path).get("config") or {}
        log.debug("loaded %d config entries from %s", len(entries), path)
        return cls(entries, project)

    def keys(self) -> list:
        """Enumerate every fully-qualified key in the snapshot."""
        return list(self._entries)

    def lookup(self, key: str):
        """Tagged lookup by fully-qualified key."""
        if key not in self._entries:
            return ABSENT
        return _classify(self._entries[key])

    def config(self, namespace: str) -> "Config":
        return Config(self, namespace)


class Config:
    """View of a ConfigStore bound to one configuration namespace.

    ``get`` returns a value only for plain entries and ``get_secret`` only
    for sensitive ones. ``lookup`` returns the tagged result that tells
    the two apart.
    """

    def __init__(self, store: ConfigStore, namespace: str):
        self.store = store
        self.namespace = namespace

    def full_key(self, name: str) -> str:
        return f"{self.namespace}:{name}"

    def lookup(self, name: str):
        return self.store.lookup(self.full_key(name))

    def get(self, name: str) -> Optional[str]:
        result = self.lookup(name)
        if isinstance(result, Plain):
            return result.value
        return None

    def get_secret(self, name: str) -> Optional[Secret]:
        result = self.lookup(name)
        if isinstance(result, Sensitive):
            return result.handle
        return None

    def require(self, name: str) -> str:
        value = self.get(name)
        if value is None:
            raise ConfigMissingError(self.full_key(name))
        return value

    def require_secret(self, name: str) -> Secret:
        handle = self.get_secret(name)
        if handle is None:
            raise ConfigMissingError(self.full_key(name), secret=True)
        return handle


class Workspace:
    """Manages the project settings and stack files on disk.

    Layout:
        <root>/
        ├── aostack.yaml             # ProjectSettings resource
        └── stacks/
            ├── dev.yaml             # config: {<namespace>:<name>: value}
            └── prod.yaml
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root else Path.cwd()
        self.project_file = self.root / PROJECT_FILE
        self.stacks_dir = self.root / STACKS_DIR
        self._settings_cache = None

    def ensure_dirs(self):
        self.root.mkdir(parents=True, exist_ok=True)
        self.stacks_dir.mkdir(exist_ok=True)

    def is_initialized(self) -> bool:
        return self.project_file.exists()

    # ── Project settings ─────────────────────────────────────────────

    def load_settings(self) -> ProjectSettings:
        """Load aostack.yaml, falling back to defaults when it is absent."""
        if self._settings_cache is not None:
            return self._settings_cache
        if not self.project_file.exists():
            self._settings_cache = ProjectSettings()
            return self._settings_cache
        with open(self.project_file) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigError(f"cannot parse {self.project_file}: {exc}") from exc
        if not data:
            self._settings_cache = ProjectSettings()
            return self._settings_cache
        if not isinstance(data, dict):
            raise ConfigError(f"{self.project_file}: expected a mapping at the top level")
        try:
            self._settings_cache = resource_from_dict(data)
        except (ValueError, TypeError) as exc:
            raise ConfigError(f"{self.project_file}: {exc}") from exc
        return self._settings_cache

    def save_settings(self, settings: ProjectSettings):
        self.ensure_dirs()
        with open(self.project_file, "w") as f:
            yaml.dump(resource_to_dict(settings), f,
                      default_flow_style=False, sort_keys=False)
        self._settings_cache = settings

    # ── Stacks ───────────────────────────────────────────────────────

    def stack_path(self, stack: str) -> Path:
        return self.stacks_dir / f"{stack}.yaml"

    def list_stacks(self) -> list:
        if not self.stacks_dir.exists():
            return []
        return sorted(p.stem for p in self.stacks_dir.glob("*.yaml"))

    def load_store(self, stack: str) -> ConfigStore:
        settings = self.load_settings()
        return ConfigStore.load(self.stack_path(stack), settings.name)

    def set_value(self, stack: str, key: str, value: str, secret: bool = False):
        """Write one entry into a stack file, preserving the others."""
        settings = self.load_settings()
        path = self.stack_path(stack)
        data = read_stack_file(path)
        entries = data.get("config") or {}
        data["config"] = entries
        full = qualify(key, settings.name)
        for existing in _aliases(entries, full, settings.name):
            del entries[existing]
        entries[full] = {"secure": value} if secret else value
        self.ensure_dirs()
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def remove_value(self, stack: str, key: str) -> bool:
        """Delete one entry from a stack file. Returns True if it existed."""
        settings = self.load_settings()
        path = self.stack_path(stack)
        data = read_stack_file(path)
        entries = data.get("config") or {}
        found = _aliases(entries, qualify(key, settings.name), settings.name)
        if not found:
            return False
        for existing in found:
            del entries[existing]
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        return True


def _aliases(entries: dict, full: str, project: str) -> list:
    """Keys of ``entries`` that name the same setting as ``full``."""
    return [k for k in entries if qualify(str(k), project) == full]


def default_stack() -> str:
    return os.environ.get("AOSTACK_STACK", DEFAULT_STACK)
