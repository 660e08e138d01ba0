# SPDX-License-Identifier: BUSL-1.1
"""Project settings resource for aostack.

The settings file is a Kubernetes-style YAML document with apiVersion,
kind, metadata, and spec fields. Its spec carries the topology knobs
(namespaces, orchestrator image, cleanup schedule) and the configuration
prefix used to pick this application's entries out of a stack file.
"""

from dataclasses import dataclass, field, fields, is_dataclass


# ── Project ──────────────────────────────────────────────────────────────

@dataclass
class NamespaceSpec:
    control_plane: str = "agents-control-plane"
    agents: str = "agents"


@dataclass
class OrchestratorSpec:
    image: str = "ghcr.io/compilercomplied/agent-orchestrator:latest"
    image_pull_policy: str = "Always"   # Always | IfNotPresent | Never
    port: int = 8080
    replicas: int = 1
    service_account: str = "agent-orchestrator-serviceaccount"
    service_name: str = "agent-orchestrator"


@dataclass
class CleanupSpec:
    schedule: str = "0 0 * * *"          # once a day at midnight
    image: str = "bitnami/kubectl:latest"
    phases: list = field(default_factory=lambda: ["Succeeded", "Failed"])


@dataclass
class ProjectSettings:
    """Ties the configuration namespace to the resources it provisions."""
    name: str = "agent-orchestrator"     # configuration namespace
    prefix: str = "AO_"
    required: list = field(default_factory=lambda: [
        "AO_KUBECONFIG",
        "AO_GITHUB_TOKEN",
        "AO_ANTHROPIC_API_KEY",
    ])
    namespaces: NamespaceSpec = field(default_factory=NamespaceSpec)
    orchestrator: OrchestratorSpec = field(default_factory=OrchestratorSpec)
    cleanup: CleanupSpec = field(default_factory=CleanupSpec)


# ── Serialization helpers ────────────────────────────────────────────────

API_VERSION = "aostack/v1"

KIND_MAP = {
    "Project": ProjectSettings,
}


def resource_to_dict(resource) -> dict:
    """Convert a settings dataclass to a YAML-serializable dict."""
    kind = next(k for k, cls in KIND_MAP.items() if isinstance(resource, cls))

    spec = _dataclass_to_dict(resource)
    name = spec.pop("name", "")

    return {
        "apiVersion": API_VERSION,
        "kind": kind,
        "metadata": {"name": name},
        "spec": spec,
    }


def resource_from_dict(data: dict):
    """Parse a YAML dict into the appropriate settings dataclass."""
    kind = data.get("kind", "")
    cls = KIND_MAP.get(kind)
    if cls is None:
        raise ValueError(f"Unknown resource kind: {kind}")

    metadata = data.get("metadata") or {}
    spec = data.get("spec") or {}
    if not isinstance(metadata, dict) or not isinstance(spec, dict):
        raise ValueError("metadata and spec must be mappings")
    spec = dict(spec)
    name = metadata.get("name")
    if name not in (None, ""):
        spec["name"] = name

    return _dict_to_dataclass(cls, spec)


def _camel(name: str) -> str:
    parts = name.split("_")
    return parts[0] + "".join(p.capitalize() for p in parts[1:])


def _dataclass_to_dict(obj) -> dict:
    """Recursively convert a dataclass to a plain dict with camelCase keys."""
    if not is_dataclass(obj):
        return obj
    result = {}
    for f in fields(obj):
        val = getattr(obj, f.name)
        if is_dataclass(val):
            val = _dataclass_to_dict(val)
        elif isinstance(val, list):
            val = list(val)
        result[_camel(f.name)] = val
    return result


def _check_scalar(key: str, field_type, val):
    """Raise ValueError unless ``val`` matches a str/int/list field type."""
    # bool is an int subclass but never a valid port or replica count
    if field_type is int and isinstance(val, bool):
        ok = False
    else:
        ok = isinstance(val, field_type)
    if ok and field_type is list:
        ok = all(isinstance(item, str) for item in val)
    if not ok:
        expected = "a list of strings" if field_type is list else field_type.__name__
        raise ValueError(f"{key}: expected {expected}, got {val!r}")


def _dict_to_dataclass(cls, data: dict):
    """Recursively construct a dataclass from a dict, accepting camelCase keys."""
    if not isinstance(data, dict):
        return data

    kwargs = {}
    field_map = {f.name: f for f in fields(cls)}
    alias_map = {}
    for f in fields(cls):
        alias_map[_camel(f.name)] = f.name
        alias_map[f.name] = f.name

    for key, val in data.items():
        field_name = alias_map.get(key)
        if field_name is None:
            continue
        field_type = field_map[field_name].type
        if is_dataclass(field_type):
            if not isinstance(val, dict):
                raise ValueError(
                    f"{key}: expected a mapping, got {type(val).__name__}"
                )
            val = _dict_to_dataclass(field_type, val)
        else:
            _check_scalar(key, field_type, val)
        kwargs[field_name] = val

    return cls(**kwargs)
