# SPDX-License-Identifier: BUSL-1.1
"""Validation engine for settings completeness and topology consistency.

Enforces two types of rules:
1. Resolved configuration carries every required setting under valid names
2. The stack table is orderable and every cross-resource reference resolves
"""

import re

from aostack.topology.stack import StackError


ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
PREFIX_RE = re.compile(r"^[A-Z][A-Z0-9]{0,7}_$")


class ValidationError(Exception):
    """Raised when configuration validation fails."""
    def __init__(self, errors: list, warnings: list = None):
        self.errors = errors
        self.warnings = warnings or []
        msg = "; ".join(errors)
        super().__init__(msg)


class ValidationResult:
    """Collects errors and warnings from validation."""
    def __init__(self):
        self.errors = []
        self.warnings = []

    def error(self, msg: str):
        self.errors.append(msg)

    def warn(self, msg: str):
        self.warnings.append(msg)

    def extend(self, other: "ValidationResult"):
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self):
        if not self.valid:
            raise ValidationError(self.errors, self.warnings)


def validate_settings(settings, resolved) -> ValidationResult:
    """Check the resolved configuration against the project settings."""
    result = ValidationResult()

    if not PREFIX_RE.match(settings.prefix):
        result.warn(
            f"prefix '{settings.prefix}' does not follow the "
            "short-uppercase-token-plus-underscore convention (e.g. 'AO_')"
        )

    for name in settings.required:
        if name in resolved.secrets:
            continue
        if name in resolved.plain_config:
            result.warn(
                f"required setting '{name}' is stored as a plain value, so "
                "it will be delivered through a ConfigMap, not a Secret"
            )
            continue
        result.error(
            f"required setting '{settings.name}:{name}' is not set. "
            f"Run 'aostack config set {name} <value> --secret'."
        )

    for name in sorted(resolved.names()):
        if not ENV_NAME_RE.match(name):
            result.error(
                f"setting '{name}' is not a valid environment variable name"
            )

    port = resolved.plain_config.get(f"{settings.prefix}PORT")
    if port is not None and port != str(settings.orchestrator.port):
        result.warn(
            f"{settings.prefix}PORT is '{port}' but the orchestrator "
            f"container port is {settings.orchestrator.port}"
        )

    return result


def _workload_pod_spec(resource) -> dict:
    spec = resource.body.get("spec", {})
    if resource.kind == "Deployment":
        return spec.get("template", {}).get("spec", {})
    if resource.kind == "CronJob":
        return (spec.get("jobTemplate", {}).get("spec", {})
                .get("template", {}).get("spec", {}))
    return {}


def _find(stack, kind: str, name: str, namespace: str = ""):
    for r in stack:
        if r.kind == kind and r.name == name and (not namespace or r.namespace == namespace):
            return r
    return None


def _check_env_refs(stack, resource, pod_spec: dict, result: ValidationResult):
    for container in pod_spec.get("containers", []):
        for env in container.get("env", []):
            value_from = env.get("valueFrom", {})
            for ref_field, kind, data_field in (
                ("configMapKeyRef", "ConfigMap", "data"),
                ("secretKeyRef", "Secret", "stringData"),
            ):
                ref = value_from.get(ref_field)
                if not ref:
                    continue
                target = _find(stack, kind, ref.get("name", ""), resource.namespace)
                if target is None:
                    result.error(
                        f"{resource.kind} '{resource.name}' env '{env.get('name')}' "
                        f"references missing {kind} '{ref.get('name')}'"
                    )
                elif ref.get("key") not in target.body.get(data_field, {}):
                    result.error(
                        f"{resource.kind} '{resource.name}' env '{env.get('name')}' "
                        f"references missing key '{ref.get('key')}' in {kind} "
                        f"'{target.name}'"
                    )


def validate_stack(stack) -> ValidationResult:
    """Check that the stack can be ordered and all references resolve."""
    result = ValidationResult()

    try:
        stack.order()
    except StackError as exc:
        result.error(str(exc))

    namespaces = {r.name for r in stack if r.kind == "Namespace"}

    for r in stack:
        if r.namespaced and r.namespace not in namespaces:
            result.error(
                f"{r.kind} '{r.name}' is in namespace '{r.namespace}', "
                "which the stack does not declare"
            )

        if r.kind == "RoleBinding":
            role_ref = r.body.get("roleRef", {})
            if _find(stack, "Role", role_ref.get("name", ""), r.namespace) is None:
                result.error(
                    f"RoleBinding '{r.name}' references missing Role "
                    f"'{role_ref.get('name')}' in namespace '{r.namespace}'"
                )
            for subject in r.body.get("subjects", []):
                if subject.get("kind") != "ServiceAccount":
                    continue
                if _find(stack, "ServiceAccount", subject.get("name", ""),
                         subject.get("namespace", "")) is None:
                    result.error(
                        f"RoleBinding '{r.name}' binds missing ServiceAccount "
                        f"'{subject.get('namespace')}/{subject.get('name')}'"
                    )

        pod_spec = _workload_pod_spec(r)
        if pod_spec:
            sa_name = pod_spec.get("serviceAccountName")
            if sa_name and _find(stack, "ServiceAccount", sa_name, r.namespace) is None:
                result.error(
                    f"{r.kind} '{r.name}' runs as missing ServiceAccount "
                    f"'{r.namespace}/{sa_name}'"
                )
            _check_env_refs(stack, r, pod_spec, result)

    return result


def validate_project(settings, resolved, stack) -> ValidationResult:
    """Full validation of one provisioning run."""
    result = ValidationResult()

    # Step 1: required settings and naming
    result.extend(validate_settings(settings, resolved))

    # Step 2: topology consistency
    result.extend(validate_stack(stack))

    return result
