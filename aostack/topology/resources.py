# SPDX-License-Identifier: BUSL-1.1
"""Declarative resource specs and their Kubernetes manifest form."""

from dataclasses import dataclass, field


API_VERSIONS = {
    "Namespace": "v1",
    "ServiceAccount": "v1",
    "ConfigMap": "v1",
    "Secret": "v1",
    "Service": "v1",
    "Role": "rbac.authorization.k8s.io/v1",
    "RoleBinding": "rbac.authorization.k8s.io/v1",
    "Deployment": "apps/v1",
    "CronJob": "batch/v1",
}

CLUSTER_SCOPED = {"Namespace"}

RBAC_GROUP = "rbac.authorization.k8s.io"


@dataclass
class ResourceSpec:
    """One row of the stack table.

    ``urn`` is the logical name other rows refer to in ``depends_on``;
    ``name`` and ``namespace`` become the object's metadata. ``body``
    holds every top-level manifest field besides apiVersion, kind and
    metadata (spec, rules, subjects, roleRef, data, stringData).
    """
    urn: str
    kind: str
    name: str
    namespace: str = ""
    labels: dict = field(default_factory=dict)
    body: dict = field(default_factory=dict)
    depends_on: list = field(default_factory=list)

    @property
    def namespaced(self) -> bool:
        return self.kind not in CLUSTER_SCOPED


def to_manifest(resource: ResourceSpec) -> dict:
    """Convert a ResourceSpec to a Kubernetes manifest dict."""
    api_version = API_VERSIONS.get(resource.kind)
    if api_version is None:
        raise ValueError(f"Unknown resource kind: {resource.kind}")

    metadata = {"name": resource.name}
    if resource.namespaced and resource.namespace:
        metadata["namespace"] = resource.namespace
    if resource.labels:
        metadata["labels"] = dict(resource.labels)

    manifest = {
        "apiVersion": api_version,
        "kind": resource.kind,
        "metadata": metadata,
    }
    manifest.update(resource.body)
    return manifest


# ── Builders ─────────────────────────────────────────────────────────────

def namespace(urn: str, name: str) -> ResourceSpec:
    return ResourceSpec(urn=urn, kind="Namespace", name=name)


def service_account(urn: str, name: str, ns: ResourceSpec) -> ResourceSpec:
    return ResourceSpec(
        urn=urn, kind="ServiceAccount", name=name,
        namespace=ns.name, depends_on=[ns.urn],
    )


def role(urn: str, name: str, ns: ResourceSpec, resources: list,
         verbs: list) -> ResourceSpec:
    return ResourceSpec(
        urn=urn, kind="Role", name=name, namespace=ns.name,
        body={"rules": [{
            "apiGroups": [""],
            "resources": list(resources),
            "verbs": list(verbs),
        }]},
        depends_on=[ns.urn],
    )


def role_binding(urn: str, name: str, ns: ResourceSpec,
                 subject: ResourceSpec, bound_role: ResourceSpec) -> ResourceSpec:
    return ResourceSpec(
        urn=urn, kind="RoleBinding", name=name, namespace=ns.name,
        body={
            "subjects": [{
                "kind": "ServiceAccount",
                "name": subject.name,
                "namespace": subject.namespace,
            }],
            "roleRef": {
                "kind": "Role",
                "name": bound_role.name,
                "apiGroup": RBAC_GROUP,
            },
        },
        depends_on=[ns.urn, subject.urn, bound_role.urn],
    )
