# SPDX-License-Identifier: BUSL-1.1
"""The agent orchestrator stack: resource table, ordering, outputs."""

import logging

from aostack.config.resources import ProjectSettings
from aostack.config.resolver import ResolvedConfiguration
from aostack.topology.resources import (
    ResourceSpec,
    namespace,
    role,
    role_binding,
    service_account,
)


log = logging.getLogger(__name__)

APP_LABEL = "agent-orchestrator"


class StackError(Exception):
    """Raised when the resource table cannot be ordered."""


class Stack:
    """Ordered collection of ResourceSpecs plus exported outputs."""

    def __init__(self, resources=None, outputs=None):
        self.resources = {}
        for r in resources or []:
            self.add(r)
        self.outputs = dict(outputs or {})

    def add(self, resource: ResourceSpec) -> ResourceSpec:
        if resource.urn in self.resources:
            raise StackError(f"duplicate resource '{resource.urn}'")
        self.resources[resource.urn] = resource
        return resource

    def get(self, urn: str):
        return self.resources.get(urn)

    def __iter__(self):
        return iter(self.resources.values())

    def __len__(self):
        return len(self.resources)

    def order(self) -> list:
        """Return resources so that every dependency precedes its dependents.

        Ties keep declaration order.
        """
        for r in self:
            for dep in r.depends_on:
                if dep not in self.resources:
                    raise StackError(
                        f"resource '{r.urn}' depends on unknown resource '{dep}'"
                    )

        remaining = {urn: set(r.depends_on) for urn, r in self.resources.items()}
        ordered = []
        while remaining:
            ready = [urn for urn, deps in remaining.items() if not deps]
            if not ready:
                cycle = ", ".join(sorted(remaining))
                raise StackError(f"dependency cycle among: {cycle}")
            for urn in ready:
                ordered.append(self.resources[urn])
                del remaining[urn]
            for deps in remaining.values():
                deps.difference_update(ready)
        return ordered


def _cleanup_command(phases: list) -> str:
    return " && ".join(
        f"kubectl delete pods --field-selector=status.phase={phase} "
        "--ignore-not-found=true"
        for phase in phases
    )


def _add_cleanup(stack: Stack, settings: ProjectSettings, ns_agents: ResourceSpec):
    """Cleaner account, its pod-deleting role, and the daily CronJob."""
    sa = stack.add(service_account(
        "agent-cleaner-serviceaccount", "agent-cleaner-serviceaccount", ns_agents,
    ))
    cleaner_role = stack.add(role(
        "agent-cleaner-role", "agent-cleaner-role", ns_agents,
        resources=["pods"], verbs=["list", "delete"],
    ))
    stack.add(role_binding(
        "agent-cleaner-rolebinder", "agent-cleaner-rolebinder", ns_agents,
        subject=sa, bound_role=cleaner_role,
    ))
    stack.add(ResourceSpec(
        urn="agent-cleanup-job",
        kind="CronJob",
        name="agent-cleanup",
        namespace=ns_agents.name,
        body={"spec": {
            "schedule": settings.cleanup.schedule,
            "jobTemplate": {"spec": {"template": {"spec": {
                "serviceAccountName": sa.name,
                "containers": [{
                    "name": "kubectl",
                    "image": settings.cleanup.image,
                    "command": ["/bin/sh", "-c"],
                    "args": [_cleanup_command(settings.cleanup.phases)],
                }],
                "restartPolicy": "OnFailure",
            }}}},
        }},
        depends_on=[ns_agents.urn, sa.urn],
    ))


def _container_env(port: int, config_map: ResourceSpec, secret: ResourceSpec,
                   resolved: ResolvedConfiguration) -> list:
    env = [{"name": "PORT", "value": str(port)}]
    for name in sorted(resolved.plain_config):
        env.append({"name": name, "valueFrom": {
            "configMapKeyRef": {"name": config_map.name, "key": name},
        }})
    for name in sorted(resolved.secrets):
        env.append({"name": name, "valueFrom": {
            "secretKeyRef": {"name": secret.name, "key": name},
        }})
    return env


def build_stack(settings: ProjectSettings, resolved: ResolvedConfiguration) -> Stack:
    """Assemble the full resource table for one provisioning run."""
    stack = Stack()
    orch = settings.orchestrator
    labels = {"app": APP_LABEL}

    ns_control = stack.add(namespace("ns-control-plane", settings.namespaces.control_plane))
    ns_agents = stack.add(namespace("ns-agents", settings.namespaces.agents))

    _add_cleanup(stack, settings, ns_agents)

    # The orchestrator manages agent pods from the control plane namespace.
    sa = stack.add(service_account(
        "agent-orchestrator-serviceaccount", orch.service_account, ns_control,
    ))
    manager_role = stack.add(role(
        "agents-manager-role", "agents-manager", ns_agents,
        resources=["pods", "pods/log"],
        verbs=["create", "list", "watch", "delete", "get"],
    ))
    stack.add(role_binding(
        "agents-manager-rb", "agents-manager-binding", ns_agents,
        subject=sa, bound_role=manager_role,
    ))

    config_map = stack.add(ResourceSpec(
        urn="orchestrator-config",
        kind="ConfigMap",
        name="orchestrator-config",
        namespace=ns_control.name,
        body={"data": dict(sorted(resolved.plain_config.items()))},
        depends_on=[ns_control.urn],
    ))
    secret = stack.add(ResourceSpec(
        urn="orchestrator-secrets",
        kind="Secret",
        name="orchestrator-secrets",
        namespace=ns_control.name,
        body={"type": "Opaque",
              "stringData": dict(sorted(resolved.secrets.items()))},
        depends_on=[ns_control.urn],
    ))

    deployment = stack.add(ResourceSpec(
        urn="orchestrator-dep",
        kind="Deployment",
        name="orchestrator-dep",
        namespace=ns_control.name,
        labels=labels,
        body={"spec": {
            "replicas": orch.replicas,
            "selector": {"matchLabels": dict(labels)},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": {
                    "serviceAccountName": sa.name,
                    "containers": [{
                        "name": APP_LABEL,
                        "image": orch.image,
                        "imagePullPolicy": orch.image_pull_policy,
                        "ports": [{"containerPort": orch.port}],
                        "env": _container_env(orch.port, config_map, secret, resolved),
                    }],
                },
            },
        }},
        depends_on=[ns_control.urn, sa.urn, config_map.urn, secret.urn],
    ))

    service = stack.add(ResourceSpec(
        urn="orchestrator-svc",
        kind="Service",
        name=orch.service_name,
        namespace=ns_control.name,
        body={"spec": {
            "selector": dict(labels),
            "ports": [{"port": orch.port, "targetPort": orch.port}],
            "type": "ClusterIP",
        }},
        depends_on=[ns_control.urn, deployment.urn],
    ))

    stack.outputs["internalUrl"] = (
        f"http://{service.name}.{ns_control.name}.svc.cluster.local:{orch.port}"
    )
    log.debug("built stack with %d resources", len(stack))
    return stack
