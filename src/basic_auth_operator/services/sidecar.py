"""Sidecar injection into existing workloads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..builders.proxy import build_proxy_container, build_proxy_volumes
from ..config import OperatorConfig
from ..constants import ANNOTATION_INJECTED_BY, FIELD_MANAGER, KIND_BASIC_AUTHENTICATOR, KIND_DEPLOYMENT, LABEL_MANAGED_BY
from ..models import AuthenticatorSpec, ResourceRef
from ..tracing import trace_span
from .store.base import ResourceStore

logger = logging.getLogger(__name__)

INJECTED = "injected"
PRESENT = "present"
FOREIGN = "foreign"


@dataclass
class InjectionPlan:
    """Workloads selected by a resource, split by what injection did to them.

    Attributes:
        mutated: Workloads changed in memory that still have to be persisted
        targets: Every workload carrying this resource's proxy, mutated ones included
        skipped: Names of workloads left alone
    """

    mutated: list[dict[str, Any]] = field(default_factory=list)
    targets: list[dict[str, Any]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def injected_by(workload: dict[str, Any]) -> str | None:
    """Return the ``namespace/name`` of the resource that injected ``workload``."""
    return ((workload.get("metadata") or {}).get("annotations") or {}).get(ANNOTATION_INJECTED_BY)


class SidecarInjector:
    """Adds the proxy container to Deployments matched by a selector.

    Presence is detected by the proxy container name only; the rest of the
    pod template belongs to whoever manages the workload and is never
    compared or rewritten.
    """

    def __init__(self, store: ResourceStore, config: OperatorConfig) -> None:
        self.store = store
        self.config = config

    def inject_into(
        self,
        workload: dict[str, Any],
        owner: ResourceRef,
        spec: AuthenticatorSpec,
        secret_name: str,
        config_map_name: str,
    ) -> str:
        """Inject the proxy into ``workload`` in place.

        Returns:
            ``INJECTED`` if the workload was changed, ``PRESENT`` if it already
            carries this resource's proxy, ``FOREIGN`` if another resource got
            there first
        """
        pod_spec = workload.setdefault("spec", {}).setdefault("template", {}).setdefault("spec", {})
        containers = pod_spec.setdefault("containers", [])
        marker = self.config.proxy_container_name

        if any(c.get("name") == marker for c in containers):
            existing_owner = injected_by(workload)
            if existing_owner and existing_owner != str(owner):
                return FOREIGN
            return PRESENT

        containers.append(build_proxy_container(spec, self.config))
        volumes = build_proxy_volumes(config_map_name, secret_name)
        ours = {v["name"] for v in volumes}
        pod_spec["volumes"] = [v for v in pod_spec.get("volumes") or [] if v.get("name") not in ours] + volumes

        annotations = workload.setdefault("metadata", {}).setdefault("annotations", {})
        annotations[ANNOTATION_INJECTED_BY] = str(owner)
        return INJECTED

    def plan(
        self,
        resource: dict[str, Any],
        spec: AuthenticatorSpec,
        secret_name: str,
        config_map_name: str,
    ) -> InjectionPlan:
        """List the selected workloads and inject the proxy where it is missing.

        Nothing is written; the caller persists ``plan.mutated``.
        """
        owner = ResourceRef.of(resource)
        plan = InjectionPlan()

        with trace_span("plan_sidecar_injection", kind=KIND_BASIC_AUTHENTICATOR, attributes={"resource": str(owner)}):
            for workload in self.store.list(KIND_DEPLOYMENT, owner.namespace, spec.selector):
                workload_name = workload["metadata"]["name"]
                labels = workload["metadata"].get("labels") or {}
                if labels.get(LABEL_MANAGED_BY) == FIELD_MANAGER:
                    # Standalone proxies of other resources
                    plan.skipped.append(workload_name)
                    continue

                outcome = self.inject_into(workload, owner, spec, secret_name, config_map_name)
                if outcome == FOREIGN:
                    logger.warning(
                        f"Deployment {owner.namespace}/{workload_name} already carries a proxy injected by "
                        f"{injected_by(workload)}, skipping it for {owner}"
                    )
                    plan.skipped.append(workload_name)
                    continue
                if outcome == INJECTED:
                    plan.mutated.append(workload)
                plan.targets.append(workload)

        return plan
