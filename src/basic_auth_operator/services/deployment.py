"""Standalone proxy deployment management."""

from __future__ import annotations

import copy
import logging
from typing import Any

from .. import metrics
from ..builders.deployment import build_deployment
from ..config import OperatorConfig
from ..constants import (
    ACTION_DEPLOYMENT_CREATED,
    ACTION_DEPLOYMENT_UPDATED,
    API_GROUP,
    KIND_BASIC_AUTHENTICATOR,
    KIND_DEPLOYMENT,
    PROXY_APP_NAME,
)
from ..errors import AlreadyExistsError, InvariantViolationError, NotFoundError, RequeueRequested
from ..models import AuthenticatorSpec
from ..tracing import trace_span
from ..utils.diff import deployment_diff
from ..utils.ownership import is_owned_by, managed_selector
from .result import ReconcileResult
from .store.base import ResourceStore

logger = logging.getLogger(__name__)


def apply_managed_fields(observed: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
    """Overwrite the fields the operator manages on ``observed``.

    Template annotations outside the operator's group (for example restart
    stamps added by ``kubectl rollout restart``) are preserved.
    """
    spec = observed.setdefault("spec", {})
    spec["replicas"] = desired["spec"]["replicas"]
    spec["selector"] = copy.deepcopy(desired["spec"]["selector"])

    template = copy.deepcopy(desired["spec"]["template"])
    observed_annotations = ((spec.get("template") or {}).get("metadata") or {}).get("annotations") or {}
    foreign = {k: v for k, v in observed_annotations.items() if not k.startswith(API_GROUP)}
    template["metadata"]["annotations"] = {**foreign, **template["metadata"].get("annotations", {})}
    spec["template"] = template

    labels = observed.setdefault("metadata", {}).setdefault("labels", {})
    labels.update(desired["metadata"].get("labels") or {})
    return observed


class DeploymentManager:
    """Keeps the standalone proxy Deployment in line with the spec."""

    def __init__(self, store: ResourceStore, config: OperatorConfig) -> None:
        self.store = store
        self.config = config

    def ensure(
        self,
        resource: dict[str, Any],
        spec: AuthenticatorSpec,
        secret_name: str,
        config_map_name: str,
        result: ReconcileResult,
    ) -> int:
        """Create or update the proxy Deployment.

        Args:
            resource: BasicAuthenticator object
            spec: Parsed spec
            secret_name: Credential secret to mount
            config_map_name: Proxy config to mount
            result: Reconcile result to record writes on

        Returns:
            Observed ready replicas of the Deployment

        Raises:
            RequeueRequested: After creating the Deployment
            InvariantViolationError: On duplicate or foreign proxy Deployments
        """
        meta = resource["metadata"]
        namespace, name = meta["namespace"], meta["name"]
        desired = build_deployment(name, namespace, spec, secret_name, config_map_name, self.config)
        deployment_name = desired["metadata"]["name"]

        with trace_span("ensure_deployment", kind=KIND_BASIC_AUTHENTICATOR, attributes={"deployment.name": deployment_name}):
            owned = [
                d for d in self.store.list(KIND_DEPLOYMENT, namespace, managed_selector(name, PROXY_APP_NAME))
                if is_owned_by(d, resource)
            ]
            if len(owned) > 1:
                names = ", ".join(sorted(d["metadata"]["name"] for d in owned))
                raise InvariantViolationError(f"{name} owns more than one proxy Deployment: {names}")

            try:
                existing = self.store.get(KIND_DEPLOYMENT, namespace, deployment_name)
            except NotFoundError:
                self.store.set_owner(desired, resource)
                try:
                    self.store.create(desired)
                except AlreadyExistsError as e:
                    raise RequeueRequested(f"deployment {deployment_name} was created concurrently") from e
                metrics.object_writes_total.labels(object_kind=KIND_DEPLOYMENT, operation="create").inc()
                result.record(ACTION_DEPLOYMENT_CREATED, deployment_name)
                logger.info(f"Created proxy deployment {namespace}/{deployment_name}")
                raise RequeueRequested(f"created deployment {deployment_name}")

            if not is_owned_by(existing, resource):
                raise InvariantViolationError(
                    f"Deployment {namespace}/{deployment_name} exists but is not owned by {name}"
                )

            changed = deployment_diff(desired, existing)
            if changed:
                metrics.drift_detected_total.labels(kind=KIND_BASIC_AUTHENTICATOR, resource_type=KIND_DEPLOYMENT).inc()
                existing = self.store.update(apply_managed_fields(existing, desired))
                metrics.object_writes_total.labels(object_kind=KIND_DEPLOYMENT, operation="update").inc()
                result.record(ACTION_DEPLOYMENT_UPDATED, deployment_name)
                logger.info(f"Updated proxy deployment {namespace}/{deployment_name}, changed: {', '.join(changed)}")

            return int((existing.get("status") or {}).get("readyReplicas") or 0)
