"""Status reporting for BasicAuthenticator resources."""

from __future__ import annotations

import logging
from typing import Any

from .. import metrics
from ..constants import ACTION_STATUS_UPDATED, API_GROUP_VERSION, COND_READY, KIND_BASIC_AUTHENTICATOR
from ..utils.conditions import set_ready_condition
from .result import ReconcileResult
from .store.base import ResourceStore

logger = logging.getLogger(__name__)


class StatusReporter:
    """Writes observed readiness through the status subresource only."""

    def __init__(self, store: ResourceStore) -> None:
        self.store = store

    def desired_status(
        self,
        resource: dict[str, Any],
        ready_replicas: int,
        ready: bool,
        message: str,
    ) -> dict[str, Any]:
        """Compute the status the resource should carry."""
        current = resource.get("status") or {}
        status = dict(current)
        status["readyReplicas"] = ready_replicas
        status["observedGeneration"] = resource["metadata"].get("generation")
        status["conditions"] = set_ready_condition(
            current.get("conditions") or [],
            ready,
            message,
            resource["metadata"].get("generation"),
        )
        return status

    def report(
        self,
        resource: dict[str, Any],
        ready_replicas: int,
        ready: bool,
        message: str,
        result: ReconcileResult,
    ) -> bool:
        """Write the status if it changed.

        Returns:
            True if a status write was made
        """
        meta = resource["metadata"]
        status = self.desired_status(resource, ready_replicas, ready, message)
        if status == (resource.get("status") or {}):
            return False

        # Only identity and version travel with the status write, never spec
        self.store.update_status({
            "apiVersion": resource.get("apiVersion", API_GROUP_VERSION),
            "kind": KIND_BASIC_AUTHENTICATOR,
            "metadata": {
                "name": meta["name"],
                "namespace": meta["namespace"],
                "resourceVersion": meta.get("resourceVersion"),
            },
            "status": status,
        })
        result.record(ACTION_STATUS_UPDATED, meta["name"])
        metrics.resource_status_total.labels(
            kind=KIND_BASIC_AUTHENTICATOR, status=f"{COND_READY}={ready}"
        ).inc()
        metrics.ready_replicas.labels(namespace=meta["namespace"], name=meta["name"]).set(ready_replicas)
        logger.info(f"Updated status of {meta['namespace']}/{meta['name']}: readyReplicas={ready_replicas}")
        return True
