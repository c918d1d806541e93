"""Proxy configuration artifact management."""

from __future__ import annotations

import logging
from typing import Any

from .. import metrics
from ..builders.config import build_config_map
from ..constants import ACTION_CONFIG_CREATED, ACTION_CONFIG_UPDATED, KIND_BASIC_AUTHENTICATOR, KIND_CONFIG_MAP
from ..errors import AlreadyExistsError, InvariantViolationError, NotFoundError, RequeueRequested
from ..models import AuthenticatorSpec
from ..tracing import trace_span
from ..utils.diff import data_diff
from ..utils.ownership import is_owned_by
from .result import ReconcileResult
from .store.base import ResourceStore

logger = logging.getLogger(__name__)


class ConfigArtifactManager:
    """Keeps the nginx ConfigMap equal to the content derived from the spec."""

    def __init__(self, store: ResourceStore) -> None:
        self.store = store

    def ensure(self, resource: dict[str, Any], spec: AuthenticatorSpec, result: ReconcileResult) -> str:
        """Create or update the ConfigMap and return its name.

        Raises:
            RequeueRequested: After creating the ConfigMap
            InvariantViolationError: If a ConfigMap not owned by the resource holds the name
        """
        meta = resource["metadata"]
        namespace, name = meta["namespace"], meta["name"]
        desired = build_config_map(name, namespace, spec)
        cm_name = desired["metadata"]["name"]

        with trace_span("ensure_config_artifact", kind=KIND_BASIC_AUTHENTICATOR, attributes={"configmap.name": cm_name}):
            try:
                existing = self.store.get(KIND_CONFIG_MAP, namespace, cm_name)
            except NotFoundError:
                self.store.set_owner(desired, resource)
                try:
                    self.store.create(desired)
                except AlreadyExistsError as e:
                    raise RequeueRequested(f"configmap {cm_name} was created concurrently") from e
                metrics.object_writes_total.labels(object_kind=KIND_CONFIG_MAP, operation="create").inc()
                result.record(ACTION_CONFIG_CREATED, cm_name)
                logger.info(f"Created proxy config {namespace}/{cm_name}")
                raise RequeueRequested(f"created configmap {cm_name}")

            if not is_owned_by(existing, resource):
                raise InvariantViolationError(f"ConfigMap {namespace}/{cm_name} exists but is not owned by {name}")

            changed = data_diff(desired["data"], existing.get("data"))
            if not changed:
                return cm_name

            metrics.drift_detected_total.labels(kind=KIND_BASIC_AUTHENTICATOR, resource_type=KIND_CONFIG_MAP).inc()
            existing["data"] = desired["data"]
            self.store.update(existing)
            metrics.object_writes_total.labels(object_kind=KIND_CONFIG_MAP, operation="update").inc()
            result.record(ACTION_CONFIG_UPDATED, cm_name)
            logger.info(f"Updated proxy config {namespace}/{cm_name}, changed keys: {', '.join(changed)}")
            return cm_name
