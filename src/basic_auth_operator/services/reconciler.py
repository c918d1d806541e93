"""Reconcile loop for BasicAuthenticator resources.

Every pass starts from scratch and walks the same steps::

    Fetch -> EnsureCredential -> EnsureConfig -> EnsureWorkload -> ReportStatus

There is no persisted step pointer; progress is recovered by reading the live
dependents. A step that creates an object stops the pass with a requeue so the
next pass sees the new object through a fresh read.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from .. import metrics
from ..config import OperatorConfig, get_config
from ..constants import ACTION_SIDECAR_INJECTED, KIND_BASIC_AUTHENTICATOR, KIND_DEPLOYMENT
from ..errors import AlreadyExistsError, ConflictError, NotFoundError, RequeueRequested
from ..models import AuthenticatorSpec, ResourceRef
from ..tracing import add_span_attribute, trace_span
from ..utils.context import with_correlation_id
from ..utils.locks import resource_locks, workload_locks
from .config_artifact import ConfigArtifactManager
from .credentials import CredentialProvisioner
from .deployment import DeploymentManager
from .result import ReconcileResult
from .sidecar import InjectionPlan, SidecarInjector
from .status import StatusReporter
from .store.base import ResourceStore

logger = logging.getLogger(__name__)


class ReconcileLoop:
    """Drives one BasicAuthenticator towards its spec per call."""

    def __init__(
        self,
        store: ResourceStore,
        config: OperatorConfig | None = None,
        credentials: CredentialProvisioner | None = None,
    ) -> None:
        """Initialize the loop and its steps.

        Args:
            store: Resource store every step reads and writes through
            config: Operator configuration (process config when omitted)
            credentials: Credential provisioner override, e.g. with a fixed generator
        """
        self.store = store
        self.config = config or get_config()
        self.credentials = credentials or CredentialProvisioner(store)
        self.config_artifacts = ConfigArtifactManager(store)
        self.deployments = DeploymentManager(store, self.config)
        self.sidecars = SidecarInjector(store, self.config)
        self.status = StatusReporter(store)

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Run one pass for the resource identified by ``namespace/name``.

        Conflicts and requeue signals are folded into the result; every other
        error propagates to the caller's retry policy.
        """
        ref = ResourceRef(namespace=namespace, name=name)
        result = ReconcileResult()
        start_time = time.time()

        with resource_locks.hold(str(ref)), with_correlation_id():
            with trace_span("reconcile", kind=KIND_BASIC_AUTHENTICATOR, attributes={"resource": str(ref)}):
                try:
                    self._run(ref, result)
                except RequeueRequested as e:
                    result.requeue = True
                    result.reason = e.reason
                except (ConflictError, AlreadyExistsError) as e:
                    result.requeue = True
                    result.reason = f"conflict: {e}"
                finally:
                    duration = time.time() - start_time
                    metrics.reconcile_duration_seconds.labels(kind=KIND_BASIC_AUTHENTICATOR).observe(duration)
                add_span_attribute("reconcile.requeue", result.requeue)

        if result.requeue:
            logger.info(f"Requeue {ref}: {result.reason}")
        return result

    def _run(self, ref: ResourceRef, result: ReconcileResult) -> None:
        try:
            resource = self.store.get(KIND_BASIC_AUTHENTICATOR, ref.namespace, ref.name)
        except NotFoundError:
            logger.info(f"{KIND_BASIC_AUTHENTICATOR} {ref} no longer exists, nothing to do")
            return

        if resource.get("metadata", {}).get("deletionTimestamp"):
            # Dependents are being garbage collected
            logger.info(f"{KIND_BASIC_AUTHENTICATOR} {ref} is being deleted, nothing to do")
            return

        spec = AuthenticatorSpec.from_dict(resource.get("spec") or {})

        secret_name = self.credentials.ensure(resource, result)
        config_map_name = self.config_artifacts.ensure(resource, spec, result)

        if spec.is_sidecar:
            plan = self.sidecars.plan(resource, spec, secret_name, config_map_name)
            self._persist_injections(ref, plan, result)
            ready_replicas = sum(_ready_replicas(w) for w in plan.targets)
            ready = bool(plan.targets)
            message = f"Proxy injected into {len(plan.targets)} workload(s)"
        else:
            ready_replicas = self.deployments.ensure(resource, spec, secret_name, config_map_name, result)
            ready = ready_replicas >= spec.replicas
            message = f"{ready_replicas}/{spec.replicas} proxy replicas ready"

        result.ready_replicas = ready_replicas
        self.status.report(resource, ready_replicas, ready, message, result)

    def _persist_injections(self, ref: ResourceRef, plan: InjectionPlan, result: ReconcileResult) -> None:
        for workload in plan.mutated:
            workload_name = workload["metadata"]["name"]
            with workload_locks.hold(f"{ref.namespace}/{workload_name}"):
                try:
                    self.store.update(workload)
                except ConflictError:
                    # Another writer got there first; the next pass re-reads and re-decides
                    metrics.sidecar_injections_total.labels(result="conflict").inc()
                    raise
            metrics.sidecar_injections_total.labels(result="injected").inc()
            metrics.object_writes_total.labels(object_kind=KIND_DEPLOYMENT, operation="update").inc()
            result.record(ACTION_SIDECAR_INJECTED, workload_name)
            logger.info(f"Injected proxy sidecar into {ref.namespace}/{workload_name} for {ref}")


def _ready_replicas(workload: dict[str, Any]) -> int:
    return int((workload.get("status") or {}).get("readyReplicas") or 0)
