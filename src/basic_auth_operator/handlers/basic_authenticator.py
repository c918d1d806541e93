"""Handler for BasicAuthenticator CRD."""

from __future__ import annotations

import contextlib
from typing import Any, Mapping

import kopf

from .. import metrics
from ..config import OperatorConfig, get_config
from ..constants import API_GROUP_VERSION, FIELD_MANAGER, KIND_BASIC_AUTHENTICATOR, LABEL_MANAGED_BY
from ..services.reconciler import ReconcileLoop
from ..services.store.kube import KubernetesStore
from ..utils.ownership import owner_of
from .base import BaseHandler


class BasicAuthenticatorHandler(BaseHandler):
    """Handler for BasicAuthenticator resources."""

    def __init__(self, loop: ReconcileLoop | None = None, config: OperatorConfig | None = None):
        """Initialize the handler.

        Args:
            loop: Reconcile loop to drive (built on the Kubernetes store on first use when omitted)
            config: Operator configuration
        """
        super().__init__(KIND_BASIC_AUTHENTICATOR, config)
        self._loop = loop

    @property
    def loop(self) -> ReconcileLoop:
        if self._loop is None:
            self._loop = ReconcileLoop(KubernetesStore(), self.config)
        return self._loop

    def reconcile(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        retry: int = 0,
    ) -> None:
        """Run one reconcile pass for the resource in ``body``."""
        namespace = meta.get("namespace", "default")
        name = meta.get("name", "unknown")
        self.reconcile_with_metrics(body, meta, retry, lambda: self.loop.reconcile(namespace, name))

    def reconcile_dependent(self, body: Mapping[str, Any]) -> None:
        """Re-reconcile the BasicAuthenticator owning a changed dependent.

        Requeues and failures are already logged, counted and announced by
        ``reconcile_with_metrics``; the next pass is triggered by the event of
        whichever dependent that pass writes, or by the resync timer.
        """
        owner = owner_of(body)
        if owner is None:
            return

        namespace, name = owner
        owner_body = {
            "apiVersion": API_GROUP_VERSION,
            "kind": KIND_BASIC_AUTHENTICATOR,
            "metadata": {"name": name, "namespace": namespace},
        }
        for ref in body.get("metadata", {}).get("ownerReferences") or []:
            if ref.get("kind") == KIND_BASIC_AUTHENTICATOR and ref.get("name") == name:
                owner_body["metadata"]["uid"] = ref.get("uid")

        try:
            self.reconcile(owner_body, owner_body["metadata"])
        except (kopf.TemporaryError, kopf.PermanentError) as e:
            self.logger.debug(f"Pass for {namespace}/{name} triggered by a dependent did not finish: {e}")

    def delete(self, meta: dict[str, Any]) -> None:
        """Handle BasicAuthenticator resource deletion."""
        # Owned secret, config and deployment are removed by owner references.
        # Injected sidecars are left in place; those workloads are not ours.
        self.log_info(meta, "BasicAuthenticator is being deleted", event="deletion", reason="Deletion")
        namespace = meta.get("namespace", "default")
        name = meta.get("name", "unknown")
        # A resource that never reported status has no series
        with contextlib.suppress(KeyError):
            metrics.ready_replicas.remove(namespace, name)


# Global handler instance
_handler = BasicAuthenticatorHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_BASIC_AUTHENTICATOR)
@kopf.on.update(API_GROUP_VERSION, KIND_BASIC_AUTHENTICATOR)
@kopf.on.resume(API_GROUP_VERSION, KIND_BASIC_AUTHENTICATOR)
def handle_basic_authenticator(
    body: kopf.Body,
    meta: dict[str, Any],
    retry: int,
    **kwargs: Any,
) -> None:
    """Handle BasicAuthenticator resource reconciliation."""
    _handler.reconcile(dict(body), meta, retry)


@kopf.timer(API_GROUP_VERSION, KIND_BASIC_AUTHENTICATOR, interval=get_config().resync_interval_seconds)
def resync_basic_authenticator(
    body: kopf.Body,
    meta: dict[str, Any],
    retry: int,
    **kwargs: Any,
) -> None:
    """Periodically re-reconcile to repair drift in dependents."""
    _handler.reconcile(dict(body), meta, retry)


@kopf.on.delete(API_GROUP_VERSION, KIND_BASIC_AUTHENTICATOR, optional=True)
def handle_basic_authenticator_delete(
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle BasicAuthenticator resource deletion."""
    _handler.delete(meta)


MANAGED_LABELS = {LABEL_MANAGED_BY: FIELD_MANAGER}


@kopf.on.event("apps", "v1", "deployments", labels=MANAGED_LABELS)
@kopf.on.event("", "v1", "configmaps", labels=MANAGED_LABELS)
@kopf.on.event("", "v1", "secrets", labels=MANAGED_LABELS)
def handle_managed_dependent(
    body: kopf.Body,
    **kwargs: Any,
) -> None:
    """Reconcile the owner when one of its dependents changes or disappears."""
    _handler.reconcile_dependent(body)
