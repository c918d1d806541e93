"""In-memory resource store.

Behaves like the API server for the parts the reconcile steps rely on:
resource versions and conflicts, a separate status subresource, generation
bumps on spec changes and server-side defaulting of Deployments. Every write
is recorded in ``writes`` so callers can assert on the exact mutations made.
"""

from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from ...constants import KIND_BASIC_AUTHENTICATOR, KIND_DEPLOYMENT
from ...errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from ...utils.ownership import set_owner_reference
from ...utils.selectors import selector_matches

# Kinds whose status is only writable through update_status
_STATUS_KINDS = {KIND_BASIC_AUTHENTICATOR, KIND_DEPLOYMENT}


def _default_deployment(obj: dict[str, Any]) -> None:
    """Fill in the defaults the API server adds to a Deployment."""
    spec = obj.setdefault("spec", {})
    spec.setdefault("replicas", 1)
    spec.setdefault("progressDeadlineSeconds", 600)
    spec.setdefault("revisionHistoryLimit", 10)
    spec.setdefault(
        "strategy",
        {"type": "RollingUpdate", "rollingUpdate": {"maxSurge": "25%", "maxUnavailable": "25%"}},
    )
    template = spec.setdefault("template", {})
    template.setdefault("metadata", {}).setdefault("creationTimestamp", None)
    pod_spec = template.setdefault("spec", {})
    pod_spec.setdefault("restartPolicy", "Always")
    pod_spec.setdefault("dnsPolicy", "ClusterFirst")
    pod_spec.setdefault("schedulerName", "default-scheduler")
    pod_spec.setdefault("terminationGracePeriodSeconds", 30)
    pod_spec.setdefault("securityContext", {})
    for container in pod_spec.get("containers") or []:
        container.setdefault("imagePullPolicy", "IfNotPresent")
        container.setdefault("terminationMessagePath", "/dev/termination-log")
        container.setdefault("terminationMessagePolicy", "File")
        container.setdefault("resources", {})
        for port in container.get("ports") or []:
            port.setdefault("protocol", "TCP")
    for volume in pod_spec.get("volumes") or []:
        for source in ("configMap", "secret"):
            if source in volume:
                volume[source].setdefault("defaultMode", 420)


class InMemoryStore:
    """Thread-safe in-memory implementation of the resource store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self._version = 0
        self.writes: list[tuple[str, str, str, str]] = []

    @staticmethod
    def _key(obj: dict[str, Any]) -> tuple[str, str, str]:
        meta = obj.get("metadata", {})
        return obj["kind"], meta.get("namespace", "default"), meta["name"]

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _record(self, operation: str, key: tuple[str, str, str]) -> None:
        kind, namespace, name = key
        self.writes.append((operation, kind, namespace, name))

    def _check_version(self, stored: dict[str, Any], obj: dict[str, Any], key: tuple[str, str, str]) -> None:
        wanted = obj.get("metadata", {}).get("resourceVersion")
        # Like the API server, a replace without resourceVersion is unconditional
        if wanted is not None and wanted != stored["metadata"]["resourceVersion"]:
            kind, namespace, name = key
            raise ConflictError(
                f"{kind} {namespace}/{name} was modified concurrently",
                kind=kind, namespace=namespace, name=name,
            )

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        with self._lock:
            stored = self._objects.get((kind, namespace, name))
            if stored is None:
                raise NotFoundError(f"{kind} {namespace}/{name} not found", kind=kind, namespace=namespace, name=name)
            return copy.deepcopy(stored)

    def list(self, kind: str, namespace: str, selector: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(obj)
                for (obj_kind, obj_ns, _), obj in sorted(self._objects.items())
                if obj_kind == kind
                and obj_ns == namespace
                and selector_matches(selector, obj.get("metadata", {}).get("labels"))
            ]

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        key = self._key(obj)
        with self._lock:
            if key in self._objects:
                kind, namespace, name = key
                raise AlreadyExistsError(
                    f"{kind} {namespace}/{name} already exists", kind=kind, namespace=namespace, name=name
                )
            stored = copy.deepcopy(obj)
            meta = stored.setdefault("metadata", {})
            meta.setdefault("namespace", key[1])
            meta["uid"] = str(uuid.uuid4())
            meta["resourceVersion"] = self._next_version()
            meta["generation"] = 1
            meta["creationTimestamp"] = datetime.now(timezone.utc).isoformat()
            if key[0] in _STATUS_KINDS:
                stored["status"] = {}
            if key[0] == KIND_DEPLOYMENT:
                _default_deployment(stored)
            self._objects[key] = stored
            self._record("create", key)
            return copy.deepcopy(stored)

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        key = self._key(obj)
        with self._lock:
            stored = self._objects.get(key)
            if stored is None:
                kind, namespace, name = key
                raise NotFoundError(f"{kind} {namespace}/{name} not found", kind=kind, namespace=namespace, name=name)
            self._check_version(stored, obj, key)

            updated = copy.deepcopy(obj)
            meta = updated.setdefault("metadata", {})
            for field in ("uid", "creationTimestamp", "generation"):
                meta[field] = stored["metadata"].get(field)
            if key[0] in _STATUS_KINDS:
                updated["status"] = copy.deepcopy(stored.get("status", {}))
            if key[0] == KIND_DEPLOYMENT:
                _default_deployment(updated)
            if updated.get("spec") != stored.get("spec"):
                meta["generation"] = (stored["metadata"].get("generation") or 0) + 1
            meta["resourceVersion"] = self._next_version()

            self._objects[key] = updated
            self._record("update", key)
            return copy.deepcopy(updated)

    def update_status(self, obj: dict[str, Any]) -> dict[str, Any]:
        key = self._key(obj)
        if key[0] not in _STATUS_KINDS:
            raise StoreError(f"{key[0]} has no status subresource", kind=key[0], namespace=key[1], name=key[2])
        with self._lock:
            stored = self._objects.get(key)
            if stored is None:
                kind, namespace, name = key
                raise NotFoundError(f"{kind} {namespace}/{name} not found", kind=kind, namespace=namespace, name=name)
            self._check_version(stored, obj, key)

            stored["status"] = copy.deepcopy(obj.get("status") or {})
            stored["metadata"]["resourceVersion"] = self._next_version()
            self._record("update_status", key)
            return copy.deepcopy(stored)

    def set_owner(self, child: dict[str, Any], parent: dict[str, Any]) -> None:
        set_owner_reference(child, parent)

    # Helpers for acting as an external actor; none of these are recorded in ``writes``

    def seed(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Insert an object as-is (status included), assigning missing metadata."""
        key = self._key(obj)
        with self._lock:
            stored = copy.deepcopy(obj)
            meta = stored.setdefault("metadata", {})
            meta.setdefault("namespace", key[1])
            meta.setdefault("uid", str(uuid.uuid4()))
            meta.setdefault("generation", 1)
            meta["resourceVersion"] = self._next_version()
            if key[0] == KIND_DEPLOYMENT:
                _default_deployment(stored)
            self._objects[key] = stored
            return copy.deepcopy(stored)

    def mutate(self, kind: str, namespace: str, name: str, fn: Callable[[dict[str, Any]], None]) -> dict[str, Any]:
        """Apply ``fn`` to the stored object in place and bump its version."""
        with self._lock:
            stored = self._objects.get((kind, namespace, name))
            if stored is None:
                raise NotFoundError(f"{kind} {namespace}/{name} not found", kind=kind, namespace=namespace, name=name)
            fn(stored)
            stored["metadata"]["resourceVersion"] = self._next_version()
            return copy.deepcopy(stored)

    def delete(self, kind: str, namespace: str, name: str) -> None:
        """Remove an object without cascading."""
        with self._lock:
            if self._objects.pop((kind, namespace, name), None) is None:
                raise NotFoundError(f"{kind} {namespace}/{name} not found", kind=kind, namespace=namespace, name=name)

    def reset_writes(self) -> None:
        """Forget the recorded writes."""
        with self._lock:
            self.writes.clear()
