"""Credential secret provisioning."""

from __future__ import annotations

import logging
from typing import Any, Callable

from .. import metrics
from ..builders.secret import build_credentials_secret
from ..constants import (
    ACTION_SECRET_ADOPTED,
    ACTION_SECRET_CREATED,
    HTPASSWD_KEY,
    KIND_BASIC_AUTHENTICATOR,
    KIND_SECRET,
    secret_name_for,
)
from ..errors import (
    AlreadyExistsError,
    DependencyNotReady,
    InvariantViolationError,
    NotFoundError,
    RequeueRequested,
    SpecValidationError,
)
from ..tracing import trace_span
from ..utils.credentials import generate_credentials
from ..utils.ownership import is_owned_by
from ..utils.secrets import has_secret_key
from .result import ReconcileResult
from .store.base import ResourceStore

logger = logging.getLogger(__name__)


class CredentialProvisioner:
    """Ensures a credential secret exists for a BasicAuthenticator.

    A secret is generated only while ``spec.credentialsSecretRef`` is empty.
    Once the reference is set it is never regenerated or overwritten; the
    referenced secret is only read.
    """

    def __init__(
        self,
        store: ResourceStore,
        generator: Callable[[], dict[str, str]] = generate_credentials,
    ) -> None:
        self.store = store
        self.generator = generator

    def ensure(self, resource: dict[str, Any], result: ReconcileResult) -> str:
        """Return the name of the credential secret to mount.

        Args:
            resource: BasicAuthenticator object as read from the store
            result: Reconcile result to record writes on

        Returns:
            Secret name

        Raises:
            RequeueRequested: After creating or adopting a secret
            DependencyNotReady: If the referenced secret does not exist yet
            InvariantViolationError: If a foreign secret occupies the generated name
        """
        meta = resource["metadata"]
        namespace, name = meta["namespace"], meta["name"]
        ref = (resource.get("spec") or {}).get("credentialsSecretRef") or ""

        with trace_span("ensure_credentials", kind=KIND_BASIC_AUTHENTICATOR, attributes={"secret.ref": ref}):
            if ref:
                return self._check_referenced(namespace, name, ref)
            return self._provision(resource, namespace, name, result)

    def _check_referenced(self, namespace: str, name: str, ref: str) -> str:
        try:
            secret = self.store.get(KIND_SECRET, namespace, ref)
        except NotFoundError as e:
            if ref == secret_name_for(name):
                # Generated earlier and since removed; regenerating would change the credentials
                logger.warning(f"Credential secret {namespace}/{ref} created for {name} is missing")
            else:
                logger.info(f"Referenced credential secret {namespace}/{ref} does not exist yet")
            raise DependencyNotReady(f"Secret {namespace}/{ref} referenced by {name} not found", cause=e) from e

        if not has_secret_key(secret, HTPASSWD_KEY):
            raise SpecValidationError(
                f"secret '{ref}' has no '{HTPASSWD_KEY}' key", field="credentialsSecretRef"
            )
        return ref

    def _provision(self, resource: dict[str, Any], namespace: str, name: str, result: ReconcileResult) -> str:
        secret_name = secret_name_for(name)
        try:
            existing = self.store.get(KIND_SECRET, namespace, secret_name)
        except NotFoundError:
            existing = None

        if existing is not None:
            if not is_owned_by(existing, resource):
                raise InvariantViolationError(
                    f"Secret {namespace}/{secret_name} exists but is not owned by {name}; "
                    f"reference it through credentialsSecretRef to use it"
                )
            # An earlier pass created the secret but failed to record the reference
            self._record_reference(resource, secret_name)
            result.record(ACTION_SECRET_ADOPTED, secret_name)
            logger.info(f"Adopted credential secret {namespace}/{secret_name} for {name}")
            raise RequeueRequested(f"adopted secret {secret_name}")

        secret = build_credentials_secret(name, namespace, self.generator())
        self.store.set_owner(secret, resource)
        try:
            self.store.create(secret)
        except AlreadyExistsError as e:
            raise RequeueRequested(f"secret {secret_name} was created concurrently") from e
        metrics.object_writes_total.labels(object_kind=KIND_SECRET, operation="create").inc()
        result.record(ACTION_SECRET_CREATED, secret_name)
        logger.info(f"Created credential secret {namespace}/{secret_name} for {name}")

        self._record_reference(resource, secret_name)
        raise RequeueRequested(f"created secret {secret_name}")

    def _record_reference(self, resource: dict[str, Any], secret_name: str) -> None:
        resource.setdefault("spec", {})["credentialsSecretRef"] = secret_name
        # Conflicts propagate; the next pass adopts the secret created above
        self.store.update(resource)
        metrics.object_writes_total.labels(object_kind=KIND_BASIC_AUTHENTICATOR, operation="update").inc()
