"""Resource store backed by the Kubernetes API."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import (
    API_GROUP,
    API_VERSION,
    FIELD_MANAGER,
    KIND_BASIC_AUTHENTICATOR,
    KIND_CONFIG_MAP,
    KIND_DEPLOYMENT,
    KIND_SECRET,
    PLURAL_BASIC_AUTHENTICATOR,
)
from ...errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError, TransientStoreError
from ...utils.ownership import set_owner_reference
from ...utils.rate_limit import handle_rate_limit_error, rate_limit_k8s
from ...utils.selectors import selector_to_string

logger = logging.getLogger(__name__)

# Typed API method suffix and apiVersion per built-in kind
_TYPED_KINDS = {
    KIND_SECRET: ("core", "secret", "v1"),
    KIND_CONFIG_MAP: ("core", "config_map", "v1"),
    KIND_DEPLOYMENT: ("apps", "deployment", "apps/v1"),
}


def get_api_client() -> client.ApiClient:
    """Load in-cluster configuration, falling back to the local kubeconfig.

    Returns:
        ApiClient instance
    """
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.ApiClient()


class KubernetesStore:
    """Kubernetes API implementation of the resource store."""

    def __init__(self, api_client: client.ApiClient | None = None) -> None:
        """Initialize the store.

        Args:
            api_client: Configured ApiClient (loaded from the environment when omitted)
        """
        self.api_client = api_client or get_api_client()
        self.core_api = client.CoreV1Api(self.api_client)
        self.apps_api = client.AppsV1Api(self.api_client)
        self.custom_api = client.CustomObjectsApi(self.api_client)

    def _typed(self, kind: str) -> tuple[Any, str, str]:
        try:
            group, suffix, api_version = _TYPED_KINDS[kind]
        except KeyError:
            raise StoreError(f"Unsupported kind {kind}", kind=kind) from None
        api = self.core_api if group == "core" else self.apps_api
        return api, suffix, api_version

    def _to_dict(self, obj: Any, kind: str, api_version: str) -> dict[str, Any]:
        if isinstance(obj, dict):
            data = obj
        else:
            data = self.api_client.sanitize_for_serialization(obj)
        # List items come back without apiVersion/kind
        data.setdefault("apiVersion", api_version)
        data.setdefault("kind", kind)
        return data

    def _call(
        self,
        operation: str,
        kind: str,
        target_ns: str,
        target_name: str | None,
        fn: Callable[..., Any],
        /,
        **api_kwargs: Any,
    ) -> Any:
        """Invoke an API method with rate limiting, metrics and error translation.

        The routing arguments are positional-only so ``api_kwargs`` may carry
        the client's own ``namespace`` and ``name`` keywords.
        """
        op_label = f"{operation}_{kind.lower()}"
        attempt = 0
        while True:
            start_time = time.time()
            try:
                result = rate_limit_k8s(fn)(**api_kwargs)
                metrics.api_call_total.labels(api_type="k8s", operation=op_label, result="success").inc()
                return result
            except ApiException as e:
                metrics.api_call_total.labels(api_type="k8s", operation=op_label, result="error").inc()
                if handle_rate_limit_error(e, attempt):
                    metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
                    attempt += 1
                    continue
                raise self._translate(e, operation, kind, target_ns, target_name) from e
            except (urllib3.exceptions.HTTPError, OSError) as e:
                metrics.api_call_total.labels(api_type="k8s", operation=op_label, result="error").inc()
                raise TransientStoreError(
                    f"Kubernetes API unreachable during {operation} of {kind} {target_ns}/{target_name}: {e}",
                    kind=kind, namespace=target_ns, name=target_name, cause=e,
                ) from e
            finally:
                duration = time.time() - start_time
                metrics.api_call_duration_seconds.labels(api_type="k8s", operation=op_label).observe(duration)

    @staticmethod
    def _translate(e: ApiException, operation: str, kind: str, namespace: str, name: str | None) -> StoreError:
        target = f"{kind} {namespace}/{name}"
        if e.status == 404:
            return NotFoundError(f"{target} not found", kind=kind, namespace=namespace, name=name, cause=e)
        if e.status == 409:
            if operation == "create":
                return AlreadyExistsError(f"{target} already exists", kind=kind, namespace=namespace, name=name, cause=e)
            return ConflictError(f"{target} was modified concurrently", kind=kind, namespace=namespace, name=name, cause=e)
        if e.status == 429 or (e.status is not None and e.status >= 500):
            return TransientStoreError(
                f"{operation} of {target} failed with HTTP {e.status}",
                kind=kind, namespace=namespace, name=name, cause=e,
            )
        return StoreError(
            f"{operation} of {target} failed with HTTP {e.status}: {e.reason}",
            kind=kind, namespace=namespace, name=name, cause=e,
        )

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Read one object."""
        if kind == KIND_BASIC_AUTHENTICATOR:
            return self._call(
                "get", kind, namespace, name,
                self.custom_api.get_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_BASIC_AUTHENTICATOR, name=name,
            )

        api, suffix, api_version = self._typed(kind)
        obj = self._call(
            "get", kind, namespace, name,
            getattr(api, f"read_namespaced_{suffix}"),
            name=name, namespace=namespace,
        )
        return self._to_dict(obj, kind, api_version)

    def list(self, kind: str, namespace: str, selector: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """List objects matching a LabelSelector dict."""
        label_selector = selector_to_string(selector)

        if kind == KIND_BASIC_AUTHENTICATOR:
            result = self._call(
                "list", kind, namespace, None,
                self.custom_api.list_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_BASIC_AUTHENTICATOR, label_selector=label_selector,
            )
            return [
                self._to_dict(item, kind, f"{API_GROUP}/{API_VERSION}")
                for item in result.get("items", [])
            ]

        api, suffix, api_version = self._typed(kind)
        result = self._call(
            "list", kind, namespace, None,
            getattr(api, f"list_namespaced_{suffix}"),
            namespace=namespace, label_selector=label_selector,
        )
        return [self._to_dict(item, kind, api_version) for item in result.items or []]

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object."""
        kind = obj["kind"]
        meta = obj["metadata"]
        namespace, name = meta["namespace"], meta["name"]

        if kind == KIND_BASIC_AUTHENTICATOR:
            return self._call(
                "create", kind, namespace, name,
                self.custom_api.create_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_BASIC_AUTHENTICATOR, body=obj, field_manager=FIELD_MANAGER,
            )

        api, suffix, api_version = self._typed(kind)
        created = self._call(
            "create", kind, namespace, name,
            getattr(api, f"create_namespaced_{suffix}"),
            namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
        )
        logger.info(f"Created {kind} {namespace}/{name}")
        return self._to_dict(created, kind, api_version)

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object; the API server rejects stale resourceVersions."""
        kind = obj["kind"]
        meta = obj["metadata"]
        namespace, name = meta["namespace"], meta["name"]

        if kind == KIND_BASIC_AUTHENTICATOR:
            return self._call(
                "update", kind, namespace, name,
                self.custom_api.replace_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_BASIC_AUTHENTICATOR, name=name, body=obj, field_manager=FIELD_MANAGER,
            )

        api, suffix, api_version = self._typed(kind)
        updated = self._call(
            "update", kind, namespace, name,
            getattr(api, f"replace_namespaced_{suffix}"),
            name=name, namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
        )
        logger.info(f"Updated {kind} {namespace}/{name}")
        return self._to_dict(updated, kind, api_version)

    def update_status(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace the status subresource only."""
        kind = obj["kind"]
        meta = obj["metadata"]
        namespace, name = meta["namespace"], meta["name"]

        if kind == KIND_BASIC_AUTHENTICATOR:
            return self._call(
                "update_status", kind, namespace, name,
                self.custom_api.replace_namespaced_custom_object_status,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_BASIC_AUTHENTICATOR, name=name, body=obj, field_manager=FIELD_MANAGER,
            )

        if kind != KIND_DEPLOYMENT:
            raise StoreError(f"{kind} has no status subresource", kind=kind, namespace=namespace, name=name)

        updated = self._call(
            "update_status", kind, namespace, name,
            self.apps_api.replace_namespaced_deployment_status,
            name=name, namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
        )
        return self._to_dict(updated, kind, "apps/v1")

    def set_owner(self, child: dict[str, Any], parent: dict[str, Any]) -> None:
        """Declare cascade deletion via an owner reference."""
        set_owner_reference(child, parent)
