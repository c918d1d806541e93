"""Builder for the standalone proxy deployment."""

from __future__ import annotations

from typing import Any

from ..config import OperatorConfig
from ..constants import ANNOTATION_CONFIG_HASH, LABEL_INSTANCE, LABEL_NAME, PROXY_APP_NAME, deployment_name_for
from ..models import AuthenticatorSpec
from ..utils.ownership import managed_labels
from .config import config_data_from_spec, config_hash
from .proxy import build_proxy_container, build_proxy_volumes


def selector_labels(name: str) -> dict[str, str]:
    """Pod selector labels of the standalone deployment for ``name``."""
    return {
        LABEL_NAME: PROXY_APP_NAME,
        LABEL_INSTANCE: name,
    }


def build_deployment(
    name: str,
    namespace: str,
    spec: AuthenticatorSpec,
    secret_name: str,
    config_map_name: str,
    config: OperatorConfig,
) -> dict[str, Any]:
    """Create the desired standalone proxy Deployment.

    Args:
        name: Name of the BasicAuthenticator
        namespace: Namespace of the BasicAuthenticator
        spec: Parsed spec
        secret_name: Credential secret to mount
        config_map_name: Proxy config artifact to mount
        config: Operator configuration (image, container name)

    Returns:
        Deployment manifest (owner reference is set by the caller)
    """
    pod_labels = {**managed_labels(name, component=PROXY_APP_NAME), **selector_labels(name)}

    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": deployment_name_for(name),
            "namespace": namespace,
            "labels": dict(pod_labels),
        },
        "spec": {
            "replicas": spec.replicas,
            "selector": {"matchLabels": selector_labels(name)},
            "template": {
                "metadata": {
                    "labels": pod_labels,
                    "annotations": {
                        # Changing the config rolls the pods; nginx does not watch its files
                        ANNOTATION_CONFIG_HASH: config_hash(config_data_from_spec(spec)),
                    },
                },
                "spec": {
                    "containers": [build_proxy_container(spec, config)],
                    "volumes": build_proxy_volumes(config_map_name, secret_name),
                },
            },
        },
    }
