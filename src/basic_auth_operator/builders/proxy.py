"""Builder for the nginx proxy container and the volumes it mounts."""

from __future__ import annotations

from typing import Any

from ..config import OperatorConfig
from ..constants import (
    CONFIG_KEY,
    CONFIG_MOUNT_PATH,
    CONFIG_VOLUME_NAME,
    CREDENTIALS_MOUNT_PATH,
    CREDENTIALS_VOLUME_NAME,
    HTPASSWD_KEY,
)
from ..models import AuthenticatorSpec


def build_proxy_container(spec: AuthenticatorSpec, config: OperatorConfig) -> dict[str, Any]:
    """Create the proxy container.

    The container name doubles as the marker used to detect an existing
    injection, so it must come from ``config.proxy_container_name``.
    """
    return {
        "name": config.proxy_container_name,
        "image": config.proxy_image,
        "ports": [{"name": "proxy", "containerPort": spec.proxy_port}],
        "volumeMounts": [
            {"name": CONFIG_VOLUME_NAME, "mountPath": CONFIG_MOUNT_PATH, "readOnly": True},
            {"name": CREDENTIALS_VOLUME_NAME, "mountPath": CREDENTIALS_MOUNT_PATH, "readOnly": True},
        ],
    }


def build_proxy_volumes(config_map_name: str, secret_name: str) -> list[dict[str, Any]]:
    """Create the config and credential volumes the proxy container mounts."""
    return [
        {
            "name": CONFIG_VOLUME_NAME,
            "configMap": {
                "name": config_map_name,
                "items": [{"key": CONFIG_KEY, "path": CONFIG_KEY}],
            },
        },
        {
            "name": CREDENTIALS_VOLUME_NAME,
            "secret": {
                "secretName": secret_name,
                "items": [{"key": HTPASSWD_KEY, "path": HTPASSWD_KEY}],
            },
        },
    ]
