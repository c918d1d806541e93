"""Builder for the nginx proxy configuration artifact."""

from __future__ import annotations

import hashlib
from typing import Any

from ..constants import (
    CONFIG_KEY,
    CREDENTIALS_MOUNT_PATH,
    HTPASSWD_KEY,
    PROXY_APP_NAME,
    config_map_name_for,
)
from ..models import AuthenticatorSpec
from ..utils.ownership import managed_labels

NGINX_TEMPLATE = """\
server {{
    listen {listen_port};

    location / {{
        auth_basic "{realm}";
        auth_basic_user_file {htpasswd_path};

        proxy_pass {upstream};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
    }}
}}
"""


def upstream_for(spec: AuthenticatorSpec) -> str:
    """Address the proxy forwards authenticated requests to."""
    if spec.is_sidecar:
        # Same pod, same network namespace
        return f"http://127.0.0.1:{spec.app_port}"
    return f"http://{spec.app_service}:{spec.app_port}"


def render_nginx_config(spec: AuthenticatorSpec) -> str:
    """Render the nginx server block for a spec. Pure and deterministic."""
    realm = spec.realm.replace("\\", "\\\\").replace('"', '\\"')
    return NGINX_TEMPLATE.format(
        listen_port=spec.proxy_port,
        realm=realm,
        htpasswd_path=f"{CREDENTIALS_MOUNT_PATH}/{HTPASSWD_KEY}",
        upstream=upstream_for(spec),
    )


def config_data_from_spec(spec: AuthenticatorSpec) -> dict[str, str]:
    """Derive the ConfigMap ``data`` for a spec."""
    return {CONFIG_KEY: render_nginx_config(spec)}


def config_hash(data: dict[str, str]) -> str:
    """Stable short digest of config data, used to roll proxy pods on change."""
    digest = hashlib.sha256()
    for key in sorted(data):
        digest.update(key.encode("utf-8"))
        digest.update(b"\0")
        digest.update(data[key].encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()[:16]


def build_config_map(
    name: str,
    namespace: str,
    spec: AuthenticatorSpec,
) -> dict[str, Any]:
    """Create the desired ConfigMap for a BasicAuthenticator.

    Args:
        name: Name of the BasicAuthenticator
        namespace: Namespace of the BasicAuthenticator
        spec: Parsed spec

    Returns:
        ConfigMap manifest (owner reference is set by the caller)
    """
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": config_map_name_for(name),
            "namespace": namespace,
            "labels": managed_labels(name, component=PROXY_APP_NAME),
        },
        "data": config_data_from_spec(spec),
    }
