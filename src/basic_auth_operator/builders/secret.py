"""Builder for credential secrets."""

from __future__ import annotations

from typing import Any

from ..constants import secret_name_for
from ..utils.ownership import managed_labels
from ..utils.secrets import encode_secret_data


def build_credentials_secret(
    name: str,
    namespace: str,
    credentials: dict[str, str],
) -> dict[str, Any]:
    """Create the credential Secret manifest for a BasicAuthenticator.

    Args:
        name: Name of the BasicAuthenticator
        namespace: Namespace of the BasicAuthenticator
        credentials: Plain credential material (username, password, htpasswd)

    Returns:
        Secret manifest with base64-encoded data (owner reference is set by the caller)
    """
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": secret_name_for(name),
            "namespace": namespace,
            "labels": managed_labels(name, component="credentials"),
        },
        "type": "Opaque",
        "data": encode_secret_data(credentials),
    }
