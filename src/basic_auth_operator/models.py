"""Typed views over BasicAuthenticator resources."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .constants import (
    DEFAULT_PROXY_PORT,
    DEFAULT_REALM,
    DEFAULT_REPLICAS,
    MODE_SIDECAR,
    MODE_STANDALONE,
    MODES,
)
from .errors import SpecValidationError

# RFC 1123 subdomain: dot-separated DNS labels, 253 characters at most
DNS_SUBDOMAIN_RE = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*")
DNS_SUBDOMAIN_MAX_LENGTH = 253

# nginx expands variables in auth_basic and has no escape for "$"
REALM_FORBIDDEN_RE = re.compile(r"[\x00-\x1f\x7f$]")


@dataclass(frozen=True)
class AuthenticatorSpec:
    """Proxy-relevant spec fields of a BasicAuthenticator."""

    mode: str
    app_port: int
    app_service: str | None = None
    proxy_port: int = DEFAULT_PROXY_PORT
    replicas: int = DEFAULT_REPLICAS
    realm: str = DEFAULT_REALM
    credentials_secret_ref: str = ""
    selector: dict[str, Any] = field(default_factory=dict)

    @property
    def is_sidecar(self) -> bool:
        return self.mode == MODE_SIDECAR

    @classmethod
    def from_dict(cls, spec: dict[str, Any]) -> AuthenticatorSpec:
        """Parse and validate a raw spec dict.

        Raises:
            SpecValidationError: If the spec cannot be reconciled
        """
        mode = spec.get("mode") or MODE_STANDALONE
        if mode not in MODES:
            raise SpecValidationError(f"must be one of {', '.join(MODES)}, got '{mode}'", field="mode")

        app_port = spec.get("appPort")
        if not isinstance(app_port, int) or isinstance(app_port, bool) or app_port <= 0:
            raise SpecValidationError("must be a positive integer", field="appPort")

        proxy_port = spec.get("proxyPort", DEFAULT_PROXY_PORT)
        if not isinstance(proxy_port, int) or isinstance(proxy_port, bool) or proxy_port <= 0:
            raise SpecValidationError("must be a positive integer", field="proxyPort")

        replicas = spec.get("replicas", DEFAULT_REPLICAS)
        if not isinstance(replicas, int) or isinstance(replicas, bool) or replicas < 0:
            raise SpecValidationError("must be a non-negative integer", field="replicas")

        app_service = spec.get("appService")
        selector = spec.get("selector") or {}

        if mode == MODE_STANDALONE and not app_service:
            raise SpecValidationError("is required in standalone mode", field="appService")
        if app_service and not _is_dns_subdomain(app_service):
            raise SpecValidationError("must be a lowercase RFC 1123 DNS name", field="appService")

        realm = spec.get("realm") or DEFAULT_REALM
        if not isinstance(realm, str) or REALM_FORBIDDEN_RE.search(realm):
            raise SpecValidationError("must be a string without control characters or '$'", field="realm")

        if mode == MODE_SIDECAR:
            if not selector.get("matchLabels") and not selector.get("matchExpressions"):
                raise SpecValidationError("is required in sidecar mode", field="selector")
            # The sidecar shares the pod network namespace with the application.
            if proxy_port == app_port:
                raise SpecValidationError(
                    f"must differ from appPort ({app_port}) in sidecar mode", field="proxyPort"
                )

        return cls(
            mode=mode,
            app_port=app_port,
            app_service=app_service,
            proxy_port=proxy_port,
            replicas=replicas,
            realm=realm,
            credentials_secret_ref=spec.get("credentialsSecretRef") or "",
            selector=selector,
        )


def _is_dns_subdomain(value: Any) -> bool:
    return (
        isinstance(value, str)
        and len(value) <= DNS_SUBDOMAIN_MAX_LENGTH
        and DNS_SUBDOMAIN_RE.fullmatch(value) is not None
    )


@dataclass(frozen=True)
class ResourceRef:
    """Identity of a namespaced object."""

    namespace: str
    name: str

    @classmethod
    def of(cls, obj: dict[str, Any]) -> ResourceRef:
        meta = obj.get("metadata", {})
        return cls(namespace=meta.get("namespace", "default"), name=meta.get("name", ""))

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"
