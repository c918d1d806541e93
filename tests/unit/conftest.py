"""Shared fixtures for unit tests."""

from __future__ import annotations

import base64
from typing import Any, Callable

import pytest

from basic_auth_operator.config import OperatorConfig
from basic_auth_operator.constants import API_GROUP_VERSION, KIND_BASIC_AUTHENTICATOR
from basic_auth_operator.services.credentials import CredentialProvisioner
from basic_auth_operator.services.reconciler import ReconcileLoop
from basic_auth_operator.services.store.memory import InMemoryStore

FIXED_CREDENTIALS = {
    "username": "admin",
    "password": "correct-horse",
    "htpasswd": "admin:{SSHA}c2VjcmV0aGFzaHNhbHQ=\n",
}


def make_resource(name: str = "web-auth", namespace: str = "default", **spec: Any) -> dict[str, Any]:
    """Build a BasicAuthenticator manifest with standalone defaults."""
    body = {
        "mode": "standalone",
        "appPort": 8080,
        "appService": "web",
        "credentialsSecretRef": "",
    }
    body.update(spec)
    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_BASIC_AUTHENTICATOR,
        "metadata": {"name": name, "namespace": namespace},
        "spec": body,
    }


def make_sidecar_resource(name: str = "web-auth", namespace: str = "default", **spec: Any) -> dict[str, Any]:
    """Build a sidecar-mode BasicAuthenticator selecting ``app=web``."""
    body = {
        "mode": "sidecar",
        "appService": None,
        "proxyPort": 8081,
        "selector": {"matchLabels": {"app": "web"}},
    }
    body.update(spec)
    return make_resource(name, namespace, **body)


def make_workload(
    name: str,
    namespace: str = "default",
    labels: dict[str, str] | None = None,
    ready_replicas: int = 0,
) -> dict[str, Any]:
    """Build an application Deployment as another team would own it."""
    labels = labels or {"app": "web"}
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name, "namespace": namespace, "labels": dict(labels)},
        "spec": {
            "replicas": 2,
            "selector": {"matchLabels": dict(labels)},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": {
                    "containers": [{"name": "app", "image": "example/web:1.0", "ports": [{"containerPort": 8080}]}],
                    "volumes": [{"name": "cache", "emptyDir": {}}],
                },
            },
        },
        "status": {"readyReplicas": ready_replicas},
    }


def make_secret(name: str, namespace: str = "default", htpasswd: str = "user:{SSHA}abc\n") -> dict[str, Any]:
    """Build a user-provided credential Secret."""
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name, "namespace": namespace},
        "type": "Opaque",
        "data": {"htpasswd": base64.b64encode(htpasswd.encode("utf-8")).decode("utf-8")},
    }


@pytest.fixture
def config() -> OperatorConfig:
    """Default operator configuration."""
    return OperatorConfig()


@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory cluster."""
    return InMemoryStore()


@pytest.fixture
def loop(store: InMemoryStore, config: OperatorConfig) -> ReconcileLoop:
    """Reconcile loop generating fixed credentials."""
    return ReconcileLoop(
        store,
        config,
        credentials=CredentialProvisioner(store, generator=lambda: dict(FIXED_CREDENTIALS)),
    )


@pytest.fixture
def seed(store: InMemoryStore) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """Insert objects into the store as an external actor would."""
    return store.seed
