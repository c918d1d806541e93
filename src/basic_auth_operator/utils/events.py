"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    ACTION_CONFIG_CREATED,
    ACTION_CONFIG_UPDATED,
    ACTION_DEPLOYMENT_CREATED,
    ACTION_DEPLOYMENT_UPDATED,
    ACTION_SECRET_CREATED,
    ACTION_SIDECAR_INJECTED,
    EVENT_REASON_CONFIG_CREATED,
    EVENT_REASON_CONFIG_UPDATED,
    EVENT_REASON_DEPLOYMENT_CREATED,
    EVENT_REASON_DEPLOYMENT_UPDATED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_REQUEUED,
    EVENT_REASON_SECRET_CREATED,
    EVENT_REASON_SIDECAR_INJECTED,
    EVENT_REASON_VALIDATE_FAILED,
)

# Action names reported by the reconcile loop, mapped to event reason and message prefix
ACTION_EVENT_REASONS = {
    ACTION_SECRET_CREATED: (EVENT_REASON_SECRET_CREATED, "Credential secret created"),
    ACTION_CONFIG_CREATED: (EVENT_REASON_CONFIG_CREATED, "Proxy config created"),
    ACTION_CONFIG_UPDATED: (EVENT_REASON_CONFIG_UPDATED, "Proxy config updated"),
    ACTION_DEPLOYMENT_CREATED: (EVENT_REASON_DEPLOYMENT_CREATED, "Proxy deployment created"),
    ACTION_DEPLOYMENT_UPDATED: (EVENT_REASON_DEPLOYMENT_UPDATED, "Proxy deployment updated"),
    ACTION_SIDECAR_INJECTED: (EVENT_REASON_SIDECAR_INJECTED, "Proxy sidecar injected into"),
}


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body (apiVersion, kind and metadata are required)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_failed(body: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(body, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_requeued(body: dict[str, Any], reason: str) -> None:
    """Emit requeue event."""
    emit_event(body, EVENT_REASON_REQUEUED, f"Requeued: {reason}")


def emit_action(body: dict[str, Any], action: str, target: str) -> None:
    """Emit the event matching a reconcile action, ignoring unknown actions."""
    entry = ACTION_EVENT_REASONS.get(action)
    if entry is None:
        return
    reason, prefix = entry
    emit_event(body, reason, f"{prefix} {target}")
