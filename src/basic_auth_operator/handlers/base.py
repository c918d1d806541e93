"""Base handler class with common functionality for all CRD handlers."""

from __future__ import annotations

import logging
from typing import Any, Callable

import kopf

from .. import metrics
from ..config import OperatorConfig, get_config
from ..errors import OperatorError, SpecValidationError
from ..logging import CONTROLLER_NAME, log_resource_event
from ..services.result import ReconcileResult
from ..utils.context import get_context_dict
from ..utils.errors import sanitize_exception
from ..utils.events import emit_action, emit_reconcile_failed, emit_reconcile_started, emit_requeued, emit_validate_failed


class BaseHandler:
    """Base class for all CRD handlers with common functionality."""

    def __init__(self, kind: str, config: OperatorConfig | None = None):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "BasicAuthenticator")
            config: Operator configuration (process config when omitted)
        """
        self.kind = kind
        self._config = config
        self.logger = logging.getLogger(__name__)

    @property
    def config(self) -> OperatorConfig:
        return self._config or get_config()

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        """Extract common resource context from metadata.

        Args:
            meta: Kubernetes resource metadata

        Returns:
            Dictionary with resource context fields
        """
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(
        self,
        level: int,
        meta: dict[str, Any],
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **get_context_dict(kwargs),
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            event: Event type (default: "info")
            reason: Reason for the event (default: "Info")
            **kwargs: Additional fields to include in the log
        """
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()

        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__

        self._log(logging.ERROR, meta, message, event, reason, **log_data)

    def handle_validation_error(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        error: SpecValidationError,
    ) -> None:
        """Handle validation error consistently.

        Raises:
            kopf.PermanentError: Always; retrying cannot fix the spec
        """
        error_msg = sanitize_exception(error)
        self.log_error(meta, error_msg, error=error, reason="ValidationFailed", field=error.field)
        emit_validate_failed(body, error_msg)
        metrics.error_total.labels(kind=self.kind, error_type=type(error).__name__).inc()
        metrics.reconcile_total.labels(kind=self.kind, result="invalid").inc()
        raise kopf.PermanentError(error_msg) from error

    def handle_reconciliation_error(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        error: OperatorError,
        retry: int,
    ) -> None:
        """Log, count and announce a failed pass, then hand it to kopf.

        Raises:
            kopf.PermanentError: For invariant violations and other non-retryable errors
            kopf.TemporaryError: For everything that may succeed later
        """
        sanitized_error = sanitize_exception(error)
        error_type = type(error).__name__

        self.log_error(meta, "Reconciliation failed", error=error, reason="ReconciliationFailed", retry=retry)
        emit_reconcile_failed(body, f"Reconciliation failed: {sanitized_error}")
        metrics.error_total.labels(kind=self.kind, error_type=error_type).inc()
        metrics.reconcile_total.labels(kind=self.kind, result="error").inc()

        if not error.retryable:
            raise kopf.PermanentError(sanitized_error) from error
        raise kopf.TemporaryError(sanitized_error, delay=self.config.requeue_delay(retry)) from error

    def handle_result(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        result: ReconcileResult,
        retry: int,
    ) -> None:
        """Emit events for a finished pass and turn a requeue into a kopf retry.

        Raises:
            kopf.TemporaryError: If the pass asked to be requeued
        """
        for action, target in result.actions:
            emit_action(body, action, target)

        if not result.requeue:
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
            return

        delay = self.config.requeue_delay(retry)
        reason = result.reason or "requeue"
        metrics.requeue_total.labels(kind=self.kind, reason=reason.split(" ", 1)[0].rstrip(":")).inc()
        metrics.reconcile_total.labels(kind=self.kind, result="requeue").inc()
        self.log_info(meta, f"Requeued in {delay:.1f}s: {reason}", event="requeue", reason="Requeued", retry=retry)
        emit_requeued(body, reason)
        raise kopf.TemporaryError(reason, delay=delay)

    def reconcile_with_metrics(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        retry: int,
        reconcile_fn: Callable[[], ReconcileResult],
    ) -> None:
        """Execute reconciliation with metrics and error handling.

        Args:
            body: Full resource body, used as the event target
            meta: Kubernetes resource metadata
            retry: kopf retry counter of the current handler
            reconcile_fn: Function running one reconcile pass
        """
        emit_reconcile_started(body)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        try:
            result = reconcile_fn()
        except SpecValidationError as e:
            self.handle_validation_error(body, meta, e)
        except OperatorError as e:
            self.handle_reconciliation_error(body, meta, e, retry)
        except Exception as e:
            # Unexpected failures are left to kopf's own retry policy
            self.log_error(meta, "Reconciliation failed", error=e, reason="ReconciliationFailed")
            emit_reconcile_failed(body, f"Reconciliation failed: {sanitize_exception(e)}")
            metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        else:
            self.handle_result(body, meta, result, retry)
