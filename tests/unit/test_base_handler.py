"""Tests for base handler functionality."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock, patch

import kopf
import pytest

from basic_auth_operator.config import OperatorConfig
from basic_auth_operator.errors import (
    DependencyNotReady,
    InvariantViolationError,
    SpecValidationError,
    TransientStoreError,
)
from basic_auth_operator.handlers.base import BaseHandler
from basic_auth_operator.services.result import ReconcileResult

BODY = {
    "apiVersion": "authenticator.snappcloud.io/v1alpha1",
    "kind": "BasicAuthenticator",
    "metadata": {"name": "test-resource", "namespace": "default", "uid": "test-uid"},
}
META = BODY["metadata"]


@pytest.fixture
def handler():
    return BaseHandler(kind="TestKind", config=OperatorConfig(requeue_base_delay_seconds=1.0))


@pytest.fixture(autouse=True)
def mock_event():
    with patch("basic_auth_operator.utils.events.kopf.event") as mock:
        yield mock


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    def test_get_resource_context(self, handler):
        """Test extracting resource context from metadata."""
        assert handler._get_resource_context(META) == {
            "name": "test-resource",
            "namespace": "default",
            "uid": "test-uid",
        }

    def test_get_resource_context_defaults(self, handler):
        """Test resource context with missing fields uses defaults."""
        assert handler._get_resource_context({}) == {"name": "unknown", "namespace": "default", "uid": "unknown"}

    def test_log_info(self, handler):
        """Test info logging."""
        with patch.object(handler.logger, "log") as mock_log:
            handler.log_info(META, "Test message", event="test", reason="TestReason")

        level, payload = mock_log.call_args[0]
        data = json.loads(payload)
        assert level == logging.INFO
        assert data["controller"] == "basic-auth-operator"
        assert data["resource"] == "TestKind"
        assert data["message"] == "Test message"
        assert data["reason"] == "TestReason"

    def test_log_warning_level(self, handler):
        """Test warning logging uses the warning level."""
        with patch.object(handler.logger, "log") as mock_log:
            handler.log_warning(META, "careful")

        assert mock_log.call_args[0][0] == logging.WARNING

    def test_log_error_sanitizes(self, handler):
        """Test that error details are sanitized before logging."""
        with patch.object(handler.logger, "log") as mock_log:
            handler.log_error(META, "Failed", error=ValueError("password: hunter2"))

        data = json.loads(mock_log.call_args[0][1])
        assert "hunter2" not in data["error"]
        assert data["error_type"] == "ValueError"

    def test_log_redacts_secret_fields(self, handler):
        """Test that secret-named fields are redacted."""
        with patch.object(handler.logger, "log") as mock_log:
            handler.log_info(META, "x", password="hunter2")

        assert json.loads(mock_log.call_args[0][1])["password"] == "***REDACTED***"


class TestReconcileWithMetrics:
    """Test mapping of reconcile outcomes to kopf signals."""

    def test_success(self, handler, mock_event):
        """Test that a finished pass emits action events and returns."""
        result = ReconcileResult()
        result.record("config_updated", "cm")

        handler.reconcile_with_metrics(BODY, META, 0, lambda: result)

        reasons = [c.kwargs["reason"] for c in mock_event.call_args_list]
        assert reasons == ["ReconcileStarted", "ConfigUpdated"]

    def test_requeue_raises_temporary_error(self, handler):
        """Test that a requeue becomes a delayed TemporaryError."""
        result = ReconcileResult(requeue=True, reason="created secret s")

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handler.reconcile_with_metrics(BODY, META, 3, lambda: result)

        assert exc_info.value.delay == 8.0

    def test_validation_error_is_permanent(self, handler, mock_event):
        """Test that spec validation failures are not retried."""
        def fail():
            raise SpecValidationError("must be a positive integer", field="appPort")

        with pytest.raises(kopf.PermanentError, match="appPort"):
            handler.reconcile_with_metrics(BODY, META, 0, fail)

        assert mock_event.call_args.kwargs["reason"] == "ValidateFailed"
        assert mock_event.call_args.kwargs["type"] == "Warning"

    def test_invariant_violation_is_permanent(self, handler):
        """Test that invariant violations are surfaced, not retried."""
        def fail():
            raise InvariantViolationError("two deployments")

        with pytest.raises(kopf.PermanentError):
            handler.reconcile_with_metrics(BODY, META, 0, fail)

    @pytest.mark.parametrize("error", [DependencyNotReady("later"), TransientStoreError("down")])
    def test_retryable_errors_are_temporary(self, handler, error):
        """Test that retryable errors back off."""
        def fail():
            raise error

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handler.reconcile_with_metrics(BODY, META, 1, fail)

        assert exc_info.value.delay == 2.0

    def test_unexpected_error_propagates(self, handler, mock_event):
        """Test that unknown failures are logged and re-raised unchanged."""
        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            handler.reconcile_with_metrics(BODY, META, 0, fail)

        assert mock_event.call_args.kwargs["reason"] == "ReconcileFailed"

    def test_error_message_sanitized_in_kopf_error(self, handler):
        """Test that credential material never reaches kopf errors."""
        def fail():
            raise TransientStoreError("failed with password=hunter2")

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handler.reconcile_with_metrics(BODY, META, 0, fail)

        assert "hunter2" not in str(exc_info.value)

    def test_uses_process_config_by_default(self):
        """Test lazy config lookup."""
        sentinel = MagicMock()
        with patch("basic_auth_operator.handlers.base.get_config", return_value=sentinel):
            assert BaseHandler(kind="X").config is sentinel
