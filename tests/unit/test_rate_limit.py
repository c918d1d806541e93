"""Tests for rate limiting utilities."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from kubernetes.client.exceptions import ApiException

import basic_auth_operator.utils.rate_limit as rl
from basic_auth_operator.utils.rate_limit import handle_rate_limit_error, is_rate_limit_error, rate_limit_k8s


class TestRateLimitK8s:
    """Test cases for Kubernetes API rate limiting."""

    def test_rate_limit_k8s_with_args(self):
        """Test that arguments and return values pass through."""

        @rate_limit_k8s
        def test_func(a, b, c=None):
            return (a, b, c)

        assert test_func(1, 2, c=3) == (1, 2, 3)

    @patch("basic_auth_operator.utils.rate_limit.time.sleep")
    def test_rate_limit_k8s_sleeps_when_needed(self, mock_sleep):
        """Test that rate limiter sleeps when calls are too fast."""
        with patch("basic_auth_operator.utils.rate_limit._K8S_RATE_LIMIT_PER_SECOND", 1.0):
            rl._k8s_last_call_time = 0.0

            @rate_limit_k8s
            def test_func():
                return "ok"

            with patch("basic_auth_operator.utils.rate_limit.time.time", return_value=10.0):
                test_func()
            mock_sleep.assert_not_called()

            with patch("basic_auth_operator.utils.rate_limit.time.time", return_value=10.1):
                test_func()

            assert mock_sleep.call_count == 1
            assert mock_sleep.call_args[0][0] == pytest.approx(0.9)


class TestIsRateLimitError:
    """Test cases for rate limit detection."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (ApiException(status=429, reason="Too Many Requests"), True),
            (ApiException(status=503, reason="Service Unavailable: rate limit exceeded"), True),
            (ApiException(status=503, reason="Service Unavailable"), False),
            (ApiException(status=404, reason="Not Found"), False),
            (ValueError("429"), False),
        ],
    )
    def test_detection(self, error, expected):
        assert is_rate_limit_error(error) is expected


class TestHandleRateLimitError:
    """Test cases for handling rate limit errors."""

    def test_exponential_backoff(self):
        """Test exponential backoff on retries."""
        error = ApiException(status=429, reason="Too Many Requests")

        with patch("basic_auth_operator.utils.rate_limit.time.sleep") as mock_sleep:
            assert handle_rate_limit_error(error, 0) is True
            assert handle_rate_limit_error(error, 1) is True
            assert handle_rate_limit_error(error, 2) is True

        assert [c[0][0] for c in mock_sleep.call_args_list] == [1, 2, 4]

    def test_max_retries_exceeded(self):
        """Test that max retries limit is enforced."""
        error = ApiException(status=429, reason="Too Many Requests")

        with patch("basic_auth_operator.utils.rate_limit.time.sleep") as mock_sleep:
            assert handle_rate_limit_error(error, 3, max_retries=3) is False

        mock_sleep.assert_not_called()

    def test_non_rate_limit_error(self):
        """Test that other errors are not retried."""
        with patch("basic_auth_operator.utils.rate_limit.time.sleep") as mock_sleep:
            assert handle_rate_limit_error(ApiException(status=404), 0) is False

        mock_sleep.assert_not_called()
