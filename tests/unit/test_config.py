"""Tests for operator configuration."""

from __future__ import annotations

from unittest.mock import patch

from basic_auth_operator.config import OperatorConfig, get_config, reset_config


class TestOperatorConfig:
    """Test cases for OperatorConfig."""

    def test_defaults(self):
        """Test defaults when no environment is set."""
        with patch.dict("os.environ", {}, clear=True):
            config = OperatorConfig.from_env()

        assert config.proxy_image == "nginx:1.27-alpine"
        assert config.proxy_container_name == "nginx-basic-auth"
        assert config.metrics_port == 8080
        assert config.max_workers == 4

    def test_from_env(self):
        """Test reading values from the environment."""
        env = {
            "PROXY_IMAGE": "registry.local/nginx:1.25",
            "PROXY_CONTAINER_NAME": "auth-proxy",
            "METRICS_PORT": "9090",
            "RESYNC_INTERVAL_SECONDS": "30",
            "REQUEUE_BASE_DELAY_SECONDS": "0.5",
            "REQUEUE_MAX_DELAY_SECONDS": "10",
            "MAX_WORKERS": "8",
        }
        with patch.dict("os.environ", env, clear=True):
            config = OperatorConfig.from_env()

        assert config.proxy_image == "registry.local/nginx:1.25"
        assert config.proxy_container_name == "auth-proxy"
        assert config.metrics_port == 9090
        assert config.resync_interval_seconds == 30.0
        assert config.requeue_base_delay_seconds == 0.5
        assert config.requeue_max_delay_seconds == 10.0
        assert config.max_workers == 8

    def test_requeue_delay_is_bounded_exponential(self):
        """Test backoff doubling up to the cap."""
        config = OperatorConfig(requeue_base_delay_seconds=1.0, requeue_max_delay_seconds=10.0)

        assert [config.requeue_delay(r) for r in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]
        assert config.requeue_delay(-1) == 1.0
        assert config.requeue_delay(1000) == 10.0


class TestGetConfig:
    """Test cases for the cached process config."""

    def test_cached_until_reset(self):
        """Test that get_config caches and reset_config clears."""
        reset_config()
        try:
            with patch.dict("os.environ", {"PROXY_IMAGE": "a"}):
                first = get_config()
            with patch.dict("os.environ", {"PROXY_IMAGE": "b"}):
                assert get_config() is first
                reset_config()
                assert get_config().proxy_image == "b"
        finally:
            reset_config()
