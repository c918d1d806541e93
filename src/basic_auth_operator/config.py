"""Operator configuration loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class OperatorConfig:
    """Process-wide settings for the operator.

    Environment Variables:
        PROXY_IMAGE: nginx image used for the proxy (default: nginx:1.27-alpine)
        PROXY_CONTAINER_NAME: Name of the proxy container, also the injection marker
        METRICS_PORT: Port for /metrics, /healthz and /readyz (default: 8080)
        RESYNC_INTERVAL_SECONDS: Periodic re-reconcile interval (default: 60)
        REQUEUE_BASE_DELAY_SECONDS: First requeue delay (default: 1)
        REQUEUE_MAX_DELAY_SECONDS: Upper bound for requeue delays (default: 60)
        MAX_WORKERS: kopf executor size (default: 4)
    """

    proxy_image: str = "nginx:1.27-alpine"
    proxy_container_name: str = "nginx-basic-auth"
    metrics_port: int = 8080
    resync_interval_seconds: float = 60.0
    requeue_base_delay_seconds: float = 1.0
    requeue_max_delay_seconds: float = 60.0
    max_workers: int = 4

    @classmethod
    def from_env(cls) -> OperatorConfig:
        """Build a config from environment variables, falling back to defaults."""
        return cls(
            proxy_image=os.getenv("PROXY_IMAGE", cls.proxy_image),
            proxy_container_name=os.getenv("PROXY_CONTAINER_NAME", cls.proxy_container_name),
            metrics_port=int(os.getenv("METRICS_PORT", str(cls.metrics_port))),
            resync_interval_seconds=float(
                os.getenv("RESYNC_INTERVAL_SECONDS", str(cls.resync_interval_seconds))
            ),
            requeue_base_delay_seconds=float(
                os.getenv("REQUEUE_BASE_DELAY_SECONDS", str(cls.requeue_base_delay_seconds))
            ),
            requeue_max_delay_seconds=float(
                os.getenv("REQUEUE_MAX_DELAY_SECONDS", str(cls.requeue_max_delay_seconds))
            ),
            max_workers=int(os.getenv("MAX_WORKERS", str(cls.max_workers))),
        )

    def requeue_delay(self, retry: int) -> float:
        """Bounded exponential backoff for the given retry attempt (0-based)."""
        delay = self.requeue_base_delay_seconds * (2 ** min(max(retry, 0), 32))
        return min(delay, self.requeue_max_delay_seconds)


_config: OperatorConfig | None = None


def get_config() -> OperatorConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = OperatorConfig.from_env()
    return _config


def reset_config() -> None:
    """Forget the cached config so the next call re-reads the environment."""
    global _config
    _config = None
