"""Utilities for handling Kubernetes secret payloads."""

from __future__ import annotations

import base64
from typing import Any


def encode_secret_data(data: dict[str, str]) -> dict[str, str]:
    """Base64-encode plain values for a Secret's ``data`` field."""
    return {k: base64.b64encode(v.encode("utf-8")).decode("utf-8") for k, v in data.items()}


def has_secret_key(secret: dict[str, Any], key: str) -> bool:
    """Check whether a Secret object carries ``key``."""
    return key in (secret.get("data") or {}) or key in (secret.get("stringData") or {})
