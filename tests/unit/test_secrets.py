"""Tests for Kubernetes secrets utilities."""

from __future__ import annotations

import base64

from basic_auth_operator.utils.secrets import encode_secret_data, has_secret_key


def b64(value):
    return base64.b64encode(value.encode()).decode()


class TestEncodeSecretData:
    """Test cases for encode_secret_data."""

    def test_encode_secret_data(self):
        assert encode_secret_data({"htpasswd": "admin:{SSHA}x"}) == {"htpasswd": b64("admin:{SSHA}x")}

    def test_encode_empty(self):
        assert encode_secret_data({}) == {}


class TestHasSecretKey:
    """Test cases for has_secret_key."""

    def test_key_in_data(self):
        assert has_secret_key({"data": {"htpasswd": ""}}, "htpasswd")

    def test_key_in_string_data(self):
        """Test that keys not yet merged into data are seen."""
        assert has_secret_key({"stringData": {"htpasswd": "x"}}, "htpasswd")

    def test_key_missing(self):
        assert not has_secret_key({"data": {"other": "x"}}, "htpasswd")
        assert not has_secret_key({"data": None}, "htpasswd")
