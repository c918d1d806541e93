"""Tests for field-scoped diffs."""

from __future__ import annotations

import copy

import pytest

from basic_auth_operator.builders.deployment import build_deployment
from basic_auth_operator.config import OperatorConfig
from basic_auth_operator.models import AuthenticatorSpec
from basic_auth_operator.services.store.memory import _default_deployment
from basic_auth_operator.utils.diff import ContainerFields, DeploymentFields, data_diff, deployment_diff, field_diff


@pytest.fixture
def desired():
    spec = AuthenticatorSpec.from_dict({"appPort": 8080, "appService": "web"})
    return build_deployment("web-auth", "default", spec, "creds", "cm", OperatorConfig())


class TestDeploymentDiff:
    """Test cases for deployment_diff."""

    def test_server_defaults_ignored(self, desired):
        """Test that API server defaults are not drift."""
        observed = copy.deepcopy(desired)
        _default_deployment(observed)
        observed["metadata"]["resourceVersion"] = "42"
        observed["status"] = {"readyReplicas": 1}

        assert deployment_diff(desired, observed) == []

    def test_omitted_replicas_equals_one(self, desired):
        """Test that a missing replica count is read as the server default."""
        observed = copy.deepcopy(desired)
        del observed["spec"]["replicas"]

        assert deployment_diff(desired, observed) == []

    def test_image_change_detected(self, desired):
        """Test that container image drift is reported."""
        observed = copy.deepcopy(desired)
        observed["spec"]["template"]["spec"]["containers"][0]["image"] = "other"

        assert deployment_diff(desired, observed) == ["containers"]

    def test_foreign_annotations_ignored(self, desired):
        """Test that annotations outside the operator group are not managed."""
        observed = copy.deepcopy(desired)
        observed["spec"]["template"]["metadata"]["annotations"]["kubectl.kubernetes.io/restartedAt"] = "now"

        assert deployment_diff(desired, observed) == []

    def test_multiple_fields(self, desired):
        """Test that every differing field is listed."""
        observed = copy.deepcopy(desired)
        observed["spec"]["replicas"] = 5
        observed["spec"]["template"]["spec"]["volumes"].pop()

        assert deployment_diff(desired, observed) == ["replicas", "volumes"]

    def test_volume_order_ignored(self, desired):
        """Test that volume order does not matter."""
        observed = copy.deepcopy(desired)
        observed["spec"]["template"]["spec"]["volumes"].reverse()

        assert deployment_diff(desired, observed) == []


class TestFieldDiff:
    """Test cases for field_diff."""

    def test_type_mismatch(self, desired):
        """Test that views of different types cannot be compared."""
        with pytest.raises(TypeError):
            field_diff(DeploymentFields.from_deployment(desired), ContainerFields.from_dict({"name": "a"}))

    def test_equal_views(self):
        """Test that equal views have no differences."""
        a = ContainerFields.from_dict({"name": "a", "image": "x"})
        b = ContainerFields.from_dict({"name": "a", "image": "x", "imagePullPolicy": "Always"})
        assert field_diff(a, b) == []


class TestDataDiff:
    """Test cases for data_diff."""

    def test_changed_added_removed(self):
        """Test that changed, added and removed keys are all reported."""
        assert data_diff({"a": "1", "b": "2"}, {"a": "1", "b": "3", "c": "4"}) == ["b", "c"]

    def test_none_is_empty(self):
        """Test that missing data compares as empty."""
        assert data_diff(None, {}) == []
        assert data_diff({"a": "1"}, None) == ["a"]
