"""Tests for the in-memory resource store."""

from __future__ import annotations

import pytest

from basic_auth_operator.errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError

from conftest import make_resource, make_workload


class TestInMemoryStore:
    """Test cases for InMemoryStore."""

    def test_get_missing(self, store):
        """Test NotFound on a missing object."""
        with pytest.raises(NotFoundError):
            store.get("Secret", "default", "nope")

    def test_create_assigns_metadata(self, store):
        """Test uid, version and generation on create."""
        created = store.create(make_resource())

        meta = created["metadata"]
        assert meta["uid"]
        assert meta["resourceVersion"] == "1"
        assert meta["generation"] == 1
        assert created["status"] == {}
        assert store.writes == [("create", "BasicAuthenticator", "default", "web-auth")]

    def test_create_twice(self, store):
        """Test AlreadyExists on duplicate create."""
        store.create(make_resource())
        with pytest.raises(AlreadyExistsError):
            store.create(make_resource())

    def test_returns_copies(self, store):
        """Test that callers cannot mutate stored state in place."""
        store.create(make_resource())
        obj = store.get("BasicAuthenticator", "default", "web-auth")
        obj["spec"]["appPort"] = 1

        assert store.get("BasicAuthenticator", "default", "web-auth")["spec"]["appPort"] == 8080

    def test_stale_update_conflicts(self, store):
        """Test optimistic concurrency on update."""
        store.create(make_resource())
        first = store.get("BasicAuthenticator", "default", "web-auth")
        second = store.get("BasicAuthenticator", "default", "web-auth")

        first["spec"]["realm"] = "a"
        store.update(first)
        second["spec"]["realm"] = "b"
        with pytest.raises(ConflictError):
            store.update(second)

    def test_update_bumps_generation_on_spec_change(self, store):
        """Test generation handling."""
        store.create(make_resource())
        obj = store.get("BasicAuthenticator", "default", "web-auth")

        same = store.update(obj)
        assert same["metadata"]["generation"] == 1

        same["spec"]["realm"] = "x"
        changed = store.update(same)
        assert changed["metadata"]["generation"] == 2

    def test_update_ignores_status(self, store):
        """Test that update cannot write the status subresource."""
        store.create(make_resource())
        obj = store.get("BasicAuthenticator", "default", "web-auth")
        obj["status"] = {"readyReplicas": 9}

        updated = store.update(obj)

        assert updated["status"] == {}

    def test_update_status_only_touches_status(self, store):
        """Test the status subresource write."""
        store.create(make_resource())
        obj = store.get("BasicAuthenticator", "default", "web-auth")
        obj["spec"]["appPort"] = 1
        obj["status"] = {"readyReplicas": 2}

        updated = store.update_status(obj)

        assert updated["status"] == {"readyReplicas": 2}
        assert updated["spec"]["appPort"] == 8080

    def test_update_status_unsupported_kind(self, store):
        """Test that kinds without a status subresource are rejected."""
        store.create({"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "c", "namespace": "default"}})
        with pytest.raises(StoreError):
            store.update_status({"kind": "ConfigMap", "metadata": {"name": "c", "namespace": "default"}})

    def test_list_by_selector(self, store):
        """Test label-selected listing scoped to a namespace."""
        store.seed(make_workload("a"))
        store.seed(make_workload("b", labels={"app": "api"}))
        store.seed(make_workload("c", namespace="other"))

        names = [d["metadata"]["name"] for d in store.list("Deployment", "default", {"matchLabels": {"app": "web"}})]

        assert names == ["a"]

    def test_deployment_defaults(self, store):
        """Test server-side defaulting of Deployments."""
        created = store.create(make_workload("a"))

        pod_spec = created["spec"]["template"]["spec"]
        assert created["spec"]["progressDeadlineSeconds"] == 600
        assert pod_spec["containers"][0]["imagePullPolicy"] == "IfNotPresent"
        assert pod_spec["containers"][0]["ports"][0]["protocol"] == "TCP"
        assert pod_spec["dnsPolicy"] == "ClusterFirst"

    def test_external_helpers_not_recorded(self, store):
        """Test that seed, mutate and delete are invisible in writes."""
        store.seed(make_workload("a"))
        store.mutate("Deployment", "default", "a", lambda obj: obj["spec"].update({"replicas": 5}))
        store.delete("Deployment", "default", "a")

        assert store.writes == []
        with pytest.raises(NotFoundError):
            store.delete("Deployment", "default", "a")
