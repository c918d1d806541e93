"""Tests for label selector helpers."""

from __future__ import annotations

import pytest

from basic_auth_operator.errors import SpecValidationError
from basic_auth_operator.utils.selectors import selector_matches, selector_to_string


class TestSelectorToString:
    """Test cases for selector_to_string."""

    def test_empty(self):
        """Test that an empty selector selects everything."""
        assert selector_to_string(None) == ""
        assert selector_to_string({}) == ""

    def test_match_labels_sorted(self):
        """Test matchLabels rendering."""
        assert selector_to_string({"matchLabels": {"tier": "web", "app": "shop"}}) == "app=shop,tier=web"

    def test_match_expressions(self):
        """Test every supported operator."""
        selector = {
            "matchExpressions": [
                {"key": "env", "operator": "In", "values": ["prod", "dev"]},
                {"key": "team", "operator": "NotIn", "values": ["ops"]},
                {"key": "app", "operator": "Exists"},
                {"key": "legacy", "operator": "DoesNotExist"},
            ]
        }
        assert selector_to_string(selector) == "env in (dev,prod),team notin (ops),app,!legacy"

    def test_unknown_operator(self):
        """Test that unsupported operators are rejected."""
        with pytest.raises(SpecValidationError):
            selector_to_string({"matchExpressions": [{"key": "a", "operator": "Gt", "values": ["1"]}]})


class TestSelectorMatches:
    """Test cases for selector_matches."""

    def test_match_labels(self):
        """Test exact label matching."""
        assert selector_matches({"matchLabels": {"app": "web"}}, {"app": "web", "tier": "x"})
        assert not selector_matches({"matchLabels": {"app": "web"}}, {"app": "api"})
        assert not selector_matches({"matchLabels": {"app": "web"}}, None)

    def test_expressions(self):
        """Test expression matching."""
        selector = {
            "matchExpressions": [
                {"key": "env", "operator": "In", "values": ["prod"]},
                {"key": "legacy", "operator": "DoesNotExist"},
            ]
        }
        assert selector_matches(selector, {"env": "prod"})
        assert not selector_matches(selector, {"env": "dev"})
        assert not selector_matches(selector, {"env": "prod", "legacy": "true"})

    def test_not_in_allows_missing_key(self):
        """Test NotIn semantics for absent keys."""
        assert selector_matches({"matchExpressions": [{"key": "a", "operator": "NotIn", "values": ["x"]}]}, {})

    def test_empty_selector_matches_all(self):
        """Test that no selector matches any labels."""
        assert selector_matches(None, {"a": "b"})
