"""Utility functions for the BasicAuthenticator Operator."""

from .conditions import set_ready_condition, update_condition
from .context import (
    get_context_dict,
    get_correlation_id,
    propagate_trace_context,
    set_correlation_id,
    with_correlation_id,
)
from .credentials import generate_credentials, generate_password, generate_username
from .diff import DeploymentFields, data_diff, deployment_diff, field_diff
from .events import emit_event
from .locks import KeyedLock
from .ownership import is_owned_by, managed_labels, set_owner_reference
from .rate_limit import handle_rate_limit_error, rate_limit_k8s
from .secrets import encode_secret_data, has_secret_key
from .selectors import selector_matches, selector_to_string

__all__ = [
    "update_condition",
    "set_ready_condition",
    "emit_event",
    "encode_secret_data",
    "has_secret_key",
    "generate_credentials",
    "generate_username",
    "generate_password",
    "DeploymentFields",
    "deployment_diff",
    "data_diff",
    "field_diff",
    "KeyedLock",
    "set_owner_reference",
    "is_owned_by",
    "managed_labels",
    "rate_limit_k8s",
    "handle_rate_limit_error",
    "selector_to_string",
    "selector_matches",
    "set_correlation_id",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
    "propagate_trace_context",
]
