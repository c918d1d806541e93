"""Label selector helpers shared by the Kubernetes and in-memory stores."""

from __future__ import annotations

from typing import Any

from ..errors import SpecValidationError


def selector_to_string(selector: dict[str, Any] | None) -> str:
    """Render a LabelSelector dict as a Kubernetes label selector string.

    Args:
        selector: Dict with optional ``matchLabels`` and ``matchExpressions``

    Returns:
        Selector string suitable for ``label_selector=`` (empty selects everything)
    """
    if not selector:
        return ""

    parts = [f"{key}={value}" for key, value in sorted((selector.get("matchLabels") or {}).items())]

    for expr in selector.get("matchExpressions") or []:
        key = expr.get("key")
        operator = expr.get("operator")
        values = sorted(expr.get("values") or [])
        if operator == "In":
            parts.append(f"{key} in ({','.join(values)})")
        elif operator == "NotIn":
            parts.append(f"{key} notin ({','.join(values)})")
        elif operator == "Exists":
            parts.append(key)
        elif operator == "DoesNotExist":
            parts.append(f"!{key}")
        else:
            raise SpecValidationError(f"unsupported operator '{operator}'", field="selector.matchExpressions")

    return ",".join(parts)


def selector_matches(selector: dict[str, Any] | None, labels: dict[str, str] | None) -> bool:
    """Evaluate a LabelSelector dict against a label set."""
    labels = labels or {}
    if not selector:
        return True

    for key, value in (selector.get("matchLabels") or {}).items():
        if labels.get(key) != value:
            return False

    for expr in selector.get("matchExpressions") or []:
        key = expr.get("key")
        operator = expr.get("operator")
        values = expr.get("values") or []
        if operator == "In":
            if labels.get(key) not in values:
                return False
        elif operator == "NotIn":
            if key in labels and labels[key] in values:
                return False
        elif operator == "Exists":
            if key not in labels:
                return False
        elif operator == "DoesNotExist":
            if key in labels:
                return False
        else:
            raise SpecValidationError(f"unsupported operator '{operator}'", field="selector.matchExpressions")

    return True
