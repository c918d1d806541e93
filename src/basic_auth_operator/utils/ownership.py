"""Owner reference helpers.

Ownership is only declared here; cascade deletion is carried out by the
cluster's garbage collector.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..constants import (
    API_GROUP_VERSION,
    FIELD_MANAGER,
    KIND_BASIC_AUTHENTICATOR,
    LABEL_COMPONENT,
    LABEL_INSTANCE,
    LABEL_MANAGED_BY,
)


def owner_reference_for(owner: dict[str, Any]) -> dict[str, Any]:
    """Build a controller owner reference pointing at ``owner``."""
    meta = owner.get("metadata", {})
    return {
        "apiVersion": owner.get("apiVersion", API_GROUP_VERSION),
        "kind": owner.get("kind", KIND_BASIC_AUTHENTICATOR),
        "name": meta.get("name"),
        "uid": meta.get("uid"),
        "controller": True,
        "blockOwnerDeletion": True,
    }


def set_owner_reference(child: dict[str, Any], owner: dict[str, Any]) -> None:
    """Declare ``owner`` as the controlling owner of ``child``.

    Any existing reference to the same owner uid is replaced, so calling this
    twice never produces duplicate entries.
    """
    ref = owner_reference_for(owner)
    meta = child.setdefault("metadata", {})
    refs = [r for r in meta.get("ownerReferences") or [] if r.get("uid") != ref["uid"]]
    refs.append(ref)
    meta["ownerReferences"] = refs


def is_owned_by(child: dict[str, Any], owner: dict[str, Any]) -> bool:
    """Check whether ``child`` carries an owner reference to ``owner``."""
    owner_uid = owner.get("metadata", {}).get("uid")
    if not owner_uid:
        return False
    refs = child.get("metadata", {}).get("ownerReferences") or []
    return any(ref.get("uid") == owner_uid for ref in refs)


def managed_labels(owner_name: str, component: str | None = None) -> dict[str, str]:
    """Labels stamped on every artifact the operator creates for ``owner_name``."""
    labels = {
        LABEL_MANAGED_BY: FIELD_MANAGER,
        LABEL_INSTANCE: owner_name,
    }
    if component:
        labels[LABEL_COMPONENT] = component
    return labels


def managed_selector(owner_name: str, component: str | None = None) -> dict[str, Any]:
    """Selector matching the artifacts created for ``owner_name``."""
    return {"matchLabels": managed_labels(owner_name, component)}


def owner_of(obj: Mapping[str, Any]) -> tuple[str, str] | None:
    """Return ``(namespace, name)`` of the BasicAuthenticator owning ``obj``.

    The owner reference is preferred; the instance label covers objects whose
    references were stripped.
    """
    meta = obj.get("metadata") or {}
    namespace = meta.get("namespace")
    if not namespace:
        return None

    for ref in meta.get("ownerReferences") or []:
        if ref.get("kind") == KIND_BASIC_AUTHENTICATOR and ref.get("apiVersion") == API_GROUP_VERSION:
            return namespace, ref["name"]

    labels = meta.get("labels") or {}
    if labels.get(LABEL_MANAGED_BY) == FIELD_MANAGER and labels.get(LABEL_INSTANCE):
        return namespace, labels[LABEL_INSTANCE]
    return None
