"""Field-scoped comparison of desired and observed workload specs.

Objects read back from the API server carry defaults the operator never set
(``imagePullPolicy``, ``terminationMessagePath``, port protocols, volume
``defaultMode`` and so on). Comparing whole specs would report drift on every
pass, so both sides are first reduced to the fields the operator manages.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from ..constants import API_GROUP

Pairs = tuple[tuple[str, str], ...]


def _pairs(mapping: dict[str, Any] | None, prefix: str | None = None) -> Pairs:
    items = (mapping or {}).items()
    if prefix is not None:
        items = [(k, v) for k, v in items if k.startswith(prefix)]
    return tuple(sorted((str(k), str(v)) for k, v in items))


@dataclass(frozen=True)
class ContainerFields:
    """Managed fields of a container."""

    name: str
    image: str | None
    args: tuple[str, ...]
    ports: tuple[tuple[int, str | None], ...]
    mounts: tuple[tuple[str, str, str | None, bool], ...]

    @classmethod
    def from_dict(cls, container: dict[str, Any]) -> ContainerFields:
        return cls(
            name=container.get("name", ""),
            image=container.get("image"),
            args=tuple(container.get("args") or ()),
            ports=tuple(
                sorted((p.get("containerPort", 0), p.get("name")) for p in container.get("ports") or [])
            ),
            mounts=tuple(
                sorted(
                    (m.get("name", ""), m.get("mountPath", ""), m.get("subPath"), bool(m.get("readOnly", False)))
                    for m in container.get("volumeMounts") or []
                )
            ),
        )


@dataclass(frozen=True)
class VolumeFields:
    """Managed fields of a pod volume."""

    name: str
    config_map: str | None
    secret: str | None
    items: tuple[tuple[str, str], ...]

    @classmethod
    def from_dict(cls, volume: dict[str, Any]) -> VolumeFields:
        config_map = volume.get("configMap") or {}
        secret = volume.get("secret") or {}
        source = config_map or secret
        return cls(
            name=volume.get("name", ""),
            config_map=config_map.get("name"),
            secret=secret.get("secretName"),
            items=tuple(sorted((i.get("key", ""), i.get("path", "")) for i in source.get("items") or [])),
        )


@dataclass(frozen=True)
class DeploymentFields:
    """Managed fields of a Deployment spec."""

    replicas: int
    selector: Pairs
    template_labels: Pairs
    template_annotations: Pairs
    containers: tuple[ContainerFields, ...]
    volumes: tuple[VolumeFields, ...]

    @classmethod
    def from_deployment(cls, deployment: dict[str, Any]) -> DeploymentFields:
        spec = deployment.get("spec") or {}
        template = spec.get("template") or {}
        template_meta = template.get("metadata") or {}
        pod_spec = template.get("spec") or {}
        replicas = spec.get("replicas")
        return cls(
            # The API server defaults an omitted replica count to 1
            replicas=1 if replicas is None else replicas,
            selector=_pairs((spec.get("selector") or {}).get("matchLabels")),
            template_labels=_pairs(template_meta.get("labels")),
            # Only annotations in the operator's group are managed
            template_annotations=_pairs(template_meta.get("annotations"), prefix=API_GROUP),
            containers=tuple(ContainerFields.from_dict(c) for c in pod_spec.get("containers") or []),
            volumes=tuple(sorted(
                (VolumeFields.from_dict(v) for v in pod_spec.get("volumes") or []),
                key=lambda v: v.name,
            )),
        )


def field_diff(desired: Any, observed: Any) -> list[str]:
    """List the names of the dataclass fields that differ.

    Args:
        desired: Normalized desired view
        observed: Normalized observed view of the same type

    Returns:
        Names of differing fields, empty when the views are equal
    """
    if type(desired) is not type(observed):
        raise TypeError(f"cannot diff {type(desired).__name__} against {type(observed).__name__}")
    return [f.name for f in fields(desired) if getattr(desired, f.name) != getattr(observed, f.name)]


def deployment_diff(desired: dict[str, Any], observed: dict[str, Any]) -> list[str]:
    """Field-scoped diff between two Deployment objects."""
    return field_diff(DeploymentFields.from_deployment(desired), DeploymentFields.from_deployment(observed))


def data_diff(desired: dict[str, str] | None, observed: dict[str, str] | None) -> list[str]:
    """Keys whose values differ between two ConfigMap/Secret data maps."""
    desired = desired or {}
    observed = observed or {}
    return sorted(key for key in set(desired) | set(observed) if desired.get(key) != observed.get(key))
