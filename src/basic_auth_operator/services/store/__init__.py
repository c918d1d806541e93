"""Resource store interface and implementations."""

from .base import ResourceStore
from .kube import KubernetesStore
from .memory import InMemoryStore

__all__ = ["ResourceStore", "KubernetesStore", "InMemoryStore"]
