"""Reconcile steps and the loop that sequences them."""

from .config_artifact import ConfigArtifactManager
from .credentials import CredentialProvisioner
from .deployment import DeploymentManager
from .reconciler import ReconcileLoop
from .result import ReconcileResult
from .sidecar import InjectionPlan, SidecarInjector
from .status import StatusReporter
from .store import InMemoryStore, KubernetesStore, ResourceStore

__all__ = [
    "ConfigArtifactManager",
    "CredentialProvisioner",
    "DeploymentManager",
    "InMemoryStore",
    "InjectionPlan",
    "KubernetesStore",
    "ReconcileLoop",
    "ReconcileResult",
    "ResourceStore",
    "SidecarInjector",
    "StatusReporter",
]
