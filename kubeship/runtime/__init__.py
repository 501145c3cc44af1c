"""Runtime helpers for reconciling, following and tearing down apps on Kubernetes."""

from .client import KubernetesClients, build_api_client, build_clients
from .executor import Executor, KubernetesExecutor
from .issues import IssueSeverity, RuntimeIssue
from .logs import LogStreamer
from .readiness import ReadinessPoller
from .reconciler import ReconcileResult, ResourceReconciler
from .teardown import Teardown, TeardownResult

__all__ = [
    "KubernetesClients",
    "build_api_client",
    "build_clients",
    "Executor",
    "KubernetesExecutor",
    "IssueSeverity",
    "RuntimeIssue",
    "LogStreamer",
    "ReadinessPoller",
    "ReconcileResult",
    "ResourceReconciler",
    "Teardown",
    "TeardownResult",
]
