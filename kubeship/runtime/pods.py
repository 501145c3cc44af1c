from __future__ import annotations

from typing import Optional

from kubernetes import client

from .manifests import app_selector


def is_running(pod: client.V1Pod) -> bool:
    """True when the pod's first container reports a running state."""
    statuses = (pod.status.container_statuses if pod.status else None) or []
    if not statuses:
        return False
    state = statuses[0].state
    return bool(state and state.running)


def find_running_pod(core_api: client.CoreV1Api, namespace: str, name: str) -> Optional[client.V1Pod]:
    """
    Return the first pod labelled ``app=<name>`` whose first container is running.

    Returns None when no such pod exists; API failures propagate.
    """
    pods = core_api.list_namespaced_pod(namespace=namespace, label_selector=app_selector(name))
    for pod in pods.items or []:
        if is_running(pod):
            return pod
    return None
