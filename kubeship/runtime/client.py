"""Kubernetes client construction, kept apart from the deployment logic."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException

from kubeship.common.config import ExecutorConfig
from kubeship.common.errors import ClientConfigurationError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class KubernetesClients:
    """API groups used by the executor, sharing one ApiClient."""

    core: client.CoreV1Api
    apps: client.AppsV1Api


def build_api_client(config: ExecutorConfig) -> client.ApiClient:
    """
    Build an ApiClient from an explicit configuration object.

    The process-wide default configuration of the kubernetes package is left
    untouched, so several executors can target different clusters.

    Args:
        config: Executor configuration carrying the kubeconfig path and context.

    Returns:
        ApiClient bound to the resolved cluster configuration.

    Raises:
        ClientConfigurationError: When neither in-cluster nor kubeconfig loading succeeds.
    """
    client_configuration = client.Configuration()

    try:
        if config.uses_explicit_kubeconfig:
            logger.debug("Loading kubeconfig %s (context=%s)", config.kubeconfig or "<default>", config.context)
            k8s_config.load_kube_config(
                config_file=config.kubeconfig,
                context=config.context,
                client_configuration=client_configuration,
            )
        else:
            try:
                k8s_config.load_incluster_config(client_configuration=client_configuration)
                logger.debug("Using in-cluster Kubernetes configuration")
            except ConfigException:
                logger.debug("Not running in a cluster, falling back to the default kubeconfig")
                k8s_config.load_kube_config(client_configuration=client_configuration)
    except (ConfigException, OSError) as exc:
        raise ClientConfigurationError(f"Kubernetes client configuration failed: {exc}") from exc

    return client.ApiClient(configuration=client_configuration)


def build_clients(config: ExecutorConfig, api_client: Optional[client.ApiClient] = None) -> KubernetesClients:
    """Create the CoreV1/AppsV1 API wrappers used by the runtime helpers."""
    api_client = api_client or build_api_client(config)
    return KubernetesClients(core=client.CoreV1Api(api_client), apps=client.AppsV1Api(api_client))
