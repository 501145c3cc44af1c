"""Kubernetes executor: run, follow and cancel a containerized app."""

from __future__ import annotations

import logging
import threading
from typing import Any, BinaryIO, Dict, Optional, Protocol

from kubernetes import client

from kubeship.common.config import ExecutorConfig
from kubeship.common.errors import InvalidArgumentError, TeardownError
from kubeship.common.models import RuntimeSpec

from .client import KubernetesClients, build_clients
from .logs import LogStreamer
from .manifests import render_manifests
from .readiness import ReadinessPoller
from .reconciler import ReconcileResult, ResourceReconciler
from .teardown import Teardown, TeardownResult


class Executor(Protocol):
    """Operations every runtime backend exposes to callers."""

    def run(
        self,
        image: str,
        name: str,
        spec: RuntimeSpec,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
    ) -> Any:
        ...

    def logs(self, name: str, stdout: BinaryIO, stderr: Optional[BinaryIO] = None) -> Any:
        ...

    def cancel(self, name: str) -> Any:
        ...


def _require(value: Optional[str], what: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgumentError(f"{what} must not be empty")
    return value.strip()


class KubernetesExecutor:
    """Run images as Deployments (plus an optional Service) in one namespace."""

    def __init__(
        self,
        *,
        core_api: client.CoreV1Api,
        apps_api: client.AppsV1Api,
        config: Optional[ExecutorConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or ExecutorConfig()
        self.logger = logger or logging.getLogger(__name__)
        namespace = self.config.namespace

        self.reconciler = ResourceReconciler(
            core_api=core_api, apps_api=apps_api, namespace=namespace, logger=self.logger
        )
        self.poller = ReadinessPoller(
            core_api=core_api,
            namespace=namespace,
            poll_interval=self.config.poll_interval,
            default_timeout=self.config.wait_timeout,
            logger=self.logger,
        )
        self.log_streamer = LogStreamer(core_api=core_api, namespace=namespace, logger=self.logger)
        self.teardown = Teardown(core_api=core_api, apps_api=apps_api, namespace=namespace, logger=self.logger)

    @classmethod
    def from_clients(
        cls,
        clients: KubernetesClients,
        config: Optional[ExecutorConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "KubernetesExecutor":
        return cls(core_api=clients.core, apps_api=clients.apps, config=config, logger=logger)

    @classmethod
    def from_config(cls, config: ExecutorConfig, logger: Optional[logging.Logger] = None) -> "KubernetesExecutor":
        """Build API clients from ``config`` and wrap them in an executor."""
        return cls.from_clients(build_clients(config), config=config, logger=logger)

    def run(
        self,
        image: str,
        name: str,
        spec: RuntimeSpec,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
        *,
        timeout: Optional[float] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> ReconcileResult:
        """
        Create or update the app and block until one of its pods is running.

        With zero replicas no pod will ever start, so the wait is skipped.
        ``stderr`` is accepted for interface compatibility and left untouched.

        Args:
            image: Image reference to run.
            name: App name; used for both resources and the ``app`` label.
            spec: Desired replicas, ports and exposure.
            stdout: Optional binary sink receiving a one-line status summary.
            timeout: Readiness bound in seconds; falls back to the configured one.
            stop_event: Event that aborts the readiness wait when set.

        Raises:
            InvalidArgumentError: Empty image/name or missing spec.
            PodWaitTimeoutError: No running pod within the timeout.
            WaitCancelledError: ``stop_event`` was set during the wait.
            kubernetes.client.rest.ApiException: Any API failure while reconciling.
        """
        image = _require(image, "Image name")
        name = _require(name, "Container name")
        if spec is None:
            raise InvalidArgumentError("Runtime spec must not be None")

        result = self.reconciler.reconcile(name, image, spec)

        if spec.replicas == 0:
            self.logger.info("Deployment %s has zero replicas; not waiting for a running pod", name)
        else:
            pod = self.poller.wait_for_running_pod(name, timeout=timeout, stop_event=stop_event)
            if stdout is not None:
                stdout.write(f"{name}: pod {pod.metadata.name} running\n".encode())
                stdout.flush()

        return result

    def logs(self, name: str, stdout: BinaryIO, stderr: Optional[BinaryIO] = None) -> int:
        """
        Stream logs of the running pod for ``name`` into ``stdout``.

        Kubernetes merges container stdout and stderr into one stream, so
        ``stderr`` is never written.

        Raises:
            InvalidArgumentError: Empty name.
            ResourceNotFoundError: No running pod exists.
        """
        name = _require(name, "Container name")
        return self.log_streamer.stream_logs(name, stdout)

    def cancel(self, name: str) -> TeardownResult:
        """
        Delete the Service and Deployment for ``name``.

        Succeeds when both are gone, including when they never existed.

        Raises:
            InvalidArgumentError: Empty name.
            TeardownError: At least one deletion failed; the other was still attempted.
        """
        name = _require(name, "Container name")
        result = self.teardown.delete_all(name)
        if not result.success:
            cause = next((issue.exception for issue in result.issues if issue.exception is not None), None)
            raise TeardownError(result) from cause
        return result

    def render(self, image: str, name: str, spec: RuntimeSpec) -> Dict[str, Dict[str, Any]]:
        """Return the manifests ``run`` would apply, without touching the cluster."""
        image = _require(image, "Image name")
        name = _require(name, "Container name")
        if spec is None:
            raise InvalidArgumentError("Runtime spec must not be None")

        return render_manifests(name, image, spec, self.config.namespace)
