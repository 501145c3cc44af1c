"""Create-or-replace reconciliation of the Deployment and Service for one app."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from kubeship.common.models import RuntimeSpec

from .manifests import build_deployment, build_service

ReconcileAction = Literal["created", "replaced", "unchanged", "skipped"]


@dataclass(slots=True)
class ReconcileResult:
    """Action taken for each resource kind during one reconcile pass."""

    name: str
    namespace: str
    deployment: ReconcileAction
    service: ReconcileAction


class ResourceReconciler:
    """Ensure the Deployment (and Service, when ports are declared) match a RuntimeSpec."""

    def __init__(
        self,
        *,
        core_api: client.CoreV1Api,
        apps_api: client.AppsV1Api,
        namespace: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.core_api = core_api
        self.apps_api = apps_api
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)

    def reconcile(self, name: str, image: str, spec: RuntimeSpec) -> ReconcileResult:
        """
        Create or fully replace the Deployment, then create the Service if missing.

        Raises:
            kubernetes.client.rest.ApiException: Any API failure other than a 404 on lookup.
        """
        deployment_action = self._reconcile_deployment(name, image, spec)

        if spec.ports:
            service_action = self._reconcile_service(name, spec)
        else:
            self.logger.debug("No ports declared for %s; skipping Service", name)
            service_action = "skipped"

        return ReconcileResult(
            name=name,
            namespace=self.namespace,
            deployment=deployment_action,
            service=service_action,
        )

    def _reconcile_deployment(self, name: str, image: str, spec: RuntimeSpec) -> ReconcileAction:
        deployment = build_deployment(name, image, spec, self.namespace)

        if not self._exists(self.apps_api.read_namespaced_deployment, name):
            self.logger.info("Deployment %s not found in %s, creating...", name, self.namespace)
            self.apps_api.create_namespaced_deployment(namespace=self.namespace, body=deployment)
            self.logger.info("Deployment %s created (replicas=%s, image=%s)", name, spec.replicas, image)
            return "created"

        self.logger.info("Deployment %s already exists, replacing...", name)
        self.apps_api.replace_namespaced_deployment(name=name, namespace=self.namespace, body=deployment)
        self.logger.info("Deployment %s replaced (replicas=%s, image=%s)", name, spec.replicas, image)
        return "replaced"

    def _reconcile_service(self, name: str, spec: RuntimeSpec) -> ReconcileAction:
        if self._exists(self.core_api.read_namespaced_service, name):
            # Existing Services are kept as-is; replacing would need the allocated clusterIP.
            self.logger.info("Service %s already exists, leaving it unchanged", name)
            return "unchanged"

        service = build_service(name, spec, self.namespace)
        self.logger.info("Service %s not found in %s, creating...", name, self.namespace)
        self.core_api.create_namespaced_service(namespace=self.namespace, body=service)
        self.logger.info(
            "Service %s created (type=%s, ports=%s)",
            name,
            service.spec.type,
            ",".join(str(port) for port in spec.ports),
        )
        return "created"

    def _exists(self, read: Callable[..., object], name: str) -> bool:
        try:
            read(name=name, namespace=self.namespace)
        except ApiException as exc:
            if exc.status == 404:
                return False
            raise
        return True
