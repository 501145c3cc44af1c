"""Best-effort deletion of the Service and Deployment belonging to an app."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Literal, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from .issues import RuntimeIssue

DeletionStatus = Literal["deleted", "absent", "failed"]


@dataclass(slots=True)
class TeardownResult:
    """Outcome of deleting both resources for one app."""

    name: str
    namespace: str
    service: DeletionStatus = "absent"
    deployment: DeletionStatus = "absent"
    issues: List[RuntimeIssue] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not any(issue.is_error() for issue in self.issues)


class Teardown:
    """Delete Service then Deployment, attempting both and tolerating absence."""

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

    def delete_all(self, name: str) -> TeardownResult:
        """
        Delete the Service and the Deployment named ``name``.

        A 404 counts as success. Any other failure is recorded as an issue and
        does not prevent the second deletion; callers inspect ``success``.
        """
        result = TeardownResult(name=name, namespace=self.namespace)

        result.service = self._delete(
            "Service",
            name,
            lambda: self.core_api.delete_namespaced_service(name=name, namespace=self.namespace),
            result.issues,
        )
        result.deployment = self._delete(
            "Deployment",
            name,
            lambda: self.apps_api.delete_namespaced_deployment(
                name=name,
                namespace=self.namespace,
                body=client.V1DeleteOptions(propagation_policy="Background"),
            ),
            result.issues,
        )
        return result

    def _delete(
        self,
        kind: str,
        name: str,
        delete: Callable[[], object],
        issues: List[RuntimeIssue],
    ) -> DeletionStatus:
        try:
            delete()
        except ApiException as exc:
            if exc.status == 404:
                self.logger.info("%s %s not found in %s, nothing to delete", kind, name, self.namespace)
                return "absent"
            self.logger.error("Failed to delete %s %s: %s %s", kind, name, exc.status, exc.reason)
            issues.append(
                RuntimeIssue(
                    code=f"K8S_{kind.upper()}_DELETE_FAILED",
                    message=f"Failed to delete {kind} {name}: {exc.status} {exc.reason}",
                    kind=kind,
                    subject=name,
                    status=exc.status,
                    exception=exc,
                )
            )
            return "failed"
        except (HTTPError, OSError) as exc:
            # Transport failures carry no HTTP status.
            self.logger.error("Failed to delete %s %s: %s", kind, name, exc)
            issues.append(
                RuntimeIssue(
                    code=f"K8S_{kind.upper()}_DELETE_FAILED",
                    message=f"Failed to delete {kind} {name}: {exc}",
                    kind=kind,
                    subject=name,
                    exception=exc,
                )
            )
            return "failed"

        self.logger.info("%s %s deleted", kind, name)
        return "deleted"
