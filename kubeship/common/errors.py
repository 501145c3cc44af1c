"""Error taxonomy shared by the runtime helpers and the CLI."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from kubeship.runtime.teardown import TeardownResult


class KubeshipError(Exception):
    """Base class for errors raised by kubeship itself."""


class InvalidArgumentError(KubeshipError, ValueError):
    """Raised before any remote call when the caller supplied unusable input."""


class ResourceNotFoundError(KubeshipError, LookupError):
    """Raised when a required resource (e.g. a running pod) does not exist."""

    def __init__(self, kind: str, name: str, namespace: str) -> None:
        super().__init__(f"No {kind} found for '{name}' in namespace '{namespace}'")
        self.kind = kind
        self.name = name
        self.namespace = namespace


class PodWaitTimeoutError(KubeshipError, TimeoutError):
    """Raised when no running pod appears within the readiness timeout."""

    def __init__(self, name: str, timeout: float, last_error: Optional[BaseException] = None) -> None:
        message = f"No running pod for '{name}' after {timeout:.1f}s"
        if last_error is not None:
            message += f" (last lookup error: {last_error})"
        super().__init__(message)
        self.name = name
        self.timeout = timeout
        self.last_error = last_error


class WaitCancelledError(KubeshipError):
    """Raised when the readiness wait is interrupted through its stop event."""


class TeardownError(KubeshipError):
    """Raised when at least one resource could not be deleted."""

    def __init__(self, result: "TeardownResult") -> None:
        failures = "; ".join(issue.message for issue in result.issues if issue.is_error())
        super().__init__(f"Teardown of '{result.name}' incomplete: {failures}")
        self.result = result


class ClientConfigurationError(KubeshipError, RuntimeError):
    """Raised when no usable Kubernetes client configuration can be loaded."""
