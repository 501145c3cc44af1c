"""Blocking wait for a running pod of a freshly reconciled Deployment."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from kubeship.common.errors import PodWaitTimeoutError, WaitCancelledError

from .manifests import app_selector
from .pods import find_running_pod


def is_transient_lookup_error(exc: BaseException) -> bool:
    """True for failures worth retrying: 5xx, 429 and transport errors."""
    if isinstance(exc, ApiException):
        return exc.status is None or exc.status == 429 or exc.status >= 500
    return isinstance(exc, (HTTPError, OSError))


class ReadinessPoller:
    """Poll for a running pod with a fixed interval and an optional bound."""

    def __init__(
        self,
        *,
        core_api: client.CoreV1Api,
        namespace: str,
        poll_interval: float = 1.0,
        default_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.core_api = core_api
        self.namespace = namespace
        self.poll_interval = poll_interval
        self.default_timeout = default_timeout
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._sleep = sleep

    def wait_for_running_pod(
        self,
        name: str,
        *,
        timeout: Optional[float] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> client.V1Pod:
        """
        Block until a pod labelled ``app=<name>`` has a running container.

        Without a timeout (argument or configured default) the wait is unbounded.
        Transient lookup failures (5xx, 429, connection errors) are logged and
        retried; they are never mistaken for "no pod yet". Any other API error,
        such as 403 Forbidden, is raised at once.

        Args:
            name: App name used in the label selector.
            timeout: Seconds to wait before giving up; overrides the default.
            stop_event: When set by another thread, the wait is abandoned.

        Returns:
            The running pod.

        Raises:
            PodWaitTimeoutError: When the timeout elapses.
            WaitCancelledError: When ``stop_event`` is set.
            ApiException: When the lookup fails with a non-transient status.
        """
        timeout = timeout if timeout is not None else self.default_timeout
        deadline = self._clock() + timeout if timeout is not None else None
        last_error: Optional[Exception] = None
        lookup_failures = 0

        self.logger.info("Waiting for running pod (%s)", app_selector(name))
        while True:
            if stop_event is not None and stop_event.is_set():
                raise WaitCancelledError(f"Wait for running pod '{name}' was cancelled")

            try:
                pod = find_running_pod(self.core_api, self.namespace, name)
            except (ApiException, HTTPError, OSError) as exc:
                if not is_transient_lookup_error(exc):
                    self.logger.error("Pod lookup for %s failed permanently: %s", name, exc)
                    raise
                lookup_failures += 1
                last_error = exc
                self.logger.warning(
                    "Pod lookup for %s failed (status=%s, failure #%d): %s",
                    name,
                    getattr(exc, "status", None),
                    lookup_failures,
                    getattr(exc, "reason", None) or exc,
                )
            else:
                if pod is not None:
                    self.logger.info("Pod %s is running", pod.metadata.name)
                    return pod
                self.logger.info("Pod for %s is not running yet...", name)

            delay = self.poll_interval
            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise PodWaitTimeoutError(name, timeout, last_error)
                # Never sleep past the deadline.
                delay = min(delay, remaining)

            if stop_event is not None:
                if stop_event.wait(delay):
                    raise WaitCancelledError(f"Wait for running pod '{name}' was cancelled")
            else:
                self._sleep(delay)
