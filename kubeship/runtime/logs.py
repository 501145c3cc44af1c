"""Follow-mode log streaming from the running pod of an app."""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from kubernetes import client

from kubeship.common.errors import ResourceNotFoundError

from .pods import find_running_pod

DEFAULT_CHUNK_SIZE = 4096


class LogStreamer:
    """Copy a pod's log stream into a caller-supplied binary sink."""

    def __init__(
        self,
        *,
        core_api: client.CoreV1Api,
        namespace: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.core_api = core_api
        self.namespace = namespace
        self.chunk_size = chunk_size
        self.logger = logger or logging.getLogger(__name__)

    def stream_logs(self, name: str, sink: BinaryIO) -> int:
        """
        Follow the logs of the first container of the running pod for ``name``.

        Blocks until the stream ends (pod terminated) or fails.

        Returns:
            Number of bytes written to ``sink``.

        Raises:
            ResourceNotFoundError: When no running pod exists; no stream is opened.
            kubernetes.client.rest.ApiException: When the API server refuses the stream.
        """
        pod = find_running_pod(self.core_api, self.namespace, name)
        if pod is None:
            raise ResourceNotFoundError("running pod", name, self.namespace)

        pod_name = pod.metadata.name
        container = pod.spec.containers[0].name if pod.spec and pod.spec.containers else None
        self.logger.info("Streaming logs from pod %s (container=%s)", pod_name, container)

        response = self.core_api.read_namespaced_pod_log(
            name=pod_name,
            namespace=pod.metadata.namespace or self.namespace,
            container=container,
            follow=True,
            _preload_content=False,
        )

        copied = 0
        try:
            for chunk in response.stream(self.chunk_size):
                sink.write(chunk)
                copied += len(chunk)
            sink.flush()
        finally:
            response.close()
            response.release_conn()

        self.logger.info("Log stream for pod %s ended after %d bytes", pod_name, copied)
        return copied
