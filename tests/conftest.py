"""In-memory stand-ins for the Kubernetes API groups used by kubeship."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Tuple

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

NAMESPACE = "default"


def make_pod(
    name: str,
    *,
    app: str = "web",
    running: bool = True,
    namespace: str = NAMESPACE,
    with_status: bool = True,
) -> client.V1Pod:
    """Helper to create a pod whose first container is running or waiting."""
    state = (
        client.V1ContainerState(running=client.V1ContainerStateRunning())
        if running
        else client.V1ContainerState(waiting=client.V1ContainerStateWaiting(reason="ContainerCreating"))
    )
    statuses = [
        client.V1ContainerStatus(
            name=app,
            image="nginx",
            image_id="",
            ready=running,
            restart_count=0,
            state=state,
        )
    ]
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels={"app": app}),
        spec=client.V1PodSpec(containers=[client.V1Container(name=app, image="nginx")]),
        status=client.V1PodStatus(
            phase="Running" if running else "Pending",
            container_statuses=statuses if with_status else None,
        ),
    )


class FakeLogResponse:
    """Mimics the urllib3 response returned with ``_preload_content=False``."""

    def __init__(self, chunks: List[bytes], error: Optional[Exception] = None) -> None:
        self.chunks = chunks
        self.error = error
        self.closed = False
        self.released = False

    def stream(self, amt: int) -> Iterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self) -> None:
        self.closed = True

    def release_conn(self) -> None:
        self.released = True


class FakeCluster:
    """Namespace-scoped object store recording every API call."""

    def __init__(self) -> None:
        self.objects: Dict[Tuple[str, str, str], Any] = {}
        self.calls: List[Tuple[str, str]] = []
        self.failures: Dict[str, Exception] = {}
        self.pod_lists: List[Any] = [[]]
        self.log_response = FakeLogResponse([b"hello\n"])
        self.log_kwargs: Dict[str, Any] = {}

    def record(self, method: str, name: str = "") -> None:
        self.calls.append((method, name))
        if method in self.failures:
            raise self.failures[method]

    def get(self, kind: str, namespace: str, name: str) -> Any:
        try:
            return self.objects[(kind, namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason="Not Found") from None

    def put(self, kind: str, namespace: str, name: str, body: Any) -> Any:
        self.objects[(kind, namespace, name)] = body
        return body

    def pop(self, kind: str, namespace: str, name: str) -> None:
        if self.objects.pop((kind, namespace, name), None) is None:
            raise ApiException(status=404, reason="Not Found")

    def next_pod_list(self) -> List[client.V1Pod]:
        entry = self.pod_lists.pop(0) if len(self.pod_lists) > 1 else self.pod_lists[0]
        if isinstance(entry, Exception):
            raise entry
        return entry

    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]


class FakeAppsApi:
    def __init__(self, cluster: FakeCluster) -> None:
        self.cluster = cluster

    def read_namespaced_deployment(self, name: str, namespace: str) -> Any:
        self.cluster.record("read_namespaced_deployment", name)
        return self.cluster.get("Deployment", namespace, name)

    def create_namespaced_deployment(self, namespace: str, body: Any) -> Any:
        self.cluster.record("create_namespaced_deployment", body.metadata.name)
        return self.cluster.put("Deployment", namespace, body.metadata.name, body)

    def replace_namespaced_deployment(self, name: str, namespace: str, body: Any) -> Any:
        self.cluster.record("replace_namespaced_deployment", name)
        self.cluster.get("Deployment", namespace, name)
        return self.cluster.put("Deployment", namespace, name, body)

    def delete_namespaced_deployment(self, name: str, namespace: str, body: Any = None) -> None:
        self.cluster.record("delete_namespaced_deployment", name)
        self.cluster.pop("Deployment", namespace, name)


class FakeCoreApi:
    def __init__(self, cluster: FakeCluster) -> None:
        self.cluster = cluster

    def read_namespaced_service(self, name: str, namespace: str) -> Any:
        self.cluster.record("read_namespaced_service", name)
        return self.cluster.get("Service", namespace, name)

    def create_namespaced_service(self, namespace: str, body: Any) -> Any:
        self.cluster.record("create_namespaced_service", body.metadata.name)
        return self.cluster.put("Service", namespace, body.metadata.name, body)

    def delete_namespaced_service(self, name: str, namespace: str) -> None:
        self.cluster.record("delete_namespaced_service", name)
        self.cluster.pop("Service", namespace, name)

    def list_namespaced_pod(self, namespace: str, label_selector: str) -> client.V1PodList:
        self.cluster.record("list_namespaced_pod", label_selector)
        return client.V1PodList(items=self.cluster.next_pod_list())

    def read_namespaced_pod_log(self, name: str, namespace: str, **kwargs: Any) -> FakeLogResponse:
        self.cluster.record("read_namespaced_pod_log", name)
        self.cluster.log_kwargs = kwargs
        return self.cluster.log_response


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def core_api(cluster: FakeCluster) -> FakeCoreApi:
    return FakeCoreApi(cluster)


@pytest.fixture
def apps_api(cluster: FakeCluster) -> FakeAppsApi:
    return FakeAppsApi(cluster)
