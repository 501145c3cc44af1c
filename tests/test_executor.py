"""Scenario tests for the run / logs / cancel facade."""

from __future__ import annotations

import io

import pytest
from kubernetes.client.rest import ApiException
from urllib3.exceptions import ProtocolError

from kubeship.common.config import ExecutorConfig
from kubeship.common.errors import InvalidArgumentError, ResourceNotFoundError, TeardownError
from kubeship.common.models import RuntimeSpec
from kubeship.runtime import KubernetesExecutor

from conftest import NAMESPACE, make_pod


def make_executor(core_api, apps_api) -> KubernetesExecutor:
    config = ExecutorConfig(namespace=NAMESPACE, poll_interval=0.01, wait_timeout=None)
    return KubernetesExecutor(core_api=core_api, apps_api=apps_api, config=config)


def test_public_web_scenario(cluster, core_api, apps_api) -> None:
    cluster.pod_lists = [[make_pod("web-abc")]]
    spec = RuntimeSpec(image="nginx", name="web", replicas=2, ports=[80], public_address=True)
    stdout = io.BytesIO()

    result = make_executor(core_api, apps_api).run("nginx", "web", spec, stdout)

    assert (result.deployment, result.service) == ("created", "created")
    deployment = cluster.objects[("Deployment", NAMESPACE, "web")]
    service = cluster.objects[("Service", NAMESPACE, "web")]
    assert deployment.spec.replicas == 2
    assert service.spec.type == "LoadBalancer"
    assert service.spec.selector == {"app": "web"}
    assert [port.port for port in service.spec.ports] == [80]
    assert stdout.getvalue() == b"web: pod web-abc running\n"


def test_run_without_ports_never_touches_services(cluster, core_api, apps_api) -> None:
    cluster.pod_lists = [[make_pod("worker-1", app="worker")]]

    make_executor(core_api, apps_api).run("busybox", "worker", RuntimeSpec(replicas=1))

    assert not [method for method in cluster.methods() if "service" in method]


def test_second_run_replaces_deployment(cluster, core_api, apps_api) -> None:
    cluster.pod_lists = [[make_pod("web-abc")]]
    executor = make_executor(core_api, apps_api)

    executor.run("nginx:1.26", "web", RuntimeSpec(replicas=1, ports=[80]))
    result = executor.run("nginx:1.27", "web", RuntimeSpec(replicas=4, ports=[80]))

    assert result.deployment == "replaced"
    stored = cluster.objects[("Deployment", NAMESPACE, "web")]
    assert stored.spec.replicas == 4
    assert stored.spec.template.spec.containers[0].image == "nginx:1.27"


def test_zero_replicas_skips_readiness_wait(cluster, core_api, apps_api) -> None:
    make_executor(core_api, apps_api).run("nginx", "web", RuntimeSpec(replicas=0))

    assert "list_namespaced_pod" not in cluster.methods()
    assert cluster.objects[("Deployment", NAMESPACE, "web")].spec.replicas == 0


@pytest.mark.parametrize(
    "image, name, spec",
    [
        ("", "web", RuntimeSpec()),
        ("nginx", "  ", RuntimeSpec()),
        ("nginx", "web", None),
    ],
)
def test_run_validates_before_any_remote_call(cluster, core_api, apps_api, image, name, spec) -> None:
    with pytest.raises(InvalidArgumentError):
        make_executor(core_api, apps_api).run(image, name, spec)

    assert cluster.calls == []


def test_logs_without_running_pod(cluster, core_api, apps_api) -> None:
    with pytest.raises(ResourceNotFoundError):
        make_executor(core_api, apps_api).logs("web", io.BytesIO())

    assert "read_namespaced_pod_log" not in cluster.methods()


def test_logs_streams_to_stdout(cluster, core_api, apps_api) -> None:
    cluster.pod_lists = [[make_pod("web-abc")]]
    stdout = io.BytesIO()

    copied = make_executor(core_api, apps_api).logs("web", stdout)

    assert stdout.getvalue() == b"hello\n"
    assert copied == 6


def test_cancel_is_idempotent(cluster, core_api, apps_api) -> None:
    cluster.pod_lists = [[make_pod("web-abc")]]
    executor = make_executor(core_api, apps_api)
    executor.run("nginx", "web", RuntimeSpec(replicas=2, ports=[80], public_address=True))

    first = executor.cancel("web")
    second = executor.cancel("web")

    assert (first.service, first.deployment) == ("deleted", "deleted")
    assert (second.service, second.deployment) == ("absent", "absent")
    assert cluster.objects == {}


def test_cancel_on_unknown_name_succeeds(cluster, core_api, apps_api) -> None:
    result = make_executor(core_api, apps_api).cancel("never-deployed")

    assert result.success


def test_cancel_reports_partial_failure(cluster, core_api, apps_api) -> None:
    cluster.failures["delete_namespaced_deployment"] = ApiException(status=409, reason="Conflict")

    with pytest.raises(TeardownError) as excinfo:
        make_executor(core_api, apps_api).cancel("web")

    result = excinfo.value.result
    assert result.service == "absent"
    assert result.deployment == "failed"
    assert cluster.methods() == ["delete_namespaced_service", "delete_namespaced_deployment"]


def test_cancel_chains_transport_failure(cluster, core_api, apps_api) -> None:
    reset = ProtocolError("Connection aborted.", ConnectionResetError(104, "reset by peer"))
    cluster.failures["delete_namespaced_deployment"] = reset

    with pytest.raises(TeardownError) as excinfo:
        make_executor(core_api, apps_api).cancel("web")

    assert excinfo.value.__cause__ is reset
    assert excinfo.value.result.deployment == "failed"


def test_cancel_requires_name(cluster, core_api, apps_api) -> None:
    with pytest.raises(InvalidArgumentError):
        make_executor(core_api, apps_api).cancel("")

    assert cluster.calls == []


def test_render_does_not_call_cluster(cluster, core_api, apps_api) -> None:
    manifests = make_executor(core_api, apps_api).render("nginx", "web", RuntimeSpec(ports=[80]))

    assert set(manifests) == {"deployment", "service"}
    assert cluster.calls == []
