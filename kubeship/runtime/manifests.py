"""Deterministic Deployment and Service objects derived from a RuntimeSpec."""

from __future__ import annotations

from typing import Any, Dict, List

from kubernetes import client

from kubeship.common.models import RuntimeSpec

APP_LABEL = "app"


def app_labels(name: str) -> Dict[str, str]:
    return {APP_LABEL: name}


def app_selector(name: str) -> str:
    """Label selector string matching every pod of the named app."""
    return f"{APP_LABEL}={name}"


def build_deployment(name: str, image: str, spec: RuntimeSpec, namespace: str) -> client.V1Deployment:
    """Build a single-container Deployment selecting pods by ``app=<name>``."""
    container = client.V1Container(
        name=name,
        image=image,
        ports=[client.V1ContainerPort(container_port=port) for port in spec.ports] or None,
    )

    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=app_labels(name)),
        spec=client.V1DeploymentSpec(
            replicas=spec.replicas,
            selector=client.V1LabelSelector(match_labels=app_labels(name)),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=app_labels(name)),
                spec=client.V1PodSpec(containers=[container]),
            ),
        ),
    )


def build_service(name: str, spec: RuntimeSpec, namespace: str) -> client.V1Service:
    """
    Build a Service exposing every port of the spec.

    Ports are named by their ordinal index. The Service is a LoadBalancer when
    the spec asks for a public address and ClusterIP otherwise.

    Raises:
        ValueError: When the spec declares no ports.
    """
    if not spec.ports:
        raise ValueError(f"Service for '{name}' requires at least one port")

    ports: List[client.V1ServicePort] = [
        client.V1ServicePort(name=str(index), port=port, target_port=port, protocol="TCP")
        for index, port in enumerate(spec.ports)
    ]

    return client.V1Service(
        api_version="v1",
        kind="Service",
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=app_labels(name)),
        spec=client.V1ServiceSpec(
            type="LoadBalancer" if spec.public_address else "ClusterIP",
            selector=app_labels(name),
            ports=ports,
        ),
    )


def to_manifest(resource: Any) -> Dict[str, Any]:
    """Serialize a kubernetes model object to a plain camelCase dict."""
    return client.ApiClient().sanitize_for_serialization(resource)


def render_manifests(name: str, image: str, spec: RuntimeSpec, namespace: str) -> Dict[str, Dict[str, Any]]:
    """Plain-dict manifests for the Deployment and, when ports exist, the Service."""
    manifests = {"deployment": to_manifest(build_deployment(name, image, spec, namespace))}
    if spec.ports:
        manifests["service"] = to_manifest(build_service(name, spec, namespace))
    return manifests
