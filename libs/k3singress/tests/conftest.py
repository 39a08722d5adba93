"""Shared fixtures for k3singress tests."""

import json
from typing import Any, Dict, Optional, Tuple

import pytest
from kubernetes.client import V1Ingress, V1ObjectMeta, V1Status
from kubernetes.client.rest import ApiException

from k3singress.config import IngressSettings
from k3singress.reconciler import IngressReconciler
from k3singress.types import ControllerFlavor, DeployIntent


def _flatten(body: Dict[str, Any]) -> Dict[str, str]:
    """Split an Ingress body into the fields server-side apply tracks."""
    metadata = body.get("metadata", {})
    fields: Dict[str, str] = {}
    for key, value in (metadata.get("annotations") or {}).items():
        fields[f"metadata.annotations.{key}"] = value
    for key, value in (metadata.get("labels") or {}).items():
        fields[f"metadata.labels.{key}"] = value
    if "spec" in body:
        fields["spec"] = json.dumps(body["spec"], sort_keys=True)
    return fields


class FakeNetworkingApi:
    """
    In-memory stand-in for NetworkingV1Api.

    Tracks which field manager owns each annotation, label and the spec, and
    rejects applies that would take over another manager's field with a
    different value unless force is set.
    """

    def __init__(self):
        self.objects: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.calls = []

    def seed(self, namespace: str, name: str, manager: str, body: Dict[str, Any]) -> None:
        fields = _flatten(body)
        self.objects[(namespace, name)] = {
            "fields": fields,
            "owners": {path: manager for path in fields},
            "version": 1,
        }

    def owner_of(self, namespace: str, name: str, path: str) -> Optional[str]:
        return self.objects[(namespace, name)]["owners"].get(path)

    def value_of(self, namespace: str, name: str, path: str) -> Optional[str]:
        return self.objects[(namespace, name)]["fields"].get(path)

    def patch_namespaced_ingress(
        self,
        name,
        namespace,
        body,
        field_manager=None,
        force=None,
        _content_type=None,
        _request_timeout=None,
    ):
        self.calls.append({
            "op": "apply",
            "name": name,
            "namespace": namespace,
            "body": body,
            "field_manager": field_manager,
            "force": force,
            "content_type": _content_type,
            "timeout": _request_timeout,
        })

        submitted = _flatten(body)
        stored = self.objects.setdefault(
            (namespace, name), {"fields": {}, "owners": {}, "version": 0}
        )

        conflicts = [
            path for path, value in submitted.items()
            if stored["owners"].get(path) not in (None, field_manager)
            and stored["fields"].get(path) != value
        ]
        if conflicts and not force:
            raise ApiException(status=409, reason=f"Apply failed with conflicts: {', '.join(conflicts)}")

        # Fields this manager applied before and no longer submits are removed.
        for path, owner in list(stored["owners"].items()):
            if owner == field_manager and path not in submitted:
                del stored["owners"][path]
                del stored["fields"][path]

        for path, value in submitted.items():
            stored["fields"][path] = value
            stored["owners"][path] = field_manager
        stored["version"] += 1

        return V1Ingress(
            api_version="networking.k8s.io/v1",
            kind="Ingress",
            metadata=V1ObjectMeta(
                name=name,
                namespace=namespace,
                resource_version=str(stored["version"]),
                annotations={
                    path.split(".", 2)[2]: value
                    for path, value in stored["fields"].items()
                    if path.startswith("metadata.annotations.")
                },
            ),
        )

    def delete_namespaced_ingress(self, name, namespace, _request_timeout=None):
        self.calls.append({
            "op": "delete",
            "name": name,
            "namespace": namespace,
            "timeout": _request_timeout,
        })
        if (namespace, name) not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        del self.objects[(namespace, name)]
        return V1Status(status="Success")


@pytest.fixture
def settings():
    return IngressSettings(
        root_domain="apps.example.com",
        field_manager="k3singress",
        force_on_conflicts=False,
        request_timeout=15.0,
    )


@pytest.fixture
def fake_api():
    return FakeNetworkingApi()


@pytest.fixture
def reconciler(settings, fake_api):
    return IngressReconciler(settings, api_factory=lambda _settings: fake_api)


@pytest.fixture
def web_intent():
    """Minimal NGINX intent without TLS."""
    return DeployIntent(
        namespace="shop",
        container_name="web",
        ports=[8080],
    )


@pytest.fixture
def full_intent():
    """NGINX intent using every policy flag."""
    return DeployIntent(
        namespace="shop",
        container_name="api",
        ports=[3000, 9090],
        ingress_name="store-api",
        tls=True,
        proxy_headers=True,
        allowed_headers=["X-Custom"],
        upload_limit="50m",
        labels={"app": "api", "team": "payments"},
        annotations={"nginx.ingress.kubernetes.io/rewrite-target": "/"},
        controller=ControllerFlavor.STANDARD,
    )
