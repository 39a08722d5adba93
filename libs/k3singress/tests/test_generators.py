"""Tests for Ingress manifest assembly."""

import pytest
import yaml

from k3singress.generators import (
    generate_ingress,
    manifest_summary,
    render_manifests,
    write_manifests,
)
from k3singress.types import ResolvedRoute, TlsBinding


@pytest.fixture
def route():
    return ResolvedRoute(host="web.shop.example.com", backend_name="web", backend_port=8080)


@pytest.fixture
def tls():
    return TlsBinding(hosts=["web.shop.example.com"], secret_name="web-tls")


class TestGenerateIngress:
    def test_simple_ingress(self, route):
        annotations = {"kubernetes.io/ingress.class": "nginx"}
        manifest = generate_ingress(
            container_name="web",
            namespace="shop",
            route=route,
            annotations=annotations,
        )

        assert manifest.name == "web"
        assert manifest.namespace == "shop"
        assert manifest.route is route
        assert manifest.labels == {}
        assert manifest.annotations == annotations
        assert manifest.tls is None

    def test_ingress_with_tls_and_labels(self, route, tls):
        manifest = generate_ingress(
            container_name="web",
            namespace="shop",
            route=route,
            annotations={},
            labels={"app": "web"},
            tls=tls,
        )
        data = manifest.to_dict()
        assert data["metadata"]["labels"] == {"app": "web"}
        assert data["spec"]["tls"][0]["secretName"] == "web-tls"

    def test_copies_inputs(self, route):
        labels = {"app": "web"}
        annotations = {"custom": "value"}
        manifest = generate_ingress(
            container_name="web",
            namespace="shop",
            route=route,
            annotations=annotations,
            labels=labels,
        )

        labels["app"] = "changed"
        annotations["custom"] = "changed"

        assert manifest.labels == {"app": "web"}
        assert manifest.annotations == {"custom": "value"}

    def test_annotations_preserved_exactly(self, route):
        annotations = {
            "nginx.ingress.kubernetes.io/cors-allow-headers": "X-Custom, X-Real-IP",
            "nginx.ingress.kubernetes.io/proxy-body-size": "0",
        }
        manifest = generate_ingress("web", "shop", route, annotations)
        assert manifest.to_dict()["metadata"]["annotations"] == annotations


class TestRenderManifests:
    def test_render_yaml(self, route, tls):
        manifests = [
            generate_ingress("web", "shop", route, {"a": "1"}, tls=tls),
            generate_ingress("api", "shop", route, {"b": "2"}),
        ]
        documents = list(yaml.safe_load_all(render_manifests(manifests)))

        assert len(documents) == 2
        assert documents[0]["metadata"]["name"] == "web"
        assert documents[0]["spec"]["tls"][0]["hosts"] == ["web.shop.example.com"]
        assert documents[1]["metadata"]["name"] == "api"
        assert "tls" not in documents[1]["spec"]

    def test_write_manifests(self, route, tmp_path):
        output = tmp_path / "out" / "ingress.yaml"
        path = write_manifests([generate_ingress("web", "shop", route, {})], str(output))

        assert path == output
        document = yaml.safe_load(output.read_text())
        assert document["kind"] == "Ingress"


class TestManifestSummary:
    def test_summary(self, route, tls):
        manifest = generate_ingress("web", "shop", route, {}, tls=tls)
        assert manifest_summary(manifest) == {
            "name": "web",
            "namespace": "shop",
            "host": "web.shop.example.com",
            "backend": "web:8080",
            "tls": "web-tls",
        }

    def test_summary_without_tls(self, route):
        manifest = generate_ingress("web", "shop", route, {})
        assert manifest_summary(manifest)["tls"] == "(none)"
