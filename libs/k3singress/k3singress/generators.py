"""
Ingress manifest assembly.

Composes the resolved route, TLS block, labels and annotations into one
IngressManifest and renders it as YAML.
"""

from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from .types import IngressManifest, ResolvedRoute, TlsBinding


def generate_ingress(
    container_name: str,
    namespace: str,
    route: ResolvedRoute,
    annotations: Mapping[str, str],
    labels: Optional[Mapping[str, str]] = None,
    tls: Optional[TlsBinding] = None,
) -> IngressManifest:
    """
    Assemble an Ingress for a container.

    Args:
        container_name: Name of the Ingress and of the backend service
        namespace: Target namespace
        route: Host, path and backend of the single rule
        annotations: Final annotation set, copied verbatim
        labels: Labels for the Ingress metadata
        tls: TLS block or None

    Returns:
        IngressManifest
    """
    return IngressManifest(
        name=container_name,
        namespace=namespace,
        route=route,
        labels=dict(labels or {}),
        annotations=dict(annotations),
        tls=tls,
    )


def render_manifests(manifests: List[IngressManifest]) -> str:
    """Dump manifests as a multi-document YAML string."""
    return yaml.dump_all(
        [m.to_dict() for m in manifests],
        default_flow_style=False,
        sort_keys=False,
    )


def write_manifests(manifests: List[IngressManifest], output_file: str) -> Path:
    """Write manifests to output_file, creating parent directories."""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_manifests(manifests))
    return output_path


def manifest_summary(manifest: IngressManifest) -> Dict[str, str]:
    """Short description of an Ingress for CLI output."""
    return {
        "name": manifest.name,
        "namespace": manifest.namespace,
        "host": manifest.route.host,
        "backend": f"{manifest.route.backend_name}:{manifest.route.backend_port}",
        "tls": manifest.tls.secret_name if manifest.tls else "(none)",
    }
