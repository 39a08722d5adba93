"""
k3singress - Ingress manifest synthesis and server-side apply reconciliation.

Turns a deploy intent into a networking.k8s.io/v1 Ingress for the NGINX or
Traefik ingress controller and applies it to the cluster.
"""

__version__ = "0.1.0"

from .types import (
    ApplyOutcome,
    ControllerFlavor,
    DeployIntent,
    IngressManifest,
    PathType,
    ResolvedRoute,
    TlsBinding,
)

from .errors import (
    ApplyConflictError,
    ClientAcquisitionError,
    ConfigurationError,
    EmptyPortsError,
    IngressError,
    IngressNotFoundError,
    InvalidPortError,
    MissingDomainError,
    RemoteError,
)

from .config import IngressSettings, load_settings

from .routing import build_tls, resolve_host, resolve_route

from .annotations import (
    AnnotationStrategy,
    NginxAnnotations,
    PolicyDefaults,
    TraefikAnnotations,
    build_annotations,
    get_strategy,
    merge_annotations,
    register_strategy,
)

from .generators import generate_ingress, render_manifests

from .reconciler import IngressReconciler, load_networking_api

from .deployer import IngressDeployer

__all__ = [
    # Types
    "ApplyOutcome",
    "ControllerFlavor",
    "DeployIntent",
    "IngressManifest",
    "PathType",
    "ResolvedRoute",
    "TlsBinding",
    # Errors
    "ApplyConflictError",
    "ClientAcquisitionError",
    "ConfigurationError",
    "EmptyPortsError",
    "IngressError",
    "IngressNotFoundError",
    "InvalidPortError",
    "MissingDomainError",
    "RemoteError",
    # Config
    "IngressSettings",
    "load_settings",
    # Routing
    "build_tls",
    "resolve_host",
    "resolve_route",
    # Annotations
    "AnnotationStrategy",
    "NginxAnnotations",
    "PolicyDefaults",
    "TraefikAnnotations",
    "build_annotations",
    "get_strategy",
    "merge_annotations",
    "register_strategy",
    # Generators
    "generate_ingress",
    "render_manifests",
    # Reconciliation
    "IngressReconciler",
    "load_networking_api",
    "IngressDeployer",
]
