"""
Controller-specific Ingress annotations.

Each controller flavor has its own strategy translating the policy flags of a
DeployIntent into the annotation dialect its controller understands. User
annotations from the intent are overlaid last and always win.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from .types import ControllerFlavor, DeployIntent

DEFAULT_CLUSTER_ISSUER = "letsencrypt-prod"

INGRESS_CLASS = "kubernetes.io/ingress.class"
TLS_ACME = "kubernetes.io/tls-acme"
CLUSTER_ISSUER = "cert-manager.io/cluster-issuer"

NGINX_ENABLE_CORS = "nginx.ingress.kubernetes.io/enable-cors"
NGINX_CORS_ALLOW_HEADERS = "nginx.ingress.kubernetes.io/cors-allow-headers"
NGINX_PROXY_BUFFERING = "nginx.ingress.kubernetes.io/proxy-buffering"
NGINX_PROXY_BUFFER_SIZE = "nginx.ingress.kubernetes.io/proxy-buffer-size"
NGINX_PROXY_BODY_SIZE = "nginx.ingress.kubernetes.io/proxy-body-size"

TRAEFIK_ENTRYPOINTS = "traefik.ingress.kubernetes.io/router.entrypoints"
TRAEFIK_ROUTER_TLS = "traefik.ingress.kubernetes.io/router.tls"
HTTP01_INGRESS_CLASS = "acme.cert-manager.io/http01-ingress-class"

PROXY_HEADERS = [
    "X-Forwarded-For",
    "X-Forwarded-Host",
    "X-Forwarded-Server",
    "X-Real-IP",
    "X-Requested-With",
]
PROXY_BUFFER_SIZE = "256k"


@dataclass(frozen=True)
class PolicyDefaults:
    """Configured values a strategy needs besides the intent itself."""
    ingress_class: str
    cluster_issuer: str = DEFAULT_CLUSTER_ISSUER


class AnnotationStrategy(ABC):
    """Builds the annotation set for one ingress controller."""

    flavor: ControllerFlavor

    @abstractmethod
    def build(self, intent: DeployIntent, defaults: PolicyDefaults) -> Dict[str, str]:
        """Return a new annotation mapping for intent."""


class NginxAnnotations(AnnotationStrategy):
    """
    NGINX ingress controller dialect.

    Supports TLS through cert-manager, CORS allowed headers, proxy buffering
    and the request body size limit.
    """

    flavor = ControllerFlavor.STANDARD

    def build(self, intent: DeployIntent, defaults: PolicyDefaults) -> Dict[str, str]:
        annotations: Dict[str, str] = {
            INGRESS_CLASS: defaults.ingress_class,
        }

        if intent.tls:
            annotations[TLS_ACME] = "true"
            annotations[CLUSTER_ISSUER] = defaults.cluster_issuer

        headers: List[str] = list(intent.allowed_headers)

        if intent.proxy_headers:
            headers.extend(PROXY_HEADERS)
            annotations[NGINX_ENABLE_CORS] = "true"
            annotations[NGINX_PROXY_BUFFERING] = "on"
            annotations[NGINX_PROXY_BUFFER_SIZE] = PROXY_BUFFER_SIZE

        if headers:
            annotations[NGINX_CORS_ALLOW_HEADERS] = ", ".join(headers)

        if intent.upload_limit:
            annotations[NGINX_PROXY_BODY_SIZE] = intent.upload_limit

        return annotations


class TraefikAnnotations(AnnotationStrategy):
    """
    Traefik dialect.

    Only entrypoints and TLS are handled; header, CORS, buffering and body
    size flags of the intent have no effect here.
    """

    flavor = ControllerFlavor.ALTERNATIVE

    def build(self, intent: DeployIntent, defaults: PolicyDefaults) -> Dict[str, str]:
        annotations: Dict[str, str] = {
            INGRESS_CLASS: defaults.ingress_class,
        }

        if intent.tls:
            annotations[TRAEFIK_ENTRYPOINTS] = "web,websecure"
            annotations[HTTP01_INGRESS_CLASS] = defaults.ingress_class
            annotations[TRAEFIK_ROUTER_TLS] = "true"
            annotations[TLS_ACME] = "true"
            annotations[CLUSTER_ISSUER] = defaults.cluster_issuer
        else:
            annotations[TRAEFIK_ENTRYPOINTS] = "web"

        return annotations


_STRATEGIES: Dict[ControllerFlavor, AnnotationStrategy] = {}


def register_strategy(strategy: AnnotationStrategy, flavor: Optional[ControllerFlavor] = None) -> None:
    """Register the strategy used for a flavor, replacing any previous one."""
    _STRATEGIES[flavor or strategy.flavor] = strategy


def get_strategy(flavor: ControllerFlavor) -> AnnotationStrategy:
    try:
        return _STRATEGIES[flavor]
    except KeyError:
        raise ValueError(f"No annotation strategy registered for controller '{flavor.value}'")


register_strategy(NginxAnnotations())
register_strategy(TraefikAnnotations())


def merge_annotations(
    generated: Mapping[str, str],
    overrides: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Overlay overrides onto generated; keys present in both take the override."""
    merged = dict(generated)
    if overrides:
        merged.update(overrides)
    return merged


def build_annotations(intent: DeployIntent, defaults: PolicyDefaults) -> Dict[str, str]:
    """
    Build the final annotation set of an Ingress.

    Args:
        intent: Deployment intent
        defaults: Ingress class and cluster issuer for the intent's controller

    Returns:
        Generated annotations with intent.annotations applied on top
    """
    strategy = get_strategy(intent.controller)
    return merge_annotations(strategy.build(intent, defaults), intent.annotations)
