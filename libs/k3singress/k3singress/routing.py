"""
Host, path and TLS resolution for an Ingress.
"""

from typing import List, Optional

from .errors import EmptyPortsError, InvalidPortError, MissingDomainError
from .types import DeployIntent, PathType, ResolvedRoute, TlsBinding


def resolve_host(
    container_name: str,
    namespace: str,
    ingress_name: Optional[str] = None,
    ingress_host: Optional[str] = None,
    root_domain: Optional[str] = None,
) -> str:
    """
    Derive the externally routable host.

    The routing root is ingress_host when given, otherwise root_domain.
    With an ingress name the host is ``name.root``; without one it is
    ``container.namespace.root`` so equal container names in different
    namespaces never collide.

    Raises:
        MissingDomainError: If neither ingress_host nor root_domain is set
    """
    if ingress_host:
        root = ingress_host
    elif root_domain:
        root = root_domain
    else:
        raise MissingDomainError(container_name)

    if ingress_name:
        return f"{ingress_name}.{root}"
    return f"{container_name}.{namespace}.{root}"


def _check_ports(container_name: str, ports: List[int]) -> None:
    if not ports:
        raise EmptyPortsError(container_name)
    for port in ports:
        if port <= 0:
            raise InvalidPortError(container_name, port)


def resolve_route(intent: DeployIntent, root_domain: Optional[str] = None) -> ResolvedRoute:
    """
    Resolve the single rule of the Ingress.

    Only the first port is routed, additional ports are ignored.
    """
    _check_ports(intent.container_name, intent.ports)

    host = resolve_host(
        container_name=intent.container_name,
        namespace=intent.namespace,
        ingress_name=intent.ingress_name,
        ingress_host=intent.ingress_host,
        root_domain=root_domain,
    )

    return ResolvedRoute(
        host=host,
        backend_name=intent.container_name,
        backend_port=intent.ports[0],
        path="/",
        path_type=PathType.IMPLEMENTATION_SPECIFIC,
    )


def tls_secret_name(container_name: str) -> str:
    return f"{container_name}-tls"


def build_tls(host: str, container_name: str, enabled: bool) -> Optional[TlsBinding]:
    """Return the TLS block for host, or None when TLS is off."""
    if not enabled:
        return None
    return TlsBinding(hosts=[host], secret_name=tls_secret_name(container_name))
