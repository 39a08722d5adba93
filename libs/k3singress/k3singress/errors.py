"""
Exceptions raised by k3singress.

Configuration problems are detected before any cluster call. Everything that
goes wrong talking to the API server is a RemoteError that carries the
operation and the resource it was aimed at.
"""

from typing import Optional


class IngressError(Exception):
    """Base class for all k3singress errors."""


class ConfigurationError(IngressError):
    """The intent or the settings cannot produce an Ingress."""


class EmptyPortsError(ConfigurationError):
    def __init__(self, container_name: str):
        self.container_name = container_name
        super().__init__(f"empty ports for {container_name}, nothing to expose")


class InvalidPortError(ConfigurationError):
    def __init__(self, container_name: str, port: int):
        self.container_name = container_name
        self.port = port
        super().__init__(f"invalid port {port} for {container_name}, ports must be positive")


class MissingDomainError(ConfigurationError):
    def __init__(self, container_name: str):
        self.container_name = container_name
        super().__init__(
            f"no ingress domain for {container_name}: set ingress_host in the "
            "deploy request or configure a root domain"
        )


class ClientAcquisitionError(IngressError):
    """No usable client for the Kubernetes API could be created."""


class RemoteError(IngressError):
    """The API server rejected a request or could not be reached."""

    def __init__(
        self,
        operation: str,
        namespace: str,
        name: str,
        reason: str,
        status: Optional[int] = None,
    ):
        self.operation = operation
        self.namespace = namespace
        self.name = name
        self.reason = reason
        self.status = status
        status_info = f" (HTTP {status})" if status else ""
        super().__init__(f"{operation} ingress {namespace}/{name} failed{status_info}: {reason}")


class ApplyConflictError(RemoteError):
    """Server-side apply hit fields owned by another field manager."""


class IngressNotFoundError(RemoteError):
    """The Ingress does not exist."""
