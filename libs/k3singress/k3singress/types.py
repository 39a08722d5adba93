"""
Type definitions for k3singress.

These dataclasses describe a deployment intent and the values derived from it
on the way to a networking.k8s.io/v1 Ingress object.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def parse_bool(name: str, value: Any) -> bool:
    """Parse a YAML or environment flag; quoted strings like "false" are accepted."""
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name}: expected a boolean, got {value!r}")


def _parse_headers(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigurationError(f"allowed_headers must be a list, got {value!r}")
    return [str(header) for header in value]


class ControllerFlavor(str, Enum):
    """Ingress controller whose annotation dialect is generated."""
    STANDARD = "nginx"
    ALTERNATIVE = "traefik"


class PathType(str, Enum):
    """Ingress path matching type."""
    IMPLEMENTATION_SPECIFIC = "ImplementationSpecific"


@dataclass
class DeployIntent:
    """What the orchestrator wants exposed for one container."""
    namespace: str
    container_name: str
    ports: List[int] = field(default_factory=list)
    ingress_name: Optional[str] = None
    ingress_host: Optional[str] = None
    tls: bool = False
    proxy_headers: bool = False
    allowed_headers: List[str] = field(default_factory=list)
    upload_limit: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    controller: ControllerFlavor = ControllerFlavor.STANDARD

    @classmethod
    def from_dict(cls, data: Dict) -> "DeployIntent":
        missing = [key for key in ("namespace", "container_name") if not data.get(key)]
        if missing:
            raise ConfigurationError(f"deploy intent is missing: {', '.join(missing)}")

        controller = data.get("controller") or ControllerFlavor.STANDARD.value
        try:
            flavor = ControllerFlavor(controller)
        except ValueError:
            choices = ", ".join(f.value for f in ControllerFlavor)
            raise ConfigurationError(f"unknown controller '{controller}', expected one of: {choices}")

        try:
            ports = [int(p) for p in data.get("ports") or []]
        except (TypeError, ValueError):
            raise ConfigurationError(f"ports must be integers, got {data.get('ports')!r}")

        return cls(
            namespace=data["namespace"],
            container_name=data["container_name"],
            ports=ports,
            ingress_name=data.get("ingress_name"),
            ingress_host=data.get("ingress_host"),
            tls=parse_bool("tls", data.get("tls", False)),
            proxy_headers=parse_bool("proxy_headers", data.get("proxy_headers", False)),
            allowed_headers=_parse_headers(data.get("allowed_headers")),
            upload_limit=data.get("upload_limit"),
            labels={str(k): str(v) for k, v in (data.get("labels") or {}).items()},
            annotations={str(k): str(v) for k, v in (data.get("annotations") or {}).items()},
            controller=flavor,
        )


@dataclass(frozen=True)
class ResolvedRoute:
    """Host, path and backend an Ingress rule points at."""
    host: str
    backend_name: str
    backend_port: int
    path: str = "/"
    path_type: PathType = PathType.IMPLEMENTATION_SPECIFIC


@dataclass(frozen=True)
class TlsBinding:
    """TLS block of an Ingress; the secret is filled in by cert-manager."""
    hosts: List[str]
    secret_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hosts": list(self.hosts),
            "secretName": self.secret_name,
        }


@dataclass(frozen=True)
class IngressManifest:
    """
    A fully assembled Ingress.

    Built fresh for every deployment and handed to the reconciler as is.
    """
    name: str
    namespace: str
    route: ResolvedRoute
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    tls: Optional[TlsBinding] = None

    api_version = "networking.k8s.io/v1"
    kind = "Ingress"

    def to_dict(self) -> Dict[str, Any]:
        """Render the Kubernetes object submitted to the API server."""
        spec: Dict[str, Any] = {
            "rules": [
                {
                    "host": self.route.host,
                    "http": {
                        "paths": [
                            {
                                "path": self.route.path,
                                "pathType": self.route.path_type.value,
                                "backend": {
                                    "service": {
                                        "name": self.route.backend_name,
                                        "port": {"number": self.route.backend_port},
                                    },
                                },
                            }
                        ],
                    },
                }
            ],
        }

        if self.tls:
            spec["tls"] = [self.tls.to_dict()]

        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": dict(self.labels),
                "annotations": dict(self.annotations),
            },
            "spec": spec,
        }


@dataclass
class ApplyOutcome:
    """State of the Ingress as accepted by the API server."""
    name: str
    namespace: str
    resource_version: Optional[str]
    ingress: Any = None
    manifest: Optional[IngressManifest] = None
