"""
Process-wide settings for k3singress.

Values come from K3SINGRESS_* environment variables and can be overridden
from the ingress section of a YAML config file.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .annotations import DEFAULT_CLUSTER_ISSUER, PolicyDefaults
from .errors import ConfigurationError
from .types import ControllerFlavor, parse_bool

ENV_PREFIX = "K3SINGRESS_"


def _parse_float(name: str, value: Any) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name}: expected a number, got {value!r}")
    if result <= 0:
        raise ConfigurationError(f"{name}: must be greater than zero, got {value!r}")
    return result


@dataclass(frozen=True)
class IngressSettings:
    """Fallback configuration shared by every deployment call."""
    root_domain: str = ""
    field_manager: str = "k3singress"
    force_on_conflicts: bool = True
    cluster_issuer: str = DEFAULT_CLUSTER_ISSUER
    nginx_class: str = "nginx"
    traefik_class: str = "traefik"
    request_timeout: float = 30.0
    in_cluster: bool = False
    kubeconfig: Optional[str] = None
    kube_context: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "IngressSettings":
        """Build settings from the process environment."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            root_domain=env.get(f"{ENV_PREFIX}ROOT_DOMAIN", defaults.root_domain),
            field_manager=env.get(f"{ENV_PREFIX}FIELD_MANAGER", defaults.field_manager),
            force_on_conflicts=parse_bool(
                f"{ENV_PREFIX}FORCE_ON_CONFLICTS",
                env.get(f"{ENV_PREFIX}FORCE_ON_CONFLICTS", defaults.force_on_conflicts),
            ),
            cluster_issuer=env.get(f"{ENV_PREFIX}CLUSTER_ISSUER", defaults.cluster_issuer),
            nginx_class=env.get(f"{ENV_PREFIX}NGINX_CLASS", defaults.nginx_class),
            traefik_class=env.get(f"{ENV_PREFIX}TRAEFIK_CLASS", defaults.traefik_class),
            request_timeout=_parse_float(
                f"{ENV_PREFIX}REQUEST_TIMEOUT",
                env.get(f"{ENV_PREFIX}REQUEST_TIMEOUT", defaults.request_timeout),
            ),
            in_cluster=parse_bool(
                f"{ENV_PREFIX}IN_CLUSTER",
                env.get(f"{ENV_PREFIX}IN_CLUSTER", defaults.in_cluster),
            ),
            kubeconfig=env.get("KUBECONFIG") or None,
            kube_context=env.get(f"{ENV_PREFIX}KUBE_CONTEXT") or None,
        )

    def merged_with(self, data: Optional[Dict[str, Any]]) -> "IngressSettings":
        """
        Return a copy with values from a config mapping applied on top.

        Unknown keys are rejected so typos do not silently fall back to
        defaults.
        """
        if not data:
            return self

        known = {f.name for f in fields(self)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"unknown ingress settings: {', '.join(unknown)}")

        overrides: Dict[str, Any] = dict(data)
        for key in ("force_on_conflicts", "in_cluster"):
            if key in overrides:
                overrides[key] = parse_bool(key, overrides[key])
        if "request_timeout" in overrides:
            overrides["request_timeout"] = _parse_float("request_timeout", overrides["request_timeout"])
        for key in ("root_domain", "field_manager", "cluster_issuer", "nginx_class", "traefik_class"):
            if key in overrides:
                overrides[key] = "" if overrides[key] is None else str(overrides[key])

        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "IngressSettings":
        return cls().merged_with(data)

    def ingress_class(self, flavor: ControllerFlavor) -> str:
        if flavor == ControllerFlavor.ALTERNATIVE:
            return self.traefik_class
        return self.nginx_class

    def policy_defaults(self, flavor: ControllerFlavor) -> PolicyDefaults:
        """Defaults injected into the annotation strategy for a flavor."""
        return PolicyDefaults(
            ingress_class=self.ingress_class(flavor),
            cluster_issuer=self.cluster_issuer,
        )


def load_settings(config_path: Optional[str] = None) -> IngressSettings:
    """
    Load settings from the environment and an optional YAML file.

    Args:
        config_path: Path to a YAML file. Settings are read from its
            top-level ``ingress`` mapping, or from the whole document when
            that key is absent.

    Returns:
        IngressSettings

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigurationError: If a value cannot be parsed
    """
    settings = IngressSettings.from_env()
    if not config_path:
        return settings

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path}: expected a mapping")

    section = data.get("ingress", data)
    return settings.merged_with(section)
