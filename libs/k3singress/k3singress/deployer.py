"""
Deployment entry point tying the pipeline together.

intent -> route -> TLS -> annotations -> manifest -> reconciler
"""

import logging
from typing import Optional

from .annotations import build_annotations
from .config import IngressSettings
from .errors import ConfigurationError, IngressNotFoundError
from .generators import generate_ingress
from .reconciler import IngressReconciler
from .routing import build_tls, resolve_route
from .types import ApplyOutcome, DeployIntent, IngressManifest

logger = logging.getLogger(__name__)


class IngressDeployer:
    """Builds Ingress manifests from intents and reconciles them."""

    def __init__(
        self,
        settings: IngressSettings,
        reconciler: Optional[IngressReconciler] = None,
    ):
        self.settings = settings
        self.reconciler = reconciler or IngressReconciler(settings)

    def build(self, intent: Optional[DeployIntent]) -> IngressManifest:
        """
        Build the Ingress for an intent without touching the cluster.

        Raises:
            ConfigurationError: If the intent has no ports or no domain can be found
        """
        if intent is None:
            raise ConfigurationError("ingress deployment is nil")

        route = resolve_route(intent, root_domain=self.settings.root_domain)
        tls = build_tls(route.host, intent.container_name, intent.tls)
        annotations = build_annotations(intent, self.settings.policy_defaults(intent.controller))

        return generate_ingress(
            container_name=intent.container_name,
            namespace=intent.namespace,
            route=route,
            annotations=annotations,
            labels=intent.labels,
            tls=tls,
        )

    def deploy(
        self,
        intent: Optional[DeployIntent],
        timeout: Optional[float] = None,
        force: Optional[bool] = None,
    ) -> ApplyOutcome:
        """Build the Ingress for intent and apply it."""
        try:
            manifest = self.build(intent)
        except ConfigurationError as e:
            logger.error(f"Ingress not deployed: {e}")
            raise

        return self.reconciler.apply(manifest, timeout=timeout, force=force)

    def delete(self, namespace: str, name: str, timeout: Optional[float] = None) -> None:
        self.reconciler.delete(namespace, name, timeout=timeout)

    def delete_if_exists(self, namespace: str, name: str, timeout: Optional[float] = None) -> bool:
        """
        Delete an Ingress, treating a missing one as done.

        Returns:
            True if an Ingress was deleted, False if it did not exist
        """
        try:
            self.delete(namespace, name, timeout=timeout)
        except IngressNotFoundError:
            logger.info(f"Ingress {namespace}/{name} already gone")
            return False
        return True

