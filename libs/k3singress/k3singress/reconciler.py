"""
Reconciles Ingress manifests against the cluster.

Applies use server-side apply: the API server merges the submitted object
with the fields previously applied under the same field manager and leaves
fields owned by other managers alone. There is no local state, no diffing and
no retrying here; every call goes straight to the API server.
"""

import logging
from typing import Any, Callable, Optional

import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from .config import IngressSettings
from .errors import (
    ApplyConflictError,
    ClientAcquisitionError,
    IngressNotFoundError,
    RemoteError,
)
from .types import ApplyOutcome, IngressManifest

logger = logging.getLogger(__name__)

APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"

ApiFactory = Callable[[IngressSettings], Any]


def load_networking_api(settings: IngressSettings) -> client.NetworkingV1Api:
    """
    Create a NetworkingV1Api for the configured cluster.

    Uses the pod service account when settings.in_cluster is set, otherwise
    the kubeconfig file and context from settings (or the client defaults).
    The global client configuration is not modified.

    Raises:
        ClientAcquisitionError: If no configuration could be loaded
    """
    try:
        if settings.in_cluster:
            configuration = client.Configuration()
            config.load_incluster_config(client_configuration=configuration)
            api_client = client.ApiClient(configuration=configuration)
            source = "in-cluster"
        else:
            api_client = config.new_client_from_config(
                config_file=settings.kubeconfig,
                context=settings.kube_context,
                persist_config=False,
            )
            source = settings.kube_context or settings.kubeconfig or "default kubeconfig"
    except (ConfigException, OSError, yaml.YAMLError, ValueError, TypeError) as e:
        raise ClientAcquisitionError(f"could not load Kubernetes configuration: {e}") from e

    logger.debug(f"Using Kubernetes configuration: {source}")
    return client.NetworkingV1Api(api_client)


def _remote_error(
    e: Exception,
    operation: str,
    namespace: str,
    name: str,
) -> RemoteError:
    if isinstance(e, ApiException):
        reason = e.body or e.reason or str(e)
        if isinstance(reason, bytes):
            reason = reason.decode("utf-8", errors="replace")
        if operation == "apply" and e.status == 409:
            return ApplyConflictError(operation, namespace, name, reason, status=e.status)
        if operation == "delete" and e.status == 404:
            return IngressNotFoundError(operation, namespace, name, reason, status=e.status)
        return RemoteError(operation, namespace, name, reason, status=e.status)
    return RemoteError(operation, namespace, name, str(e))


class IngressReconciler:
    """Applies and deletes Ingress objects with server-side apply."""

    def __init__(
        self,
        settings: IngressSettings,
        api_factory: Optional[ApiFactory] = None,
    ):
        self.settings = settings
        self._api_factory = api_factory

    def _get_api(self) -> Any:
        # No client is cached between calls.
        try:
            if self._api_factory is None:
                return load_networking_api(self.settings)
            return self._api_factory(self.settings)
        except ClientAcquisitionError:
            raise
        except ConfigException as e:
            raise ClientAcquisitionError(f"could not load Kubernetes configuration: {e}") from e

    def _timeout(self, timeout: Optional[float]) -> float:
        return timeout if timeout is not None else self.settings.request_timeout

    def apply(
        self,
        manifest: IngressManifest,
        timeout: Optional[float] = None,
        force: Optional[bool] = None,
    ) -> ApplyOutcome:
        """
        Server-side apply an Ingress.

        Args:
            manifest: Complete desired state of the Ingress
            timeout: Request timeout in seconds (default: settings.request_timeout)
            force: Take over fields owned by other managers
                (default: settings.force_on_conflicts)

        Returns:
            ApplyOutcome with the object returned by the API server

        Raises:
            ClientAcquisitionError: If no API client could be created
            ApplyConflictError: If force is off and another manager owns a field
            RemoteError: For any other API or transport failure
        """
        api = self._get_api()
        force = self.settings.force_on_conflicts if force is None else force

        logger.info(
            f"Applying ingress {manifest.namespace}/{manifest.name} "
            f"(host: {manifest.route.host}, manager: {self.settings.field_manager}, force: {force})"
        )

        try:
            result = api.patch_namespaced_ingress(
                name=manifest.name,
                namespace=manifest.namespace,
                body=manifest.to_dict(),
                field_manager=self.settings.field_manager,
                force=force,
                _content_type=APPLY_PATCH_CONTENT_TYPE,
                _request_timeout=self._timeout(timeout),
            )
        except (ApiException, HTTPError) as e:
            error = _remote_error(e, "apply", manifest.namespace, manifest.name)
            logger.error(str(error))
            raise error from e

        metadata = getattr(result, "metadata", None)
        resource_version = getattr(metadata, "resource_version", None)
        logger.info(f"Applied ingress {manifest.namespace}/{manifest.name} (resourceVersion: {resource_version})")

        return ApplyOutcome(
            name=manifest.name,
            namespace=manifest.namespace,
            resource_version=resource_version,
            ingress=result,
            manifest=manifest,
        )

    def delete(self, namespace: str, name: str, timeout: Optional[float] = None) -> None:
        """
        Delete an Ingress.

        Raises:
            ClientAcquisitionError: If no API client could be created
            IngressNotFoundError: If the Ingress does not exist
            RemoteError: For any other API or transport failure
        """
        api = self._get_api()

        logger.info(f"Deleting ingress {namespace}/{name}")

        try:
            api.delete_namespaced_ingress(
                name=name,
                namespace=namespace,
                _request_timeout=self._timeout(timeout),
            )
        except (ApiException, HTTPError) as e:
            error = _remote_error(e, "delete", namespace, name)
            if isinstance(error, IngressNotFoundError):
                logger.warning(str(error))
            else:
                logger.error(str(error))
            raise error from e

        logger.info(f"Deleted ingress {namespace}/{name}")
