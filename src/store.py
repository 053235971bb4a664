# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Cluster object store backed by the Kubernetes API."""

import logging
import typing

import kubernetes.client
import kubernetes.config
from kubernetes.client.exceptions import ApiException

from exceptions import ConflictError, NotFoundError, ObjectStoreError
from resources import OAUTH_KIND, OAuth, Secret

logger = logging.getLogger(__name__)

OAUTH_GROUP = "config.openshift.io"
OAUTH_PLURAL = "oauths"
USER_GROUP = "user.openshift.io"
USER_PLURAL = "users"
IDENTITY_PLURAL = "identities"
API_VERSION = "v1"

SECRET_KIND = "Secret"
USER_KIND = "User"
IDENTITY_KIND = "Identity"


class ObjectStore(typing.Protocol):
    """Reads and writes the cluster objects of the initial user."""

    def get_secret(self, name: str, namespace: str) -> Secret:
        """Get a secret.

        Raises:
            NotFoundError: if the secret does not exist.
        """
        ...  # pragma: no cover

    def create_secret(self, secret: Secret) -> None:
        """Create a secret."""
        ...  # pragma: no cover

    def delete_secret(self, name: str, namespace: str) -> None:
        """Delete a secret.

        Raises:
            NotFoundError: if the secret does not exist.
        """
        ...  # pragma: no cover

    def get_oauth(self, name: str) -> OAuth:
        """Get the OAuth configuration singleton."""
        ...  # pragma: no cover

    def update_oauth(self, oauth: OAuth) -> OAuth:
        """Replace the OAuth configuration singleton.

        Raises:
            ConflictError: if the object changed since it was read.
        """
        ...  # pragma: no cover

    def delete_user(self, name: str) -> None:
        """Delete a user.

        Raises:
            NotFoundError: if the user does not exist.
        """
        ...  # pragma: no cover

    def delete_identity(self, name: str) -> None:
        """Delete an identity.

        Raises:
            NotFoundError: if the identity does not exist.
        """
        ...  # pragma: no cover


def _to_store_error(
    exc: ApiException,
    operation: str,
    kind: str,
    name: str,
    namespace: typing.Optional[str] = None,
) -> ObjectStoreError:
    """Convert a Kubernetes API exception to an object store error.

    Args:
        exc: The Kubernetes API exception.
        operation: The failed operation.
        kind: The kind of the object operated on.
        name: The name of the object operated on.
        namespace: The namespace of the object operated on.

    Returns:
        NotFoundError for 404, ConflictError for 409, ObjectStoreError otherwise.
    """
    error_class = ObjectStoreError
    if exc.status == 404:
        error_class = NotFoundError
    elif exc.status == 409:
        error_class = ConflictError
    return error_class(operation, kind, name, namespace, reason=str(exc.reason or exc.status))


class KubernetesObjectStore:
    """Object store using the Kubernetes core and custom objects APIs.

    Attributes:
        core_api: The Kubernetes core v1 API.
        custom_objects_api: The Kubernetes custom objects API.
    """

    def __init__(
        self,
        core_api: kubernetes.client.CoreV1Api,
        custom_objects_api: kubernetes.client.CustomObjectsApi,
    ):
        """Construct the object store.

        Args:
            core_api: The Kubernetes core v1 API.
            custom_objects_api: The Kubernetes custom objects API.
        """
        self.core_api = core_api
        self.custom_objects_api = custom_objects_api

    @classmethod
    def from_config(cls) -> "KubernetesObjectStore":
        """Construct the object store from the in-cluster or kubeconfig configuration.

        Returns:
            The object store.
        """
        try:
            kubernetes.config.load_incluster_config()
        except kubernetes.config.ConfigException:
            logger.debug("Not running in cluster, loading kubeconfig")
            kubernetes.config.load_kube_config()
        return cls(kubernetes.client.CoreV1Api(), kubernetes.client.CustomObjectsApi())

    def get_secret(self, name: str, namespace: str) -> Secret:
        """Get a secret.

        Args:
            name: The secret name.
            namespace: The secret namespace.

        Returns:
            The secret.

        Raises:
            ObjectStoreError: if the secret could not be read.
        """
        try:
            resource = self.core_api.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as exc:
            raise _to_store_error(exc, "get", SECRET_KIND, name, namespace) from exc
        return Secret.from_resource(resource)

    def create_secret(self, secret: Secret) -> None:
        """Create a secret.

        Args:
            secret: The secret to create.

        Raises:
            ObjectStoreError: if the secret could not be created.
        """
        try:
            self.core_api.create_namespaced_secret(
                namespace=secret.namespace, body=secret.to_resource()
            )
        except ApiException as exc:
            raise _to_store_error(
                exc, "create", SECRET_KIND, secret.name, secret.namespace
            ) from exc

    def delete_secret(self, name: str, namespace: str) -> None:
        """Delete a secret.

        Args:
            name: The secret name.
            namespace: The secret namespace.

        Raises:
            ObjectStoreError: if the secret could not be deleted.
        """
        try:
            self.core_api.delete_namespaced_secret(name=name, namespace=namespace)
        except ApiException as exc:
            raise _to_store_error(exc, "delete", SECRET_KIND, name, namespace) from exc

    def get_oauth(self, name: str) -> OAuth:
        """Get the OAuth configuration singleton.

        Args:
            name: The singleton name.

        Returns:
            The OAuth configuration.

        Raises:
            ObjectStoreError: if the OAuth configuration could not be read.
        """
        try:
            resource = self.custom_objects_api.get_cluster_custom_object(
                group=OAUTH_GROUP, version=API_VERSION, plural=OAUTH_PLURAL, name=name
            )
        except ApiException as exc:
            raise _to_store_error(exc, "get", OAUTH_KIND, name) from exc
        return OAuth.from_resource(resource)

    def update_oauth(self, oauth: OAuth) -> OAuth:
        """Replace the OAuth configuration singleton.

        The resource version the object was read at is sent along so that concurrent
        modifications are rejected by the API server.

        Args:
            oauth: The updated OAuth configuration.

        Returns:
            The OAuth configuration as stored.

        Raises:
            ObjectStoreError: if the OAuth configuration could not be replaced.
        """
        try:
            resource = self.custom_objects_api.replace_cluster_custom_object(
                group=OAUTH_GROUP,
                version=API_VERSION,
                plural=OAUTH_PLURAL,
                name=oauth.name,
                body=oauth.to_resource(),
            )
        except ApiException as exc:
            raise _to_store_error(exc, "update", OAUTH_KIND, oauth.name) from exc
        return OAuth.from_resource(resource)

    def delete_user(self, name: str) -> None:
        """Delete a user.

        Args:
            name: The user name.

        Raises:
            ObjectStoreError: if the user could not be deleted.
        """
        try:
            self.custom_objects_api.delete_cluster_custom_object(
                group=USER_GROUP, version=API_VERSION, plural=USER_PLURAL, name=name
            )
        except ApiException as exc:
            raise _to_store_error(exc, "delete", USER_KIND, name) from exc

    def delete_identity(self, name: str) -> None:
        """Delete an identity.

        Args:
            name: The identity name in <provider>:<username> format.

        Raises:
            ObjectStoreError: if the identity could not be deleted.
        """
        try:
            self.custom_objects_api.delete_cluster_custom_object(
                group=USER_GROUP, version=API_VERSION, plural=IDENTITY_PLURAL, name=name
            )
        except ApiException as exc:
            raise _to_store_error(exc, "delete", IDENTITY_KIND, name) from exc
