# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Cluster objects managed by the initial user provisioner."""

import base64
import copy
import typing

import kubernetes.client
from pydantic import BaseModel, ConfigDict, Field

from state import OAUTH_SINGLETON_NAME

OAUTH_API_VERSION = "config.openshift.io/v1"
OAUTH_KIND = "OAuth"
MAPPING_METHOD_CLAIM = "claim"


class Secret(BaseModel):
    """A namespaced secret holding string data.

    Attributes:
        name: The secret name.
        namespace: The secret namespace.
        data: The decoded secret data.
        type: The secret type.
    """

    name: str = Field(..., min_length=1)
    namespace: str = Field(..., min_length=1)
    data: dict[str, str] = Field(default_factory=dict)
    type: str = "Opaque"

    def to_resource(self) -> kubernetes.client.V1Secret:
        """Build the Kubernetes secret body.

        Returns:
            The secret body, data passed as stringData.
        """
        return kubernetes.client.V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=kubernetes.client.V1ObjectMeta(name=self.name, namespace=self.namespace),
            string_data=dict(self.data),
            type=self.type,
        )

    @classmethod
    def from_resource(cls, resource: kubernetes.client.V1Secret) -> "Secret":
        """Instantiate the secret from a Kubernetes secret.

        Args:
            resource: The secret read from the cluster.

        Returns:
            The secret with base64 decoded data.
        """
        data = {
            key: base64.b64decode(value).decode("utf-8")
            for key, value in (resource.data or {}).items()
        }
        return cls(
            name=resource.metadata.name,
            namespace=resource.metadata.namespace,
            data=data,
            type=resource.type or "Opaque",
        )


class SecretNameReference(BaseModel):
    """Reference to a secret in the OpenShift configuration namespace.

    Attributes:
        name: The referenced secret name.
    """

    model_config = ConfigDict(extra="allow")

    name: str


class HTPasswdProviderConfig(BaseModel):
    """Configuration of a htpasswd identity provider.

    Attributes:
        file_data: Reference to the secret holding the htpasswd file.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    file_data: SecretNameReference = Field(..., alias="fileData")


class IdentityProvider(BaseModel):
    """An identity provider entry of the OAuth configuration.

    Fields of provider types other than htpasswd are kept as is.

    Attributes:
        name: The provider name.
        mapping_method: How identities are mapped to users.
        type: The provider type.
        htpasswd: The htpasswd provider configuration.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    mapping_method: typing.Optional[str] = Field(None, alias="mappingMethod")
    type: typing.Optional[str] = None
    htpasswd: typing.Optional[HTPasswdProviderConfig] = None


class OAuth(BaseModel):
    """The cluster-scoped OAuth configuration singleton.

    Attributes:
        name: The singleton name.
        resource_version: The resource version the object was read at.
        identity_providers: The ordered identity provider entries.
        raw: The object as read from the cluster.
    """

    name: str = OAUTH_SINGLETON_NAME
    resource_version: typing.Optional[str] = None
    identity_providers: list[IdentityProvider] = Field(default_factory=list)
    raw: dict[str, typing.Any] = Field(default_factory=dict)

    @classmethod
    def from_resource(cls, resource: typing.Mapping[str, typing.Any]) -> "OAuth":
        """Instantiate the OAuth configuration from the cluster object.

        Args:
            resource: The OAuth object as returned by the custom objects API.

        Returns:
            The OAuth configuration.
        """
        metadata = resource.get("metadata") or {}
        spec = resource.get("spec") or {}
        return cls(
            name=metadata.get("name", OAUTH_SINGLETON_NAME),
            resource_version=metadata.get("resourceVersion"),
            identity_providers=[
                IdentityProvider.model_validate(provider)
                for provider in spec.get("identityProviders") or []
            ],
            raw=copy.deepcopy(dict(resource)),
        )

    def to_resource(self) -> dict[str, typing.Any]:
        """Build the OAuth object body for a full update.

        Fields other than the identity providers are carried over from the object as read.

        Returns:
            The OAuth object body.
        """
        body = copy.deepcopy(self.raw)
        body.setdefault("apiVersion", OAUTH_API_VERSION)
        body.setdefault("kind", OAUTH_KIND)
        metadata = body.setdefault("metadata", {})
        metadata["name"] = self.name
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version
        spec = body.get("spec") or {}
        spec["identityProviders"] = [
            provider.model_dump(by_alias=True, exclude_none=True)
            for provider in self.identity_providers
        ]
        body["spec"] = spec
        return body
