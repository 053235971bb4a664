# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Initial user provisioner configuration."""

import logging
import os
import typing

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from exceptions import ConfigInvalidError

logger = logging.getLogger(__name__)

OAUTH_SINGLETON_NAME = "cluster"
HTPASSWD_PROVIDER_TYPE = "HTPasswd"
HTPASSWD_COMMAND = "htpasswd"
# Keys of the secrets data
DISPLAY_SECRET_USER_KEY = "user"
DISPLAY_SECRET_PASSWORD_KEY = "password"  # nosec
HTPASSWD_SECRET_KEY = "htpasswd"  # nosec

# Environment variable overrides, mapped to the configuration field they set.
ENV_OVERRIDES = {
    "INITIAL_USER_NAME": "username",
    "INITIAL_USER_PASSWORD_LENGTH": "password_length",
    "INITIAL_USER_SECRET_NAME": "display_secret_name",
    "INITIAL_USER_HTPASSWD_SECRET_NAME": "htpasswd_secret_name",
    "INITIAL_USER_CONFIG_NAMESPACE": "config_namespace",
    "INITIAL_USER_PROVIDER_NAME": "provider_name",
    "INITIAL_USER_HTPASSWD_COMMAND": "htpasswd_command",
}


class ProvisionerConfig(BaseModel):
    """Fixed identifiers and policy used to provision the initial user.

    Attributes:
        username: Name of the initial user.
        password_length: Number of characters of the generated password.
        display_secret_name: Name of the secret holding the plaintext credentials.
        htpasswd_secret_name: Name of the secret holding the htpasswd file.
        config_namespace: The OpenShift configuration namespace of the htpasswd secret.
        provider_name: Name of the htpasswd identity provider in the OAuth configuration.
        oauth_name: Name of the cluster-scoped OAuth configuration singleton.
        htpasswd_command: The executable used to hash the password.
    """

    model_config = ConfigDict(frozen=True)

    username: str = Field("che-user", min_length=1, pattern=r"^[^:\s]+$")
    password_length: int = Field(16, ge=8, le=128)
    display_secret_name: str = Field("openshift-oauth-user-credentials", min_length=1)
    htpasswd_secret_name: str = Field("htpasswd-eclipse-che", min_length=1)
    config_namespace: str = Field("openshift-config", min_length=1)
    provider_name: str = Field("htpasswd-eclipse-che", min_length=1)
    oauth_name: str = Field(OAUTH_SINGLETON_NAME, min_length=1)
    htpasswd_command: str = Field(HTPASSWD_COMMAND, min_length=1)

    @property
    def identity_name(self) -> str:
        """Name of the Identity binding the initial user to the htpasswd provider.

        Returns:
            The identity name in <provider>:<username> format.
        """
        return f"{self.provider_name}:{self.username}"

    @classmethod
    def from_env(
        cls, environ: typing.Optional[typing.Mapping[str, str]] = None
    ) -> "ProvisionerConfig":
        """Instantiate the configuration, applying overrides from environment variables.

        Args:
            environ: The environment to read the overrides from, os.environ by default.

        Returns:
            The provisioner configuration.

        Raises:
            ConfigInvalidError: if an override has an invalid value.
        """
        environ = os.environ if environ is None else environ
        overrides = {
            field: environ[variable]
            for variable, field in ENV_OVERRIDES.items()
            if environ.get(variable)
        }
        try:
            return cls(**overrides)
        except ValidationError as exc:
            logger.error("Invalid initial user configuration, %s", exc)
            raise ConfigInvalidError("Invalid initial user configuration.") from exc
