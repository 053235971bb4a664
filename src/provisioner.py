# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Provisioning of the initial OpenShift OAuth user."""

import logging
import secrets
import string
import typing

import hasher
import htpasswd
from exceptions import NotFoundError, ObjectStoreError
from resources import (
    MAPPING_METHOD_CLAIM,
    HTPasswdProviderConfig,
    IdentityProvider,
    OAuth,
    Secret,
    SecretNameReference,
)
from state import (
    DISPLAY_SECRET_PASSWORD_KEY,
    DISPLAY_SECRET_USER_KEY,
    HTPASSWD_PROVIDER_TYPE,
    HTPASSWD_SECRET_KEY,
    ProvisionerConfig,
)
from store import ObjectStore
from types_ import Credentials

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits


def new_htpasswd_provider(config: ProvisionerConfig) -> IdentityProvider:
    """Build the htpasswd identity provider entry of the initial user.

    Args:
        config: The provisioner configuration.

    Returns:
        The identity provider referencing the htpasswd secret.
    """
    return IdentityProvider(
        name=config.provider_name,
        mapping_method=MAPPING_METHOD_CLAIM,
        type=HTPASSWD_PROVIDER_TYPE,
        htpasswd=HTPasswdProviderConfig(
            file_data=SecretNameReference(name=config.htpasswd_secret_name)
        ),
    )


def find_identity_provider(
    providers: typing.Sequence[IdentityProvider], name: str
) -> typing.Optional[int]:
    """Find an identity provider by name.

    Args:
        providers: The identity providers of the OAuth configuration.
        name: The provider name to look for.

    Returns:
        The index of the provider, None if there is no provider with the name.
    """
    return next((index for index, item in enumerate(providers) if item.name == name), None)


def generate_password(length: int) -> str:
    """Generate a random alphanumeric password.

    Args:
        length: The number of characters.

    Returns:
        The generated password.
    """
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class InitialUserProvisioner:
    """Creates and removes the initial user of the OpenShift OAuth htpasswd provider.

    Attributes:
        store: The cluster object store.
        runner: The runner executing the htpasswd command.
        config: The provisioner configuration.
    """

    def __init__(
        self,
        store: ObjectStore,
        runner: hasher.CommandRunner,
        config: typing.Optional[ProvisionerConfig] = None,
    ):
        """Construct the provisioner.

        Args:
            store: The cluster object store.
            runner: The runner executing the htpasswd command.
            config: The provisioner configuration, defaults are used if not given.
        """
        self.store = store
        self.runner = runner
        self.config = config or ProvisionerConfig()

    def create_initial_user(self, namespace: str, oauth: OAuth) -> None:
        """Provision the initial user.

        The password is hashed before any object is written. Existing secrets are left
        unchanged and the identity provider is appended only if it is not present yet.

        Args:
            namespace: The namespace of the secret holding the plaintext credentials.
            oauth: The live OAuth configuration singleton.

        Raises:
            HasherError: if the password could not be hashed. No object is written.
            ObjectStoreError: if an object could not be read or written.
        """
        logger.info("Creating initial user %s", self.config.username)
        credentials = Credentials(
            username=self.config.username,
            password=generate_password(self.config.password_length),
        )
        hash_line = hasher.hash_credentials(
            self.runner, credentials, command=self.config.htpasswd_command
        )
        try:
            self._ensure_display_secret(namespace, credentials)
            self._ensure_htpasswd_secret(hash_line)
            self._ensure_identity_provider(oauth)
        except ObjectStoreError as exc:
            logger.error("Failed to create initial user, %s", exc)
            raise
        logger.info("Initial user %s created", self.config.username)

    def _secret_exists(self, name: str, namespace: str) -> bool:
        """Check whether a secret exists.

        Args:
            name: The secret name.
            namespace: The secret namespace.

        Returns:
            True if the secret exists.
        """
        try:
            self.store.get_secret(name, namespace)
        except NotFoundError:
            return False
        return True

    def _ensure_display_secret(self, namespace: str, credentials: Credentials) -> None:
        """Create the secret holding the plaintext credentials if it does not exist.

        Args:
            namespace: The secret namespace.
            credentials: The initial user credentials.
        """
        name = self.config.display_secret_name
        if self._secret_exists(name, namespace):
            logger.debug("Initial user secret %s/%s already exists", namespace, name)
            return
        logger.info("Creating initial user secret %s/%s", namespace, name)
        self.store.create_secret(
            Secret(
                name=name,
                namespace=namespace,
                data={
                    DISPLAY_SECRET_USER_KEY: credentials.username,
                    DISPLAY_SECRET_PASSWORD_KEY: credentials.password,
                },
            )
        )

    def _ensure_htpasswd_secret(self, hash_line: str) -> None:
        """Create the htpasswd secret if it does not exist.

        Args:
            hash_line: The htpasswd line of the initial user.
        """
        name = self.config.htpasswd_secret_name
        namespace = self.config.config_namespace
        try:
            secret = self.store.get_secret(name, namespace)
        except NotFoundError:
            logger.info("Creating htpasswd secret %s/%s", namespace, name)
            htpasswd_file = htpasswd.HtpasswdFile()
            htpasswd_file.add(hash_line)
            self.store.create_secret(
                Secret(
                    name=name,
                    namespace=namespace,
                    data={HTPASSWD_SECRET_KEY: htpasswd_file.render()},
                )
            )
            return
        logger.debug("Htpasswd secret %s/%s already exists", namespace, name)
        try:
            htpasswd_file = htpasswd.HtpasswdFile.parse(secret.data.get(HTPASSWD_SECRET_KEY, ""))
        except htpasswd.HtpasswdFormatError as exc:
            logger.warning("Htpasswd secret %s/%s is malformed, %s", namespace, name, exc)
            return
        if self.config.username not in htpasswd_file:
            logger.warning(
                "Htpasswd secret %s/%s has no entry for %s, leaving it unchanged",
                namespace,
                name,
                self.config.username,
            )

    def _ensure_identity_provider(self, oauth: OAuth) -> None:
        """Append the htpasswd identity provider to the OAuth configuration if missing.

        Args:
            oauth: The live OAuth configuration singleton.
        """
        if find_identity_provider(oauth.identity_providers, self.config.provider_name) is not None:
            logger.debug("Identity provider %s already configured", self.config.provider_name)
            return
        logger.info(
            "Adding identity provider %s to OAuth %s", self.config.provider_name, oauth.name
        )
        updated = oauth.model_copy(
            update={
                "identity_providers": [
                    *oauth.identity_providers,
                    new_htpasswd_provider(self.config),
                ]
            }
        )
        self.store.update_oauth(updated)

    def delete_initial_user(self, namespace: str) -> None:
        """Remove the initial user and everything provisioned for it.

        Objects already absent are skipped. The identity provider is removed last so that the
        OAuth configuration never references a deleted htpasswd secret while it is in use.

        Args:
            namespace: The namespace of the secret holding the plaintext credentials.

        Raises:
            ObjectStoreError: if an object could not be read, deleted or updated.
        """
        logger.info("Deleting initial user %s", self.config.username)
        try:
            self._delete_if_exists(
                self.store.delete_secret, self.config.display_secret_name, namespace
            )
            self._delete_if_exists(
                self.store.delete_secret,
                self.config.htpasswd_secret_name,
                self.config.config_namespace,
            )
            self._delete_if_exists(self.store.delete_identity, self.config.identity_name)
            self._delete_if_exists(self.store.delete_user, self.config.username)
            self._remove_identity_provider()
        except ObjectStoreError as exc:
            logger.error("Failed to delete initial user, %s", exc)
            raise
        logger.info("Initial user %s deleted", self.config.username)

    @staticmethod
    def _delete_if_exists(delete: typing.Callable[..., None], *args: str) -> None:
        """Delete an object, treating an absent object as deleted.

        Args:
            delete: The object store delete operation.
            args: The arguments identifying the object.
        """
        try:
            delete(*args)
        except NotFoundError as exc:
            logger.debug("Already absent, %s", exc)

    def _remove_identity_provider(self) -> None:
        """Remove every entry of the htpasswd identity provider from the OAuth configuration."""
        oauth = self.store.get_oauth(self.config.oauth_name)
        providers = [
            provider
            for provider in oauth.identity_providers
            if provider.name != self.config.provider_name
        ]
        if len(providers) == len(oauth.identity_providers):
            logger.debug("Identity provider %s not configured", self.config.provider_name)
            return
        logger.info(
            "Removing identity provider %s from OAuth %s", self.config.provider_name, oauth.name
        )
        self.store.update_oauth(oauth.model_copy(update={"identity_providers": providers}))

    def reconcile(self, namespace: str, enabled: bool) -> None:
        """Bring the initial user to the desired state.

        Args:
            namespace: The namespace of the secret holding the plaintext credentials.
            enabled: Whether the initial user should exist.
        """
        if not enabled:
            self.delete_initial_user(namespace)
            return
        oauth = self.store.get_oauth(self.config.oauth_name)
        self.create_initial_user(namespace, oauth)

    def get_credentials(self, namespace: str) -> typing.Optional[Credentials]:
        """Read back the initial user credentials.

        Args:
            namespace: The namespace of the secret holding the plaintext credentials.

        Returns:
            The credentials, None if the secret does not exist or is incomplete.
        """
        try:
            secret = self.store.get_secret(self.config.display_secret_name, namespace)
        except NotFoundError:
            return None
        username = secret.data.get(DISPLAY_SECRET_USER_KEY)
        password = secret.data.get(DISPLAY_SECRET_PASSWORD_KEY)
        if not username or not password:
            logger.warning("Initial user secret %s/%s is incomplete", namespace, secret.name)
            return None
        return Credentials(username=username, password=password)
