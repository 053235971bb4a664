# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Fixtures for the initial user provisioner unit tests."""

import unittest.mock

import kubernetes.client
import pytest

import provisioner
import state
from resources import IdentityProvider, OAuth

from .constants import HTPASSWD_OUTPUT, TEST_USERNAME
from .fake_store import FakeObjectStore, FakeRunner


@pytest.fixture(scope="function", name="config")
def config_fixture() -> state.ProvisionerConfig:
    """Provisioner configuration for the test user."""
    return state.ProvisionerConfig(username=TEST_USERNAME)


@pytest.fixture(scope="function", name="unrelated_provider")
def unrelated_provider_fixture() -> IdentityProvider:
    """An identity provider the provisioner does not own."""
    return IdentityProvider.model_validate(
        {
            "name": "corporate-ldap",
            "mappingMethod": "claim",
            "type": "LDAP",
            "ldap": {
                "url": "ldaps://ldap.example.com/ou=users,dc=example,dc=com?uid",
                "insecure": False,
                "attributes": {"id": ["dn"], "preferredUsername": ["uid"]},
            },
        }
    )


@pytest.fixture(scope="function", name="store")
def store_fixture() -> FakeObjectStore:
    """Fake object store holding an OAuth configuration without identity providers."""
    fake_store = FakeObjectStore()
    fake_store.add_oauth(OAuth(identity_providers=[]))
    return fake_store


@pytest.fixture(scope="function", name="runner")
def runner_fixture() -> FakeRunner:
    """Fake runner printing the htpasswd line of the test user."""
    return FakeRunner(stdout=HTPASSWD_OUTPUT)


@pytest.fixture(scope="function", name="initial_user_provisioner")
def initial_user_provisioner_fixture(
    store: FakeObjectStore, runner: FakeRunner, config: state.ProvisionerConfig
) -> provisioner.InitialUserProvisioner:
    """Provisioner operating on the fake store and runner."""
    return provisioner.InitialUserProvisioner(store=store, runner=runner, config=config)


@pytest.fixture(scope="function", name="mock_core_api")
def mock_core_api_fixture() -> unittest.mock.MagicMock:
    """Mock Kubernetes core v1 API."""
    return unittest.mock.MagicMock(spec=kubernetes.client.CoreV1Api)


@pytest.fixture(scope="function", name="mock_custom_objects_api")
def mock_custom_objects_api_fixture() -> unittest.mock.MagicMock:
    """Mock Kubernetes custom objects API."""
    return unittest.mock.MagicMock(spec=kubernetes.client.CustomObjectsApi)
