# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Cluster object model tests."""

import provisioner
import state
from resources import IdentityProvider, OAuth


def test_oauth_to_resource_preserves_unrelated_fields(
    unrelated_provider: IdentityProvider, config: state.ProvisionerConfig
):
    """
    arrange: given an OAuth object read from the cluster with fields other than providers.
    act: when the htpasswd provider is appended and the object body is built.
    assert: unrelated fields and providers are carried over as read.
    """
    resource = {
        "apiVersion": "config.openshift.io/v1",
        "kind": "OAuth",
        "metadata": {"name": "cluster", "resourceVersion": "3", "uid": "abc"},
        "spec": {
            "identityProviders": [
                unrelated_provider.model_dump(by_alias=True, exclude_none=True)
            ],
            "tokenConfig": {"accessTokenMaxAgeSeconds": 86400},
        },
    }
    oauth = OAuth.from_resource(resource)
    oauth.identity_providers.append(provisioner.new_htpasswd_provider(config))

    body = oauth.to_resource()

    assert body["metadata"] == {"name": "cluster", "resourceVersion": "3", "uid": "abc"}
    assert body["spec"]["tokenConfig"] == {"accessTokenMaxAgeSeconds": 86400}
    assert body["spec"]["identityProviders"] == [
        resource["spec"]["identityProviders"][0],
        {
            "name": config.provider_name,
            "mappingMethod": "claim",
            "type": "HTPasswd",
            "htpasswd": {"fileData": {"name": config.htpasswd_secret_name}},
        },
    ]
    assert len(resource["spec"]["identityProviders"]) == 1


def test_oauth_to_resource_new_object():
    """
    arrange: given an OAuth configuration not read from the cluster.
    act: when the object body is built.
    assert: the body is a complete OAuth object with an empty provider list.
    """
    body = OAuth().to_resource()

    assert body == {
        "apiVersion": "config.openshift.io/v1",
        "kind": "OAuth",
        "metadata": {"name": "cluster"},
        "spec": {"identityProviders": []},
    }


def test_oauth_from_resource_without_spec():
    """
    arrange: given an OAuth object without spec.
    act: when the OAuth configuration is parsed.
    assert: the identity provider list is empty.
    """
    oauth = OAuth.from_resource({"metadata": {"name": "cluster"}})

    assert oauth.identity_providers == []
    assert oauth.resource_version is None


def test_oauth_round_trip_preserves_nested_htpasswd_fields():
    """
    arrange: given an OAuth object with a htpasswd provider carrying fields unknown to the models.
    act: when the OAuth configuration is parsed and its body built again.
    assert: the unknown nested fields are carried over.
    """
    provider = {
        "name": "team-htpasswd",
        "mappingMethod": "add",
        "type": "HTPasswd",
        "htpasswd": {
            "fileData": {"name": "team-htpasswd", "namespace": "openshift-config"},
            "ca": {"name": "team-ca"},
        },
    }
    resource = {"metadata": {"name": "cluster"}, "spec": {"identityProviders": [provider]}}

    body = OAuth.from_resource(resource).to_resource()

    assert body["spec"]["identityProviders"] == [provider]
