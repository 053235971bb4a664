# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Constants for testing the initial user provisioner."""

TEST_NAMESPACE = "test-namespace"
TEST_USERNAME = "testuser"
HASH_LINE = "testuser:HASHEDVALUE"
# htpasswd -n prints the line followed by an empty line
HTPASSWD_OUTPUT = f"{HASH_LINE}\n\n"
