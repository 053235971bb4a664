# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Exceptions raised by the initial user provisioner."""

import typing


class InitialUserError(Exception):
    """Base exception for initial user provisioning errors."""


class ConfigInvalidError(InitialUserError):
    """Exception raised when the provisioner configuration is found to be invalid.

    Attributes:
        msg: Explanation of the error.
    """

    def __init__(self, msg: str):
        """Initialize a new instance of the ConfigInvalidError exception.

        Args:
            msg: Explanation of the error.
        """
        super().__init__(msg)
        self.msg = msg


class HasherError(InitialUserError):
    """The credential hashing command failed.

    Attributes:
        stderr: Standard error output of the hashing command, if any.
    """

    def __init__(self, msg: str, stderr: str = ""):
        """Initialize a new instance of the HasherError exception.

        Args:
            msg: Explanation of the error.
            stderr: Standard error output of the hashing command.
        """
        super().__init__(msg)
        self.stderr = stderr


class ObjectStoreError(InitialUserError):
    """An object store operation failed.

    Attributes:
        operation: The operation that failed, i.e. "get", "create", "update" or "delete".
        kind: The kind of the object operated on.
        name: The name of the object operated on.
        namespace: The namespace of the object, None for cluster-scoped objects.
    """

    def __init__(
        self,
        operation: str,
        kind: str,
        name: str,
        namespace: typing.Optional[str] = None,
        reason: str = "",
    ):
        """Initialize a new instance of the ObjectStoreError exception.

        Args:
            operation: The operation that failed.
            kind: The kind of the object operated on.
            name: The name of the object operated on.
            namespace: The namespace of the object.
            reason: The reason reported by the object store.
        """
        target = f"{namespace}/{name}" if namespace else name
        message = f"Failed to {operation} {kind} {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.operation = operation
        self.kind = kind
        self.name = name
        self.namespace = namespace


class NotFoundError(ObjectStoreError):
    """The requested object does not exist."""


class ConflictError(ObjectStoreError):
    """The object was modified concurrently, the caller should retry the whole operation."""
