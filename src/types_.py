# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Types used by the initial user provisioner."""

from typing import NamedTuple


class Credentials(NamedTuple):
    """Information needed to log in as the initial user.

    Attrs:
        username: The initial user account username.
        password: The initial user account plaintext password.
    """

    username: str
    password: str


class CommandOutput(NamedTuple):
    """Captured output of an executed command.

    Attrs:
        stdout: Standard output of the command.
        stderr: Standard error output of the command.
    """

    stdout: str
    stderr: str
