# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Credential hashing through the htpasswd executable."""

import logging
import subprocess  # nosec B404
import typing

import htpasswd
from exceptions import HasherError
from state import HTPASSWD_COMMAND
from types_ import CommandOutput, Credentials

logger = logging.getLogger(__name__)

# Hash with bcrypt, print the result instead of updating a file and take the password from args
HTPASSWD_ARGS = ("-nbB",)


class CommandError(Exception):
    """An executed command failed.

    Attributes:
        command: The executed command with its arguments.
        exit_code: The exit code of the command, None if it did not run to completion.
        stdout: Standard output of the command.
        stderr: Standard error output of the command.
    """

    def __init__(
        self,
        command: typing.Sequence[str],
        exit_code: typing.Optional[int],
        stdout: str = "",
        stderr: str = "",
    ):
        """Initialize a new instance of the CommandError exception.

        Args:
            command: The executed command with its arguments.
            exit_code: The exit code of the command.
            stdout: Standard output of the command.
            stderr: Standard error output of the command.
        """
        # Only the executable is part of the message, arguments may hold credentials.
        super().__init__(f"Command {command[0]} failed with exit code {exit_code}")
        self.command = list(command)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class CommandRunner(typing.Protocol):
    """Runs external commands."""

    def run(self, command: str, *args: str) -> CommandOutput:
        """Run a command to completion.

        Args:
            command: The executable to run.
            args: The command arguments.

        Returns:
            The captured output of the command.

        Raises:
            CommandError: if the command failed.
        """
        ...  # pragma: no cover


class SubprocessRunner:
    """Runs commands as local subprocesses."""

    def __init__(self, timeout: int = 60):
        """Construct the runner.

        Args:
            timeout: Time in seconds to wait for a command to complete.
        """
        self.timeout = timeout

    def run(self, command: str, *args: str) -> CommandOutput:
        """Run a command to completion without a shell.

        Args:
            command: The executable to run.
            args: The command arguments.

        Returns:
            The captured output of the command.

        Raises:
            CommandError: if the command is missing, timed out or exited with non-zero code.
        """
        argv = [command, *args]
        try:
            completed = subprocess.run(  # nosec B603
                argv,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise CommandError(argv, None, stderr=f"{command}: command not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandError(argv, None, stderr=f"{command}: timed out") from exc
        except subprocess.CalledProcessError as exc:
            raise CommandError(argv, exc.returncode, exc.stdout or "", exc.stderr or "") from exc
        return CommandOutput(stdout=completed.stdout, stderr=completed.stderr)


def hash_credentials(
    runner: CommandRunner, credentials: Credentials, command: str = HTPASSWD_COMMAND
) -> str:
    """Hash the credentials into a htpasswd line.

    Args:
        runner: The runner executing the htpasswd command.
        credentials: The credentials to hash.
        command: The htpasswd executable.

    Returns:
        The htpasswd line in username:hash format.

    Raises:
        HasherError: if the command failed, reported errors or printed an unexpected output.
    """
    logger.info("Generating htpasswd line for user %s", credentials.username)
    try:
        output = runner.run(command, *HTPASSWD_ARGS, credentials.username, credentials.password)
    except CommandError as exc:
        logger.error("Failed to run %s, %s", command, exc.stderr or exc)
        raise HasherError(
            f"Failed to generate htpasswd data: {exc.stderr or exc}", stderr=exc.stderr
        ) from exc
    if output.stderr:
        logger.error("%s reported errors, %s", command, output.stderr)
        raise HasherError(
            f"Failed to generate htpasswd data: {output.stderr}", stderr=output.stderr
        )
    try:
        return htpasswd.parse_hash_line(output.stdout, credentials.username)
    except htpasswd.HtpasswdFormatError as exc:
        logger.error("Unexpected %s output, %s", command, exc)
        raise HasherError("Failed to parse htpasswd data.") from exc
