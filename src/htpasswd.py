# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Htpasswd file handling."""

import typing


class HtpasswdFormatError(ValueError):
    """The htpasswd content is malformed."""


def _split_line(line: str) -> tuple[str, str]:
    """Split a htpasswd line into username and hash.

    Args:
        line: The htpasswd line in username:hash format.

    Returns:
        The username and the hash.

    Raises:
        HtpasswdFormatError: if the line is not in username:hash format.
    """
    username, separator, password_hash = line.partition(":")
    if not separator or not username or not password_hash:
        raise HtpasswdFormatError("Invalid htpasswd line, expected username:hash.")
    return username, password_hash


def parse_hash_line(output: str, username: str) -> str:
    """Extract the hash line of a user from htpasswd command output.

    htpasswd -n prints the line followed by an empty line.

    Args:
        output: The standard output of the htpasswd command.
        username: The user the line is expected for.

    Returns:
        The htpasswd line in username:hash format.

    Raises:
        HtpasswdFormatError: if the output does not hold exactly one line for the user.
    """
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if len(lines) != 1:
        raise HtpasswdFormatError(f"Expected a single htpasswd line, got {len(lines)}.")
    line_username, _ = _split_line(lines[0])
    if line_username != username:
        raise HtpasswdFormatError(f"Htpasswd line is for user {line_username}, not {username}.")
    return lines[0]


class HtpasswdFile:
    """Htpasswd file content as a mapping of username to htpasswd line."""

    def __init__(self, lines: typing.Optional[typing.Mapping[str, str]] = None):
        """Construct the htpasswd file.

        Args:
            lines: Mapping of username to its username:hash line.
        """
        self._lines: dict[str, str] = dict(lines or {})

    @classmethod
    def parse(cls, content: str) -> "HtpasswdFile":
        """Parse htpasswd file content.

        Args:
            content: The htpasswd file content, one username:hash line per account.

        Returns:
            The parsed htpasswd file. A later line for the same user replaces an earlier one.
        """
        lines = {}
        for line in content.splitlines():
            line = line.strip()
            if not line:
                continue
            username, _ = _split_line(line)
            lines[username] = line
        return cls(lines)

    def __contains__(self, username: object) -> bool:
        """Check whether the user has a line in the file.

        Args:
            username: The user to look for.

        Returns:
            True if the user is present.
        """
        return username in self._lines

    def __len__(self) -> int:
        """Return the number of accounts in the file."""
        return len(self._lines)

    def add(self, line: str) -> None:
        """Add or replace the line of a user.

        Args:
            line: The htpasswd line in username:hash format.
        """
        username, _ = _split_line(line)
        self._lines[username] = line

    def render(self) -> str:
        """Render the htpasswd file content.

        Returns:
            The file content, newline terminated.
        """
        return "".join(f"{line}\n" for line in self._lines.values())
