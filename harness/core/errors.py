"""
Error taxonomy — every failure the harness raises.

Two families:

    ConfigError     — the request itself is wrong (unknown platform key,
                      malformed harness.yml, URL without a path).
    TransportError  — the request was fine but moving bytes or running a
                      command failed (HTTP fetch, wget mirror, remote
                      command).

Nothing here retries. The first error raised inside a batch loop aborts
the remaining hosts/packages.
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for all harness failures."""


class ConfigError(HarnessError):
    """Raised when configuration or caller input is invalid."""


class UnknownPlatformError(ConfigError):
    """Raised when a platform category key or platform string is not recognised."""

    def __init__(self, platform: str, message: str | None = None):
        self.platform = platform
        super().__init__(message or f"Unknown platform '{platform}'")


class TransportError(HarnessError):
    """Raised when a fetch, mirror, or remote command fails."""


class FetchError(TransportError):
    """HTTP fetch failed or no candidate URL was reachable."""

    def __init__(self, url: str, message: str | None = None):
        self.url = url
        super().__init__(message or f"Failed to fetch '{url}'")


class MirrorError(TransportError):
    """The recursive mirror subprocess exited non-zero."""

    def __init__(self, url: str, exit_code: int):
        self.url = url
        self.exit_code = exit_code
        super().__init__(f"Failed to fetch_remote_dir '{url}' (exit code {exit_code})")


class RemoteCommandError(TransportError):
    """A command run on a host exited non-zero."""

    def __init__(self, host: str, command: str, exit_code: int, output: str = ""):
        self.host = host
        self.command = command
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"Command failed on {host} (exit {exit_code}): {command}")
