"""
Host base — the contract between the provisioning services and a test machine.

Services never talk to ssh, scp, or a package manager directly. They
only use what a Host exposes:

    platform            the host's platform string (``centos-7-x86_64``)
    log                 per-host logger; ``info`` is the notify level
    run(argv)           remote command, raises on non-zero exit
    scp_to(src, dst)    copy a local file or directory tree to the host
    check_for_package   is a command available on the host?
    install_package     install one package with the platform's manager

Subclasses implement the two transport primitives (``_exec`` and
``scp_to``); probing and package installation are built on top of them.
"""

from __future__ import annotations

import logging
import shlex
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, Field

from harness.core.errors import HarnessError, RemoteCommandError, UnknownPlatformError
from harness.core.services.platforms import PlatformCategory, classify


class CommandResult(BaseModel):
    """Outcome of one command run on a host."""

    host: str
    command: list[str] = Field(default_factory=list)
    exit_code: int = 0
    output: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        """The command as a single shell-quoted string."""
        return shlex.join(self.command)


def package_install_command(
    platform: str,
    package: str,
    extra_flags: str | None = None,
) -> list[str]:
    """Build the install argv for ``package`` on ``platform``.

    Raises:
        HarnessError: If the platform has no supported package manager.
    """
    flags = shlex.split(extra_flags) if extra_flags else []
    try:
        category = classify(platform)
    except UnknownPlatformError:
        raise HarnessError(f"No package manager known for platform '{platform}'") from None

    if category is PlatformCategory.REDHAT:
        return ["yum", "install", "-y", *flags, package]
    if category is PlatformCategory.DEBIAN:
        return ["apt-get", "install", "-y", *flags, package]
    if category is PlatformCategory.SOLARIS:
        return ["pkg", "install", *flags, package]
    raise HarnessError(f"Package installation is not supported on '{platform}'")


class Host(ABC):
    """Abstract base class for test hosts."""

    def __init__(self, name: str, platform: str):
        self._name = name
        self._platform = platform
        self.log = logging.getLogger(f"harness.hosts.{name}")

    @property
    def name(self) -> str:
        return self._name

    @property
    def platform(self) -> str:
        return self._platform

    @abstractmethod
    def _exec(self, command: Sequence[str]) -> CommandResult:
        """Run ``command`` on the host and report the result. Never raises on exit status."""

    @abstractmethod
    def scp_to(self, local_path: str | Path, remote_path: str) -> None:
        """Copy a local file or directory tree to ``remote_path`` on the host.

        Raises:
            RemoteCommandError: If the copy fails.
        """

    def run(self, command: Sequence[str]) -> CommandResult:
        """Run ``command`` on the host.

        Raises:
            RemoteCommandError: If the command exits non-zero.
        """
        result = self._exec(command)
        if not result.ok:
            raise RemoteCommandError(
                host=self.name,
                command=result.command_line,
                exit_code=result.exit_code,
                output=result.output,
            )
        return result

    def check_for_package(self, name: str) -> bool:
        """Whether the command ``name`` is available on the host."""
        return self._exec(["which", name]).ok

    def install_package(self, name: str, extra_flags: str | None = None) -> CommandResult:
        """Install ``name`` with the platform's package manager.

        Raises:
            RemoteCommandError: If the install command fails.
            HarnessError: If the platform has no supported package manager.
        """
        return self.run(package_install_command(self.platform, name, extra_flags))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} platform={self.platform!r}>"
