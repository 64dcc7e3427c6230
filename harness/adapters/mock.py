"""
Mock host — recording test double for every Host operation.

Used by the test-suite (and ``--mock`` on the CLI) to exercise the
provisioning services without touching a real machine. Every command,
copy, probe and install is appended to ``calls`` in order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from harness.adapters.base import CommandResult, Host
from harness.core.errors import RemoteCommandError


class MockHost(Host):
    """Host double.

    Args:
        name: Host name.
        platform: Platform string reported by the host.
        present: Commands ``check_for_package`` reports as installed.
        failing: Command names (argv[0]) that exit non-zero.
        failing_installs: Package names whose install fails.
    """

    def __init__(
        self,
        name: str = "mock",
        platform: str = "centos-7-x86_64",
        present: Iterable[str] = (),
        failing: Iterable[str] = (),
        failing_installs: Iterable[str] = (),
    ):
        super().__init__(name, platform)
        self.present = set(present)
        self.failing = set(failing)
        self.failing_installs = set(failing_installs)
        self.calls: list[tuple] = []

    @property
    def commands(self) -> list[list[str]]:
        """Every argv passed to ``run``, in order."""
        return [c[1] for c in self.calls if c[0] == "run"]

    @property
    def copies(self) -> list[tuple[str, str]]:
        """Every (local, remote) pair passed to ``scp_to``."""
        return [(c[1], c[2]) for c in self.calls if c[0] == "scp_to"]

    @property
    def installs(self) -> list[tuple[str, str | None]]:
        """Every (package, extra_flags) pair passed to ``install_package``."""
        return [(c[1], c[2]) for c in self.calls if c[0] == "install"]

    @property
    def probes(self) -> list[str]:
        """Every name passed to ``check_for_package``."""
        return [c[1] for c in self.calls if c[0] == "probe"]

    def _exec(self, command: Sequence[str]) -> CommandResult:
        command = list(command)
        self.calls.append(("run", command))
        exit_code = 1 if command and command[0] in self.failing else 0
        return CommandResult(host=self.name, command=command, exit_code=exit_code)

    def scp_to(self, local_path: str | Path, remote_path: str) -> None:
        self.calls.append(("scp_to", str(local_path), remote_path))

    def check_for_package(self, name: str) -> bool:
        self.calls.append(("probe", name))
        return name in self.present

    def install_package(self, name: str, extra_flags: str | None = None) -> CommandResult:
        self.calls.append(("install", name, extra_flags))
        if name in self.failing_installs:
            raise RemoteCommandError(
                host=self.name,
                command=f"install {name}",
                exit_code=1,
                output="mock install failure",
            )
        return CommandResult(host=self.name, command=["install", name])

    def reset(self) -> None:
        """Clear the call log."""
        self.calls.clear()
