"""
SSH host — run commands and copy files with the system ssh/scp clients.

Commands are passed as argv lists and shell-quoted once, here, for the
remote login shell. No service ever builds a remote command string.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from collections.abc import Sequence
from pathlib import Path

from harness.adapters.base import CommandResult, Host
from harness.core.errors import RemoteCommandError
from harness.core.models.config import HostConfig

logger = logging.getLogger(__name__)


class SSHHost(Host):
    """A test host reached over SSH as ``user@address``."""

    def __init__(
        self,
        name: str,
        platform: str,
        address: str = "",
        user: str = "root",
        port: int = 22,
        ssh_key: str = "",
        connect_timeout: int = 10,
    ):
        super().__init__(name, platform)
        self.address = address or name
        self.user = user
        self.port = port
        self.ssh_key = ssh_key
        self.connect_timeout = connect_timeout

    @classmethod
    def from_config(cls, cfg: HostConfig) -> SSHHost:
        return cls(
            name=cfg.name,
            platform=cfg.platform,
            address=cfg.address,
            user=cfg.user,
            port=cfg.port,
            ssh_key=cfg.ssh_key,
            connect_timeout=cfg.connect_timeout,
        )

    @property
    def target(self) -> str:
        return f"{self.user}@{self.address}"

    def _ssh_options(self) -> list[str]:
        args = [
            "-o", "BatchMode=yes",
            "-o", f"ConnectTimeout={self.connect_timeout}",
            "-o", "StrictHostKeyChecking=accept-new",
        ]
        if self.ssh_key:
            args += ["-i", str(Path(self.ssh_key).expanduser())]
        return args

    def _exec(self, command: Sequence[str]) -> CommandResult:
        command = list(command)
        remote = shlex.join(command)
        cmd = ["ssh", *self._ssh_options(), "-p", str(self.port), self.target, remote]

        self.log.debug("Running: %s", remote)
        start = time.monotonic()
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
        elapsed_ms = int((time.monotonic() - start) * 1000)

        output = proc.stdout or ""
        for line in output.splitlines():
            self.log.debug(line)

        return CommandResult(
            host=self.name,
            command=command,
            exit_code=proc.returncode,
            output=output,
            duration_ms=elapsed_ms,
        )

    def scp_to(self, local_path: str | Path, remote_path: str) -> None:
        cmd = [
            "scp", "-r",
            *self._ssh_options(),
            "-P", str(self.port),
            str(local_path),
            f"{self.target}:{remote_path}",
        ]
        self.log.debug("Copying %s to %s", local_path, remote_path)
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
        if proc.returncode != 0:
            raise RemoteCommandError(
                host=self.name,
                command=shlex.join(cmd),
                exit_code=proc.returncode,
                output=proc.stdout or "",
            )
