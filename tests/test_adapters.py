"""
Tests for host adapters — base contract, mock host, SSH host.
"""

import shlex
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from harness.adapters.base import CommandResult, package_install_command
from harness.adapters.mock import MockHost
from harness.adapters.ssh import SSHHost
from harness.core.errors import HarnessError, RemoteCommandError
from harness.core.models.config import HostConfig

# ── Base contract ────────────────────────────────────────────────────


class TestCommandResult:
    def test_ok(self):
        assert CommandResult(host="h", command=["true"]).ok
        assert not CommandResult(host="h", command=["false"], exit_code=1).ok

    def test_command_line_quoted(self):
        r = CommandResult(host="h", command=["find", "/etc", "-name", "*.repo"])
        assert r.command_line == "find /etc -name '*.repo'"


class TestPackageInstallCommand:
    def test_redhat(self):
        assert package_install_command("centos-7-x86_64", "facter") == [
            "yum", "install", "-y", "facter",
        ]

    def test_debian_with_flags(self):
        assert package_install_command(
            "ubuntu-1604-amd64", "facter", "--allow-unauthenticated"
        ) == ["apt-get", "install", "-y", "--allow-unauthenticated", "facter"]

    def test_old_ubuntu_uses_apt(self):
        assert package_install_command("ubuntu-precise-amd64", "ruby1.8") == [
            "apt-get", "install", "-y", "ruby1.8",
        ]

    def test_solaris(self):
        assert package_install_command("solaris-11-sparc", "git") == ["pkg", "install", "git"]

    def test_windows_unsupported(self):
        with pytest.raises(HarnessError):
            package_install_command("windows-2012-64", "facter")

    def test_unknown_platform(self):
        with pytest.raises(HarnessError, match="No package manager"):
            package_install_command("aix-7.1-power", "facter")


# ── Mock host ────────────────────────────────────────────────────────


class TestMockHost:
    def test_records_commands(self):
        host = MockHost()
        result = host.run(["apt-get", "update"])
        assert result.ok
        assert host.commands == [["apt-get", "update"]]

    def test_failing_command_raises(self):
        host = MockHost(name="agent", failing={"rpm"})
        with pytest.raises(RemoteCommandError) as exc:
            host.run(["rpm", "-Uvh", "x.rpm"])
        assert exc.value.host == "agent"
        assert exc.value.exit_code == 1
        assert exc.value.command == "rpm -Uvh x.rpm"

    def test_probe(self):
        host = MockHost(present={"git"})
        assert host.check_for_package("git")
        assert not host.check_for_package("hg")
        assert host.probes == ["git", "hg"]

    def test_copies(self):
        host = MockHost()
        host.scp_to(Path("/tmp/a.rpm"), "/root")
        assert host.copies == [("/tmp/a.rpm", "/root")]

    def test_reset(self):
        host = MockHost()
        host.run(["true"])
        host.reset()
        assert host.calls == []

    def test_repr(self):
        assert "centos-7-x86_64" in repr(MockHost())


# ── SSH host ─────────────────────────────────────────────────────────


def _completed(returncode: int = 0, stdout: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)


@pytest.fixture
def ssh_host() -> SSHHost:
    return SSHHost.from_config(HostConfig(
        name="agent",
        hostname="10.0.0.5",
        platform="centos-7-x86_64",
        port=2222,
        ssh_key="/keys/id_rsa",
    ))


class TestSSHHost:
    def test_from_config(self, ssh_host: SSHHost):
        assert ssh_host.target == "root@10.0.0.5"
        assert ssh_host.platform == "centos-7-x86_64"
        assert ssh_host.log.name == "harness.hosts.agent"

    def test_address_defaults_to_name(self):
        host = SSHHost(name="box.example", platform="el-7-x86_64")
        assert host.target == "root@box.example"

    def test_run_quotes_remote_command(self, ssh_host: SSHHost):
        with patch("subprocess.run", return_value=_completed(stdout="ok\n")) as run:
            result = ssh_host.run(["find", "/root", "-name", "*.repo", "-delete"])

        cmd = run.call_args[0][0]
        assert cmd[0] == "ssh"
        assert "BatchMode=yes" in cmd
        assert cmd[cmd.index("-p") + 1] == "2222"
        assert cmd[cmd.index("-i") + 1] == "/keys/id_rsa"
        assert cmd[-2] == "root@10.0.0.5"
        assert shlex.split(cmd[-1]) == ["find", "/root", "-name", "*.repo", "-delete"]
        assert result.output == "ok\n"
        assert run.call_args[1]["errors"] == "replace"

    def test_run_failure(self, ssh_host: SSHHost):
        with patch("subprocess.run", return_value=_completed(returncode=3, stdout="denied")):
            with pytest.raises(RemoteCommandError) as exc:
                ssh_host.run(["iptables", "-F"])
        assert exc.value.exit_code == 3
        assert exc.value.output == "denied"
        assert "iptables -F" in str(exc.value)

    def test_check_for_package(self, ssh_host: SSHHost):
        with patch("subprocess.run", return_value=_completed(returncode=1)) as run:
            assert ssh_host.check_for_package("facter") is False
        assert run.call_args[0][0][-1] == "which facter"

        with patch("subprocess.run", return_value=_completed()):
            assert ssh_host.check_for_package("facter") is True

    def test_install_package(self, ssh_host: SSHHost):
        with patch("subprocess.run", return_value=_completed()) as run:
            ssh_host.install_package("facter")
        assert run.call_args[0][0][-1] == "yum install -y facter"

    def test_scp_to(self, ssh_host: SSHHost):
        with patch("subprocess.run", return_value=_completed()) as run:
            ssh_host.scp_to(Path("/cache/x86_64"), "/root")
        cmd = run.call_args[0][0]
        assert cmd[:2] == ["scp", "-r"]
        assert cmd[cmd.index("-P") + 1] == "2222"
        assert cmd[-2:] == ["/cache/x86_64", "root@10.0.0.5:/root"]

    def test_scp_failure(self, ssh_host: SSHHost):
        with patch("subprocess.run", return_value=_completed(returncode=1, stdout="lost connection")):
            with pytest.raises(RemoteCommandError) as exc:
                ssh_host.scp_to("/cache/a.rpm", "/root")
        assert exc.value.output == "lost connection"
