"""
Firewall disabling — best effort.

Acceptance hosts need their firewall out of the way before agents and
servers can talk. Managing it is not required for correctness, so an
unrecognised platform is only logged.

Services are stopped through the configuration tool under test
(``puppet resource service <name> ensure=stopped``), except on Debian
where the rules are flushed directly.
"""

from __future__ import annotations

import re

from harness.adapters.base import Host


def _service_stopped(service: str) -> list[str]:
    return ["puppet", "resource", "service", service, "ensure=stopped"]


# First match wins: el-7 must be tried before the generic el|centos rule.
FIREWALL_RULES: tuple[tuple[re.Pattern[str], list[str]], ...] = (
    (re.compile(r"debian"), ["iptables", "-F"]),
    (re.compile(r"fedora|el-7"), _service_stopped("firewalld")),
    (re.compile(r"el|centos"), _service_stopped("iptables")),
    (re.compile(r"ubuntu"), _service_stopped("ufw")),
)


def firewall_command(platform: str) -> list[str] | None:
    """The command that disables the firewall on ``platform``, if known."""
    for pattern, command in FIREWALL_RULES:
        if pattern.search(platform):
            return list(command)
    return None


def stop_firewall(host: Host) -> list[str] | None:
    """Disable the firewall on ``host``.

    Returns:
        The command that was run, or None for an unrecognised platform.

    Raises:
        RemoteCommandError: The command failed on the host.
    """
    command = firewall_command(host.platform)
    if command is None:
        host.log.info("Not sure how to clear firewall on %s", host.platform)
        return None
    host.run(command)
    return command
