"""Adapters — host bindings used by the provisioning services.

Public re-exports for convenient access.
"""

from harness.adapters.base import CommandResult, Host
from harness.adapters.mock import MockHost
from harness.adapters.ssh import SSHHost

__all__ = [
    "CommandResult",
    "Host",
    "MockHost",
    "SSHHost",
]
