"""
Package installation across hosts.

Callers declare packages per platform category::

    install_packages(hosts, {
        "redhat": ["facter", ["git", "git-core"]],
        "debian": ["facter"],
    }, check_if_exists=True)

Every host receives the packages of every category whose pattern
matches its platform string. Categories that match nothing on a host
are simply not applied there; category keys that do not exist at all
are rejected before any host is touched.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from harness.adapters.base import Host
from harness.core.errors import UnknownPlatformError
from harness.core.models.package import PackageSpec, parse_package_list
from harness.core.services.platforms import (
    PLATFORM_PATTERNS,
    PlatformCategory,
    PlatformRule,
    matches,
    parse_category,
)

logger = logging.getLogger(__name__)

# Locally built acceptance packages are unsigned.
_EXTRA_FLAGS: dict[PlatformCategory, str] = {
    PlatformCategory.DEBIAN: "--allow-unauthenticated",
}

PackageEntry = PackageSpec | str | Sequence[str]


def _normalize(
    category_to_packages: Mapping[PlatformCategory | str, Sequence[PackageEntry]],
) -> list[tuple[PlatformCategory, list[PackageSpec]]]:
    plan = []
    for key, entries in category_to_packages.items():
        try:
            category = parse_category(key)
        except UnknownPlatformError:
            raise UnknownPlatformError(
                str(key), f"Unknown platform '{key}' in package mapping"
            ) from None
        plan.append((category, parse_package_list(entries, category.value)))
    return plan


def install_packages(
    hosts: Host | Sequence[Host],
    category_to_packages: Mapping[PlatformCategory | str, Sequence[PackageEntry]],
    check_if_exists: bool = False,
    rules: tuple[PlatformRule, ...] = PLATFORM_PATTERNS,
) -> bool:
    """Install the declared packages on every matching host.

    Args:
        hosts: One host or a sequence of hosts.
        category_to_packages: Category key → package entries. An entry is
            a package name or a ``(probe command, package)`` pair.
        check_if_exists: Probe for the command first and skip the install
            when it is already present.
        rules: Platform rule table.

    Returns:
        True once every host and category has been processed.

    Raises:
        UnknownPlatformError: A category key is not a known category.
            Raised before any host is touched.
        RemoteCommandError: An install failed; remaining work is abandoned.
    """
    if isinstance(hosts, Host):
        hosts = [hosts]

    plan = _normalize(category_to_packages)

    for host in hosts:
        for category, packages in plan:
            if not matches(category, host.platform, rules):
                continue
            for spec in packages:
                if check_if_exists and host.check_for_package(spec.command):
                    logger.debug("%s: %s already present, skipping", host.name, spec.command)
                    continue
                host.log.info("Installing %s", spec.package)
                host.install_package(spec.package, _EXTRA_FLAGS.get(category))

    return True
