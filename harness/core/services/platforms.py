"""
Platform matching — map a free-form platform string to a category.

Test hosts report platform strings like ``centos-7-x86_64`` or
``ubuntu-1604-amd64``. Everything downstream (which packages, which
package manager, which firewall, which repo layout) branches on the
coarse category derived here.

The rule table is ordered and matching is first-match-wins, using
``re.search`` (case-sensitive substring match, not equality). The table
is injectable so callers and tests can supply their own.

Pure logic — no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from harness.core.errors import UnknownPlatformError


class PlatformCategory(str, Enum):
    """Coarse OS-family tag."""

    REDHAT = "redhat"
    DEBIAN = "debian"
    DEBIAN_RUBY18 = "debian_ruby18"
    SOLARIS = "solaris"
    WINDOWS = "windows"


@dataclass(frozen=True)
class PlatformRule:
    """One (category, pattern) entry of a rule table."""

    category: PlatformCategory
    pattern: re.Pattern[str]

    def matches(self, platform: str) -> bool:
        return self.pattern.search(platform) is not None


def _rule(category: PlatformCategory, pattern: str) -> PlatformRule:
    return PlatformRule(category=category, pattern=re.compile(pattern))


# Order matters for classify(): debian_ruby18 overlaps debian and is only
# reachable through matches()/install_packages, never as a classify result.
PLATFORM_PATTERNS: tuple[PlatformRule, ...] = (
    _rule(PlatformCategory.REDHAT, r"fedora|el|centos"),
    _rule(PlatformCategory.DEBIAN, r"debian|ubuntu"),
    _rule(PlatformCategory.DEBIAN_RUBY18, r"debian|ubuntu-lucid|ubuntu-precise"),
    _rule(PlatformCategory.SOLARIS, r"solaris"),
    _rule(PlatformCategory.WINDOWS, r"windows"),
)


# Release codenames keyed by the numeric version used in platform strings.
PLATFORM_VERSION_CODES: dict[str, dict[str, str]] = {
    "debian": {
        "10": "buster",
        "9": "stretch",
        "8": "jessie",
        "7": "wheezy",
        "6": "squeeze",
    },
    "ubuntu": {
        "2004": "focal",
        "1804": "bionic",
        "1710": "artful",
        "1704": "zesty",
        "1610": "yakkety",
        "1604": "xenial",
        "1510": "wily",
        "1504": "vivid",
        "1410": "utopic",
        "1404": "trusty",
        "1310": "saucy",
        "1304": "raring",
        "1210": "quantal",
        "1204": "precise",
        "1004": "lucid",
    },
}


def parse_category(key: PlatformCategory | str) -> PlatformCategory:
    """Coerce a category key (enum or its string value).

    Raises:
        UnknownPlatformError: If ``key`` names no category.
    """
    if isinstance(key, PlatformCategory):
        return key
    try:
        return PlatformCategory(key)
    except ValueError:
        raise UnknownPlatformError(str(key)) from None


def pattern_for(
    category: PlatformCategory | str,
    rules: tuple[PlatformRule, ...] = PLATFORM_PATTERNS,
) -> re.Pattern[str]:
    """Return the pattern registered for ``category`` in ``rules``."""
    category = parse_category(category)
    for rule in rules:
        if rule.category is category:
            return rule.pattern
    raise UnknownPlatformError(category.value)


def matches(
    category: PlatformCategory | str,
    platform: str,
    rules: tuple[PlatformRule, ...] = PLATFORM_PATTERNS,
) -> bool:
    """Whether ``platform`` matches the pattern of ``category``."""
    return pattern_for(category, rules).search(platform) is not None


def classify(
    platform: str,
    rules: tuple[PlatformRule, ...] = PLATFORM_PATTERNS,
) -> PlatformCategory:
    """Classify a platform string; the first matching rule wins.

    Raises:
        UnknownPlatformError: If no rule matches.
    """
    for rule in rules:
        if rule.matches(platform):
            return rule.category
    raise UnknownPlatformError(platform)


_VERSIONED = re.compile(r"^(debian|ubuntu)-([^-]+)-(.+)$")


def with_version_codename(platform: str) -> str:
    """Replace a known Debian/Ubuntu numeric version with its codename.

    ``ubuntu-1604-amd64`` → ``ubuntu-xenial-amd64``. Anything else,
    including an already-codenamed platform, is returned as given.
    """
    m = _VERSIONED.match(platform)
    if not m:
        return platform
    name, version, arch = m.groups()
    codename = PLATFORM_VERSION_CODES[name].get(version)
    if codename is None:
        return platform
    return f"{name}-{codename}-{arch}"
