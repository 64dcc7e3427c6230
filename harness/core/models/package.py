"""
PackageSpec — one entry of a per-category package list.

Callers write package lists the short way::

    {"redhat": ["facter", ["git", "git-core"]]}

A bare name means "probe for this command, install this package". A
two-element entry is ``(probe command, package name)`` for the cases
where the binary on the system differs from the package that ships it.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from harness.core.errors import ConfigError


class PackageSpec(BaseModel):
    """Immutable (command, package) pair."""

    model_config = ConfigDict(frozen=True)

    command: str
    package: str

    @classmethod
    def parse(cls, entry: PackageSpec | str | Sequence[str]) -> PackageSpec:
        """Normalize a bare name or a ``(command, package)`` pair."""
        if isinstance(entry, PackageSpec):
            return entry
        if isinstance(entry, str):
            return cls(command=entry, package=entry)
        items = list(entry) if isinstance(entry, Sequence) else []
        if len(items) != 2 or not all(isinstance(i, str) for i in items):
            raise ConfigError(
                f"Package entry must be a name or a (command, package) pair, got {entry!r}"
            )
        command, package = items
        return cls(command=command, package=package)


def parse_package_list(
    entries: Sequence[PackageSpec | str | Sequence[str]] | None,
    key: object = None,
) -> list[PackageSpec]:
    """Normalize every entry of a package list.

    ``None`` is an empty list. A bare string is rejected instead of being
    iterated into one-letter names.
    """
    if entries is None:
        return []
    if isinstance(entries, str) or not isinstance(entries, Sequence):
        raise ConfigError(f"Package list for '{key}' must be a list")
    return [PackageSpec.parse(e) for e in entries]
