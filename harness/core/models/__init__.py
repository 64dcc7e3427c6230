"""
Domain models — Pydantic types for the harness.

    from harness.core.models import HarnessConfig, HostConfig, PackageSpec
"""

from harness.core.models.config import HarnessConfig, HostConfig, RepoSettings
from harness.core.models.package import PackageSpec, parse_package_list

__all__ = [
    "HarnessConfig",
    "HostConfig",
    "PackageSpec",
    "RepoSettings",
    "parse_package_list",
]
