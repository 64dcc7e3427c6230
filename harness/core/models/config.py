"""
Harness configuration models — loaded from harness.yml.

The file declares the test hosts, where repository artifacts live, and
the default per-category package lists. Every section is optional; an
empty file yields a usable (host-less) configuration whose repository
settings point at the stock build infrastructure.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from harness.core.models.package import PackageSpec, parse_package_list


class HostConfig(BaseModel):
    """A test host reachable over SSH."""

    name: str
    hostname: str = ""
    platform: str
    user: str = "root"
    port: int = 22
    ssh_key: str = ""
    connect_timeout: int = 10

    @property
    def address(self) -> str:
        """Network address, falling back to the host name."""
        return self.hostname or self.name


class RepoSettings(BaseModel):
    """Where release packages and per-build repositories are fetched from."""

    yum_url: str = "http://yum.puppetlabs.com"
    apt_url: str = "http://apt.puppetlabs.com"
    builds_url: str = "http://builds.puppetlabs.lan"
    project: str = "facter"
    staging_dir: str = "/root"

    @field_validator("yum_url", "apt_url", "builds_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def build_url(self, sha: str) -> str:
        """Root URL of one build's artifacts."""
        return f"{self.builds_url}/{self.project}/{sha}"


class HarnessConfig(BaseModel):
    """Root of harness.yml."""

    configs_dir: str = "repo-configs"
    repos: RepoSettings = Field(default_factory=RepoSettings)
    hosts: list[HostConfig] = Field(default_factory=list)
    packages: dict[str, list[PackageSpec]] = Field(default_factory=dict)

    @field_validator("packages", mode="before")
    @classmethod
    def _parse_packages(cls, v: object) -> object:
        if not isinstance(v, dict):
            return v
        return {key: parse_package_list(entries, key) for key, entries in v.items()}

    def get_host(self, name: str) -> HostConfig | None:
        """Look up a host by name."""
        for host in self.hosts:
            if host.name == name:
                return host
        return None
