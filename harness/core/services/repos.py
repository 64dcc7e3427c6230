"""
Repository installation — point a host's package manager at one build.

For a build SHA, the host gets:

    1. the vendor release package (yum/apt key + base repo definitions),
    2. the build's repo definition file (.repo / .list),
    3. a local mirror of the build's package repository,

and the repo definition is rewritten so its base URL points at the
mirror copied onto the host instead of the build server. Nothing is
parsed structurally; the definition files are patched with ``sed``.

Artifacts are fetched once per platform into ``<configs_dir>/<platform>``
and reused across hosts of the same platform.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from harness.adapters.base import Host
from harness.core.errors import FetchError
from harness.core.models.config import RepoSettings
from harness.core.services.fetch import fetch, fetch_remote_dir, link_exists
from harness.core.services.platforms import with_version_codename

logger = logging.getLogger(__name__)

RPM_PLATFORM = re.compile(r"^(fedora|el|centos)-(\d+)-(.+)$")
DEB_PLATFORM = re.compile(r"^(debian|ubuntu)-([^-]+)-(.+)$")

YUM_REPOS_DIR = "/etc/yum.repos.d/"
APT_SOURCES_DIR = "/etc/apt/sources.list.d/"


class RepoFamily(str, Enum):
    RPM = "rpm"
    DEB = "deb"


@dataclass(frozen=True)
class RepoInstallContext:
    """Values derived from a platform string for one install_repos call."""

    family: RepoFamily
    variant: str
    version: str
    arch: str
    sha: str
    configs_dir: Path
    fedora_prefix: str = ""

    @property
    def release(self) -> str:
        """Version as used in build-server paths (``f25`` for Fedora)."""
        return f"{self.fedora_prefix}{self.version}"


def repo_context(platform: str, sha: str, repo_configs_dir: str | Path) -> RepoInstallContext | None:
    """Derive the install context for ``platform``, or None if it has no repo layout."""
    configs_dir = Path(repo_configs_dir) / platform

    m = RPM_PLATFORM.match(platform)
    if m:
        name, version, arch = m.groups()
        variant = "el" if name == "centos" else name
        return RepoInstallContext(
            family=RepoFamily.RPM,
            variant=variant,
            version=version,
            arch=arch,
            sha=sha,
            configs_dir=configs_dir,
            fedora_prefix="f" if variant == "fedora" else "",
        )

    m = DEB_PLATFORM.match(platform)
    if m:
        variant, version, arch = m.groups()
        return RepoInstallContext(
            family=RepoFamily.DEB,
            variant=variant,
            version=version,
            arch=arch,
            sha=sha,
            configs_dir=configs_dir,
        )

    return None


# ── sed helpers ─────────────────────────────────────────────────


def _sed_pattern(text: str) -> str:
    """Escape ``text`` for a sed BRE delimited by ``|``."""
    return re.sub(r"([.\[\]*^$\\|])", r"\\\1", text)


def _sed_replacement(text: str) -> str:
    return re.sub(r"([&\\|])", r"\\\1", text)


def _rewrite_in_dir(directory: str, glob: str, expression: str) -> list[str]:
    return ["find", directory, "-name", glob, "-exec", "sed", "-i", expression, "{}", ";"]


def _remove_in_dir(directory: str, glob: str) -> list[str]:
    return ["find", directory, "-maxdepth", "1", "-name", glob, "-delete"]


# ── RPM family ──────────────────────────────────────────────────


def resolve_rpm_repo_url(ctx: RepoInstallContext, settings: RepoSettings) -> str:
    """Pick the build's repo directory: ``products`` first, then ``devel``.

    Raises:
        FetchError: Neither location is reachable.
    """
    base = f"{settings.build_url(ctx.sha)}/repos/{ctx.variant}/{ctx.release}"
    link = f"{base}/products/{ctx.arch}/"
    if not link_exists(link):
        logger.info("No products repo at %s, trying devel", link)
        link = f"{base}/devel/{ctx.arch}/"
    if not link_exists(link):
        raise FetchError(link, f"Unable to reach a repo directory at {link}")
    return link


def _install_rpm_repos(host: Host, ctx: RepoInstallContext, settings: RepoSettings) -> None:
    staging = settings.staging_dir.rstrip("/")

    rpm = fetch(
        settings.yum_url,
        f"puppetlabs-release-{ctx.variant}-{ctx.version}.noarch.rpm",
        ctx.configs_dir,
    )
    repo = fetch(
        f"{settings.build_url(ctx.sha)}/repo_configs/rpm/",
        f"pl-{settings.project}-{ctx.sha}-{ctx.variant}-{ctx.release}-{ctx.arch}.repo",
        ctx.configs_dir,
    )
    repo_dir = fetch_remote_dir(resolve_rpm_repo_url(ctx, settings), ctx.configs_dir)

    host.run(_remove_in_dir(staging, "*.repo"))
    host.run(_remove_in_dir(staging, "*.rpm"))
    host.run(["rm", "-rf", f"{staging}/{ctx.arch}"])

    host.scp_to(rpm, staging)
    host.scp_to(repo, staging)
    host.scp_to(repo_dir, staging)

    host.run(["mv", f"{staging}/{repo.name}", YUM_REPOS_DIR])
    expression = "s|baseurl\\s*=\\s*{}.*$|baseurl={}|".format(
        _sed_pattern(settings.builds_url),
        _sed_replacement(f"file://{staging}/{ctx.arch}"),
    )
    host.run(_rewrite_in_dir(YUM_REPOS_DIR, "*.repo", expression))
    host.run(["rpm", "-Uvh", "--force", f"{staging}/{rpm.name}"])


# ── Debian family ───────────────────────────────────────────────


def _install_deb_repos(host: Host, ctx: RepoInstallContext, settings: RepoSettings) -> None:
    staging = settings.staging_dir.rstrip("/")

    deb = fetch(
        settings.apt_url,
        f"puppetlabs-release-{ctx.version}.deb",
        ctx.configs_dir,
    )
    source_list = fetch(
        f"{settings.build_url(ctx.sha)}/repo_configs/deb/",
        f"pl-{settings.project}-{ctx.sha}-{ctx.version}.list",
        ctx.configs_dir,
    )
    repo_dir = fetch_remote_dir(
        f"{settings.build_url(ctx.sha)}/repos/apt/{ctx.version}",
        ctx.configs_dir,
    )

    host.run(_remove_in_dir(staging, "*.list"))
    host.run(_remove_in_dir(staging, "*.deb"))
    host.run(["rm", "-rf", f"{staging}/{ctx.version}"])

    host.scp_to(deb, staging)
    host.scp_to(source_list, staging)
    host.scp_to(repo_dir, staging)

    host.run(["mv", f"{staging}/{source_list.name}", APT_SOURCES_DIR])
    expression = "s|deb\\s\\+{}.*$|deb {}|".format(
        _sed_pattern(settings.builds_url),
        _sed_replacement(f"file://{staging}/{ctx.version} {ctx.version} main"),
    )
    host.run(_rewrite_in_dir(APT_SOURCES_DIR, "*.list", expression))
    host.run(["dpkg", "-i", "--force-all", f"{staging}/{deb.name}"])
    host.run(["apt-get", "update"])


# ── Entry point ─────────────────────────────────────────────────


def install_repos(
    host: Host,
    sha: str,
    repo_configs_dir: str | Path,
    settings: RepoSettings | None = None,
) -> RepoInstallContext | None:
    """Configure ``host`` to install packages from build ``sha``.

    Args:
        host: Target host.
        sha: Build identifier on the build server.
        repo_configs_dir: Local cache root for fetched artifacts.
        settings: Artifact locations; defaults to the stock servers.

    Returns:
        The derived context, or None when the platform has no repository
        layout (logged, not an error).

    Raises:
        FetchError: An artifact could not be fetched or no repo directory
            was reachable.
        MirrorError: Mirroring the repository directory failed.
        RemoteCommandError: A step failed on the host.
    """
    settings = settings or RepoSettings()
    platform = with_version_codename(host.platform)

    ctx = repo_context(platform, sha, repo_configs_dir)
    if ctx is None:
        host.log.info("No repository installation step for %s yet...", platform)
        return None

    logger.debug("Installing %s repos for %s on %s", ctx.family.value, sha, host.name)
    if ctx.family is RepoFamily.RPM:
        _install_rpm_repos(host, ctx, settings)
    else:
        _install_deb_repos(host, ctx, settings)
    return ctx
