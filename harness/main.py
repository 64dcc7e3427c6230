"""
Acceptance harness — CLI entrypoint.

Usage:
    harness --help
    harness classify centos-7-x86_64
    harness install-packages --package redhat=facter
    harness install-repos abc123 --host agent1
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from harness import __version__
from harness.core.observability.logging_config import resolve_level, setup_from_env


@click.group()
@click.version_option(version=__version__, prog_name="harness")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (includes wget output).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to harness.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Acceptance harness — provision test hosts for acceptance runs."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    setup_from_env(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Helpers ─────────────────────────────────────────────────────


@contextmanager
def _fail_on_harness_error() -> Iterator[None]:
    """Turn a HarnessError into a red message and exit status 1."""
    from harness.core.errors import HarnessError

    try:
        yield
    except HarnessError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _load(ctx: click.Context):
    from harness.core.config.loader import load_config

    return load_config(ctx.obj.get("config_path"))


def _select_hosts(ctx: click.Context, names: tuple[str, ...], mock: bool) -> list:
    """Build Host objects for ``names`` (all configured hosts when empty)."""
    from harness.adapters import MockHost, SSHHost
    from harness.core.errors import ConfigError

    config = _load(ctx)
    if names:
        selected = []
        for name in names:
            host_cfg = config.get_host(name)
            if host_cfg is None:
                raise ConfigError(f"Unknown host '{name}'")
            selected.append(host_cfg)
    else:
        selected = list(config.hosts)

    if not selected:
        raise ConfigError("No hosts configured")

    if mock:
        return [MockHost(name=h.name, platform=h.platform) for h in selected]
    return [SSHHost.from_config(h) for h in selected]


def _parse_package_option(value: str) -> tuple[str, str | list[str]]:
    """``CAT=PKG`` or ``CAT=PROBE:PKG``."""
    category, sep, entry = value.partition("=")
    if not sep or not category or not entry:
        raise click.BadParameter(f"expected CATEGORY=PACKAGE, got {value!r}", param_hint="--package")
    probe, sep, package = entry.partition(":")
    if sep:
        return category, [probe, package]
    return category, entry


# ── Platform ────────────────────────────────────────────────────


@cli.command()
@click.argument("platform")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def classify(platform: str, as_json: bool) -> None:
    """Show the platform category of PLATFORM."""
    from harness.core.services.platforms import classify as classify_platform
    from harness.core.services.platforms import with_version_codename

    with _fail_on_harness_error():
        category = classify_platform(platform)

    if as_json:
        click.echo(json.dumps({
            "platform": platform,
            "category": category.value,
            "codename_platform": with_version_codename(platform),
        }, indent=2))
        return

    click.echo(f"{platform} → {category.value}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def hosts(ctx: click.Context, as_json: bool) -> None:
    """List configured hosts with their platform category."""
    from harness.core.errors import UnknownPlatformError
    from harness.core.services.platforms import classify as classify_platform

    with _fail_on_harness_error():
        config = _load(ctx)

    rows = []
    for h in config.hosts:
        try:
            category = classify_platform(h.platform).value
        except UnknownPlatformError:
            category = None
        rows.append({
            "name": h.name,
            "address": h.address,
            "platform": h.platform,
            "category": category,
        })

    if as_json:
        click.echo(json.dumps({"hosts": rows}, indent=2))
        return

    if not rows:
        click.secho("⚠️  No hosts configured", fg="yellow")
        return

    click.secho(f"🖥️  Hosts: {len(rows)}", fg="cyan", bold=True)
    for row in rows:
        label = row["category"] or "unknown"
        click.echo(f"   • {row['name']} ({row['address']})  {row['platform']} [{label}]")


# ── Packages ────────────────────────────────────────────────────


@cli.command("install-packages")
@click.option("--host", "host_names", multiple=True, help="Target host (default: all).")
@click.option(
    "--package", "-p", "package_opts", multiple=True,
    help="CATEGORY=PACKAGE or CATEGORY=COMMAND:PACKAGE (default: packages from harness.yml).",
)
@click.option("--check-if-exists", is_flag=True, help="Skip packages whose command is present.")
@click.option("--mock", is_flag=True, help="Use mock hosts (no remote execution).")
@click.pass_context
def install_packages_cmd(
    ctx: click.Context,
    host_names: tuple[str, ...],
    package_opts: tuple[str, ...],
    check_if_exists: bool,
    mock: bool,
) -> None:
    """Install packages on the selected hosts."""
    from harness.core.services.packages import install_packages

    with _fail_on_harness_error():
        targets = _select_hosts(ctx, host_names, mock)

        mapping: dict[str, list] = {}
        if package_opts:
            for opt in package_opts:
                category, entry = _parse_package_option(opt)
                mapping.setdefault(category, []).append(entry)
        else:
            mapping = dict(_load(ctx).packages)

        if not mapping:
            click.secho("⚠️  No packages to install", fg="yellow")
            return

        install_packages(targets, mapping, check_if_exists=check_if_exists)

    click.secho(f"✅ Packages processed on {len(targets)} host(s)", fg="green")


# ── Fetching ────────────────────────────────────────────────────


@cli.command("fetch")
@click.argument("base_url")
@click.argument("file_name")
@click.argument("dest_dir", type=click.Path(file_okay=False))
def fetch_cmd(base_url: str, file_name: str, dest_dir: str) -> None:
    """Download BASE_URL/FILE_NAME into DEST_DIR unless already there."""
    from harness.core.services.fetch import fetch

    with _fail_on_harness_error():
        path = fetch(base_url, file_name, dest_dir)
    click.echo(str(path))


@cli.command("mirror")
@click.argument("url")
@click.argument("dest_dir", type=click.Path(file_okay=False))
def mirror_cmd(url: str, dest_dir: str) -> None:
    """Recursively mirror the remote directory URL into DEST_DIR."""
    from harness.core.services.fetch import fetch_remote_dir

    with _fail_on_harness_error():
        path = fetch_remote_dir(url, dest_dir)
    click.echo(str(path))


# ── Host preparation ────────────────────────────────────────────


@cli.command("stop-firewall")
@click.option("--host", "host_names", multiple=True, help="Target host (default: all).")
@click.option("--mock", is_flag=True, help="Use mock hosts (no remote execution).")
@click.pass_context
def stop_firewall_cmd(ctx: click.Context, host_names: tuple[str, ...], mock: bool) -> None:
    """Disable the firewall on the selected hosts (best effort)."""
    from harness.core.services.firewall import stop_firewall

    with _fail_on_harness_error():
        for host in _select_hosts(ctx, host_names, mock):
            command = stop_firewall(host)
            if command is None:
                click.secho(f"   ⚠️  {host.name}: no firewall rule for {host.platform}", fg="yellow")
            else:
                click.echo(f"   ✓ {host.name}: {' '.join(command)}")


@cli.command("install-repos")
@click.argument("sha")
@click.option("--host", "host_names", multiple=True, help="Target host (default: all).")
@click.option(
    "--configs-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Local artifact cache (default: configs_dir from harness.yml).",
)
@click.option("--mock", is_flag=True, help="Use mock hosts (no remote execution).")
@click.pass_context
def install_repos_cmd(
    ctx: click.Context,
    sha: str,
    host_names: tuple[str, ...],
    configs_dir: str | None,
    mock: bool,
) -> None:
    """Point the selected hosts' package managers at build SHA."""
    from harness.core.services.repos import install_repos

    with _fail_on_harness_error():
        config = _load(ctx)
        targets = _select_hosts(ctx, host_names, mock)
        for host in targets:
            result = install_repos(host, sha, configs_dir or config.configs_dir, config.repos)
            if result is None:
                click.secho(f"   ⚠️  {host.name}: no repository layout for {host.platform}", fg="yellow")
            else:
                click.echo(f"   ✓ {host.name}: {result.family.value} repos for {sha}")


# ── Config ──────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Configuration management."""


@config.command("check")
@click.pass_context
def config_check(ctx: click.Context) -> None:
    """Validate harness.yml."""
    with _fail_on_harness_error():
        cfg = _load(ctx)

    click.secho("✅ Configuration is valid", fg="green", bold=True)
    click.echo(f"   Hosts: {len(cfg.hosts)}")
    click.echo(f"   Package categories: {', '.join(cfg.packages) or 'none'}")
    click.echo(f"   Build server: {cfg.repos.builds_url} ({cfg.repos.project})")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
