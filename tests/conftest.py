"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from pathlib import Path

import pytest

from harness.adapters.mock import MockHost


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """CLI tests reconfigure the root logger; put it back afterwards."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def centos_host() -> MockHost:
    return MockHost(name="centos", platform="centos-7-x86_64")


@pytest.fixture
def ubuntu_host() -> MockHost:
    return MockHost(name="ubuntu", platform="ubuntu-1604-amd64")


@pytest.fixture
def windows_host() -> MockHost:
    return MockHost(name="windows", platform="windows-2012-64")


@pytest.fixture
def harness_yml(tmp_path: Path) -> Path:
    """Create a valid harness.yml in a temp directory."""
    content = textwrap.dedent("""\
        configs_dir: repo-configs
        repos:
          builds_url: http://builds.example.lan/
          project: facter
        hosts:
          - name: agent-el7
            hostname: 10.0.0.5
            platform: centos-7-x86_64
          - name: agent-xenial
            hostname: 10.0.0.6
            platform: ubuntu-1604-amd64
            user: ubuntu
            port: 2222
          - name: agent-win
            platform: windows-2012-64
        packages:
          redhat:
            - facter
            - [git, git-core]
          debian:
            - facter
    """)
    path = tmp_path / "harness.yml"
    path.write_text(content)
    return path
