"""
Tests for configuration loading — harness.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from harness.core.config.loader import ConfigError, find_config_file, load_config
from harness.core.models.package import PackageSpec


class TestLoadConfig:
    def test_hosts(self, harness_yml: Path):
        config = load_config(harness_yml)
        assert [h.name for h in config.hosts] == ["agent-el7", "agent-xenial", "agent-win"]
        xenial = config.get_host("agent-xenial")
        assert xenial.user == "ubuntu"
        assert xenial.port == 2222
        assert config.get_host("agent-win").address == "agent-win"

    def test_packages(self, harness_yml: Path):
        config = load_config(harness_yml)
        assert config.packages["redhat"] == [
            PackageSpec(command="facter", package="facter"),
            PackageSpec(command="git", package="git-core"),
        ]

    def test_repos(self, harness_yml: Path):
        config = load_config(harness_yml)
        assert config.repos.builds_url == "http://builds.example.lan"
        assert config.repos.yum_url == "http://yum.puppetlabs.com"

    def test_relative_configs_dir(self, harness_yml: Path):
        config = load_config(harness_yml)
        assert config.configs_dir == str((harness_yml.parent / "repo-configs").resolve())

    def test_absolute_configs_dir(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text(f"configs_dir: {tmp_path / 'abs'}\n")
        assert load_config(path).configs_dir == str(tmp_path / "abs")

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text("")
        config = load_config(path)
        assert config.hosts == []
        assert config.packages == {}


class TestLoadConfigErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_no_file_found(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigError, match="No harness.yml"):
            load_config()

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text("hosts: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_host_without_platform(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text("hosts:\n  - name: agent\n")
        with pytest.raises(ConfigError, match="Invalid harness configuration"):
            load_config(path)

    def test_unknown_package_category(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text(textwrap.dedent("""\
            packages:
              redhat: [facter]
              freebsd: [facter]
        """))
        with pytest.raises(ConfigError, match="Unknown platform 'freebsd'"):
            load_config(path)

    def test_bad_package_entry(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text("packages:\n  redhat:\n    - [a, b, c]\n")
        with pytest.raises(ConfigError, match="Package entry must be"):
            load_config(path)

    def test_string_package_list(self, tmp_path: Path):
        path = tmp_path / "harness.yml"
        path.write_text("packages:\n  redhat: facter\n")
        with pytest.raises(ConfigError, match="Package list for 'redhat' must be a list"):
            load_config(path)


class TestFindConfigFile:
    def test_in_directory(self, harness_yml: Path):
        assert find_config_file(harness_yml.parent) == harness_yml.resolve()

    def test_walks_up(self, harness_yml: Path):
        nested = harness_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == harness_yml.resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_config_file(tmp_path) is None
