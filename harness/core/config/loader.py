"""
Configuration loader — reads harness.yml into domain models.

Reads YAML, validates against the Pydantic schema, then checks the
package section's category keys against the platform table so that a
typo there fails at load time instead of silently leaving a platform
untested.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from harness.core.errors import ConfigError, UnknownPlatformError
from harness.core.models.config import HarnessConfig
from harness.core.services.platforms import parse_category

logger = logging.getLogger(__name__)

CONFIG_FILE = "harness.yml"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for harness.yml starting from ``start_dir`` (default: cwd), walking up.

    Returns:
        Path to harness.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None) -> HarnessConfig:
    """Load and validate harness configuration.

    Args:
        path: Explicit path to harness.yml. If None, searches upward.

    Returns:
        Validated HarnessConfig. A relative ``configs_dir`` is resolved
        against the directory holding the file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Specify one with --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading harness config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = HarnessConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid harness configuration: {e}") from e
    except ConfigError as e:
        raise ConfigError(f"{e} in {path}") from e

    for key in config.packages:
        try:
            parse_category(key)
        except UnknownPlatformError:
            raise ConfigError(f"Unknown platform '{key}' in packages section of {path}") from None

    configs_dir = Path(config.configs_dir).expanduser()
    if not configs_dir.is_absolute():
        config.configs_dir = str((path.parent / configs_dir).resolve())

    logger.info("Loaded harness config with %d hosts", len(config.hosts))
    return config
