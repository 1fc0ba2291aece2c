"""
Configuration loader — reads dotclaude.yml into InstallerSettings.

The settings file is optional: without one every default applies.
When present it is read with PyYAML, validated against the Pydantic
schema, and combined with CLI flags into an immutable InstallConfig.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from dotclaude.core.models.settings import InstallConfig, InstallerSettings

logger = logging.getLogger(__name__)

SETTINGS_FILE = "dotclaude.yml"

# Environment override for the source checkout location
SOURCE_ENV_VAR = "DOTCLAUDE_SOURCE"


class ConfigError(Exception):
    """Raised when installer configuration is invalid or missing."""


def resolve_source_root(explicit: Path | None = None) -> Path:
    """Locate the source checkout: --source, then DOTCLAUDE_SOURCE, then cwd."""
    if explicit is not None:
        root = explicit
    elif os.environ.get(SOURCE_ENV_VAR):
        root = Path(os.environ[SOURCE_ENV_VAR])
    else:
        root = Path.cwd()

    root = root.expanduser().resolve()
    if not root.is_dir():
        raise ConfigError(f"Source directory not found: {root}")
    return root


def find_settings_file(source_root: Path) -> Path | None:
    """Return ``<source_root>/dotclaude.yml`` if it exists."""
    candidate = source_root / SETTINGS_FILE
    return candidate if candidate.is_file() else None


def load_settings(path: Path | None = None) -> InstallerSettings:
    """Load and validate installer settings.

    Args:
        path: Settings file. None means defaults.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    if path is None:
        return InstallerSettings()

    if not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return InstallerSettings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under an "installer" key or be flat
    settings_data = data.get("installer", data)
    if not isinstance(settings_data, dict):
        raise ConfigError(f"Expected 'installer' to be a mapping in {path}")

    try:
        settings = InstallerSettings.model_validate(settings_data)
    except Exception as e:
        raise ConfigError(f"Invalid installer settings: {e}") from e

    logger.info("Loaded settings from %s", path)
    return settings


def build_install_config(
    *,
    source_root: Path | None = None,
    settings_path: Path | None = None,
    home: Path | None = None,
    skip_deps: bool = False,
    no_backup: bool = False,
    assume_yes: bool = False,
) -> InstallConfig:
    """Assemble the immutable per-run configuration.

    Raises:
        ConfigError: If the source checkout or settings are invalid.
    """
    root = resolve_source_root(source_root)
    settings = load_settings(settings_path or find_settings_file(root))
    return InstallConfig(
        home=(home or Path.home()).expanduser(),
        source_root=root,
        skip_deps=skip_deps,
        no_backup=no_backup,
        assume_yes=assume_yes,
        settings=settings,
    )
