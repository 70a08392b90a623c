"""
Release descriptor loading.

The descriptor ships with the package as release.yaml, next to this module:

    name: plugincheck2
    version: 0.17.3
    url_template: https://host/v{{version}}/tool_{{version}}_{{platform}}_{{arch}}.tar.gz
    platform_mapping:
      win32: windows
    platform_url_templates:
      windows: https://host/v{{version}}/tool_{{version}}_{{platform}}_{{arch}}.zip
    cache_dir: ../.bin

The wrapper forwards every command-line argument, so it is tuned through
environment variables only:

    BINWRAPPER_CONFIG      alternative descriptor file
    BINWRAPPER_VERSION     release version override
    BINWRAPPER_CACHE_DIR   cache directory override
    BINWRAPPER_LOG_LEVEL   logging level name (DEBUG, INFO, ...)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from binwrapper.core.exceptions import ConfigurationError
from binwrapper.core.platform import DEFAULT_PLATFORM_MAPPING
from binwrapper.core.release import ReleaseDescriptor

logger = logging.getLogger(__name__)

ENV_CONFIG = "BINWRAPPER_CONFIG"
ENV_VERSION = "BINWRAPPER_VERSION"
ENV_CACHE_DIR = "BINWRAPPER_CACHE_DIR"
ENV_LOG_LEVEL = "BINWRAPPER_LOG_LEVEL"

PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DESCRIPTOR_FILE = Path(__file__).resolve().parent / "release.yaml"
DEFAULT_CACHE_DIR = PACKAGE_DIR / ".bin"

REQUIRED_KEYS = ("name", "version", "url_template")


@dataclass(frozen=True)
class WrapperConfig:
    """
    Configuration for one wrapper process, built once at startup.

    Attributes:
        descriptor: Release to provision
        cache_dir: Directory holding the archive and the extracted binary
        source: Descriptor file the configuration was read from
    """

    descriptor: ReleaseDescriptor
    cache_dir: Path
    source: Path


def load_yaml_config(config_file: Path) -> Dict[str, Any]:
    """
    Load and parse a YAML descriptor file.

    Args:
        config_file: Path to YAML file

    Returns:
        Parsed mapping

    Raises:
        ConfigurationError: If the file is missing, unreadable, not valid YAML
            or not a mapping
    """
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_file}")

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Expected a mapping in {config_file}, got {type(config).__name__}"
        )

    return config


def descriptor_from_dict(data: Mapping[str, Any]) -> ReleaseDescriptor:
    """
    Build a ReleaseDescriptor from parsed configuration.

    Raises:
        ConfigurationError: If required keys are missing or values are invalid
    """
    missing = [key for key in REQUIRED_KEYS if not data.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration keys: {', '.join(missing)}"
        )

    platform_mapping = data.get("platform_mapping", DEFAULT_PLATFORM_MAPPING)
    platform_url_templates = data.get("platform_url_templates") or {}

    for key, value in (
        ("platform_mapping", platform_mapping),
        ("platform_url_templates", platform_url_templates),
    ):
        if value is not None and not isinstance(value, dict):
            raise ConfigurationError(f"'{key}' must be a mapping")

    return ReleaseDescriptor(
        name=str(data["name"]),
        version=str(data["version"]),
        url_template=str(data["url_template"]),
        platform_mapping={
            str(k): str(v) for k, v in (platform_mapping or {}).items()
        },
        platform_url_templates={
            str(k): str(v) for k, v in platform_url_templates.items()
        },
    )


def resolve_cache_dir(
    data: Mapping[str, Any],
    config_file: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Determine the cache directory.

    Resolution order: BINWRAPPER_CACHE_DIR, the descriptor's cache_dir
    (relative to the descriptor file), then .bin inside the package.
    """
    environ = os.environ if environ is None else environ

    override = environ.get(ENV_CACHE_DIR)
    if override:
        return Path(override).expanduser()

    configured = data.get("cache_dir")
    if configured:
        path = Path(str(configured)).expanduser()
        if not path.is_absolute():
            path = config_file.parent / path
        return path

    return DEFAULT_CACHE_DIR


def load_config(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> WrapperConfig:
    """
    Load the wrapper configuration.

    Args:
        config_file: Descriptor file (BINWRAPPER_CONFIG or the bundled
            release.yaml if None)
        environ: Environment mapping (os.environ if None)

    Returns:
        WrapperConfig instance

    Raises:
        ConfigurationError: If the descriptor cannot be loaded

    Example:
        >>> config = load_config()
        >>> config.descriptor.name
        'plugincheck2'
    """
    environ = os.environ if environ is None else environ

    if config_file is None:
        env_file = environ.get(ENV_CONFIG)
        if env_file:
            config_file = Path(env_file).expanduser()
        else:
            config_file = DEFAULT_DESCRIPTOR_FILE
    config_file = Path(config_file)

    data = load_yaml_config(config_file)
    descriptor = descriptor_from_dict(data)

    version_override = environ.get(ENV_VERSION)
    if version_override and version_override != descriptor.version:
        logger.debug(
            f"Version override from {ENV_VERSION}: "
            f"{descriptor.version} -> {version_override}"
        )
        descriptor = descriptor.with_version(version_override)

    return WrapperConfig(
        descriptor=descriptor,
        cache_dir=resolve_cache_dir(data, config_file, environ),
        source=config_file,
    )


def log_level_from_env(
    default: int = logging.INFO, environ: Optional[Mapping[str, str]] = None
) -> int:
    """
    Read the logging level from BINWRAPPER_LOG_LEVEL.

    Unknown level names fall back to the default.
    """
    environ = os.environ if environ is None else environ
    name = environ.get(ENV_LOG_LEVEL, "").strip().upper()
    if not name:
        return default

    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default
