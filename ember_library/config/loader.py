"""Configuration loading for ember apps.

This module handles loading settings from a YAML file and environment
variables.

Contract:
- Inputs: Config file paths, environment variables
- Outputs: EmberCliSettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path

import yaml

from ..storage.paths import get_config_dir
from .settings import EmberCliSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "EMBER_CLI_"

DEFAULT_CONFIG = """# ember-cli build coordination
# Values here are overridden by EMBER_CLI_* environment variables

# Host environment; "production" copies index.html once per build
environment: "development"

# Host application root and build working directory
# root_path: "."
# tool_root: "tmp/ember-cli"

# Seconds between build lockfile checks, and an optional wait timeout
poll_interval: 0.1
# wait_timeout: 300

log_level: "info"
host: "127.0.0.1"
port: 8430

# Apps to manage
# apps:
#   frontend:
#     path: "frontend"
#     name: "my-ember-app"
#     exclude_ember_deps: ["jquery"]
#     watcher: "polling"
apps: {}
"""


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to ember-cli.yaml in config directory

    Example:
        >>> config_path = get_config_path()
        >>> assert config_path.name == "ember-cli.yaml"
    """
    return get_config_dir() / "ember-cli.yaml"


def create_default_config() -> None:
    """Create default config file if it doesn't exist."""
    config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def load_config(config_path: Path | None = None) -> EmberCliSettings:
    """Load settings from YAML and environment.

    Environment variables take precedence over YAML settings.
    Variables should be prefixed with EMBER_CLI_ (e.g., EMBER_CLI_ENVIRONMENT).

    Args:
        config_path: Optional config file path (default: ember-cli.yaml in config dir)

    Returns:
        Validated settings

    Example:
        >>> settings = load_config()
        >>> assert isinstance(settings, EmberCliSettings)
    """
    if config_path is None:
        config_path = get_config_path()
        if not config_path.exists():
            create_default_config()

    yaml_settings = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_settings = yaml.safe_load(f) or {}
            logger.debug(f"Loaded config from {config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            logger.info("Using default settings and environment variables")

    if not isinstance(yaml_settings, dict):
        logger.warning(f"Ignoring config at {config_path}: expected a mapping")
        yaml_settings = {}

    # defaults < YAML < env vars
    filtered_yaml = {
        key: value for key, value in yaml_settings.items() if f"{ENV_PREFIX}{key.upper()}" not in os.environ
    }

    settings = EmberCliSettings(**filtered_yaml)

    logger.info(
        f"Ember configuration loaded: environment={settings.environment}, "
        f"root_path={settings.root_path}, apps={list(settings.apps)}"
    )

    return settings
