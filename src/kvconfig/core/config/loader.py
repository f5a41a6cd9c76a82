"""Configuration loader for resolver configuration.

This module provides functions to load and validate resolver configuration
from a config.yaml file.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import ResolverConfigModel

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "KVCONFIG_RESOLVER_CONFIG"


def load_resolver_config(config_path: Path | None = None) -> ResolverConfigModel:
    """Load resolver configuration from a config.yaml file.

    Args:
        config_path: Optional path to the config.yaml file.
                    If not provided, looks for:
                    1. KVCONFIG_RESOLVER_CONFIG environment variable
                    2. ~/.kvconfig/config.yaml
                    3. ./config.yaml

    Returns:
        ResolverConfigModel with resolver settings

    Raises:
        FileNotFoundError: If an explicitly named config file doesn't exist
        ValueError: If config is invalid
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            config_path = Path(env_path)
        else:
            candidates = [Path.home() / ".kvconfig" / "config.yaml", Path.cwd() / "config.yaml"]
            for candidate in candidates:
                if candidate.exists():
                    config_path = candidate
                    break

            if config_path is None:
                logger.info("No resolver config file found, using default configuration")
                return ResolverConfigModel()

    if not config_path.exists():
        raise FileNotFoundError(f"Resolver config file not found at {config_path}")

    logger.debug(f"Loading resolver config from: {config_path}")

    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML config file {config_path}: {e}") from e

    if not raw_config:
        logger.info("Empty resolver config file, using default configuration")
        return ResolverConfigModel()

    if not isinstance(raw_config, dict):
        raise ValueError(f"Invalid resolver config in {config_path}: expected a mapping")

    try:
        resolver_config = build_resolver_config(raw_config.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"Invalid resolver config: {e}") from e

    logger.debug(f"Loaded resolver config: {resolver_config}")
    return resolver_config


def build_resolver_config(config_section: dict[str, Any]) -> ResolverConfigModel:
    """Build a ResolverConfigModel from the 'config' section of a config file.

    Sections that are present but empty (``keyvault:`` with no body) fall back
    to their defaults.
    """
    sections = {key: value for key, value in config_section.items() if value is not None}
    return ResolverConfigModel.model_validate(sections)
