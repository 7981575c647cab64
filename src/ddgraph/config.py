"""
Global Configuration and Defaults.

Constants used by the graph model and the settings file read by the CLI.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .core.errors import ConfigError
from .core.types import Density

logger = logging.getLogger(__name__)

# --- Visibility ---
# Elements within this many hops of the focal node are visible when no
# encoding is supplied
DEFAULT_VISIBLE_HOPS = 2

# --- Caching ---
# Most-recent results kept per GraphModel for get_visible / uiFind queries
VISIBLE_CACHE_SIZE = 10

# Most-recent GraphModels kept by make_graph
GRAPH_CACHE_SIZE = 10

DEFAULT_DENSITY = Density.PREVENT_PATH_ENTANGLEMENT

DEFAULT_CONFIG_PATH = Path(".ddg/config.yaml")


class Settings(BaseModel):
    """
    User settings, read from `.ddg/config.yaml`.

    Example:
        density: mc
        show_operations: true
        visible_hops: 3
    """
    density: Density = DEFAULT_DENSITY
    show_operations: bool = False
    visible_hops: int = Field(default=DEFAULT_VISIBLE_HOPS, ge=0)

    model_config = ConfigDict(frozen=True, extra="ignore")


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from YAML. A missing file yields the defaults.

    Raises:
        ConfigError: If the file is not valid YAML or has invalid values.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.debug("No settings file at %s, using defaults", config_path)
        return Settings()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read settings from {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings in {config_path} must be a mapping")

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {config_path}: {e}") from e
