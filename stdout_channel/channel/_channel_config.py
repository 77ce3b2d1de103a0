"""
Configuration loading for StdoutChannel.

The packaged default YAML is always loaded first; a user file, when given and
present, is merged over it key by key.
"""

import copy
import os
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger

from .._aux._aux import iter_update_dict

DEFAULT_CONFIG_PATH = Path(__file__).parent / "_default_channel_config.yaml"

# config value -> sys attribute
SINK_NAMES = {
    "sys.stdout": "stdout",
    "sys.stderr": "stderr",
}


def _read_yaml(path) -> dict:
    with open(path, "r") as file:
        return yaml.safe_load(file) or {}


def load_channel_config(config_path: Optional[str] = None) -> dict:
    """
    Load the channel configuration.

    If ``config_path`` is not provided, or does not point to an existing file,
    the packaged default configuration is used on its own.

    Args:
        config_path (Optional[str]): Path to a YAML configuration file. Defaults to None.

    Returns:
        dict: The merged and validated configuration.

    Raises:
        ValueError: If a configuration value is invalid.
    """
    config = _read_yaml(DEFAULT_CONFIG_PATH)

    if not config_path:
        logger.debug("Config file not provided, using default channel config.")
    elif not os.path.exists(config_path) or not os.path.isfile(config_path):
        logger.warning(
            "Config file {} does not exist or is not a file, using default channel config.",
            config_path,
        )
    else:
        user_config = _read_yaml(config_path)
        if not isinstance(user_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping at the top level.")
        config = iter_update_dict(config, copy.deepcopy(user_config))
        logger.debug("Loaded channel config from {}", config_path)

    _validate_config(config)
    return config


def _validate_config(config: dict) -> None:
    buffer_conf = config.get("buffer")
    if not isinstance(buffer_conf, dict):
        raise ValueError(f"'buffer' must be a mapping, got {buffer_conf!r}")
    max_capacity = buffer_conf.get("max_capacity")
    if not isinstance(max_capacity, int) or isinstance(max_capacity, bool) or max_capacity < 1:
        raise ValueError(f"'buffer.max_capacity' must be a positive integer, got {max_capacity!r}")
    for key in ("encoding", "errors"):
        if not isinstance(buffer_conf.get(key), str):
            raise ValueError(f"'buffer.{key}' must be a string, got {buffer_conf.get(key)!r}")

    sinks_conf = config.get("sinks")
    if not isinstance(sinks_conf, dict):
        raise ValueError(f"'sinks' must be a mapping, got {sinks_conf!r}")
    for key in ("stdout", "stderr"):
        if sinks_conf.get(key) not in SINK_NAMES:
            raise ValueError(
                f"'sinks.{key}' must be one of {list(SINK_NAMES)}, got {sinks_conf.get(key)!r}"
            )

    if not isinstance(config.get("flush"), bool):
        raise ValueError(f"'flush' must be true or false, got {config.get('flush')!r}")
