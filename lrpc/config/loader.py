"""Configuration loading with fail-fast behavior and layered merging.

Configs are merged from two layers, later overriding earlier:
1. Global user config (~/.lrpc/config.json)
2. Project local config (<cwd>/.lrpc/config.json)

When neither exists the pydantic defaults are used. An explicit path given
to load_config() replaces both layers.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lrpc.config.schema import Config
from lrpc.core.constants import CONFIG_FILE_NAME, LRPC_DIR_NAME, get_lrpc_dir
from lrpc.core.errors import ConfigError
from lrpc.core.utils import deep_merge

logger = logging.getLogger(__name__)


def read_config_file(path: Path) -> dict[str, Any]:
    """Read one config file as a JSON object.

    A file holding only whitespace counts as an empty object. A UTF-8 BOM is
    tolerated.

    Raises:
        ConfigError: If the file is missing or unreadable, is not valid JSON,
            or holds something other than an object.
    """
    try:
        content = path.read_text(encoding="utf-8-sig").strip()
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not content:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected object in {path}, got {type(data).__name__}")
    return data


def config_layers(cwd: Path | None = None) -> list[Path]:
    """Return the layered config paths in merge order, without duplicates."""
    layers = [
        get_lrpc_dir() / CONFIG_FILE_NAME,
        (cwd or Path.cwd()) / LRPC_DIR_NAME / CONFIG_FILE_NAME,
    ]
    # Running from the home directory makes both layers the same file
    return list(dict.fromkeys(layer.resolve() for layer in layers))


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading.
        cwd: Working directory for the local lookup. Defaults to Path.cwd().

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If any config file contains invalid JSON or the merged
            config fails validation.
    """
    if path is not None:
        return _validate(read_config_file(path), str(path))

    merged: dict[str, Any] = {}
    loaded_from: list[Path] = []
    for layer in config_layers(cwd):
        if not layer.is_file():
            logger.debug("No config at %s", layer)
            continue
        merged = deep_merge(merged, read_config_file(layer))
        loaded_from.append(layer)

    if not loaded_from:
        logger.debug("No config files found, using defaults")
        return Config()

    logger.info("Config loaded from: %s", [str(p) for p in loaded_from])
    return _validate(merged, ", ".join(str(p) for p in loaded_from))


def _validate(data: dict[str, Any], source: str) -> Config:
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {source}: {e}") from e
