"""
User configuration.

Settings are read from ``$XDG_CONFIG_HOME/apisnip/config.toml`` (or
``~/.config/apisnip/config.toml``)::

    [default]
    # Enable verbose output
    verbose = false
"""

import os
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "apisnip"
CONFIG_FILE_NAME = "config.toml"


@dataclass
class Settings:
    verbose: bool = False


def config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    config_home = Path(base) if base else Path.home() / ".config"
    return config_home / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None) -> Settings:
    """
    Load settings, falling back to defaults.

    A missing file is not an error. A file that cannot be read or parsed is
    reported and ignored.
    """
    path = path or config_path()
    if not path.exists():
        return Settings()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring configuration file {path}: {e}")
        return Settings()

    section = data.get("default", {})
    if not isinstance(section, dict):
        logger.warning(f"Ignoring [default] in {path}: not a table")
        return Settings()

    verbose = section.get("verbose", False)
    if not isinstance(verbose, bool):
        logger.warning(f"Ignoring verbose = {verbose!r} in {path}: not a boolean")
        verbose = False

    return Settings(verbose=verbose)
