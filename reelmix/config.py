"""
Run configuration loaded from an INI file.

All keys live in the default section:

    num_combinations = 5
    target_duration = 60.0
    min_duration = 5.0
    max_videos = 10

A key that is absent, unparsable or out of range (including nan and inf)
falls back to its default. max_videos = 0 disables the cap on the number of
source videos.
A missing or malformed file is fatal.
"""

import configparser
import logging
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from reelmix.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULTS = {
    "num_combinations": 5,
    "target_duration": 60.0,
    "min_duration": 5.0,
    "max_videos": 10,
}


class Configuration(BaseModel):
    """Immutable run parameters."""

    model_config = ConfigDict(frozen=True)

    num_combinations: int = Field(default=DEFAULTS["num_combinations"], ge=0)
    target_duration: float = Field(default=DEFAULTS["target_duration"], gt=0, allow_inf_nan=False)
    min_duration: float = Field(default=DEFAULTS["min_duration"], gt=0, allow_inf_nan=False)
    max_videos: int = Field(default=DEFAULTS["max_videos"], ge=0)


def _read_value(section: configparser.SectionProxy, key: str):
    default = DEFAULTS[key]
    raw = section.get(key)
    if raw is None:
        return default

    try:
        value = section.getint(key) if isinstance(default, int) else section.getfloat(key)
    except ValueError:
        logger.warning(f"Invalid value for '{key}': {raw!r}, using default {default}")
        return default

    # Check the single value against the model's constraints; other fields keep their defaults
    try:
        Configuration(**{key: value})
    except ValidationError:
        logger.warning(f"Out-of-range value for '{key}': {raw!r}, using default {default}")
        return default

    return value


def parse_config(text: str) -> Configuration:
    """Parse INI text into a Configuration."""
    parser = configparser.ConfigParser()
    try:
        # Bare keys at the top of the file belong to the default section
        parser.read_string(f"[{parser.default_section}]\n{text}")
    except configparser.Error as e:
        raise ConfigurationError(f"Malformed configuration: {e}") from e

    section = parser[parser.default_section]
    values = {key: _read_value(section, key) for key in DEFAULTS}
    return Configuration(**values)


def load_config(path: str) -> Configuration:
    """
    Load run configuration from an INI file.

    Args:
        path: Path to the configuration file

    Returns:
        Parsed Configuration

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    if not os.path.isfile(path):
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

    config = parse_config(text)
    logger.info(
        f"Loaded configuration from {path}: num_combinations={config.num_combinations}, "
        f"target_duration={config.target_duration}, min_duration={config.min_duration}, "
        f"max_videos={config.max_videos}"
    )
    return config
