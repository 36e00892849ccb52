"""Configuration loading: TOML file, environment variables and explicit overrides.

Priority, highest first: explicit overrides, environment variables, config
file, defaults. The config file is looked up in the current directory and
then in the user config directory::

    [sampling]
    probability = 0.05
    seed = 42

    [logging]
    debug = false
    level = "WARNING"
"""

from __future__ import annotations

import logging
import os
import random
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from fast_bernoulli.errors import ConfigError
from fast_bernoulli.sampler import FastBernoulli

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "fast_bernoulli.toml"
ENV_PREFIX = "FAST_BERNOULLI_"

# env var suffix -> (section, key, converter name)
_ENV_VARS = {
    "PROBABILITY": ("sampling", "probability", "float"),
    "SEED": ("sampling", "seed", "int"),
    "DEBUG": ("logging", "debug", "bool"),
    "LOG_LEVEL": ("logging", "level", "str"),
}

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class SamplingConfig(BaseModel):
    probability: float = Field(default=1.0, ge=0.0, le=1.0)
    seed: Optional[int] = None


class LoggingConfig(BaseModel):
    debug: bool = False
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level


class FastBernoulliConfig(BaseModel):
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def find_config_file() -> Optional[str]:
    """
    Find the config file.

    Returns:
        Path of ``./fast_bernoulli.toml`` or
        ``~/.config/fast_bernoulli/fast_bernoulli.toml``, whichever exists
        first, else None
    """
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / ".config" / "fast_bernoulli" / CONFIG_FILE_NAME,
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: str) -> Dict[str, Any]:
    """
    Load a TOML config file as a nested dict.

    A missing file yields an empty dict.

    Raises:
        ConfigError: If the file is not valid TOML
    """
    config_path = Path(path)
    if not config_path.is_file():
        return {}
    try:
        with config_path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError("Invalid TOML in config file", details={"path": path, "error": e}) from e


def _convert(raw: str, kind: str, name: str) -> Any:
    if kind == "str":
        return raw
    if kind == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigError("Invalid boolean in environment variable", details={name: raw})
    try:
        return float(raw) if kind == "float" else int(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid {kind} in environment variable", details={name: raw}) from e


def load_config_from_env(flat: bool = False) -> Dict[str, Any]:
    """
    Read ``FAST_BERNOULLI_*`` environment variables.

    Args:
        flat: Return ``{key: value}`` instead of ``{section: {key: value}}``

    Returns:
        Only the variables that are set

    Raises:
        ConfigError: If a value cannot be converted to its type
    """
    result: Dict[str, Any] = {}
    for suffix, (section, key, kind) in _ENV_VARS.items():
        name = ENV_PREFIX + suffix
        raw = os.environ.get(name)
        if raw is None:
            continue
        value = _convert(raw, kind, name)
        if flat:
            result[key] = value
        else:
            result.setdefault(section, {})[key] = value
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _merged_sources(
    config_file: Optional[str],
    overrides: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    path = config_file or find_config_file()
    merged: Dict[str, Any] = load_toml_config(path) if path else {}
    merged = _deep_merge(merged, load_config_from_env())
    if overrides:
        merged = _deep_merge(merged, overrides)
    return merged


def load_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> FastBernoulliConfig:
    """
    Load and validate configuration from all sources.

    Args:
        config_file: Explicit config file, otherwise ``find_config_file()``
        overrides: Nested dict that takes priority over everything else

    Raises:
        ConfigError: If a source cannot be read or the result is invalid
    """
    merged = _merged_sources(config_file, overrides)
    try:
        return FastBernoulliConfig.model_validate(merged)
    except PydanticValidationError as e:
        raise ConfigError("Invalid configuration", details={"errors": e.error_count()}) from e


def load_config_with_priority(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Same merge as ``load_config``, flattened to ``{key: value}``."""
    config = load_config(config_file=config_file, overrides=overrides)
    flat: Dict[str, Any] = {}
    for section in config.model_dump().values():
        flat.update(section)
    return flat


def validate_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[bool, str, Optional[FastBernoulliConfig]]:
    """
    Validate configuration without raising.

    Returns:
        ``(is_valid, message, config)``, config is None when invalid
    """
    try:
        config = load_config(config_file=config_file, overrides=overrides)
    except ConfigError as e:
        cause = e.__cause__
        return False, str(cause) if cause is not None else str(e), None
    return True, "Configuration is valid", config


def configure_logging(config: FastBernoulliConfig) -> None:
    """Set the level of the ``fast_bernoulli`` logger from config."""
    level = logging.DEBUG if config.logging.debug else config.logging.level
    logging.getLogger("fast_bernoulli").setLevel(level)


def build_sampler(config: FastBernoulliConfig) -> Tuple[FastBernoulli, random.Random]:
    """
    Build a sampler and its random source from config.

    Returns:
        ``(sampler, rng)``; pass ``rng`` to every ``sampler.trial`` call
    """
    rng = random.Random(config.sampling.seed)
    sampler = FastBernoulli(config.sampling.probability, rng)
    logger.debug("Built sampler from config: %r", sampler)
    return sampler, rng
