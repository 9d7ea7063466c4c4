#!/usr/bin/env python3
"""
Service Configuration Loader

Resolves the chart service settings once at startup. The output directory
comes from CHARTS_OUTPUT_DIR or from the [charts] section of
~/.corky/config.toml; transport and pool settings come from the environment.
"""

import os
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = 'tcp://127.0.0.1:6565'
DEFAULT_IDENTITY = 'rustcharts'
DEFAULT_WORKERS = 4
DEFAULT_QUEUE_SIZE = 32


def default_config_path() -> Path:
    """Location of the shared corky config file"""
    return Path.home() / '.corky' / 'config.toml'


def load_toml(config_path: Path) -> Dict[str, Any]:
    """Load and parse the TOML config file"""
    if not config_path.exists():
        raise ConfigError(f"Config file {config_path} not found")
    try:
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e


def get_output_directory(config_path: Optional[Path] = None) -> str:
    """
    Get the chart output directory from the config file.

    Raises:
        ConfigError: if the file, the [charts] section or the directory key is missing
    """
    config_path = config_path or default_config_path()
    config = load_toml(config_path)

    charts = config.get('charts')
    if not isinstance(charts, dict):
        raise ConfigError(f"[charts] section not found in {config_path.name}")

    directory = charts.get('directory')
    if not directory or not isinstance(directory, str):
        raise ConfigError(f"Output directory not specified in [charts] section of {config_path.name}")
    return directory


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class ServiceConfig:
    """Immutable service settings shared read-only by every render task"""
    output_dir: Path
    endpoint: str = DEFAULT_ENDPOINT
    identity: str = DEFAULT_IDENTITY
    notify_endpoint: str = DEFAULT_ENDPOINT
    workers: int = DEFAULT_WORKERS
    queue_size: int = DEFAULT_QUEUE_SIZE

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'ServiceConfig':
        """
        Build the configuration from the environment and the corky config file.

        Args:
            env: Environment mapping (defaults to os.environ)

        Returns:
            ServiceConfig instance

        Raises:
            ConfigError: if the output directory cannot be resolved or a setting is invalid
        """
        env = os.environ if env is None else env

        output_dir = env.get('CHARTS_OUTPUT_DIR')
        if output_dir:
            logger.info("Output directory taken from CHARTS_OUTPUT_DIR")
        else:
            config_path = env.get('CORKY_CONFIG')
            output_dir = get_output_directory(Path(config_path).expanduser() if config_path else None)

        endpoint = env.get('CHARTS_ENDPOINT') or DEFAULT_ENDPOINT

        config = cls(
            output_dir=Path(output_dir).expanduser(),
            endpoint=endpoint,
            identity=env.get('CHARTS_IDENTITY') or DEFAULT_IDENTITY,
            notify_endpoint=env.get('CHARTS_NOTIFY_ENDPOINT') or endpoint,
            workers=_positive_int(env, 'CHARTS_WORKERS', DEFAULT_WORKERS),
            queue_size=_positive_int(env, 'CHARTS_QUEUE_SIZE', DEFAULT_QUEUE_SIZE),
        )
        logger.info(f"✅ Loaded chart service configuration (output: {config.output_dir})")
        return config
