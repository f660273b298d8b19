"""
Configuration loading and saving.

Painter settings are stored as a flat JSON object whose keys mirror the
fields of ``PainterConfig``. Environment variables prefixed with
``FRACTAL_PAINTER_`` override values read from file.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union
import logging

from ..api import PainterConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "FRACTAL_PAINTER_"


def _parse_list(value: str) -> list:
    return [item.strip() for item in value.split(',') if item.strip()]


def _parse_optional_int(value: str) -> Optional[int]:
    return None if value.strip().lower() in ('', 'none', 'auto') else int(value)


def _parse_weights(value: str) -> list:
    return [float(item) for item in _parse_list(value)]


# Field name -> parser for values read from the environment
_ENV_PARSERS: Dict[str, Callable[[str], Any]] = {
    'width': int,
    'height': int,
    'algorithm': str,
    'max_iterations': int,
    'techniques': _parse_list,
    'combination': str,
    'weights': _parse_weights,
    'color': float,
    'motion': float,
    'workers': _parse_optional_int,
    'backend': str,
}


class EnvironmentConfig:
    """Read painter overrides from environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX):
        self.environ = os.environ if environ is None else environ
        self.prefix = prefix

    def get_overrides(self) -> Dict[str, Any]:
        """
        Collect overrides such as ``FRACTAL_PAINTER_WORKERS=4``.

        Returns:
            Dictionary of parsed values keyed by ``PainterConfig`` field name
        """
        overrides = {}
        for name, parser in _ENV_PARSERS.items():
            key = self.prefix + name.upper()
            if key not in self.environ:
                continue
            raw = self.environ[key]
            try:
                overrides[name] = parser(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from e
            logger.debug(f"Environment override {key}={raw!r}")
        return overrides


class ConfigManager:
    """Load, save and merge painter configurations."""

    def __init__(self, environment: Optional[EnvironmentConfig] = None):
        self.environment = environment or EnvironmentConfig()

    def load(self, filepath: Union[str, Path, None] = None,
             overrides: Optional[Dict[str, Any]] = None) -> PainterConfig:
        """
        Build a validated configuration.

        Values are layered: defaults, then the JSON file (if any), then
        environment variables, then explicit ``overrides``.

        Args:
            filepath: Optional path to a JSON configuration file
            overrides: Optional values taking precedence over everything else

        Returns:
            Validated PainterConfig
        """
        data = PainterConfig().to_dict()

        if filepath is not None:
            data.update(self.read_file(filepath))

        data.update(self.environment.get_overrides())

        if overrides:
            data.update({k: v for k, v in overrides.items() if v is not None})

        config = PainterConfig.from_dict(data)
        config.validate()
        return config

    @staticmethod
    def read_file(filepath: Union[str, Path]) -> Dict[str, Any]:
        """Read a JSON configuration file into a dictionary."""
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {filepath} must contain a JSON object")
        logger.info(f"Loaded configuration from {filepath}")
        return data

    @staticmethod
    def save(config: PainterConfig, filepath: Union[str, Path]) -> None:
        """Write a configuration to a JSON file."""
        filepath = Path(filepath)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write('\n')
        logger.info(f"Saved configuration to {filepath}")
