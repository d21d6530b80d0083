"""
Configuration loading and validation utilities.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from uartfec.device import DecoderDevice, EncoderDevice
from uartfec.fec_utils import (
    DECODER_INPUT_CAPACITY,
    ENCODER_INPUT_CAPACITY,
    FRAMING_SENTINEL,
    FRAMINGS,
    REPETITION,
)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULT_CONFIG = {
    'encoder': {
        'input_capacity': ENCODER_INPUT_CAPACITY
    },
    'decoder': {
        'input_capacity': DECODER_INPUT_CAPACITY
    },
    'framing': FRAMING_SENTINEL,
    'channel': {
        'ber': 0.0,
        'seed': None
    },
    'logging': {
        'level': 'INFO'
    }
}


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration"""
    return copy.deepcopy(DEFAULT_CONFIG)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def _read_file(path: Path) -> Dict[str, Any]:
    """Parse a YAML or JSON configuration file."""
    try:
        with open(path) as f:
            if path.suffix == '.json':
                config = json.load(f)
            elif path.suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            else:
                raise ConfigurationError(f"Unsupported config format: {path.suffix}")
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}")

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")
    return config


def validate_config(config: Dict[str, Any]):
    """
    Validate a merged configuration.

    Args:
        config: Configuration dictionary

    Raises:
        ConfigurationError: If a value is out of range
    """
    for section in ('encoder', 'decoder', 'channel', 'logging'):
        if not isinstance(config[section], dict):
            raise ConfigurationError(f"Section '{section}' must be a mapping, got {config[section]!r}")

    if config['framing'] not in FRAMINGS:
        raise ConfigurationError(f"Invalid framing: {config['framing']}")

    for section in ('encoder', 'decoder'):
        capacity = config[section]['input_capacity']
        if not isinstance(capacity, int) or capacity <= 0:
            raise ConfigurationError(f"Invalid {section} input capacity: {capacity}")

    # Decoder must accept everything the encoder can emit
    needed = config['encoder']['input_capacity'] * REPETITION + 1
    if config['decoder']['input_capacity'] < needed:
        raise ConfigurationError(
            f"Decoder input capacity {config['decoder']['input_capacity']} "
            f"is smaller than encoder output {needed}"
        )

    ber = config['channel']['ber']
    if not isinstance(ber, (int, float)) or not 0.0 <= ber <= 1.0:
        raise ConfigurationError(f"BER {ber} out of range [0, 1]")

    level = config['logging']['level']
    if not isinstance(logging.getLevelName(str(level).upper()), int):
        raise ConfigurationError(f"Unknown log level: {level}")


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration, falling back to defaults.

    Args:
        path: YAML or JSON file (defaults only if None)

    Returns:
        Configuration dictionary
    """
    config = get_default_config()
    if path is not None:
        _merge(config, _read_file(Path(path)))

    validate_config(config)
    return config


def get_config_value(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        config: Configuration dictionary
        key: Configuration key (supports dot notation, e.g., "channel.ber")
        default: Default value if key not found

    Returns:
        Configuration value
    """
    value = config
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def setup_logging(config: Dict[str, Any], verbose: bool = False):
    """Configure root logging from the 'logging' section."""
    level = 'DEBUG' if verbose else str(config['logging']['level']).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def build_devices(config: Dict[str, Any]) -> Tuple[EncoderDevice, DecoderDevice]:
    """
    Create the encoder and decoder pair described by a configuration.

    Args:
        config: Configuration dictionary

    Returns:
        (encoder, decoder)
    """
    encoder = EncoderDevice(
        input_capacity=config['encoder']['input_capacity'],
        framing=config['framing']
    )
    decoder = DecoderDevice(
        input_capacity=config['decoder']['input_capacity'],
        framing=config['framing']
    )
    return encoder, decoder
