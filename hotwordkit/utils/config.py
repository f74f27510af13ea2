"""
Configuration utilities for hotword detection.

Provides configuration loading, saving, merging and validation with
support for YAML and JSON formats, and turns a configuration into a
ready-to-start ``DetectorBuilder``.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
import logging

import yaml

from ..core.detector import DetectorBuilder
from ..core.handlers import Handler
from ..core.hotword import Hotword, MODEL_EXTENSIONS

logger = logging.getLogger(__name__)

SECTION_TYPES = {
    'detector': dict,
    'hotwords': list,
    'silence': dict,
    'audio': dict
}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from file.

    Args:
        config_path: Path to configuration file (JSON or YAML)

    Returns:
        Configuration dictionary
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        if config_path.suffix.lower() in ['.yaml', '.yml']:
            config = yaml.safe_load(f)
        elif config_path.suffix.lower() == '.json':
            config = json.load(f)
        else:
            # YAML is a superset of JSON
            config = yaml.safe_load(f)

    if config is None:
        config = {}
    elif not isinstance(config, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping")

    # An empty section is the same as a missing one
    config = {key: value for key, value in config.items() if value is not None}
    for key, expected in SECTION_TYPES.items():
        if key in config and not isinstance(config[key], expected):
            raise ValueError(f"Section '{key}' in {config_path} must be a {expected.__name__}")

    logger.info(f"Configuration loaded from {config_path}")
    return config


def save_config(config: Dict[str, Any], config_path: str, format: str = 'auto') -> bool:
    """
    Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration
        format: Output format ('json', 'yaml', 'auto')

    Returns:
        True if saved successfully, False otherwise
    """
    config_path = Path(config_path)

    if format == 'auto':
        if config_path.suffix.lower() in ['.yaml', '.yml']:
            format = 'yaml'
        else:
            format = 'json'

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w', encoding='utf-8') as f:
            if format == 'yaml':
                yaml.safe_dump(config, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
            else:
                json.dump(config, f, indent=2, ensure_ascii=False)

        logger.info(f"Configuration saved to {config_path}")
        return True

    except OSError as e:
        logger.error(f"Failed to save configuration to {config_path}: {e}")
        return False


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge multiple configuration dictionaries.

    Later configs override earlier ones. Nested dictionaries are merged recursively.
    """
    result = {}

    for config in configs:
        if not isinstance(config, dict):
            continue

        result = _deep_merge(result, config)

    return result


def _deep_merge(dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
    result = dict1.copy()

    for key, value in dict2.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration for hotword detection.

    Returns:
        Default configuration dictionary
    """
    return {
        'detector': {
            'resource': 'resources/common.res',
            'audio_gain': 1.0,
            'apply_frontend': False,
            'chunk_size': 2048,
            'poll_interval': 0.3
        },
        'hotwords': [],
        'silence': {
            'enabled': False,
            'threshold': 2.0
        },
        'audio': {
            'device_id': None
        }
    }


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate configuration and return validation results.

    Args:
        config: Configuration dictionary to validate

    Returns:
        Validation results with errors and warnings
    """
    results = {
        'valid': True,
        'errors': [],
        'warnings': []
    }

    def error(message):
        results['errors'].append(message)
        results['valid'] = False

    def section(key, default):
        value = config.get(key)
        if value is None:
            return default
        if not isinstance(value, type(default)):
            error(f"{key} must be a {type(default).__name__}")
            return default
        return value

    detector_config = section('detector', {})
    if not detector_config.get('resource'):
        error("detector.resource is required")

    gain = detector_config.get('audio_gain', 1.0)
    if not isinstance(gain, (int, float)) or gain <= 0:
        error("detector.audio_gain must be a positive number")

    chunk_size = detector_config.get('chunk_size', 2048)
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        error("detector.chunk_size must be a positive integer")
    elif chunk_size % 2:
        results['warnings'].append("detector.chunk_size is odd; the last byte of each chunk is ignored")

    poll_interval = detector_config.get('poll_interval', 0.3)
    if not isinstance(poll_interval, (int, float)) or poll_interval < 0:
        error("detector.poll_interval must be a non-negative number")

    hotwords = section('hotwords', [])
    if not hotwords:
        results['warnings'].append("no hotwords configured")

    for i, entry in enumerate(hotwords):
        if not isinstance(entry, dict) or not entry.get('model'):
            error(f"hotwords[{i}].model is required")
            continue

        sensitivity = entry.get('sensitivity', 0.5)
        if not isinstance(sensitivity, (int, float)) or not (0 <= sensitivity <= 1):
            error(f"hotwords[{i}].sensitivity must be between 0 and 1")

        if not str(entry['model']).endswith(MODEL_EXTENSIONS):
            results['warnings'].append(
                f"hotwords[{i}].model has no {'/'.join(MODEL_EXTENSIONS)} extension"
            )

    silence_config = section('silence', {})
    threshold = silence_config.get('threshold', 0.0)
    if not isinstance(threshold, (int, float)) or threshold < 0:
        error("silence.threshold must be a non-negative number")

    return results


def create_config_template(output_path: str, format: str = 'yaml') -> bool:
    """
    Create configuration template file.

    Args:
        output_path: Path to save template
        format: Output format ('yaml' or 'json')

    Returns:
        True if created successfully, False otherwise
    """
    template_config = get_default_config()
    template_config['hotwords'] = [
        {'model': 'resources/models/snowboy.umdl', 'sensitivity': 0.5}
    ]

    return save_config(template_config, output_path, format)


def load_config_with_defaults(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration with fallback to defaults.

    Args:
        config_path: Path to configuration file (optional)

    Returns:
        Merged configuration dictionary
    """
    default_config = get_default_config()

    if config_path and os.path.exists(config_path):
        try:
            user_config = load_config(config_path)
            return merge_configs(default_config, user_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load user config, using defaults: {e}")

    return default_config


def builder_from_config(
    config: Dict[str, Any],
    handler: Handler,
    silence_handler: Optional[Handler] = None
) -> DetectorBuilder:
    """
    Build a detector builder from a configuration dictionary.

    Every configured hotword is bound to ``handler``. The silence handler
    is installed when ``silence.enabled`` is set, defaulting to ``handler``.

    Raises:
        ValueError: If the configuration is invalid
    """
    config = merge_configs(get_default_config(), config)
    validation = validate_config(config)
    if not validation['valid']:
        raise ValueError("Invalid configuration: " + "; ".join(validation['errors']))
    for warning in validation['warnings']:
        logger.warning(f"Configuration: {warning}")

    detector_config = config['detector']
    builder = DetectorBuilder(
        resource=detector_config['resource'],
        audio_gain=float(detector_config['audio_gain']),
        apply_frontend=bool(detector_config['apply_frontend']),
        chunk_size=detector_config['chunk_size'],
        poll_interval=float(detector_config['poll_interval'])
    )

    for entry in config['hotwords'] or []:
        hotword = Hotword.from_model(
            entry['model'],
            sensitivity=float(entry.get('sensitivity', 0.5)),
            name=entry.get('name')
        )
        builder.handle(hotword, handler)

    silence_config = config['silence'] or {}
    if silence_config.get('enabled'):
        builder.handle_silence(silence_config['threshold'], silence_handler or handler)

    return builder
