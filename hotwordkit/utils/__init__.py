"""Utility functions for hotword detection."""

from .file_utils import list_audio_files, list_model_files, validate_model_file
from .config import (
    builder_from_config,
    load_config,
    load_config_with_defaults,
    merge_configs,
    save_config,
    validate_config,
)

__all__ = [
    "list_audio_files",
    "list_model_files",
    "validate_model_file",
    "builder_from_config",
    "load_config",
    "load_config_with_defaults",
    "save_config",
    "merge_configs",
    "validate_config",
]
