"""
File utilities for hotword detection.

Provides discovery and validation of model files and audio inputs.
"""

import os
from pathlib import Path
from typing import List, Dict, Any, Optional
import logging

from ..core.hotword import MODEL_EXTENSIONS, derive_name

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = ['.wav', '.mp3', '.flac', '.ogg', '.m4a', '.raw']


def list_audio_files(
    directory: str,
    extensions: Optional[List[str]] = None,
    recursive: bool = True
) -> List[str]:
    """
    List all audio files in directory.

    Args:
        directory: Directory to search
        extensions: List of file extensions to include
        recursive: Whether to search recursively

    Returns:
        Sorted list of audio file paths
    """
    if extensions is None:
        extensions = AUDIO_EXTENSIONS

    directory = Path(directory)
    if not directory.exists():
        logger.warning(f"Directory does not exist: {directory}")
        return []

    prefix = "**/*" if recursive else "*"
    audio_files = []
    for ext in extensions:
        audio_files.extend(str(f) for f in directory.glob(f"{prefix}{ext}"))

    audio_files.sort()

    logger.info(f"Found {len(audio_files)} audio files in {directory}")
    return audio_files


def validate_model_file(file_path: str) -> Dict[str, Any]:
    """
    Validate a hotword model file.

    Args:
        file_path: Path to model file

    Returns:
        Dictionary with validation results and metadata
    """
    result = {
        'valid': False,
        'error': None,
        'name': None,
        'type': None,
        'file_size': 0
    }

    if not os.path.exists(file_path):
        result['error'] = 'File does not exist'
        return result

    suffix = Path(file_path).suffix.lower()
    if suffix not in MODEL_EXTENSIONS:
        result['error'] = f"Unknown model extension '{suffix}'"
        return result

    result['file_size'] = os.path.getsize(file_path)
    if result['file_size'] == 0:
        result['error'] = 'Model file is empty'
        return result

    result['name'] = derive_name(file_path)
    result['type'] = 'universal' if suffix == '.umdl' else 'personal'
    result['valid'] = True
    return result


def list_model_files(model_dir: str) -> List[Dict[str, Any]]:
    """
    List hotword models in a directory.

    Args:
        model_dir: Directory containing .umdl/.pmdl files

    Returns:
        List of model information dictionaries, newest first
    """
    models = []

    if not os.path.isdir(model_dir):
        return models

    for path in Path(model_dir).iterdir():
        if path.suffix.lower() not in MODEL_EXTENSIONS:
            continue

        info = validate_model_file(str(path))
        stat = path.stat()
        models.append({
            'name': info['name'] or path.stem,
            'path': str(path),
            'type': info['type'] or 'unknown',
            'size_kb': stat.st_size / 1024,
            'created': stat.st_mtime,
            'valid': info['valid']
        })

    models.sort(key=lambda x: x['created'], reverse=True)

    return models
