#!/usr/bin/env python3
"""
Setup script for hotwordkit - Hotword detection and dispatch on Snowboy.

Streams raw audio through the Snowboy recognition engine and dispatches
handlers for detected hotwords and sustained silence.
"""

import sys
from pathlib import Path
from setuptools import setup, find_packages

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8') if (this_directory / "README.md").exists() else ""

# Version management
def get_version():
    """Get version from __init__.py"""
    version_file = this_directory / "hotwordkit" / "__init__.py"
    if version_file.exists():
        with open(version_file, 'r', encoding='utf-8') as f:
            for line in f:
                if line.startswith('__version__'):
                    return line.split('=')[1].strip().strip('"').strip("'")
    return "0.1.0"

# Check Python version
if sys.version_info < (3, 8):
    sys.exit("Python 3.8 or later is required.")

setup(
    name="hotwordkit",
    version=get_version(),
    author="hotwordkit contributors",
    description="Hotword detection and dispatch on top of the Snowboy engine",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests*", "examples*", "docs*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Multimedia :: Sound/Audio :: Speech",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    keywords=[
        "hotword", "wake-word", "snowboy", "keyword-spotting",
        "voice-detection", "silence-detection", "raspberry-pi", "audio-processing"
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.19.0",
        "librosa>=0.8.0",
        "sounddevice>=0.4.0",
        "colorama>=0.4.4",
        "PyYAML>=5.4.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.12.0",
            "black>=21.0.0",
            "flake8>=3.9.0",
            "mypy>=0.900",
        ],
        "test": [
            "pytest>=6.0.0",
            "pytest-cov>=2.12.0",
        ],
        "docs": [
            "sphinx>=4.0.0",
            "sphinx-rtd-theme>=1.0.0",
            "myst-parser>=0.15.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "hotwordkit=hotwordkit.cli.console:cli_entry_point",
            "hwk=hotwordkit.cli.console:cli_entry_point",  # Short alias
        ],
    },
    include_package_data=True,
    zip_safe=False,
    platforms=["any"],
    license="MIT",

    # Test configuration
    test_suite="tests",
    tests_require=[
        "pytest>=6.0.0",
        "pytest-cov>=2.12.0",
    ],
)
