"""
Transfer Module

Save/load pipelines and CLI.

This module provides:
- YAML-based configuration loading
- Export of custom modes to a JSON file
- Import of custom modes from a JSON file, behind a confirmation gate
- The ``modeload`` command line interface
"""

__version__ = "0.1.0"
