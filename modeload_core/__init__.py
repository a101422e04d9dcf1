"""
Modeload Core

Shared building blocks for saving and loading Cursor custom modes.

This module provides:
- Storage keys used by Cursor's settings database
- Request/config schemas
- Error hierarchy surfaced by the CLI
- Confirmation gate guarding destructive writes
"""

__version__ = "0.1.0"
