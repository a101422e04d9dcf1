"""Tool configuration with YAML support."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from modeload_core.schemas import ToolConfig
from store.repository import SettingsLayout

CONFIG_ENV_VAR = "MODELOAD_CONFIG"


def load_config(yaml_path: str | Path) -> ToolConfig:
    """Load tool configuration from YAML file.
    
    Args:
        yaml_path: Path to YAML configuration file
        
    Returns:
        ToolConfig instance
        
    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or has unknown values
    """
    yaml_path = Path(yaml_path)
    
    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")
    
    try:
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e
    
    if data is None:
        return ToolConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping: {yaml_path}")
    
    try:
        return ToolConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def resolve_config(yaml_path: str | Path | None = None) -> ToolConfig:
    """Explicit path first, then $MODELOAD_CONFIG, then built-in defaults."""
    if yaml_path:
        return load_config(yaml_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return load_config(env_path)
    return ToolConfig()


def settings_layout(config: ToolConfig) -> SettingsLayout:
    return SettingsLayout(
        key=config.settings_key,
        composer_state_key=config.composer_state_key,
        records_key=config.records_key,
    )
