#!/usr/bin/env python3
# DiskScore
# Copyright (C) 2026 Magnus S. Modig
# Licensed under GPLv3. See LICENSE for details.

import copy
import json
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

from report_logger import get_logger

logger = get_logger(__name__)

# Configuration file location
CONFIG_DIR = Path.home() / '.diskscore'
CONFIG_FILE = CONFIG_DIR / 'settings.json'

# Default configuration
DEFAULT_CONFIG = {
    # Report layout
    'display': {
        'bar_width': 20,
        'full_glyph': '█',
        'empty_glyph': '░',
        'color': True
    },

    # Logging
    'logging': {
        'verbosity': 'warning',  # 'debug', 'info', 'warning', 'error'
        'log_file': None  # e.g. '~/.diskscore/diskscore.log'
    }
}


def _config_file(path: Optional[Path]) -> Path:
    return Path(path) if path else CONFIG_FILE


def defaults() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from file, return defaults if not found"""
    config_file = _config_file(path)

    if not config_file.exists():
        save_config(DEFAULT_CONFIG, config_file)
        return defaults()

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError("settings root must be a JSON object")

        # Merge with defaults to add any new fields from updates
        return _deep_merge(defaults(), config)
    except Exception as e:
        logger.warning(f"Error loading config {config_file}: {e}, using defaults")
        return defaults()


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> bool:
    """Save configuration to file"""
    config_file = _config_file(path)

    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
        return True
    except Exception as e:
        logger.warning(f"Error saving config {config_file}: {e}")
        return False


def export_config(path: Optional[Path] = None) -> str:
    """Export configuration as JSON string"""
    return json.dumps(load_config(path), indent=2, ensure_ascii=False)


def _deep_merge(base: dict, overlay: dict) -> dict:
    """Deep merge two dictionaries, overlay takes precedence"""
    result = base.copy()

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


# Convenience accessors over an already loaded config
def get_bar_width(config: Dict[str, Any]) -> int:
    """Bar width in characters, falls back to the default for bad values"""
    width = config.get('display', {}).get('bar_width', DEFAULT_CONFIG['display']['bar_width'])
    if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
        return DEFAULT_CONFIG['display']['bar_width']
    return width


def get_glyphs(config: Dict[str, Any]) -> Tuple[str, str]:
    """(full, empty) glyphs for proportion bars"""
    display = config.get('display', {})
    full = display.get('full_glyph') or DEFAULT_CONFIG['display']['full_glyph']
    empty = display.get('empty_glyph') or DEFAULT_CONFIG['display']['empty_glyph']
    return str(full), str(empty)


def is_color_enabled(config: Dict[str, Any]) -> bool:
    return bool(config.get('display', {}).get('color', True))


def get_log_verbosity(config: Dict[str, Any]) -> str:
    return config.get('logging', {}).get('verbosity', 'warning')


def get_log_file(config: Dict[str, Any]) -> Optional[str]:
    """Log file path, None when unset or not a string"""
    log_file = config.get('logging', {}).get('log_file')
    if not isinstance(log_file, str) or not log_file.strip():
        return None
    return log_file


if __name__ == '__main__':
    print("Loading configuration...")
    print(export_config())

    print("\nConfiguration file location:", CONFIG_FILE)
