"""
Configuration Loader

Loads YAML configuration files for the crawler (catalog location, timeouts,
page selectors, storage) and the catalog's fixed product field values.
"""

from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import ConfigError


def _get_config_dir() -> Path:
    """Get the config directory path."""
    # Try relative to this file first
    module_dir = Path(__file__).parent.parent.parent
    config_dir = module_dir / 'config'

    if config_dir.exists():
        return config_dir

    # Try current working directory
    cwd_config = Path.cwd() / 'config'
    if cwd_config.exists():
        return cwd_config

    raise FileNotFoundError(
        f"Config directory not found. Tried: {config_dir}, {cwd_config}"
    )


def load_config(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of the config file (e.g., 'crawler.yaml')

    Returns:
        Parsed YAML content as dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the file does not hold a mapping
    """
    config_path = _get_config_dir() / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def load_crawler_config() -> Dict[str, Any]:
    """
    Load crawler configuration.

    Returns:
        Dictionary with 'catalog', 'crawl', 'selectors' and 'storage' sections
    """
    return load_config('crawler.yaml')


def load_catalog_defaults() -> Dict[str, Any]:
    """
    Load the fixed product field values for the crawled catalog segment.

    Returns:
        Dictionary mapping record field name to literal value

    Example:
        {
            'categories1': 'أثاث وغرف',
            'style': 'عصري',
            'supplier': 'TAY',
            ...
        }
    """
    config = load_config('catalog_defaults.yaml')
    return config.get('fields', {})
