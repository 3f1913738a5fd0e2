"""
Configuration loader for the district election walkthrough.

Usage:
    from cdelectmap.config import Config

    config = Config('config.yaml')
    state = config.get('state')
    url = config.shapefile_url
"""

import copy
from pathlib import Path
from typing import Any, Optional

import yaml
from loguru import logger

from cdelectmap.datasources import cdmaps_districts_shp_url


class Config:
    """YAML settings layered over DEFAULTS."""

    DEFAULTS: dict[str, Any] = {
        'year': 2012,
        'state': 'NC',
        'congress': 113,
        'shapefile_url': None,
        'src_epsg': 'epsg:4269',
        'cache_dir': None,
        'out_dir': 'out',
        'tie_winner': 'Democrat',
        'results_csv': None,
        'simplify_tolerance': 0.0,
        'chart_format': 'png',
    }

    def __init__(self, config_file: Optional[str] = None):
        self.data: dict[str, Any] = copy.deepcopy(self.DEFAULTS)
        self.config_path: Optional[Path] = None

        if config_file is None:
            if Path('config.yaml').exists():
                config_file = 'config.yaml'
                logger.debug('Using config.yaml from current directory')
            else:
                logger.debug('No config file; using defaults')
                return

        self.config_path = Path(config_file).resolve()
        if not self.config_path.exists():
            raise FileNotFoundError(f'Config file not found: {self.config_path}')

        logger.debug(f'Loading config from: {self.config_path}')
        with open(self.config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f'{self.config_path} must hold a mapping')
        self.data.update(loaded)

    def get(self, key: str, default: Any = None) -> Any:
        """Get any setting; dotted keys walk nested mappings."""
        value: Any = self.data
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def update(self, **overrides: Any) -> None:
        """Apply non-None overrides, e.g. from command-line flags."""
        self.data.update({k: v for k, v in overrides.items() if v is not None})

    @property
    def shapefile_url(self) -> str:
        return self.get('shapefile_url') or cdmaps_districts_shp_url(
            self.get('congress'))
