"""
Configuration Management
Load and validate configuration files
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'grid': {
        'width': 64,
        'height': 48,
        'seed_density': 0.3
    },
    'history': {
        'capacity': 1000
    },
    'analysis': {
        'window': 5,
        'sample_size': 5,
        'variance_divisor': 10.0
    },
    'rules': {
        'default': 'B3/S23',
        'mutation_rate': 0.1
    },
    'run': {
        'universes': 3,
        'steps': 200,
        'fork_every': 50,
        'branch_steps': 100,
        'max_workers': 4,
        'seed': None
    }
}

REQUIRED_PARAMETERS = {
    'grid': ['width', 'height'],
    'history': ['capacity'],
    'analysis': ['window', 'sample_size', 'variance_divisor'],
    'rules': ['default'],
    'run': ['steps']
}


@dataclass
class MultiverseConfig:
    """Configuration container."""
    grid: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG['grid']))
    history: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG['history']))
    analysis: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG['analysis']))
    rules: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG['rules']))
    run: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_CONFIG['run']))

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "MultiverseConfig":
        """Merge a (possibly partial) config dictionary over the defaults."""
        merged = {}
        for section, defaults in DEFAULT_CONFIG.items():
            values = dict(defaults)
            values.update(config.get(section) or {})
            merged[section] = values
        return cls(**merged)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'grid': dict(self.grid),
            'history': dict(self.history),
            'analysis': dict(self.analysis),
            'rules': dict(self.rules),
            'run': dict(self.run)
        }


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    config_file = Path(config_path)

    if not config_file.exists():
        # Create default config if it doesn't exist
        create_default_config(config_path)

    with open(config_file, 'r') as f:
        config = yaml.safe_load(f) or {}

    return config


def create_default_config(config_path: str):
    """
    Create default configuration file.

    Args:
        config_path: Path where to create config file
    """
    config_file = Path(config_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, 'w') as f:
        yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, indent=2)

    logger.info(f"Created default configuration at {config_path}")


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration parameters.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid
    """
    for section, parameters in REQUIRED_PARAMETERS.items():
        if section not in config:
            logger.error(f"Missing required configuration section: {section}")
            return False

        for param in parameters:
            if param not in config[section]:
                logger.error(f"Missing required {section} parameter: {param}")
                return False

    grid = config['grid']
    if grid['width'] < 1 or grid['height'] < 1:
        logger.error(f"Grid dimensions must be positive: {grid['width']}x{grid['height']}")
        return False

    if config['history']['capacity'] < 1:
        logger.error("History capacity must be at least 1")
        return False

    if config['analysis']['window'] < config['analysis']['sample_size']:
        logger.error("Analysis window must be at least sample_size")
        return False

    if config['analysis']['variance_divisor'] <= 0:
        logger.error("Analysis variance_divisor must be positive")
        return False

    return True
