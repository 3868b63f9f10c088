"""
Utilities Module
Configuration and logging utilities
"""

from .config import load_config, validate_config, MultiverseConfig
from .logger import setup_logger

__all__ = ['load_config', 'validate_config', 'MultiverseConfig', 'setup_logger']
