"""Configuration loading for minecraft-compose."""
from mcc.config.loader import ConfigLoader, find_config, load_config
from mcc.config.validator import ConfigValidator

__all__ = ['ConfigLoader', 'ConfigValidator', 'find_config', 'load_config']
