"""Configuration helpers."""

from .config_loader import ConfigLoader, get_config, validate_profile, DEFAULT_PROFILE

__all__ = [
    "ConfigLoader",
    "get_config",
    "validate_profile",
    "DEFAULT_PROFILE",
]
