"""
Configuration loader for routing profiles and environment variables.

A profile has two optional sections:

    routing:  strategy, improve_2opt, max_points
    store:    backend, path, base_url, timeout_sec, cache_ttl_sec

Unknown sections or keys are rejected at load time so a typo in a profile
does not silently fall back to a default.
"""

import os
from pathlib import Path
from typing import Dict, Any, Mapping, Optional
import yaml


DEFAULT_PROFILE = "default"

PROFILE_SECTIONS: Dict[str, frozenset] = {
    "routing": frozenset({"strategy", "improve_2opt", "max_points"}),
    "store": frozenset({"backend", "path", "base_url", "timeout_sec", "cache_ttl_sec"}),
}


def validate_profile(profile: Any, profile_name: str = "<profile>") -> Dict[str, Any]:
    """
    Check the shape of a loaded profile.

    Args:
        profile: Parsed YAML document (``None`` for an empty file)
        profile_name: Used in error messages

    Returns:
        The profile as a dictionary (empty for an empty file)

    Raises:
        ValueError: If the document, a section or a key is not recognised
    """
    if profile is None:
        return {}
    if not isinstance(profile, Mapping):
        raise ValueError(f"Profile '{profile_name}' must be a mapping of sections")

    unknown_sections = sorted(set(profile) - set(PROFILE_SECTIONS))
    if unknown_sections:
        raise ValueError(
            f"Profile '{profile_name}' has unknown section(s): {', '.join(unknown_sections)}. "
            f"Expected: {', '.join(PROFILE_SECTIONS)}"
        )

    for section, allowed in PROFILE_SECTIONS.items():
        values = profile.get(section)
        if values is None:
            continue
        if not isinstance(values, Mapping):
            raise ValueError(f"Profile '{profile_name}': '{section}' must be a mapping")
        unknown_keys = sorted(set(values) - allowed)
        if unknown_keys:
            raise ValueError(
                f"Profile '{profile_name}': unknown {section} key(s): {', '.join(unknown_keys)}. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )

    return dict(profile)


class ConfigLoader:
    """Load and manage configuration from YAML files and environment."""
    
    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"
    
    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load a routing profile configuration.
        
        Args:
            profile_name: Name of the profile (default, two-opt, remote-store)
            
        Returns:
            Dictionary with configuration values
            
        Raises:
            FileNotFoundError: If profile doesn't exist
            ValueError: If the profile has unknown sections or keys
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"
        
        if not profile_path.exists():
            available = sorted(f.stem for f in cls.CONFIG_DIR.glob("*.yaml"))
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. Available profiles: {', '.join(available)}"
            )
        
        with open(profile_path, "r") as f:
            return validate_profile(yaml.safe_load(f), profile_name)
    
    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get profile name from ROUTE_PROFILE environment variable."""
        return os.getenv("ROUTE_PROFILE")
    
    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Load profile from environment variable or use the default profile.
        
        Returns:
            Configuration dictionary
        """
        profile = cls.get_profile_from_env() or DEFAULT_PROFILE
        return cls.load_profile(profile)

    @classmethod
    def resolve_path(cls, value: str) -> Path:
        """Resolve a profile-relative path against the repository root."""
        path = Path(value)
        if path.is_absolute():
            return path
        return cls.CONFIG_DIR.parent / path


def get_config() -> Dict[str, Any]:
    """Convenience function to get current configuration."""
    return ConfigLoader.load_default_or_env_profile()
