"""
Configuration for binwrapper.

Loads the bundled release descriptor and applies environment overrides.
"""

from .loader import (
    WrapperConfig,
    load_config,
    load_yaml_config,
    descriptor_from_dict,
    resolve_cache_dir,
    log_level_from_env,
)

__all__ = [
    "WrapperConfig",
    "load_config",
    "load_yaml_config",
    "descriptor_from_dict",
    "resolve_cache_dir",
    "log_level_from_env",
]
