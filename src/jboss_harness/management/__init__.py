"""Configuration and environment management."""

from .configuration import (
    ArgsConfigSource,
    ConfigSource,
    ConfigurationManager,
    DefaultConfigSource,
    EnvConfigSource,
    FileConfigSource,
    create_configuration_manager,
    expand_env_vars,
)
from .environment import load_dotenv_if_available


__all__ = [
    "ConfigurationManager",
    "ConfigSource",
    "FileConfigSource",
    "ArgsConfigSource",
    "DefaultConfigSource",
    "EnvConfigSource",
    "create_configuration_manager",
    "expand_env_vars",
    "load_dotenv_if_available",
]
