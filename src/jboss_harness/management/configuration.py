"""Layered lookup of lifecycle settings.

Settings are a flat mapping of LifecycleConfig field names. Each source
contributes some keys; a key from a higher priority source replaces the
value from a lower one.
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml


ENV_PREFIX = "JBOSS_HARNESS_"

_ENV_REF = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

_logger = logging.getLogger("cfg")


def _env_lookup(match: re.Match) -> str:
    value = os.getenv(match.group(1))
    if value is None:
        _logger.warning(f"Environment variable '{match.group(0)}' not set, keeping placeholder")
        return match.group(0)
    return value


def _as_number(text: str) -> int | float | str:
    try:
        return float(text) if '.' in text else int(text)
    except ValueError:
        return text


def expand_env_vars(value: Any) -> Any:
    """Expand ${VAR} references in strings, recursing into dicts and lists.

    Unset variables keep their placeholder. A string that is nothing but a
    single reference to a numeric value becomes an int or float, so
    ``port: ${JBOSS_PORT}`` yields a number.
    """
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    expanded = _ENV_REF.sub(_env_lookup, value)
    if _ENV_REF.fullmatch(value) and expanded != value:
        return _as_number(expanded)
    return expanded


class ConfigSource(ABC):
    """Base class for configuration sources."""

    def __init__(self, priority: int = 0):
        self.priority = priority  # Higher number = higher priority

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load configuration data."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if source is available."""
        pass

    def describe(self) -> str:
        """Short label used when logging where a setting came from."""
        return type(self).__name__.replace("ConfigSource", "").lower()


class FileConfigSource(ConfigSource):
    """Configuration from YAML file.

    Settings may sit at the top level or under a ``jboss`` section.
    """

    def __init__(self, file_path: str | Path, priority: int = 10):
        super().__init__(priority)
        self.file_path = file_path

    def load(self) -> dict[str, Any]:
        """Load configuration from file and expand environment variables."""
        try:
            with open(self.file_path) as f:
                config = yaml.safe_load(f) or {}
        except Exception as e:
            _logger.warning(f"Failed to load config from {self.file_path}: {e}")
            return {}

        if not isinstance(config, dict):
            _logger.warning(f"Ignoring {self.file_path}: top level is not a mapping")
            return {}

        section = config.get("jboss")
        if isinstance(section, dict):
            config = {**{k: v for k, v in config.items() if k != "jboss"}, **section}

        return expand_env_vars(config)

    def is_available(self) -> bool:
        """Check if file exists."""
        return Path(self.file_path).exists()

    def describe(self) -> str:
        return f"file {self.file_path}"


class EnvConfigSource(ConfigSource):
    """Configuration from JBOSS_HARNESS_* environment variables.

    JBOSS_HARNESS_PORT=8180 becomes {"port": "8180"}; values stay strings and
    are coerced by the consumer.
    """

    def __init__(self, prefix: str = ENV_PREFIX, priority: int = 20):
        super().__init__(priority)
        self.prefix = prefix

    def load(self) -> dict[str, Any]:
        return {
            key[len(self.prefix):].lower(): value
            for key, value in os.environ.items()
            if key.startswith(self.prefix) and len(key) > len(self.prefix)
        }

    def is_available(self) -> bool:
        return True

    def describe(self) -> str:
        return f"env {self.prefix}*"


class ArgsConfigSource(ConfigSource):
    """Configuration from command line arguments or dict.

    None values are dropped so unset CLI options do not mask lower sources.
    """

    def __init__(self, config_dict: dict[str, Any], priority: int = 30):
        super().__init__(priority)
        self.config_dict = config_dict

    def load(self) -> dict[str, Any]:
        """Return provided configuration."""
        return {k: v for k, v in self.config_dict.items() if v is not None}

    def is_available(self) -> bool:
        """Always available."""
        return True

    def describe(self) -> str:
        return "overrides"


class DefaultConfigSource(ConfigSource):
    """Default configuration values."""

    def __init__(self, defaults: dict[str, Any] = None, priority: int = 0):
        super().__init__(priority)
        self.defaults = defaults or {}

    def load(self) -> dict[str, Any]:
        """Return default configuration."""
        return self.defaults

    def is_available(self) -> bool:
        """Always available."""
        return True

    def describe(self) -> str:
        return "defaults"


class ConfigurationManager:
    """Resolves settings from multiple sources by priority.

    After resolve_config(), ``origins`` maps each key to the source that
    supplied its final value.
    """

    def __init__(self):
        self.logger = logging.getLogger("cfg")
        self.sources: list[ConfigSource] = []
        self.origins: dict[str, str] = {}

    def add_source(self, source: ConfigSource):
        self.sources.append(source)

    def resolve_config(self) -> dict[str, Any]:
        """Merge all available sources, higher priority winning per key."""
        merged: dict[str, Any] = {}
        self.origins = {}

        for source in sorted(self.sources, key=lambda s: s.priority):
            if not source.is_available():
                self.logger.debug(f"Skipping unavailable source: {source.describe()}")
                continue
            try:
                values = source.load()
            except Exception as e:
                self.logger.error(f"Error loading from {source.describe()}: {e}")
                continue

            merged.update(values)
            self.origins.update(dict.fromkeys(values, source.describe()))

        return merged

    def log_origins(self):
        """Log each resolved setting with the source it came from."""
        for key in sorted(self.origins):
            self.logger.debug(f"  {key:16s} <- {self.origins[key]}")


def create_configuration_manager(
    config_file: str | Path | None = None,
    args_config: dict[str, Any] | None = None,
    defaults: dict[str, Any] | None = None,
    use_env: bool = True
) -> ConfigurationManager:
    """Create a manager with the standard defaults/file/env/args stack."""
    manager = ConfigurationManager()

    if defaults:
        manager.add_source(DefaultConfigSource(defaults))
    if config_file:
        manager.add_source(FileConfigSource(config_file))
    if use_env:
        manager.add_source(EnvConfigSource())
    if args_config:
        manager.add_source(ArgsConfigSource(args_config))

    return manager
