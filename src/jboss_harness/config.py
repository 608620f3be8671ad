"""Lifecycle configuration: where the server lives and how to reach it."""

import logging
import os
import shutil
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from jboss_harness.management.configuration import create_configuration_manager


_logger = logging.getLogger("cfg")

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def default_java_home() -> str | None:
    """JAVA_HOME, or the installation owning the first ``java`` on PATH."""
    java_home = os.getenv("JAVA_HOME")
    if java_home:
        return java_home
    java = shutil.which("java")
    if java:
        # <java_home>/bin/java
        return str(Path(java).resolve().parent.parent)
    return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Not a boolean: {value!r}")
    return bool(value)


@dataclass(frozen=True)
class LifecycleConfig:
    """Settings shared by all lifecycle components, fixed once loaded.

    Attributes:
        host: Bind address passed to the server and management host
        port: Management HTTP port
        jboss_home: Server installation directory
        jboss_conf: Server configuration name ('default', 'all', ...)
        java_home: JVM installation used to launch the server
        jvm_args: Extra JVM flags (shell syntax)
        lazy: Reuse an already running server; skip start and stop
        wait: Default seconds to wait for readiness on start (0 = don't wait)
        request_timeout: Per-call management timeout in seconds
        poll_interval: Seconds between readiness probes
        terminate_delay: Seconds to wait for exit before force killing
        management_path: Console adaptor path on the management port
    """
    host: str = "localhost"
    port: int = 8080
    jboss_home: str | None = None
    jboss_conf: str = "default"
    java_home: str | None = None
    jvm_args: str = "-Xms64m -Xmx1024m -Djava.net.preferIPv4Stack=true"
    lazy: bool = False
    wait: float = 0
    request_timeout: float = 120.0
    poll_interval: float = 1.0
    terminate_delay: float = 5.0
    management_path: str = "/jmx-console/HtmlAdaptor"

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "LifecycleConfig":
        """Build a config from loosely typed values (YAML, env strings, CLI)."""
        known = {f.name: f for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            if key not in known:
                _logger.warning(f"Ignoring unknown configuration key: {key}")
                continue
            if value is None:
                continue
            kwargs[key] = value

        for key in ("port",):
            if key in kwargs:
                kwargs[key] = int(kwargs[key])
        for key in ("wait", "request_timeout", "poll_interval", "terminate_delay"):
            if key in kwargs:
                kwargs[key] = float(kwargs[key])
        if "lazy" in kwargs:
            kwargs["lazy"] = _to_bool(kwargs["lazy"])
        for key in ("host", "jboss_home", "jboss_conf", "java_home", "jvm_args", "management_path"):
            if key in kwargs:
                kwargs[key] = str(kwargs[key])

        return cls(**kwargs)


def load_config(config_file: str | Path | None = None, use_env: bool = True, **overrides: Any) -> LifecycleConfig:
    """Resolve LifecycleConfig from defaults, YAML file, environment and overrides.

    Precedence (lowest to highest): built-in defaults, JBOSS_HOME / JAVA_HOME,
    the YAML file, JBOSS_HARNESS_* variables, keyword overrides.

    Args:
        config_file: Optional YAML file; a missing file is logged and skipped
        use_env: Read JBOSS_HARNESS_* variables
        **overrides: Explicit values (None values are ignored)
    """
    defaults = {
        "jboss_home": os.getenv("JBOSS_HOME"),
        "java_home": default_java_home(),
    }
    if config_file and not Path(config_file).exists():
        _logger.info(f"Config file not found: {config_file}, using defaults")

    manager = create_configuration_manager(
        config_file=config_file,
        args_config=overrides,
        defaults={k: v for k, v in defaults.items() if v},
        use_env=use_env
    )
    values = manager.resolve_config()
    manager.log_origins()
    return LifecycleConfig.from_dict(values)
