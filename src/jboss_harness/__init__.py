"""jboss_harness - JBoss lifecycle control for integration test suites."""

from jboss_harness.config import LifecycleConfig, load_config
from jboss_harness.control import ControlChannel
from jboss_harness.errors import (
    AlreadyLaunchedError,
    AlreadyRunningError,
    ControlError,
    HarnessError,
    ServerExitedError,
    StartupError,
    StartupTimeoutError,
    TransportError,
)
from jboss_harness.launchers import ProcessSupervisor, ServerHandle
from jboss_harness.readiness import ReadinessMonitor
from jboss_harness.server import OperationResult, Server

__version__ = "0.1.0"

__all__ = [
    "Server",
    "OperationResult",
    "LifecycleConfig",
    "load_config",
    "ControlChannel",
    "ProcessSupervisor",
    "ServerHandle",
    "ReadinessMonitor",
    "HarnessError",
    "AlreadyLaunchedError",
    "AlreadyRunningError",
    "ControlError",
    "TransportError",
    "StartupError",
    "StartupTimeoutError",
    "ServerExitedError",
]
