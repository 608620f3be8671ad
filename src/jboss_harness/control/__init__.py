"""Management endpoint client and readiness parsing."""

from .channel import (
    DEPLOYER_BEAN,
    SERVER_BEAN,
    SUCCESS_MARKER,
    ControlChannel,
    ManagementRequest,
    ManagementResponse,
)
from .readiness import JmxConsoleStatusParser, ReadinessParser, RegexStatusParser


__all__ = [
    'ControlChannel',
    'ManagementRequest',
    'ManagementResponse',
    'ReadinessParser',
    'RegexStatusParser',
    'JmxConsoleStatusParser',
    'SUCCESS_MARKER',
    'SERVER_BEAN',
    'DEPLOYER_BEAN',
]
