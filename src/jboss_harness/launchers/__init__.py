"""Server process supervision."""

from .process import STOPPED, STOPPED_FORCED, ProcessSupervisor, ServerHandle, build_command


__all__ = [
    'ProcessSupervisor',
    'ServerHandle',
    'build_command',
    'STOPPED',
    'STOPPED_FORCED',
]
