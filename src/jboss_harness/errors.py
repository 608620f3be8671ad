"""Exceptions raised by the server lifecycle components."""


class HarnessError(Exception):
    """Base class for all jboss_harness errors."""


class AlreadyRunningError(HarnessError):
    """Raised by start() when a server already answers on the management endpoint."""

    def __init__(self, host: str, port: int):
        super().__init__(f"JBoss is already running at {host}:{port}")
        self.host = host
        self.port = port


class AlreadyLaunchedError(HarnessError):
    """Raised by launch() while a server process from an earlier launch is still supervised."""

    def __init__(self, pid: int):
        super().__init__(f"Server already launched (PID: {pid})")
        self.pid = pid


class ControlError(HarnessError):
    """Base class for management endpoint failures."""


class TransportError(ControlError):
    """Management call failed at the network or HTTP level.

    Attributes:
        status_code: HTTP status code, None when no response was received
        body: Response body (empty when no response was received)
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        if status_code:
            super().__init__(f"Management call failed ({status_code}): {message}")
        else:
            super().__init__(f"Management call failed: {message}")
        self.status_code = status_code
        self.body = body


class StartupError(HarnessError):
    """Server did not reach the ready state."""

    def __init__(self, message: str, elapsed: float):
        super().__init__(message)
        self.elapsed = elapsed


class StartupTimeoutError(StartupError):
    """Readiness was not confirmed before the timeout elapsed."""

    def __init__(self, elapsed: float, timeout: float):
        super().__init__(f"JBoss failed to start within {timeout}s (waited {elapsed:.1f}s)", elapsed)
        self.timeout = timeout


class ServerExitedError(StartupError):
    """Server process disappeared while waiting for readiness."""

    def __init__(self, elapsed: float, exit_code: int | None = None):
        super().__init__(
            f"JBoss failed to start: process exited after {elapsed:.1f}s (exit code: {exit_code})",
            elapsed
        )
        self.exit_code = exit_code
