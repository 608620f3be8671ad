"""Polls the management endpoint until the server reports itself started."""

import asyncio
import logging
import time
from typing import Callable

from jboss_harness.control.channel import ControlChannel
from jboss_harness.errors import ServerExitedError, StartupTimeoutError
from jboss_harness.launchers.process import ProcessSupervisor


class ReadinessMonitor:
    """Waits for readiness while the supervised process is alive.

    Args:
        channel: Management channel providing is_ready()
        supervisor: Supervisor whose handle tells whether the process is alive
        interval: Seconds between probes
        clock: Monotonic time source
    """

    def __init__(
        self,
        channel: ControlChannel,
        supervisor: ProcessSupervisor,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.channel = channel
        self.supervisor = supervisor
        self.interval = interval
        self._clock = clock
        self.last_elapsed: float | None = None
        self.logger = logging.getLogger("rdy")

    async def await_ready(self, timeout: float) -> bool | int | None:
        """Block until the server is ready or the timeout elapses.

        Args:
            timeout: Seconds to wait; zero or less skips waiting entirely

        Returns:
            True once ready; the process id (None without a process) when
            timeout <= 0

        Raises:
            StartupTimeoutError: If readiness was not confirmed in time
            ServerExitedError: If the process went away while waiting
        """
        if timeout <= 0:
            handle = self.supervisor.handle
            return handle.pid if handle else None

        self.logger.info(f"Waiting up to {timeout}s for JBoss to boot")
        t0 = self._clock()
        elapsed = 0.0

        while True:
            elapsed = self._clock() - t0
            if self.supervisor.handle is None:
                raise ServerExitedError(elapsed, self.supervisor.last_exit_code)
            if elapsed >= timeout:
                break

            remaining = timeout - elapsed
            if await self.channel.is_ready(timeout=min(remaining, self.channel.timeout)):
                elapsed = self._clock() - t0
                self.last_elapsed = elapsed
                self.logger.info(f"JBoss started in {int(elapsed)}s")
                return True

            remaining = timeout - (self._clock() - t0)
            if remaining > 0:
                await asyncio.sleep(min(self.interval, remaining))

        self.last_elapsed = elapsed
        raise StartupTimeoutError(elapsed, timeout)
