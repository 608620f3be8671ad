"""Supervisor for the server's OS process.

Spawns the server JVM as a child process, keeps its console pipe drained so
the child never blocks on a full buffer, and stops it either cleanly through
the management endpoint or by signal.
"""

import asyncio
import logging
import shlex
import signal
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from jboss_harness.config import LifecycleConfig
from jboss_harness.control.channel import ControlChannel
from jboss_harness.errors import AlreadyLaunchedError, ControlError


STOPPED = "stopped"
STOPPED_FORCED = "stopped (forced)"

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_command(config: LifecycleConfig) -> list[str]:
    """Build the JVM command line that boots the server.

    Raises:
        ValueError: If java_home or jboss_home is not configured
    """
    if not config.java_home:
        raise ValueError("java_home is not configured (set JAVA_HOME or java_home)")
    if not config.jboss_home:
        raise ValueError("jboss_home is not configured (set JBOSS_HOME or jboss_home)")

    java_home = Path(config.java_home)
    jboss_home = Path(config.jboss_home)

    return [
        str(java_home / "bin" / "java"),
        "-cp", str(jboss_home / "bin" / "run.jar"),
        *shlex.split(config.jvm_args or ""),
        f"-Djava.endorsed.dirs={jboss_home / 'lib' / 'endorsed'}",
        "org.jboss.Main",
        "-c", config.jboss_conf,
        "-b", config.host,
    ]


@dataclass
class ServerHandle:
    """The supervised server process.

    Exists only while the supervisor considers the server running.
    """
    process: subprocess.Popen
    start_time: datetime
    args: list[str]
    drain_task: asyncio.Task | None = None
    exit_task: asyncio.Task | None = None

    @property
    def pid(self) -> int:
        return self.process.pid


class ProcessSupervisor:
    """Launches and terminates the single server process.

    Args:
        config: Lifecycle configuration (used to build the default command)
        channel: Management channel used for clean shutdown
        terminate_delay: Seconds to wait for the process to exit before escalating
    """

    def __init__(
        self,
        config: LifecycleConfig,
        channel: ControlChannel,
        terminate_delay: float | None = None
    ):
        self.config = config
        self.channel = channel
        self.terminate_delay = config.terminate_delay if terminate_delay is None else terminate_delay
        self.logger = logging.getLogger("sup")
        self.console_logger = logging.getLogger("jboss")
        self.last_exit_code: int | None = None
        self._handle: ServerHandle | None = None
        self._terminating = False
        self._terminate_lock = asyncio.Lock()
        self._signal_loop: asyncio.AbstractEventLoop | None = None
        self._signal_fired = False
        self._installed_signals: list[signal.Signals] = []

    @property
    def handle(self) -> ServerHandle | None:
        """Current handle, None when no server process is supervised."""
        return self._handle

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    async def launch(self, command: list[str] | None = None) -> ServerHandle:
        """Spawn the server process.

        Args:
            command: Command line to run (default: built from config)

        Raises:
            AlreadyLaunchedError: If a server process is already supervised
        """
        if self._handle is not None:
            raise AlreadyLaunchedError(self._handle.pid)

        args = list(command) if command is not None else build_command(self.config)
        self.logger.info(f"Starting server: {' '.join(args)}")

        process = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace"
        )

        handle = ServerHandle(process=process, start_time=datetime.now(), args=args)
        self._handle = handle
        self.last_exit_code = None
        handle.drain_task = asyncio.create_task(self._drain_output(handle))
        handle.exit_task = asyncio.create_task(self._watch_exit(handle))
        self.logger.info(f"pid={process.pid}")
        return handle

    async def terminate(self, graceful: bool = True) -> str | None:
        """Stop the supervised server.

        A graceful stop asks the server to shut down over the management
        endpoint. If that call fails or is declined, the process is
        interrupted and, if still alive after terminate_delay, killed.

        Returns:
            "stopped", "stopped (forced)", or None if no server was running
        """
        async with self._terminate_lock:
            handle = self._handle
            if handle is None:
                self.logger.debug("No server process, nothing to stop")
                return None

            self._terminating = True
            try:
                clean = False
                if graceful:
                    clean = await self._clean_stop()

                if clean:
                    if not await self._wait_exit(handle, self.terminate_delay):
                        self.logger.info(
                            f"Server (PID: {handle.pid}) acknowledged shutdown but is still exiting"
                        )
                    result = STOPPED
                else:
                    if graceful:
                        self.logger.warning("Unable to shutdown JBoss cleanly, interrupting process")
                    await self._force_stop(handle)
                    result = STOPPED_FORCED
            finally:
                if self._handle is handle:
                    self._handle = None
                self._terminating = False

            self.logger.info("JBoss stopped")
            return result

    def install_signal_handlers(self, callback: Callable[[], Any]):
        """Route SIGINT and SIGTERM to ``callback``, at most once.

        Repeated signals after the first one are logged and ignored. SIGKILL
        cannot be caught and is left to the OS.
        """
        loop = asyncio.get_running_loop()
        self.remove_signal_handlers()
        self._signal_loop = loop
        self._signal_fired = False

        for sig in HANDLED_SIGNALS:
            loop.add_signal_handler(sig, self._on_signal, sig, callback)
            self._installed_signals.append(sig)
        self.logger.debug("Signal handlers installed")

    def remove_signal_handlers(self):
        """Restore default handling for the signals installed above."""
        if self._signal_loop is None:
            return
        if not self._signal_loop.is_closed():
            for sig in self._installed_signals:
                self._signal_loop.remove_signal_handler(sig)
        self._installed_signals = []
        self._signal_loop = None

    def get_status(self) -> dict[str, Any]:
        """Get server process status."""
        handle = self._handle
        if handle is None:
            return {
                "status": "stopped",
                "running": False,
                "exit_code": self.last_exit_code
            }

        return {
            "status": "running",
            "running": True,
            "pid": handle.pid,
            "start_time": handle.start_time.isoformat(),
            "uptime_seconds": (datetime.now() - handle.start_time).total_seconds()
        }

    def _on_signal(self, sig: signal.Signals, callback: Callable[[], Any]):
        if self._signal_fired:
            self.logger.info(f"Received signal {sig.name}, stop already in progress")
            return
        self._signal_fired = True
        self.logger.info(f"Received signal {sig.name}, stopping server...")
        callback()

    async def _clean_stop(self) -> bool:
        try:
            return await self.channel.clean_stop()
        except ControlError as e:
            self.logger.warning(f"Clean shutdown call failed: {e}")
            return False

    async def _force_stop(self, handle: ServerHandle):
        proc = handle.process
        if proc.poll() is not None:
            return

        proc.send_signal(signal.SIGINT)
        if await self._wait_exit(handle, self.terminate_delay):
            return

        self.logger.warning(
            f"Force killing server (PID: {handle.pid}) - did not exit in {self.terminate_delay}s"
        )
        proc.kill()
        await self._wait_exit(handle, self.terminate_delay)

    async def _wait_exit(self, handle: ServerHandle, timeout: float) -> bool:
        """Wait up to timeout seconds for the process to exit."""
        try:
            self.last_exit_code = await asyncio.to_thread(handle.process.wait, timeout)
            return True
        except subprocess.TimeoutExpired:
            return False

    async def _watch_exit(self, handle: ServerHandle):
        """Clear the handle when the process exits on its own."""
        try:
            returncode = await asyncio.to_thread(handle.process.wait)
        except asyncio.CancelledError:
            return

        self.last_exit_code = returncode
        if self._handle is handle and not self._terminating:
            self._handle = None
            self.logger.warning(f"Server (PID: {handle.pid}) exited unexpectedly (exit code: {returncode})")

    async def _drain_output(self, handle: ServerHandle):
        """Read the console pipe until it closes, relaying each line."""
        stream = handle.process.stdout
        try:
            while True:
                line = await asyncio.to_thread(stream.readline)
                if not line:
                    break
                self.console_logger.debug(line.rstrip())
        except asyncio.CancelledError:
            return
        except Exception as e:
            self.logger.error(f"Console drain error: {e}")
