"""Lifecycle controller for the application server under test.

Server is the entry point used by test harnesses:

    server = Server(load_config())
    await server.start(wait=120)
    result = await server.deploy("file:///build/app.war")
    assert result.success
    ...
    await server.undeploy("file:///build/app.war")
    await server.stop()

or, scoped:

    async with Server(load_config(wait=120)) as server:
        await server.deploy(url)
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from jboss_harness.config import LifecycleConfig
from jboss_harness.control.channel import ControlChannel
from jboss_harness.errors import AlreadyRunningError
from jboss_harness.launchers.process import ProcessSupervisor
from jboss_harness.readiness import ReadinessMonitor


@dataclass
class OperationResult:
    """Outcome of a deploy or undeploy call.

    An unsuccessful result means the server answered but declined the
    operation; transport failures raise instead.
    """
    operation: str
    url: str
    success: bool
    elapsed: float

    @property
    def artifact(self) -> str:
        """Last path segment of the artifact URL."""
        return self.url.rstrip("/").split("/")[-1]


class Server:
    """Starts, stops and deploys to a single server instance.

    Components are built from the config unless passed in explicitly.
    """

    def __init__(
        self,
        config: LifecycleConfig | None = None,
        channel: ControlChannel | None = None,
        supervisor: ProcessSupervisor | None = None,
        monitor: ReadinessMonitor | None = None
    ):
        self.config = config or LifecycleConfig()
        self.channel = channel or ControlChannel(
            self.config.host,
            self.config.port,
            path=self.config.management_path,
            timeout=self.config.request_timeout
        )
        self.supervisor = supervisor or ProcessSupervisor(self.config, self.channel)
        self.monitor = monitor or ReadinessMonitor(
            self.channel, self.supervisor, interval=self.config.poll_interval
        )
        self.logger = logging.getLogger("srv")
        self._stopped = asyncio.Event()
        self._stop_task: asyncio.Task | None = None

    async def __aenter__(self) -> "Server":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def start(self, wait: float | None = None, command: list[str] | None = None) -> bool | int | None:
        """Launch the server and optionally wait for it to become ready.

        Args:
            wait: Seconds to wait for readiness (default: config.wait); 0 returns right after spawning
            command: Override the command line built from config

        Returns:
            None in lazy mode when a server is already up, True once ready,
            or the process id when not waiting

        Raises:
            AlreadyRunningError: A server already answers on the management endpoint
            AlreadyLaunchedError: This controller still supervises an earlier launch
            StartupTimeoutError: Readiness not confirmed within ``wait`` seconds
            ServerExitedError: The process died before becoming ready
        """
        wait = self.config.wait if wait is None else wait

        if await self.ready():
            if self.config.lazy:
                self.logger.info(f"JBoss already running at {self.config.base_url}, reusing it")
                return None
            raise AlreadyRunningError(self.config.host, self.config.port)

        handle = await self.supervisor.launch(command)
        self._stopped.clear()
        self.supervisor.install_signal_handlers(self._request_stop)
        self.logger.info(f"JBoss launched (PID: {handle.pid})")

        return await self.monitor.await_ready(wait)

    async def deploy(self, url: str) -> OperationResult:
        """(Re)deploy the artifact at ``url``.

        Raises:
            TransportError: If the management call failed
        """
        t0 = time.monotonic()
        self.logger.info(url)
        success = await self.channel.deployer("redeploy", url)
        elapsed = time.monotonic() - t0

        if success:
            self.logger.info(f"  deployed in {int(elapsed)}s")
        else:
            self.logger.warning(f"  deployment of {url} not confirmed by server ({int(elapsed)}s)")
        return OperationResult("redeploy", url, success, elapsed)

    async def undeploy(self, url: str) -> OperationResult:
        """Undeploy the artifact at ``url``.

        Raises:
            TransportError: If the management call failed
        """
        t0 = time.monotonic()
        success = await self.channel.deployer("undeploy", url)
        result = OperationResult("undeploy", url, success, time.monotonic() - t0)

        if success:
            self.logger.info(f"  undeployed {result.artifact}")
        else:
            self.logger.warning(f"  undeploy of {result.artifact} not confirmed by server")
        return result

    async def stop(self) -> str | None:
        """Stop the server this controller launched.

        Does nothing in lazy mode or when no server was launched. Either way
        signal handlers are released and wait_stopped() resolves.

        Returns:
            "stopped", "stopped (forced)", or None if nothing was stopped
        """
        try:
            if self.config.lazy:
                self.logger.debug("Lazy mode, leaving JBoss running")
                return None
            return await self.supervisor.terminate(graceful=True)
        finally:
            self.supervisor.remove_signal_handlers()
            self._stopped.set()

    async def ready(self) -> bool:
        """True if the server reports itself started. Never raises."""
        return await self.channel.is_ready()

    async def wait_stopped(self):
        """Wait until a stop() call has completed."""
        await self._stopped.wait()

    def _request_stop(self):
        if self._stop_task is None or self._stop_task.done():
            self._stop_task = asyncio.create_task(self.stop())
            self._stop_task.add_done_callback(self._stop_done)

    def _stop_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error(f"Stop requested by signal failed: {type(exc).__name__}: {exc}")
