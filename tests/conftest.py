"""Pytest configuration for jboss-harness tests.

Provides a fake JMX console served through httpx.MockTransport, so the
control channel, readiness monitor and lifecycle controller can be exercised
without a JBoss installation. Server processes are stood in for by short
Python child processes.
"""

import sys
from urllib.parse import parse_qs

import httpx
import pytest

from jboss_harness.config import LifecycleConfig
from jboss_harness.control.channel import ControlChannel
from jboss_harness.server import Server


SUCCESS_PAGE = """<html><body>
<h1>JMX MBean Operation Result <em>shutdown()</em></h1>
<span class='OpResult'>Operation completed successfully without a return value!</span>
</body></html>"""

FAILURE_PAGE = """<html><body>
<h1>JMX MBean Operation Result <em>redeploy()</em></h1>
<span class='OpResult'>org.jboss.deployment.DeploymentException: url file:/missing.war could not be opened</span>
</body></html>"""


def status_page(started: str) -> str:
    """Render the inspectMBean page for jboss.system:type=Server."""
    return f"""<html><body>
<h1>MBean View</h1>
<table>
<tr>
  <td class='param'>Name</td><td>jboss.system:type=Server</td>
</tr>
<tr>
  <td class='param'>Started</td>
  <td class='param'>R</td>
  <td class='param'>boolean</td>
  <td class='param'>
    <pre>
{started}
    </pre>
  </td>
</tr>
</table>
</body></html>"""


class FakeConsole:
    """In-memory JMX console HtmlAdaptor.

    Attributes:
        started: Value reported for the Started attribute
        ready_after: If set, report started only from this inspect call on (1-based)
        accept_operations: Whether invokeOpByName calls report success
        status_code: HTTP status to answer with
        unreachable: Raise a connection error for every request
        on_shutdown: Called when the shutdown operation is invoked
        requests: Form data of every request received
    """

    def __init__(self):
        self.started = False
        self.ready_after: int | None = None
        self.accept_operations = True
        self.status_code = 200
        self.unreachable = False
        self.on_shutdown = None
        self.requests: list[dict[str, str]] = []
        self.inspect_count = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        self.requests.append(form)

        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="<html>Internal error</html>")

        if form.get("action") == "inspectMBean":
            self.inspect_count += 1
            started = self.started
            if self.ready_after is not None:
                started = self.inspect_count >= self.ready_after
            return httpx.Response(200, text=status_page("True" if started else "False"))

        if form.get("methodName") == "shutdown" and self.on_shutdown is not None:
            self.on_shutdown()
        return httpx.Response(200, text=SUCCESS_PAGE if self.accept_operations else FAILURE_PAGE)

    def operations(self, method: str) -> list[dict[str, str]]:
        """Requests that invoked the given bean method."""
        return [r for r in self.requests if r.get("methodName") == method]


@pytest.fixture
def console():
    return FakeConsole()


@pytest.fixture
def channel(console):
    return ControlChannel("localhost", 8080, transport=console.transport)


@pytest.fixture
def sleeper_command():
    """Command for a stand-in server that prints a line and idles."""
    return [sys.executable, "-c", "import time; print('JBoss booting', flush=True); time.sleep(60)"]


@pytest.fixture
def make_server(console):
    """Factory for Servers wired to the fake console; kills leftover children on teardown."""
    servers: list[Server] = []

    def factory(**overrides) -> Server:
        config = LifecycleConfig(**{"poll_interval": 0.05, "terminate_delay": 2.0, **overrides})
        server_channel = ControlChannel(config.host, config.port, transport=console.transport)
        server = Server(config, channel=server_channel)
        servers.append(server)
        return server

    yield factory

    for server in servers:
        handle = server.supervisor.handle
        if handle is not None and handle.process.poll() is None:
            handle.process.kill()
            handle.process.wait(timeout=5)
