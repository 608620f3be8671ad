"""Client for the server's HTTP management endpoint.

Every control operation is a single form-encoded POST to the JMX console
HtmlAdaptor. The server answers with an HTML page; whether the operation
itself succeeded is read from the page text, not from the HTTP status.

Example:
    channel = ControlChannel("localhost", 8080)
    if await channel.is_ready():
        await channel.deployer("redeploy", "file:///tmp/app.war")
"""

import logging
from dataclasses import dataclass, field

import httpx

from jboss_harness.control.readiness import JmxConsoleStatusParser, ReadinessParser
from jboss_harness.errors import ControlError, TransportError


SUCCESS_MARKER = "Operation completed successfully"
SERVER_BEAN = "jboss.system:type=Server"
DEPLOYER_BEAN = "jboss.system:service=MainDeployer"
DEFAULT_PATH = "/jmx-console/HtmlAdaptor"
DEFAULT_TIMEOUT = 120.0


@dataclass
class ManagementRequest:
    """One outbound management call.

    Attributes:
        action: Console action, e.g. 'invokeOpByName' or 'inspectMBean'
        name: Target management bean, e.g. 'jboss.system:type=Server'
        params: Extra form parameters (methodName, argType, arg0, ...)
    """
    action: str
    name: str
    params: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.action:
            raise ValueError("Management request requires an action")
        if not self.name:
            raise ValueError("Management request requires a target bean name")

    def form_data(self) -> dict[str, str]:
        data = {"action": self.action, "name": self.name}
        data.update({k: str(v) for k, v in self.params.items()})
        return data


@dataclass
class ManagementResponse:
    """Raw management response."""
    body: str
    status_code: int = 200

    @property
    def succeeded(self) -> bool:
        """True if the console reported the operation as completed."""
        return SUCCESS_MARKER in self.body


class ControlChannel:
    """Synchronous request/response client for the management endpoint.

    Args:
        host: Management host
        port: Management HTTP port
        path: Console adaptor path
        timeout: Default per-call timeout in seconds
        readiness_parser: Strategy used by is_ready() (default: JMX console)
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        host: str,
        port: int,
        path: str = DEFAULT_PATH,
        timeout: float = DEFAULT_TIMEOUT,
        readiness_parser: ReadinessParser | None = None,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self.host = host
        self.port = port
        self.path = path
        self.timeout = timeout
        self.readiness_parser = readiness_parser or JmxConsoleStatusParser()
        self._transport = transport
        self.logger = logging.getLogger("ctl")

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def call(self, request: ManagementRequest, timeout: float | None = None) -> ManagementResponse:
        """Send one management request and return the response body.

        Raises:
            TransportError: On network failure or a non-success HTTP status
        """
        timeout = self.timeout if timeout is None else timeout
        self.logger.debug(f"{request.action} {request.name} {request.params}")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=timeout,
                transport=self._transport
            ) as client:
                response = await client.post(self.path, data=request.form_data())
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            self.logger.error(response.text)
            raise TransportError(response.reason_phrase, response.status_code, response.text)

        return ManagementResponse(body=response.text, status_code=response.status_code)

    async def invoke(self, bean: str, method: str, **params: str) -> bool:
        """Invoke a bean operation by name.

        Returns:
            True if the console confirmed the operation, False if it declined

        Raises:
            TransportError: If the call itself failed
        """
        request = ManagementRequest("invokeOpByName", bean, {"methodName": method, **params})
        response = await self.call(request)
        return response.succeeded

    async def inspect(self, bean: str, timeout: float | None = None) -> ManagementResponse:
        """Fetch the attribute page for a bean."""
        return await self.call(ManagementRequest("inspectMBean", bean), timeout=timeout)

    async def clean_stop(self) -> bool:
        """Ask the server to shut itself down."""
        return await self.invoke(SERVER_BEAN, "shutdown")

    async def deployer(self, method: str, url: str) -> bool:
        """Run a MainDeployer operation ('redeploy' or 'undeploy') against an artifact URL."""
        return await self.invoke(DEPLOYER_BEAN, method, argType="java.net.URL", arg0=url)

    async def is_ready(self, timeout: float | None = None) -> bool:
        """Probe the server's Started attribute.

        Never raises: an unreachable endpoint, an HTTP error or an unreadable
        page all mean "not ready".
        """
        try:
            response = await self.inspect(SERVER_BEAN, timeout=timeout)
            return self.readiness_parser.parse(response.body)
        except ControlError as e:
            self.logger.debug(f"Readiness probe failed: {e}")
            return False
        except Exception as e:
            self.logger.debug(f"Readiness probe error: {type(e).__name__}: {e}")
            return False
