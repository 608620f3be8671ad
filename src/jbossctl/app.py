"""Main Typer app for jbossctl CLI.

Usage:
    jbossctl start --wait 120      # boot JBoss, block until Ctrl+C
    jbossctl status
    jbossctl deploy file:///build/app.war
    jbossctl undeploy file:///build/app.war
    jbossctl stop                  # clean shutdown of a running server
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Annotated

import typer

from jboss_harness.config import LifecycleConfig, load_config
from jboss_harness.control.channel import ControlChannel
from jboss_harness.errors import AlreadyRunningError, StartupError, TransportError
from jboss_harness.logging_setup import setup_logging
from jboss_harness.management.environment import load_dotenv_if_available
from jboss_harness.server import Server

# Disable typer's rich integration to avoid compatibility issues
os.environ["_TYPER_STANDARD_TRACEBACK"] = "1"

app = typer.Typer(pretty_exceptions_enable=False, rich_markup_mode=None, no_args_is_help=True)

logger = logging.getLogger("cli")


@dataclass
class CliState:
    config: LifecycleConfig


def _fail(message: str):
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


@app.callback()
def main_options(
    ctx: typer.Context,
    config_file: Annotated[str | None, typer.Option("--config", "-c", help="YAML configuration file")] = None,
    host: Annotated[str | None, typer.Option("--host", help="Server host / bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Management HTTP port")] = None,
    lazy: Annotated[bool, typer.Option("--lazy", help="Reuse an already running server")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable colored logging")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show server console output")] = False,
):
    """Control a JBoss instance used by integration tests."""
    setup_logging(
        use_color=not no_color,
        console_level=logging.DEBUG if verbose else logging.WARNING
    )
    env_loaded, env_file_path = load_dotenv_if_available()
    if env_loaded:
        logger.info(f"Loaded environment from {env_file_path}")

    ctx.obj = CliState(config=load_config(config_file, host=host, port=port, lazy=True if lazy else None))


async def _run_foreground(config: LifecycleConfig, wait: float) -> bool | int | None:
    server = Server(config)
    try:
        result = await server.start(wait=wait)
        if result is None:
            # Lazy mode reused a running server; nothing of ours to supervise
            return result

        logger.info("JBoss running. Press Ctrl+C to stop.")
        await server.wait_stopped()
    finally:
        await server.stop()
        if server.supervisor.is_running:
            # lazy stop() leaves the server up, but this process owns the child
            logger.info("Stopping JBoss launched by this command")
            await server.supervisor.terminate(graceful=True)
    return result


@app.command()
def start(
    ctx: typer.Context,
    wait: Annotated[float | None, typer.Option("--wait", "-w", help="Seconds to wait for readiness (0 = don't wait)")] = None,
):
    """Start JBoss in the foreground and stop it on SIGINT/SIGTERM."""
    config: LifecycleConfig = ctx.obj.config
    try:
        asyncio.run(_run_foreground(config, config.wait if wait is None else wait))
    except AlreadyRunningError as e:
        _fail(str(e))
    except StartupError as e:
        _fail(str(e))
    except ValueError as e:
        _fail(f"Cannot build server command: {e}")


@app.command()
def stop(ctx: typer.Context):
    """Ask a running server to shut down cleanly."""
    config: LifecycleConfig = ctx.obj.config
    channel = ControlChannel(config.host, config.port, path=config.management_path, timeout=config.request_timeout)
    try:
        stopped = asyncio.run(channel.clean_stop())
    except TransportError as e:
        _fail(str(e))
    if not stopped:
        _fail("Server declined the shutdown request")
    typer.echo("JBoss shutdown requested")


@app.command()
def status(ctx: typer.Context):
    """Report whether the server is started."""
    config: LifecycleConfig = ctx.obj.config
    ready = asyncio.run(Server(config).ready())
    if not ready:
        typer.secho(f"JBoss at {config.base_url}: not ready", fg=typer.colors.YELLOW)
        raise typer.Exit(1)
    typer.secho(f"JBoss at {config.base_url}: started", fg=typer.colors.GREEN)


@app.command()
def deploy(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="Artifact URL, e.g. file:///build/app.war")],
):
    """Deploy (or redeploy) an artifact."""
    try:
        result = asyncio.run(Server(ctx.obj.config).deploy(url))
    except TransportError as e:
        _fail(str(e))
    if not result.success:
        _fail(f"Deployment of {url} failed")
    typer.echo(f"Deployed {result.artifact} in {result.elapsed:.1f}s")


@app.command()
def undeploy(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="Artifact URL used at deploy time")],
):
    """Undeploy an artifact."""
    try:
        result = asyncio.run(Server(ctx.obj.config).undeploy(url))
    except TransportError as e:
        _fail(str(e))
    if not result.success:
        _fail(f"Undeploy of {url} failed")
    typer.echo(f"Undeployed {result.artifact}")


def main():
    """Entry point for jbossctl CLI."""
    app()


if __name__ == "__main__":
    main()
