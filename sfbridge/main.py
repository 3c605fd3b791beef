"""
sfbridge - Salesforce streaming events to a message queue topic.

Features:
- Structured logging with per-event context
- Prometheus metrics and health probes (optional HTTP surface)
- Graceful shutdown on SIGINT/SIGTERM
- Exit codes: 0 graceful, 1 subscription/runtime failure, 2 configuration,
  3 authentication, 4 sink connection, 5 HTTP server startup
"""
import argparse
import asyncio
import contextlib
import signal
import sys
import uvicorn
from .adapters import create_event_source, create_publisher
from .api import create_app
from .config import BridgeConfig, Settings, get_settings, load_config
from .errors import BridgeError, HttpServerError
from .health import HealthChecker
from .logging import setup_logging, get_logger
from .metrics import Metrics
from .services.forwarder import EventForwarder, ForwarderStats

logger = get_logger()


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the bridge."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def build_forwarder(config: BridgeConfig, metrics: Metrics) -> EventForwarder:
    publisher = create_publisher(config.sink)
    source = create_event_source(config.source)
    return EventForwarder(config, source, publisher, metrics)


async def _serve_http(server: uvicorn.Server, port: int) -> None:
    try:
        await server.serve()
    except SystemExit as e:
        # uvicorn exits the process when it cannot bind
        raise HttpServerError(f"HTTP server could not start on port {port}") from e


async def _wait_started(server: uvicorn.Server, server_task: asyncio.Task, port: int) -> None:
    """Return once uvicorn is listening; raise HttpServerError if it gave up."""
    while not server.started:
        if server_task.done():
            server_task.result()
            raise HttpServerError(f"HTTP server stopped before listening on port {port}")
        await asyncio.sleep(0.05)


async def serve(forwarder: EventForwarder, settings: Settings, metrics: Metrics) -> ForwarderStats:
    """Run the forwarder, plus the HTTP surface when HTTP_PORT is set."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, forwarder.stop)
        except NotImplementedError:
            # Windows event loops; Ctrl+C surfaces as KeyboardInterrupt instead
            logger.debug("signal_handler_unavailable", signal=sig.name)

    server = None
    server_task = None
    if settings.HTTP_PORT:
        app = create_app(metrics, HealthChecker(forwarder.publisher))
        server = _EmbeddedServer(
            uvicorn.Config(app, host=settings.HTTP_HOST, port=settings.HTTP_PORT, log_level="warning")
        )
        server_task = asyncio.create_task(_serve_http(server, settings.HTTP_PORT))
        await _wait_started(server, server_task, settings.HTTP_PORT)
        logger.info("http.listening", host=settings.HTTP_HOST, port=settings.HTTP_PORT)

    try:
        return await forwarder.run()
    finally:
        metrics.set_down()
        if server is not None:
            server.should_exit = True
            await server_task


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sfbridge",
        description="Forward Salesforce streaming events to a message queue topic.",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to the JSON configuration file (default: $CONFIG_PATH or config.json)",
    )
    return parser.parse_args(argv)


def run(argv=None) -> int:
    """Process entry point; returns the exit code."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(json_output=settings.LOG_JSON, level=settings.LOG_LEVEL)
    config_path = args.config or settings.CONFIG_PATH

    logger.info("service_starting", env=settings.ENV, config_path=config_path)
    try:
        config = load_config(config_path)
        metrics = Metrics()
        forwarder = build_forwarder(config, metrics)
        stats = asyncio.run(serve(forwarder, settings, metrics))
    except BridgeError as e:
        logger.error("service_failed", error=str(e), error_type=type(e).__name__, exit_code=e.exit_code)
        return e.exit_code
    except KeyboardInterrupt:
        logger.info("service_interrupted")
        return 0
    except Exception as e:
        logger.error("service_crashed", error=str(e), error_type=type(e).__name__, exc_info=True)
        return 1

    logger.info("service_stopping", **stats.model_dump())
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
