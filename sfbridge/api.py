"""
Operational HTTP surface: liveness, readiness and Prometheus metrics.

Runs beside the forwarder in the same event loop; it only reads health
and metrics and never touches the forwarding path.
"""
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from . import __version__
from .health import HealthChecker
from .logging import get_logger
from .metrics import Metrics

logger = get_logger()


def create_app(metrics: Metrics, health_checker: HealthChecker) -> FastAPI:
    app = FastAPI(
        title="sfbridge",
        version=__version__,
        description="Salesforce streaming to message queue bridge",
    )

    @app.get("/health")
    async def health():
        """Liveness probe - 200 while the process is running."""
        logger.debug("health_check_liveness")
        return health_checker.liveness()

    @app.get("/health/ready")
    async def health_ready():
        """
        Readiness probe.

        Returns:
            200: Broker reachable and host resources available
            503: Service is not ready
        """
        logger.debug("health_check_readiness")
        result = await health_checker.readiness()
        status_code = 200 if result["status"] == "ready" else 503
        return JSONResponse(result, status_code=status_code)

    app.mount("/metrics", make_asgi_app(registry=metrics.registry))
    return app
