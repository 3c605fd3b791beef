"""
Liveness and readiness checks for the bridge.
"""
from datetime import datetime, timezone
from typing import Dict, Any
import psutil
from . import __version__
from .adapters.base import Publisher
from .logging import SERVICE_NAME, get_logger

logger = get_logger()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HealthChecker:
    """
    Health checker for the bridge.

    Provides:
    - Liveness checks (is the process running?)
    - Readiness checks (is the broker reachable and the host healthy?)
    """

    def __init__(self, publisher: Publisher | None = None, service_name: str = SERVICE_NAME, version: str = __version__):
        self.publisher = publisher
        self.service_name = service_name
        self.version = version

    def liveness(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "service": self.service_name,
            "version": self.version,
            "timestamp": _now(),
        }

    async def readiness(self) -> Dict[str, Any]:
        """
        Readiness check - broker connectivity, disk space and memory.

        Returns:
            dict: Readiness status with detailed check results
        """
        checks = {
            "broker": await self._check_broker(),
            "disk_space": self._check_disk_space(),
            "memory": self._check_memory(),
        }
        overall_status = "ready"
        if any(check["status"] == "error" for check in checks.values()):
            overall_status = "not_ready"

        return {
            "status": overall_status,
            "service": self.service_name,
            "version": self.version,
            "timestamp": _now(),
            "checks": checks,
        }

    async def _check_broker(self) -> Dict[str, Any]:
        if self.publisher is None:
            return {
                "status": "skipped",
                "message": "No publisher attached",
            }
        if await self.publisher.health_check():
            return {"status": "ok", "adapter": type(self.publisher).__name__}
        return {
            "status": "error",
            "adapter": type(self.publisher).__name__,
            "error": "broker unreachable",
        }

    def _check_disk_space(self, threshold_gb: float = 1.0) -> Dict[str, Any]:
        """
        Check available disk space.

        Args:
            threshold_gb: Minimum available disk space in GB (default: 1.0)
        """
        try:
            disk = psutil.disk_usage("/")
            available_gb = disk.free / (1024**3)

            if available_gb < threshold_gb:
                status = "error"
            elif available_gb < threshold_gb * 2:
                status = "warning"
            else:
                status = "ok"

            return {
                "status": status,
                "available_gb": round(available_gb, 2),
                "total_gb": round(disk.total / (1024**3), 2),
                "used_percent": disk.percent,
            }

        except Exception as e:
            logger.warning("disk_health_check_failed", error=str(e))
            return {
                "status": "error",
                "error": str(e),
            }

    def _check_memory(self, threshold_mb: float = 50.0) -> Dict[str, Any]:
        try:
            memory = psutil.virtual_memory()
            available_mb = memory.available / (1024**2)

            if available_mb < threshold_mb:
                status = "error"
            elif available_mb < threshold_mb * 2:
                status = "warning"
            else:
                status = "ok"

            return {
                "status": status,
                "available_mb": round(available_mb, 2),
                "used_percent": memory.percent,
            }

        except Exception as e:
            logger.warning("memory_health_check_failed", error=str(e))
            return {
                "status": "error",
                "error": str(e),
            }
