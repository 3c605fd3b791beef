"""
Structured logging configuration using structlog.

Standardized log format:
{
    "ts": "2025-11-18T04:30:00.123456Z",
    "level": "info",
    "service": "sfbridge",
    "event": "event.forwarded",
    "seq": 42,
    "replay_id": 1187,
    "module": "sfbridge.services.forwarder",
    "func_name": "forward",
    "lineno": 88,
    ...additional context...
}
"""
import structlog
import logging
from typing import Any

SERVICE_NAME = "sfbridge"


def add_service_name(service_name: str):
    """Build a processor that stamps every entry with the service name."""

    def processor(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict["service"] = service_name
        return event_dict

    return processor


def setup_logging(json_output: bool = True, level: str = "INFO", service_name: str = SERVICE_NAME):
    """
    Configure structured logging with standardized fields.

    Args:
        json_output: If True, output JSON logs. If False, use console format.
        level: Minimum log level name (DEBUG, INFO, WARNING, ERROR).
        service_name: Name of the service (for multi-instance deployments).
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    shared_processors = [
        # Per-event context (seq, replay_id) bound by the forwarder
        structlog.contextvars.merge_contextvars,
        add_service_name(service_name),
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            [
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route library logging (kafka, aiohttp, uvicorn) through the same level
    logging.basicConfig(
        format="%(message)s",
        level=log_level,
    )

    # kafka-python is chatty at INFO about connection bookkeeping
    logging.getLogger("kafka").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("uvicorn.access").handlers = []


def get_logger():
    """Get a configured structlog logger."""
    return structlog.get_logger()
