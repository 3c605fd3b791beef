import pytest
import structlog
from sfbridge.config import parse_config


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Keep tests independent of any logging configured by the entry point."""
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.reset_defaults()


@pytest.fixture
def raw_config():
    return {
        "source": {
            "adapter": "memory",
            "channel": "/event/Monitoring_Event__e",
            "connection_params": {"username": "u", "password": "p"},
        },
        "sink": {
            "adapter": "memory",
            "brokers": ["localhost:9092"],
            "topic": "salesforce_events",
        },
    }


@pytest.fixture
def config(raw_config):
    return parse_config(raw_config)
