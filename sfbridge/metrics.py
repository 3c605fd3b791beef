"""
Prometheus metrics for the bridge.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry
from . import __version__
from .logging import SERVICE_NAME


class Metrics:
    """
    Centralized metrics for the bridge, on a private registry so that
    several forwarders (and tests) never collide.
    """

    def __init__(self, service_name: str = SERVICE_NAME, version: str = __version__, registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Forwarding metrics
        self.events_received_total = Counter(
            "sfbridge_events_received_total",
            "Inbound events received from the subscription",
            ["channel"],
            registry=self.registry,
        )

        self.events_forwarded_total = Counter(
            "sfbridge_events_forwarded_total",
            "Envelopes published to the message queue",
            ["topic"],
            registry=self.registry,
        )

        self.events_failed_total = Counter(
            "sfbridge_events_failed_total",
            "Events dropped after a processing error",
            ["stage"],
            registry=self.registry,
        )

        self.publish_retries_total = Counter(
            "sfbridge_publish_retries_total",
            "Publish attempts repeated after a failure",
            ["topic"],
            registry=self.registry,
        )

        self.publish_duration = Histogram(
            "sfbridge_publish_duration_seconds",
            "Time to publish one envelope, retries included",
            ["topic"],
            registry=self.registry,
        )

        self.subscription_active = Gauge(
            "sfbridge_subscription_active",
            "Whether the event subscription is open (1) or closed (0)",
            ["channel"],
            registry=self.registry,
        )

    def record_received(self, channel: str):
        self.events_received_total.labels(channel=channel).inc()

    def record_forwarded(self, topic: str, duration: float):
        """Record a successful publish."""
        self.events_forwarded_total.labels(topic=topic).inc()
        self.publish_duration.labels(topic=topic).observe(duration)

    def record_failed(self, stage: str):
        """Record a dropped event; stage is "envelope" or "publish"."""
        self.events_failed_total.labels(stage=stage).inc()

    def record_retry(self, topic: str):
        self.publish_retries_total.labels(topic=topic).inc()

    def set_subscription_active(self, channel: str, active: bool):
        self.subscription_active.labels(channel=channel).set(1 if active else 0)

    def set_down(self):
        self.app_up.labels(service=self.service_name, version=self.version).set(0)
