from pydantic import BaseModel, Field
from typing import Any, Dict, Mapping
from .config import DEFAULT_EVENT_TYPE
from .errors import EventProcessingError

# Inbound events are loose mappings; only event.createdDate is inspected
InboundEvent = Dict[str, Any]


class Envelope(BaseModel):
    event_type: str = Field(..., description="Fixed event type tag")
    data: Dict[str, Any] = Field(..., description="Original inbound event, unmodified")
    timestamp: Any | None = Field(None, description="Copy of data.event.createdDate")


def extract_timestamp(event: Mapping[str, Any]) -> Any | None:
    """Return event["event"]["createdDate"], or None when the path is absent."""
    meta = event.get("event")
    if not isinstance(meta, Mapping):
        return None
    return meta.get("createdDate")


def extract_replay_id(event: Any) -> Any | None:
    """Return the Streaming API replay id for log context, if there is one."""
    if not isinstance(event, Mapping):
        return None
    meta = event.get("event")
    if not isinstance(meta, Mapping):
        return None
    return meta.get("replayId")


def build_envelope(event: Any, event_type: str = DEFAULT_EVENT_TYPE) -> Envelope:
    """
    Wrap an inbound event in an outbound envelope.

    Args:
        event: Inbound event mapping
        event_type: Tag written to envelope.event_type

    Returns:
        Envelope carrying the event and its creation timestamp

    Raises:
        EventProcessingError: If the event is not a mapping with string keys
    """
    if not isinstance(event, Mapping):
        raise EventProcessingError(
            f"inbound event must be a mapping, got {type(event).__name__}"
        )
    if not all(isinstance(key, str) for key in event):
        raise EventProcessingError("inbound event keys must be strings")
    # model_construct keeps the payload exactly as received (no coercion)
    return Envelope.model_construct(
        event_type=event_type,
        data=dict(event),
        timestamp=extract_timestamp(event),
    )
