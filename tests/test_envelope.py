"""Tests for envelope construction."""
import copy
import pytest
import orjson
from sfbridge.errors import EventProcessingError
from sfbridge.event_models import build_envelope, extract_replay_id, extract_timestamp


def test_example_scenario():
    """Test the monitoring event example produces the documented envelope."""
    event = {
        "event": {"createdDate": "2024-01-01T00:00:00Z"},
        "Metric_Name__c": "cpu",
        "Metric_Value__c": 42.5,
    }

    envelope = build_envelope(event)

    assert envelope.model_dump() == {
        "event_type": "Monitoring_Event__e",
        "data": event,
        "timestamp": "2024-01-01T00:00:00Z",
    }


def test_wire_format_key_order_and_encoding():
    """Test the serialized envelope is UTF-8 JSON with the three fields."""
    event = {"event": {"createdDate": "2024-01-01T00:00:00Z"}, "Name": "Zürich"}

    payload = orjson.dumps(build_envelope(event).model_dump())

    assert list(orjson.loads(payload)) == ["event_type", "data", "timestamp"]
    assert "Zürich".encode("utf-8") in payload


@pytest.mark.parametrize(
    "created",
    ["2024-01-01T00:00:00Z", "2023-12-31T23:59:59.999+0000", 1704067200000, None],
)
def test_timestamp_is_exact_copy(created):
    """Test timestamp is copied verbatim, without parsing or coercion."""
    event = {"event": {"createdDate": created, "replayId": 7}}

    assert build_envelope(event).timestamp == created


def test_data_is_deep_equal_and_input_untouched():
    """Test no field is dropped, renamed or coerced and input is not mutated."""
    event = {
        "event": {"createdDate": "2024-01-01T00:00:00Z", "replayId": 12},
        "payload": {"nested": [1, 2.5, "3", None, True], "Count__c": "10"},
        "schema": "abc",
    }
    original = copy.deepcopy(event)

    envelope = build_envelope(event)

    assert envelope.model_dump()["data"] == original
    assert event == original


@pytest.mark.parametrize(
    "event",
    [
        {},
        {"Metric_Name__c": "cpu"},
        {"event": {}},
        {"event": None},
        {"event": "not-a-mapping"},
        {"event": {"replayId": 3}},
    ],
)
def test_missing_timestamp_is_null(event):
    """Test events without event.createdDate yield a null timestamp."""
    envelope = build_envelope(event)

    assert envelope.timestamp is None
    assert envelope.data == event


def test_custom_event_type():
    """Test the event type tag comes from the caller."""
    envelope = build_envelope({"event": {}}, event_type="Custom__e")
    assert envelope.event_type == "Custom__e"


@pytest.mark.parametrize("event", [None, "text", 42, ["a", "b"]])
def test_non_mapping_event_is_processing_error(event):
    """Test malformed inbound events raise a per-event error."""
    with pytest.raises(EventProcessingError):
        build_envelope(event)


def test_non_string_keys_are_processing_error():
    with pytest.raises(EventProcessingError):
        build_envelope({1: "x"})


def test_extract_helpers():
    event = {"event": {"createdDate": "d", "replayId": 99}}
    assert extract_timestamp(event) == "d"
    assert extract_replay_id(event) == 99
    assert extract_replay_id("garbage") is None
    assert extract_replay_id({"event": []}) is None
