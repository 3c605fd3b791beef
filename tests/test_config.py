"""Tests for configuration loading."""
import pytest
import orjson
from pydantic import ValidationError
from sfbridge.config import BridgeConfig, Settings, load_config, parse_config
from sfbridge.errors import ConfigurationError


def _write(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_bytes(orjson.dumps(data) if not isinstance(data, bytes) else data)
    return path


def test_load_valid_config(tmp_path, raw_config):
    """Test a complete configuration file is loaded with defaults applied."""
    config = load_config(_write(tmp_path, raw_config))

    assert isinstance(config, BridgeConfig)
    assert config.sink.topic == "salesforce_events"
    assert config.sink.brokers == ["localhost:9092"]
    assert config.sink.event_type == "Monitoring_Event__e"
    assert config.sink.publish_retries == 0
    assert config.source.channel == "/event/Monitoring_Event__e"
    assert config.source.connection_params == {"username": "u", "password": "p"}


def test_defaults_select_salesforce_and_kafka():
    config = parse_config(
        {
            "source": {"connection_params": {"username": "u", "password": "p"}},
            "sink": {"brokers": ["b1:9092", "b2:9092"], "topic": "t"},
        }
    )
    assert config.source.adapter == "salesforce"
    assert config.sink.adapter == "kafka"
    assert config.sink.brokers == ["b1:9092", "b2:9092"]
    assert config.source.replay == -1


@pytest.mark.parametrize("replay", [-2, -1])
def test_replay_accepts_streaming_options(raw_config, replay):
    raw_config["source"]["replay"] = replay
    assert parse_config(raw_config).source.replay == replay


@pytest.mark.parametrize("replay", [0, 5, None, "new"])
def test_invalid_replay(raw_config, replay):
    raw_config["source"]["replay"] = replay
    with pytest.raises(ConfigurationError, match="replay"):
        parse_config(raw_config)


@pytest.mark.parametrize("section", ["source", "sink"])
def test_missing_section(raw_config, section):
    """Test a missing section fails fast."""
    del raw_config[section]
    with pytest.raises(ConfigurationError, match=section):
        parse_config(raw_config)


@pytest.mark.parametrize(
    "section,field",
    [
        ("source", "connection_params"),
        ("sink", "brokers"),
        ("sink", "topic"),
    ],
)
def test_missing_required_field(raw_config, section, field):
    del raw_config[section][field]
    with pytest.raises(ConfigurationError, match=field):
        parse_config(raw_config)


@pytest.mark.parametrize(
    "patch",
    [
        {"brokers": []},
        {"topic": ""},
        {"adapter": "rabbitmq"},
        {"publish_timeout": 0},
        {"publish_retries": -1},
    ],
)
def test_invalid_sink_values(raw_config, patch):
    raw_config["sink"].update(patch)
    with pytest.raises(ConfigurationError):
        parse_config(raw_config)


def test_config_is_immutable(config):
    with pytest.raises(ValidationError):
        config.sink.topic = "other"


def test_non_object_config():
    with pytest.raises(ConfigurationError):
        parse_config(["source", "sink"])


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="cannot read"):
        load_config(tmp_path / "absent.json")


def test_invalid_json(tmp_path):
    with pytest.raises(ConfigurationError, match="not valid JSON"):
        load_config(_write(tmp_path, b"{not json"))


def test_settings_from_environment(monkeypatch):
    """Test process settings are read from the environment."""
    monkeypatch.setenv("CONFIG_PATH", "/etc/sfbridge.json")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("HTTP_PORT", "9100")

    settings = Settings()

    assert settings.CONFIG_PATH == "/etc/sfbridge.json"
    assert settings.LOG_JSON is False
    assert settings.HTTP_PORT == 9100
