from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Any, Dict, List, Literal
import orjson
from .errors import ConfigurationError

DEFAULT_EVENT_TYPE = "Monitoring_Event__e"
DEFAULT_CHANNEL = "/event/Monitoring_Event__e"


class Settings(BaseSettings):
    """Process-level settings read from the environment (or .env)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    CONFIG_PATH: str = "config.json"
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"
    # Operational HTTP surface (health + metrics); 0 disables it
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


class SourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    adapter: Literal["salesforce", "memory"] = "salesforce"
    channel: str = DEFAULT_CHANNEL
    # Streaming API replay id: -1 new events only, -2 all retained events
    replay: Literal[-1, -2] = -1
    connection_params: Dict[str, Any]

    @field_validator("channel")
    @classmethod
    def _channel_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("channel must not be empty")
        return v


class SinkConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    adapter: Literal["kafka", "redis", "memory"] = "kafka"
    brokers: List[str] = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    event_type: str = DEFAULT_EVENT_TYPE
    client_id: str = "sfbridge"
    acks: Literal[0, 1, "all"] = 1
    publish_timeout: float = Field(10.0, gt=0)
    # Extra attempts after a failed publish before the envelope is dropped
    publish_retries: int = Field(0, ge=0)
    retry_backoff: float = Field(0.5, ge=0)


class BridgeConfig(BaseModel):
    """Immutable configuration passed down to the forwarder and adapters."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    source: SourceConfig
    sink: SinkConfig


def parse_config(raw: Any) -> BridgeConfig:
    """
    Validate a decoded configuration object.

    Raises:
        ConfigurationError: If a section or required field is missing or invalid
    """
    if not isinstance(raw, dict):
        raise ConfigurationError("configuration must be a JSON object")
    missing = [section for section in ("source", "sink") if section not in raw]
    if missing:
        raise ConfigurationError(f"missing configuration section(s): {', '.join(missing)}")
    try:
        return BridgeConfig.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"invalid configuration: {problems}") from e


def load_config(path: str | Path) -> BridgeConfig:
    """
    Load and validate the JSON configuration file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated, frozen bridge configuration

    Raises:
        ConfigurationError: If the file is unreadable, not JSON, or invalid
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"cannot read configuration file {path}: {e}") from e
    try:
        raw = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        raise ConfigurationError(f"configuration file {path} is not valid JSON: {e}") from e
    return parse_config(raw)
