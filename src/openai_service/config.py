"""
Service configuration.

Configuration is resolved once, when the service is constructed, from
built-in defaults, an optional YAML file and environment variables (in
increasing order of precedence). Per-call overrides are merged into a
fresh, immutable RequestConfig for every request.

Environment variables:
    OPENAI_API_KEY_COMPLETIONS / OPENAI_API_KEY_ASSISTANTS (fallback: OPENAI_API_KEY)
    OPENAI_RETRIES, OPENAI_TIMEOUT
    OPENAI_URL_COMPLETIONS, OPENAI_URL_THREADS, OPENAI_URL_EMBEDDINGS,
    OPENAI_URL_MODERATIONS, OPENAI_URL_IMAGES
    OPENAI_DEFAULT_MODEL, OPENAI_DEFAULT_ASSISTANT_MODEL,
    OPENAI_DEFAULT_TEMPERATURE, OPENAI_DEFAULT_MAX_TOKENS, OPENAI_DEFAULT_TOP_P
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from openai_service.errors import ConfigurationError
from openai_service.transport.endpoints import RequestType

DEFAULT_ASSISTANTS_BETA = "assistants=v2"


class EndpointConfig(BaseModel):
    """Base URL for every request type."""

    completions: str = "https://api.openai.com/v1/chat/completions"
    threads: str = "https://api.openai.com/v1/threads"
    embeddings: str = "https://api.openai.com/v1/embeddings"
    moderations: str = "https://api.openai.com/v1/moderations"
    images: str = "https://api.openai.com/v1/images/generations"


class ModelDefaults(BaseModel):
    """Sampling defaults applied when a call does not override them."""

    model: str = "gpt-4o-mini"
    assistant_model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 1000
    top_p: float = 1.0


class PollConfig(BaseModel):
    """Run polling cadence.

    Attributes:
        interval: Minimum seconds between polls
        max_attempts: Poll ceiling before PollTimeoutError
        backoff: Multiplier applied to the interval after each poll (1.0 = fixed)
        max_interval: Upper bound for the interval when backing off
    """

    model_config = ConfigDict(frozen=True)

    interval: float = Field(default=2.0, ge=0)
    max_attempts: int = Field(default=60, ge=1)
    backoff: float = Field(default=1.0, ge=1.0)
    max_interval: float = Field(default=10.0, ge=0)

    def delay(self, attempt: int) -> float:
        """Sleep before the given poll attempt (0-based)."""
        if self.backoff == 1.0:
            return self.interval
        delay = self.interval
        for _ in range(attempt):
            if delay >= self.max_interval:
                break
            delay *= self.backoff
        return max(self.interval, min(delay, self.max_interval))


class ServiceConfig(BaseModel):
    """Process-wide defaults for the service.

    Example:
        >>> config = ServiceConfig(completions_api_key="sk-...", retries=5)
        >>> config = ServiceConfig.from_env()
        >>> config = load_config("openai.yaml")
    """

    completions_api_key: str = ""
    assistants_api_key: str = ""
    retries: int = 3
    timeout: float = 60.0
    transport_backoff: float = Field(default=1.0, ge=0)
    assistants_beta: str | None = DEFAULT_ASSISTANTS_BETA
    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)
    defaults: ModelDefaults = Field(default_factory=ModelDefaults)
    poll: PollConfig = Field(default_factory=PollConfig)

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Build configuration from environment variables over built-in defaults."""
        return load_config()

    @classmethod
    def from_yaml(cls, path: str | Path) -> ServiceConfig:
        """Build configuration from a YAML file over built-in defaults."""
        return _validate(_read_yaml(Path(path)))

    def api_key_for(self, request_type: RequestType) -> str:
        """Key namespace used by a request type."""
        if request_type.is_thread:
            return self.assistants_api_key
        return self.completions_api_key


class RequestConfig(BaseModel):
    """Immutable per-call configuration."""

    model_config = ConfigDict(frozen=True)

    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    api_key: str
    retries: int
    timeout: float

    @classmethod
    def resolve(
        cls,
        config: ServiceConfig,
        request_type: RequestType,
        **overrides: Any,
    ) -> RequestConfig:
        """Merge defaults and overrides for a single call.

        Overrides set to None fall back to the defaults.

        Raises:
            ConfigurationError: If no API key resolves for the request type
        """
        values: dict[str, Any] = {
            "api_key": config.api_key_for(request_type),
            "retries": config.retries,
            "timeout": config.timeout,
        }
        if request_type is RequestType.COMPLETION:
            values.update(
                model=config.defaults.model,
                temperature=config.defaults.temperature,
                max_tokens=config.defaults.max_tokens,
                top_p=config.defaults.top_p,
            )
        elif request_type.is_thread:
            values["model"] = config.defaults.assistant_model

        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values.get("api_key"):
            raise ConfigurationError(
                f'Missing OpenAI API key for request type "{request_type.value}"',
                setting="assistants_api_key" if request_type.is_thread else "completions_api_key",
            )
        return cls.model_validate(values)


_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "OPENAI_RETRIES": ("retries",),
    "OPENAI_TIMEOUT": ("timeout",),
    "OPENAI_URL_COMPLETIONS": ("endpoints", "completions"),
    "OPENAI_URL_THREADS": ("endpoints", "threads"),
    "OPENAI_URL_EMBEDDINGS": ("endpoints", "embeddings"),
    "OPENAI_URL_MODERATIONS": ("endpoints", "moderations"),
    "OPENAI_URL_IMAGES": ("endpoints", "images"),
    "OPENAI_DEFAULT_MODEL": ("defaults", "model"),
    "OPENAI_DEFAULT_ASSISTANT_MODEL": ("defaults", "assistant_model"),
    "OPENAI_DEFAULT_TEMPERATURE": ("defaults", "temperature"),
    "OPENAI_DEFAULT_MAX_TOKENS": ("defaults", "max_tokens"),
    "OPENAI_DEFAULT_TOP_P": ("defaults", "top_p"),
}


def _set_path(target: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    for key in path[:-1]:
        target = target.setdefault(key, {})
    target[path[-1]] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _env_overrides() -> dict[str, Any]:
    """Collect settings from environment variables that are actually set."""
    data: dict[str, Any] = {}

    fallback = os.getenv("OPENAI_API_KEY")
    completions = os.getenv("OPENAI_API_KEY_COMPLETIONS") or fallback
    assistants = os.getenv("OPENAI_API_KEY_ASSISTANTS") or fallback
    if completions:
        data["completions_api_key"] = completions
    if assistants:
        data["assistants_api_key"] = assistants

    for env_name, path in _ENV_KEYS.items():
        value = os.getenv(env_name)
        if value:
            _set_path(data, path, value)
    return data


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a config file laid out like the published openai config."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {e}", setting=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}", setting=str(path)) from e

    if not isinstance(raw, dict):
        raise ConfigurationError("Config file must contain a mapping", setting=str(path))

    data = {k: v for k, v in raw.items() if k != "keys"}
    keys = raw.get("keys") or {}
    if keys.get("completions"):
        data["completions_api_key"] = keys["completions"]
    if keys.get("assistants"):
        data["assistants_api_key"] = keys["assistants"]
    return data


def _validate(data: dict[str, Any]) -> ServiceConfig:
    try:
        return ServiceConfig.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        setting = ".".join(str(p) for p in first["loc"])
        raise ConfigurationError(
            f"Invalid configuration value: {first['msg']}", setting=setting
        ) from e


def load_config(path: str | Path | None = None) -> ServiceConfig:
    """Load configuration: built-in defaults, then the YAML file, then env.

    Args:
        path: Optional YAML config file

    Raises:
        ConfigurationError: If the file is unreadable or a value is invalid
    """
    data: dict[str, Any] = {}
    if path is not None:
        data = _read_yaml(Path(path))
    return _validate(_deep_merge(data, _env_overrides()))
