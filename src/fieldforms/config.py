"""
Runtime configuration for the collaborators around the form core.

Values come from, in increasing precedence:
    - field defaults
    - a YAML file (or keyword arguments)
    - FIELDFORMS_* environment variables

    api_base_url: "https://collect.example.org/api"
    geolocation_max_wait_seconds: 1800
"""

import logging
from typing import Any, Mapping, Optional, Tuple, Type

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from fieldforms.errors import ConfigError

logger = logging.getLogger(__name__)


ENV_PREFIX = "FIELDFORMS_"


class FormsConfig(BaseSettings):
    """
    Settings for transport and geo capture.

    Properties:
        api_base_url:
            Root of the collection API (no trailing slash)

        geolocation_max_wait_seconds:
            How long a location request may stay outstanding. Field
            conditions with poor signal need tens of minutes.

        high_accuracy:
            Ask the location provider for a GPS fix rather than a
            network estimate

        max_position_age_seconds:
            Oldest cached position the provider may return (0 = fresh fix)

        geocoder_url, geocoder_user_agent, geocoder_min_interval_seconds:
            Reverse geocoding endpoint, identity and rate limit

        request_timeout_seconds:
            Timeout for submission and geocoding HTTP calls
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore", frozen=True)

    api_base_url: str = "http://localhost:3000/api"
    geolocation_max_wait_seconds: float = 1800.0
    high_accuracy: bool = True
    max_position_age_seconds: float = 0.0
    geocoder_url: str = "https://nominatim.openstreetmap.org/reverse"
    geocoder_user_agent: str = "FikiriCollect/1.0"
    geocoder_min_interval_seconds: float = 1.0
    request_timeout_seconds: float = 30.0

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # The environment overrides file values passed in as keyword arguments.
        return env_settings, init_settings


def _read_file(path: str) -> Mapping[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}")
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file {path} must hold a mapping")

    for key in data:
        if key not in FormsConfig.model_fields:
            logger.warning("Ignoring unknown setting %r from %s", key, path)
    return data


def load_config(path: Optional[str] = None) -> FormsConfig:
    """
    Build a FormsConfig from an optional YAML file and the environment.

    Raises:
        ConfigError: If the file is unreadable or a value has the wrong type
    """
    values = _read_file(path) if path else {}
    try:
        return FormsConfig(**{str(k): v for k, v in values.items()})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
