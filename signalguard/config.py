# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Configuration management for SignalGuard.

Two kinds of configuration live here:

- AgentConfig: the per-session configuration supplied by the integrator
  (environment, session identifier and the API credential pair). It is
  validated field by field in a fixed order by validate_config() and is
  immutable afterwards.
- AgentSettings: process-wide settings (log level, intelligence hosts,
  SDK version identifiers) loaded from SIGNALGUARD_* environment
  variables or from a YAML/JSON file.

Example:
    >>> from signalguard.config import validate_config
    >>> config = validate_config({
    ...     "environment": "PROD",
    ...     "sessionIdentifier": "s1",
    ...     "apiKey": "k1",
    ...     "apiSecret": "sec1",
    ... })
    >>> config.environment
    <Environment.PROD: 'PROD'>
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

from signalguard.exceptions import ConfigurationError
from signalguard.security.masking import mask_secret
from signalguard.utils.logger import LogFormat, configure_logging

MISSING_FIELD_MESSAGE = "Something missing from required fields"


class Environment(str, Enum):
    """Intelligence backend environments."""

    PROD = "PROD"
    STAGE = "STAGE"


class AgentConfig(BaseModel):
    """Validated, immutable session configuration.

    Field aliases follow the public camelCase names so that integrators can
    pass the same mapping they would hand to the browser agent.

    Attributes:
        environment: Backend environment the envelopes are destined for
        session_identifier: Caller-assigned identifier, unique per user session
        api_key: API key; doubles as the key-derivation salt
        api_secret: API secret; doubles as the key-derivation passphrase
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    environment: Environment
    session_identifier: str = Field(alias="sessionIdentifier", min_length=1)
    api_key: str = Field(alias="apiKey", min_length=1)
    api_secret: str = Field(alias="apiSecret", min_length=1)

    def __repr__(self) -> str:
        """Safe repr that doesn't expose the credentials."""
        return (
            f"AgentConfig(environment={self.environment.value!r}, "
            f"session_identifier={self.session_identifier!r}, "
            f"api_key={mask_secret(self.api_key)!r}, "
            f"api_secret={mask_secret(self.api_secret)!r})"
        )

    __str__ = __repr__


# Public field name -> accepted keys, in validation order
_FIELD_KEYS = (
    ("environment", ("environment",)),
    ("sessionIdentifier", ("sessionIdentifier", "session_identifier")),
    ("apiKey", ("apiKey", "api_key")),
    ("apiSecret", ("apiSecret", "api_secret")),
)


def _lookup(candidate: Mapping[str, Any], keys: tuple) -> Any:
    for key in keys:
        if key in candidate:
            return candidate[key]
    return None


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _normalize_environment(value: Any) -> Environment:
    if isinstance(value, Environment):
        return value
    if isinstance(value, str):
        try:
            return Environment(value.strip().upper())
        except ValueError:
            pass
    allowed = " or ".join(e.value for e in Environment)
    raise ConfigurationError(
        f"Invalid value for environment: {value!r} (expected {allowed})",
        field="environment",
    )


def validate_config(candidate: Union[AgentConfig, Mapping[str, Any]]) -> AgentConfig:
    """
    Validate and normalize a candidate session configuration.

    Fields are checked in a fixed order (environment, sessionIdentifier,
    apiKey, apiSecret) and the first missing or invalid one is reported.
    Validation is all-or-nothing and has no side effects.

    Args:
        candidate: Mapping with camelCase or snake_case keys, or an
            already validated AgentConfig

    Returns:
        Validated AgentConfig

    Raises:
        ConfigurationError: If a required field is missing or invalid
    """
    if isinstance(candidate, AgentConfig):
        return candidate
    if not isinstance(candidate, Mapping):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(candidate).__name__}"
        )

    values = {}
    for public_name, keys in _FIELD_KEYS:
        value = _lookup(candidate, keys)
        if _is_missing(value):
            raise ConfigurationError(
                f"{MISSING_FIELD_MESSAGE}: {public_name}", field=public_name
            )
        if public_name == "environment":
            value = _normalize_environment(value)
        elif not isinstance(value, str):
            raise ConfigurationError(
                f"Invalid value for {public_name}: expected a string, "
                f"got {type(value).__name__}",
                field=public_name,
            )
        values[public_name] = value

    return AgentConfig(**values)


class AgentSettings(BaseSettings):
    """Process-wide settings loaded from environment variables.

    Environment variables are prefixed with SIGNALGUARD_ and are case
    insensitive.

    Example:
        SIGNALGUARD_LOG_LEVEL=DEBUG
        SIGNALGUARD_PROD_HOST=intelligence.example.com
        SIGNALGUARD_REQUEST_TIMEOUT=5
    """

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.JSON, description="Log format: json, human or text")

    prod_host: str = Field(
        default="intelligence.signalguard.io",
        description="Intelligence host for the PROD environment",
    )
    stage_host: str = Field(
        default="stage-intelligence.signalguard.io",
        description="Intelligence host for the STAGE environment",
    )

    sdk_version_code: str = Field(default="13", description="Value of the sdk-version-code header")
    sdk_version_name: str = Field(default="1.3.0", description="Value of the sdk-version-name header")

    request_timeout: float = Field(default=10.0, gt=0, description="Forwarder timeout in seconds")

    model_config = {
        "env_prefix": "SIGNALGUARD_",
        "case_sensitive": False,
    }

    def host_for(self, environment: Environment) -> str:
        """Return the intelligence host for an environment."""
        if environment == Environment.PROD:
            return self.prod_host
        return self.stage_host


# Global settings instance
_settings: Optional[AgentSettings] = None


def _apply_logging(settings: AgentSettings) -> None:
    configure_logging(level=settings.log_level, log_format=settings.log_format)


def get_settings() -> AgentSettings:
    """Get the global settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = AgentSettings()
    return _settings


def reload_settings() -> AgentSettings:
    """Reload settings from the environment and apply their logging options."""
    global _settings
    _settings = AgentSettings()
    _apply_logging(_settings)
    return _settings


def load_settings_from_file(path: str) -> AgentSettings:
    """Load settings from a YAML or JSON file, make them global and apply
    their logging options.

    Args:
        path: Path to the settings file

    Returns:
        AgentSettings instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file format is invalid
    """
    import json
    import yaml

    if not os.path.exists(path):
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, "r") as f:
        if path.endswith(".yaml") or path.endswith(".yml"):
            data = yaml.safe_load(f) or {}
        elif path.endswith(".json"):
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported settings file format: {path}")

    global _settings
    _settings = AgentSettings(**data)
    _apply_logging(_settings)
    return _settings
