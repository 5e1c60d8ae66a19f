"""
Configuration module for softcascade.

Provides centralized configuration for soft delete, restore and the
default visibility scope applied to queries.
"""

import logging
from datetime import datetime, tzinfo
from typing import Any, Dict, Literal, Optional, Union, get_args, get_origin
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class SoftDeleteConfig(BaseModel):
    """Central configuration for soft delete behaviour.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (SOFTCASCADE_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> config = SoftDeleteConfig(timezone="Europe/Berlin")

        Loading from environment:

        >>> import os
        >>> os.environ['SOFTCASCADE_CASCADE_ENABLED'] = 'false'
        >>> config = SoftDeleteConfig.from_env()

    Note:
        ``default_scope`` is read by the session listener on every query,
        ``scope_option_name`` and ``cascade_info_key`` are read when the
        listener runs and when mappers are configured respectively, so they
        should be set before models are imported.
    """

    # General settings
    application_name: str = Field(
        "softcascade", description="Name of the application using the extension"
    )
    environment: str = Field(
        "production", description="Environment (development, staging, production)"
    )
    timezone: str = Field("UTC", description="Timezone for deletion timestamps")

    # Cascade settings
    cascade_enabled: bool = Field(
        True, description="Cascade soft delete and restore to owned relationships"
    )
    cascade_info_key: str = Field(
        "soft_delete_cascade",
        description="relationship(info=...) key marking an owned relationship",
        min_length=1,
    )

    # Visibility settings
    default_scope: Literal["active", "deleted", "unrestricted"] = Field(
        "active",
        description="Scope applied to queries that do not select one",
    )
    scope_option_name: str = Field(
        "soft_delete_scope",
        description="Execution option carrying the visibility scope",
        min_length=1,
    )

    # Logging
    log_cascade_steps: bool = Field(
        True, description="Emit a DEBUG record for every cascaded entity"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid."""
        valid_environments = {"development", "testing", "staging", "production"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Environment must be one of: {', '.join(sorted(valid_environments))}"
            )
        return v.lower()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.timezone)

    def now(self) -> datetime:
        """Current timestamp in the configured timezone."""
        return datetime.now(self.tz)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_env(cls, prefix: str = "SOFTCASCADE_") -> "SoftDeleteConfig":
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Configuration instance
        """
        import os

        config_dict: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var not in os.environ:
                continue
            value = os.environ[env_var]

            field_type = field_info.annotation

            # Handle Optional types
            if get_origin(field_type) is Union:
                args = get_args(field_type)
                field_type = next((arg for arg in args if arg is not type(None)), str)

            try:
                if field_type == bool:
                    config_dict[field_name] = value.lower() in (
                        "true",
                        "1",
                        "yes",
                        "on",
                    )
                elif field_type == int:
                    config_dict[field_name] = int(value)
                else:
                    config_dict[field_name] = value
            except (ValueError, TypeError):
                # Let model validation report the raw value
                config_dict[field_name] = value

        return cls.model_validate(config_dict)


# Global configuration instance
_config: Optional[SoftDeleteConfig] = None


def get_config() -> SoftDeleteConfig:
    """
    Get the global configuration instance.

    Returns:
        Global configuration
    """
    global _config

    if _config is None:
        try:
            _config = SoftDeleteConfig.from_env()
        except ValidationError as e:
            logger.warning("Ignoring invalid SOFTCASCADE_* settings: %s", e)
            _config = SoftDeleteConfig.model_validate({})

    return _config


def set_config(config: Optional[SoftDeleteConfig]) -> None:
    """
    Set the global configuration instance.

    Passing None drops the cached instance so the next ``get_config()``
    reloads it from the environment.
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> SoftDeleteConfig:
    """
    Configure softcascade with keyword arguments.

    Args:
        **kwargs: Configuration parameters

    Returns:
        Updated configuration
    """
    global _config

    if _config is None:
        _config = SoftDeleteConfig(**kwargs)
    else:
        config_dict = _config.model_dump()
        config_dict.update(kwargs)
        _config = SoftDeleteConfig(**config_dict)

    return _config
