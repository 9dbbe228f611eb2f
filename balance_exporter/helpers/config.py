"""Configuration management and environment variable utilities."""

import ipaddress
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from balance_exporter.helpers.constants import (
    DEFAULT_BALANCE_SCHEDULE,
    DEFAULT_CL_NODE_URL,
    DEFAULT_CL_VALIDATOR_METRICS_URL,
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_METRICS_ADDRESS,
    DEFAULT_METRICS_PORT,
    DEFAULT_SCAN_URL,
    DEFAULT_TIMEOUT,
)
from balance_exporter.helpers.cron import CronSchedule
from balance_exporter.helpers.errors import ConfigInvalidError
from balance_exporter.helpers.logging import LOG_LEVELS


# Load environment variables from .env file
load_dotenv()

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})
FALSY_VALUES = frozenset({"0", "false", "no", "off"})


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default

    Example:
        ```python
        from balance_exporter.helpers.config import get_optional_env

        port = int(get_optional_env("METRICS_PORT", "7000"))
        ```
    """
    return os.getenv(key, default)


def get_bool_env(key: str, *, default: bool) -> bool:
    """Get a boolean environment variable.

    Args:
        key: Environment variable name
        default: Value used when the variable is unset or empty

    Returns:
        Parsed boolean

    Raises:
        ConfigInvalidError: If the value is not a recognised boolean literal
    """
    raw = os.getenv(key, "").strip().lower()
    if not raw:
        return default
    if raw in TRUTHY_VALUES:
        return True
    if raw in FALSY_VALUES:
        return False
    msg = f"{key} must be a boolean, got '{raw}'"
    raise ConfigInvalidError(msg)


class Settings(BaseModel):
    """Runtime settings of the exporter."""

    cl_node_url: str = Field(default=DEFAULT_CL_NODE_URL, description="Beacon node base URL")
    cl_validator_metrics_url: str = Field(
        default=DEFAULT_CL_VALIDATOR_METRICS_URL,
        description="Validator client metrics base URL",
    )
    scan_url: str = Field(default=DEFAULT_SCAN_URL, description="Explorer base URL")
    scheduler_enable: bool = Field(default=True, description="Run the balance scheduler")
    balance_schedule: str = Field(
        default=DEFAULT_BALANCE_SCHEDULE,
        description="Six-field cron expression of the balance job",
    )
    metrics_address: str = Field(default=DEFAULT_METRICS_ADDRESS)
    metrics_port: int = Field(default=DEFAULT_METRICS_PORT, gt=0, lt=65536)
    http_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    max_concurrent_requests: int = Field(default=DEFAULT_MAX_CONCURRENT_REQUESTS, gt=0)
    log_level: str = Field(default="INFO")
    log_color: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @field_validator("cl_node_url", "cl_validator_metrics_url", "scan_url")
    @classmethod
    def _strip_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            msg = "URL cannot be empty"
            raise ValueError(msg)
        return value

    @field_validator("metrics_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        try:
            ipaddress.ip_address(value)
        except ValueError as e:
            msg = f"'{value}' is not appropriate to use as an IP address"
            raise ValueError(msg) from e
        return value

    @field_validator("balance_schedule")
    @classmethod
    def _check_schedule(cls, value: str) -> str:
        return CronSchedule(value).expression

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            msg = f"Invalid log level: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Returns:
            Validated settings

        Raises:
            ConfigInvalidError: If any variable is missing or invalid
        """
        raw: dict[str, object] = {}
        env_keys = {
            "cl_node_url": "CL_NODE_URL",
            "cl_validator_metrics_url": "CL_VALIDATOR_METRICS_URL",
            "scan_url": "SCAN_URL",
            "balance_schedule": "BALANCE_SCHEDULE",
            "metrics_address": "METRICS_ADDRESS",
            "metrics_port": "METRICS_PORT",
            "http_timeout": "HTTP_TIMEOUT",
            "max_concurrent_requests": "MAX_CONCURRENT_REQUESTS",
            "log_level": "LOG_LEVEL",
        }
        for field, key in env_keys.items():
            value = get_optional_env(key)
            if value:
                raw[field] = value

        raw["scheduler_enable"] = get_bool_env("SCHEDULER_ENABLE", default=True)
        raw["log_color"] = get_bool_env("LOG_COLOR", default=False)

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            msg = f"Invalid settings: {errors}"
            raise ConfigInvalidError(msg) from e


__all__ = [
    "Settings",
    "get_bool_env",
    "get_optional_env",
]
