"""
fixtureflow configuration

Settings are read from ``FIXTUREFLOW_*`` environment variables, validated with
pydantic and fed into the dependency injection container.
"""

import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .runner import LIFECYCLE_HOOKS

ENV_PREFIX = "FIXTUREFLOW_"
_CONSOLE_HANDLER = "fixtureflow-console"


class FixtureFlowSettings(BaseModel):
    """Runtime settings for discovery, resolution and logging."""

    test_prefix: str = Field(
        "subtest_", min_length=1, description="Prefix marking test-case methods"
    )
    check_field_types: bool = Field(
        True, description="Validate injected values against shape field types"
    )
    log_level: str = Field(
        "WARNING",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Level of the fixtureflow logger",
    )
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("test_prefix")
    @classmethod
    def validate_test_prefix(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"test_prefix must be a valid identifier prefix, got {v!r}")
        if any(hook.startswith(v) for hook in LIFECYCLE_HOOKS):
            raise ValueError(f"test_prefix {v!r} would select lifecycle hooks")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    def dict_for_container(self) -> dict[str, Any]:
        """Convert to the dictionary format loaded into providers.Configuration."""
        return self.model_dump()

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX
    ) -> "FixtureFlowSettings":
        """Create settings from environment variables such as FIXTUREFLOW_LOG_LEVEL."""
        environ = os.environ if environ is None else environ
        data = {}
        for field_name in cls.model_fields:
            key = f"{prefix}{field_name.upper()}"
            if key in environ:
                data[field_name] = environ[key]

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid fixtureflow settings: {e}") from e


def configure_logging(level: str, fmt: str) -> logging.Logger:
    """Apply level and a single console handler to the fixtureflow logger."""
    logger = logging.getLogger("fixtureflow")
    logger.setLevel(getattr(logging, level.upper()))

    for handler in list(logger.handlers):
        if handler.get_name() == _CONSOLE_HANDLER:
            logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.set_name(_CONSOLE_HANDLER)
    console_handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(console_handler)
    return logger


__all__ = ["ENV_PREFIX", "FixtureFlowSettings", "configure_logging"]
