"""
Dependency injection container

Owns the process-wide fixture registry and builds group runners from the
loaded settings. Fixtures are registered once at import time and resolved many
times afterwards.
"""

import logging

from dependency_injector import containers, providers

from .config import FixtureFlowSettings, configure_logging
from .registry import FixtureRegistry
from .runner import GroupRunner

logger = logging.getLogger("fixtureflow.container")


class FixtureContainer(containers.DeclarativeContainer):
    """Provides the default registry, runner and logger."""

    config = providers.Configuration()

    registry = providers.Singleton(FixtureRegistry)

    runner = providers.Factory(
        GroupRunner,
        registry=registry,
        test_prefix=config.test_prefix,
        check_field_types=config.check_field_types,
    )

    logger = providers.Singleton(
        configure_logging,
        level=config.log_level,
        fmt=config.log_format,
    )


def create_container(settings: FixtureFlowSettings | None = None) -> FixtureContainer:
    """Create a container configured from ``settings`` or the environment."""
    if settings is None:
        settings = FixtureFlowSettings.from_env()

    container = FixtureContainer()
    container.config.from_dict(settings.dict_for_container())
    container.logger()
    logger.debug(f"Created FixtureContainer with settings {settings!r}")
    return container


__all__ = ["FixtureContainer", "create_container"]
