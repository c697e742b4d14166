"""
pytest global configuration

Provides fresh registries, root execution handles and an isolated default
container for every test.
"""

import pytest
from dependency_injector import providers

import fixtureflow
from fixtureflow import FixtureRegistry, GroupRunner, T

from tests.fixtures import register_sample_fixtures

pytest_plugins = ["pytester", "fixtureflow.pytest_plugin"]


@pytest.fixture(scope="function")
def empty_registry() -> FixtureRegistry:
    """A registry with nothing registered"""
    return FixtureRegistry()


@pytest.fixture(scope="function")
def registry(empty_registry) -> FixtureRegistry:
    """A registry holding the sample fixtures"""
    return register_sample_fixtures(empty_registry)


@pytest.fixture(scope="function")
def runner(registry) -> GroupRunner:
    return GroupRunner(registry)


@pytest.fixture(scope="function")
def root(request) -> T:
    """Root execution handle whose failures are inspected, not reported"""
    return T(request.node.name)


@pytest.fixture(scope="function")
def default_registry(registry):
    """Point the package-level default container at the sample registry"""
    with fixtureflow.container.registry.override(providers.Object(registry)):
        yield registry
