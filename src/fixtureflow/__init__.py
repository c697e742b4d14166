"""
fixtureflow - grouped sub-tests with injectable, scoped fixtures.

Register fixtures once at import time, declare what a test case needs with
``Annotated[..., FixtureRef("Name")]`` fields on a dependency shape class, and
run a test group through ``run_test_group``.
"""

from . import api
from .api import (
    fixture,
    get_fixture,
    must_register_fixture,
    register_fixture,
    run_test_group,
)
from .config import FixtureFlowSettings, configure_logging
from .container import FixtureContainer, create_container
from .contract import validate_fixture, validate_test_case
from .exceptions import (
    CircularDependency,
    ConfigurationError,
    DuplicateName,
    FieldNotAssignable,
    FixtureFlowError,
    InvalidContract,
    MalformedTestSignature,
    RegistrationError,
    ResolutionError,
    UnregisteredFixture,
)
from .handle import ExecutionHandle, FatalFailure, T
from .models import Fixture, FixtureEntry, FixtureRef, FixtureScope, NoFixtures
from .registry import FixtureRegistry
from .resolver import FixtureResolver
from .runner import GroupRunner, TestCase, TestGroup

# process-wide default container backing the package-level functions
container = create_container()
container.wire(modules=[api])

__all__ = [
    # entry points
    "run_test_group",
    "register_fixture",
    "must_register_fixture",
    "get_fixture",
    "fixture",
    # core
    "FixtureRegistry",
    "FixtureResolver",
    "GroupRunner",
    "TestGroup",
    "TestCase",
    "validate_fixture",
    "validate_test_case",
    # models
    "Fixture",
    "FixtureEntry",
    "FixtureRef",
    "FixtureScope",
    "NoFixtures",
    # execution handles
    "ExecutionHandle",
    "FatalFailure",
    "T",
    # configuration and container
    "FixtureFlowSettings",
    "FixtureContainer",
    "configure_logging",
    "container",
    "create_container",
    # exceptions
    "FixtureFlowError",
    "ConfigurationError",
    "RegistrationError",
    "DuplicateName",
    "InvalidContract",
    "ResolutionError",
    "UnregisteredFixture",
    "FieldNotAssignable",
    "CircularDependency",
    "MalformedTestSignature",
]
