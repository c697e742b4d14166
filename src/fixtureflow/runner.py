"""
Test Orchestrator

Runs a test group: discovers test-case methods by name prefix, validates their
signatures, then runs each one as a sub-unit of the execution handle with
fixtures resolved and cleaned up around it.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .contract import validate_test_case
from .exceptions import (
    ConfigurationError,
    FixtureFlowError,
    MalformedTestSignature,
)
from .handle import ExecutionHandle, FatalFailure
from .registry import FixtureRegistry
from .resolver import FixtureResolver

logger = logging.getLogger("fixtureflow.runner")

DEFAULT_TEST_PREFIX = "subtest_"
LIFECYCLE_HOOKS = ("setup", "teardown", "before_each", "after_each")


class TestGroup:
    """Base class for test groups, every lifecycle hook is a no-op.

    Subclassing is optional: any object exposing the four hooks can be run.
    """

    __test__ = False

    def setup(self, t: ExecutionHandle) -> None:
        """Called once before any test case in the group."""

    def teardown(self, t: ExecutionHandle) -> None:
        """Called once after all test cases in the group."""

    def before_each(self, t: ExecutionHandle) -> None:
        """Called inside each sub-unit before the test case body."""

    def after_each(self, t: ExecutionHandle) -> None:
        """Called inside each sub-unit after the body and fixture cleanup."""


@dataclass(frozen=True)
class TestCase:
    """A discovered test-case method"""

    __test__ = False

    name: str
    method_name: str
    method: Callable[..., Any]
    shape: type | None


class GroupRunner:
    """Drives test groups against a fixture registry"""

    def __init__(
        self,
        registry: FixtureRegistry,
        test_prefix: str = DEFAULT_TEST_PREFIX,
        check_field_types: bool = True,
    ) -> None:
        if not isinstance(test_prefix, str) or not test_prefix.isidentifier():
            raise ConfigurationError(
                f"test_prefix must be a valid identifier prefix, got {test_prefix!r}"
            )
        hooks = [hook for hook in LIFECYCLE_HOOKS if hook.startswith(test_prefix)]
        if hooks:
            raise ConfigurationError(
                f"test_prefix {test_prefix!r} would select lifecycle hooks: "
                f"{', '.join(hooks)}"
            )
        self.registry = registry
        self.test_prefix = test_prefix
        self.check_field_types = check_field_types

    def discover(self, group: Any) -> list[TestCase]:
        """
        Find test-case methods on ``group`` in alphabetical order.

        Raises:
            MalformedTestSignature: For the first case with a bad signature
        """
        cases = []
        for method_name in sorted(dir(type(group))):
            if not method_name.startswith(self.test_prefix):
                continue
            method = getattr(group, method_name)
            if not callable(method):
                continue
            shape = validate_test_case(method_name, method)
            cases.append(
                TestCase(
                    name=method_name[len(self.test_prefix) :],
                    method_name=method_name,
                    method=method,
                    shape=shape,
                )
            )
        return cases

    def run(self, t: ExecutionHandle, group: Any) -> None:
        """Run every test case of ``group`` as a sub-unit of ``t``."""
        group_name = type(group).__name__
        missing = [
            hook for hook in LIFECYCLE_HOOKS if not callable(getattr(group, hook, None))
        ]
        if missing:
            t.fatal(f"Test group {group_name} is missing hooks: {', '.join(missing)}")

        try:
            cases = self.discover(group)
        except MalformedTestSignature as e:
            t.fatal(str(e))

        logger.info(f"Running test group {group_name} with {len(cases)} case(s)")
        group.setup(t)
        try:
            for case in cases:
                t.run(case.name, lambda sub, case=case: self._run_case(sub, group, case))
        finally:
            group.teardown(t)
        logger.info(f"Finished test group {group_name}")

    def _run_case(self, t: ExecutionHandle, group: Any, case: TestCase) -> None:
        resolver = FixtureResolver(self.registry, self.check_field_types)

        args: tuple[Any, ...] = (t,)
        try:
            if case.shape is not None:
                args = (t, resolver.resolve(t, case.shape, caller=case.method_name))
        except Exception as e:
            resolver.run_cleanups(t)
            if isinstance(e, FixtureFlowError):
                logger.error(f"Fixture resolution failed for {case.method_name}: {e}")
                t.fatal(str(e))
            raise

        try:
            group.before_each(t)
            case.method(*args)
        except BaseException:
            self._finish_case(t, group, resolver, body_failed=True)
            raise
        self._finish_case(t, group, resolver, body_failed=False)

    def _finish_case(
        self,
        t: ExecutionHandle,
        group: Any,
        resolver: FixtureResolver,
        body_failed: bool,
    ) -> None:
        """Run cleanups then after_each.

        When the body already failed, an after_each error is recorded on ``t``
        instead of replacing the body's exception.
        """
        try:
            resolver.run_cleanups(t)
        finally:
            try:
                group.after_each(t)
            except Exception as e:
                if not body_failed:
                    raise
                logger.error(f"after_each failed after a failing case body: {e}")
                # t.fatal() has already recorded its message
                if not isinstance(e, FatalFailure):
                    t.fail(f"after_each raised {type(e).__name__}: {e}")


__all__ = ["DEFAULT_TEST_PREFIX", "GroupRunner", "TestCase", "TestGroup"]
