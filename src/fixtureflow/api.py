"""
Package-level entry points bound to the default container.

Each function takes an explicit ``registry=`` (or ``runner=``) override; without
one, dependency-injector supplies the container's default instance.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from dependency_injector.wiring import Provide, inject

from .container import FixtureContainer
from .handle import ExecutionHandle
from .models import FixtureEntry, FixtureScope
from .registry import FixtureRegistry
from .runner import GroupRunner

C = TypeVar("C", bound=type)


@inject
def register_fixture(
    name: str,
    instance: Any,
    scope: FixtureScope | str = FixtureScope.PER_CALL,
    registry: FixtureRegistry = Provide[FixtureContainer.registry],
) -> FixtureEntry:
    """Register a fixture, raising DuplicateName or InvalidContract."""
    return registry.register(name, instance, scope)


@inject
def must_register_fixture(
    name: str,
    instance: Any,
    scope: FixtureScope | str = FixtureScope.PER_CALL,
    registry: FixtureRegistry = Provide[FixtureContainer.registry],
) -> FixtureEntry:
    """Register a fixture, raising RuntimeError if registration fails."""
    return registry.must_register(name, instance, scope)


@inject
def get_fixture(
    name: str,
    registry: FixtureRegistry = Provide[FixtureContainer.registry],
) -> FixtureEntry | None:
    return registry.lookup(name)


@inject
def run_test_group(
    t: ExecutionHandle,
    group: Any,
    runner: GroupRunner = Provide[FixtureContainer.runner],
) -> None:
    """
    Run a group of sub tests.

    Usage Examples:
    ```python
    class SampleTests(TestGroup):
        def subtest_compare(self, t: ExecutionHandle) -> None:
            assert 1 + 1 == 2

        def subtest_work_dir(self, t: ExecutionHandle, fixtures: WorkDirFixtures) -> None:
            assert os.path.isdir(fixtures.dir_path)

    def test_sample(gt):
        run_test_group(gt, SampleTests())
    ```
    """
    runner.run(t, group)


def fixture(
    name: str,
    scope: FixtureScope | str = FixtureScope.PER_CALL,
    registry: FixtureRegistry | None = None,
) -> Callable[[C], C]:
    """
    Class decorator: instantiate the class with no arguments and register it.

    Example:
        @fixture("WorkDir", scope=FixtureScope.PER_SUBTEST)
        class WorkDirFixture:
            def construct(self, t: ExecutionHandle, fixtures: NoFixtures) -> tuple[str, str]:
                path = tempfile.mkdtemp()
                return path, path

            def destruct(self, t: ExecutionHandle, ctx: Any) -> None:
                shutil.rmtree(ctx, ignore_errors=True)
    """

    def decorator(cls: C) -> C:
        if registry is None:
            must_register_fixture(name, cls(), scope)
        else:
            registry.must_register(name, cls(), scope)
        return cls

    return decorator


__all__ = [
    "fixture",
    "get_fixture",
    "must_register_fixture",
    "register_fixture",
    "run_test_group",
]
