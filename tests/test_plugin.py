"""
Tests for the pytest plugin and end-to-end usage through the gt fixture
"""

import os
import shutil
import tempfile
from typing import Annotated, Any

from fixtureflow import (
    ExecutionHandle,
    FixtureRef,
    FixtureRegistry,
    FixtureScope,
    GroupRunner,
    NoFixtures,
    TestGroup,
    fixture,
    run_test_group,
)

example_registry = FixtureRegistry()


# start of fixture definitions


@fixture("WorkDir", scope=FixtureScope.PER_SUBTEST, registry=example_registry)
class WorkDirFixture:
    def construct(self, t: ExecutionHandle, fixtures: NoFixtures) -> tuple[str, str]:
        path = tempfile.mkdtemp(prefix="fixtureflow-example-")
        # the first value goes to the test, the second to destruct
        return path, path

    def destruct(self, t: ExecutionHandle, ctx: Any) -> None:
        shutil.rmtree(ctx, ignore_errors=True)


@fixture("Uid", scope=FixtureScope.PER_CALL, registry=example_registry)
class UidFixture:
    def __init__(self):
        self.current_id = 0

    def construct(self, t: ExecutionHandle, fixtures: NoFixtures) -> tuple[int, Any]:
        self.current_id += 1
        return self.current_id, None

    def destruct(self, t: ExecutionHandle, ctx: Any) -> None:
        pass


# start of test definitions


class MultipleFixtures:
    dir_path: Annotated[str, FixtureRef("WorkDir")]
    uid1: Annotated[int, FixtureRef("Uid")]
    uid2: Annotated[int, FixtureRef("Uid")]


class SampleTests(TestGroup):
    def subtest_compare(self, t: ExecutionHandle) -> None:
        assert 1 + 1 == 2

    def subtest_check_prefix(self, t: ExecutionHandle) -> None:
        assert "abc".startswith("ab")

    def subtest_multiple_fixtures(
        self, t: ExecutionHandle, fixtures: MultipleFixtures
    ) -> None:
        assert os.path.isdir(fixtures.dir_path)
        # Uid has call scope, every reference gets a new value
        assert fixtures.uid1 != fixtures.uid2


def test_sample_tests(gt):
    run_test_group(gt, SampleTests(), runner=GroupRunner(example_registry))

    assert [sub.name for sub in gt.children] == [
        "check_prefix",
        "compare",
        "multiple_fixtures",
    ]


INNER_TEST = """
from fixtureflow import ExecutionHandle, FixtureRegistry, GroupRunner, TestGroup


class Broken(TestGroup):
    def subtest_good(self, t: ExecutionHandle) -> None:
        pass

    def subtest_bad(self, t: ExecutionHandle) -> None:
        assert 2 + 2 == 5, "arithmetic"


def test_group(gt):
    GroupRunner(FixtureRegistry()).run(gt, Broken())


def test_untouched(gt):
    pass
"""


def test_failed_subunit_fails_pytest_item(pytester):
    pytester.makepyfile(test_inner=INNER_TEST)

    result = pytester.runpytest("-p", "fixtureflow.pytest_plugin")

    result.assert_outcomes(passed=1, failed=1)
    result.stdout.fnmatch_lines(
        [
            "*--- FAIL: test_group/bad*",
            "*arithmetic*",
        ]
    )
