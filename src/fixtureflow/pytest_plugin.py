"""
pytest integration

Enable with ``pytest_plugins = ["fixtureflow.pytest_plugin"]`` in a top-level
conftest.py. The ``gt`` fixture is a root execution handle named after the
pytest item; the test fails when any sub-unit run under it failed.
"""

import pytest

from .handle import T


@pytest.fixture
def gt(request: pytest.FixtureRequest) -> T:
    """Root execution handle for run_test_group."""
    return T(request.node.name)


@pytest.hookimpl(wrapper=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function):
    result = yield
    handle = pyfuncitem.funcargs.get("gt")
    if isinstance(handle, T) and handle.failed:
        pytest.fail(handle.report(), pytrace=False)
    return result
