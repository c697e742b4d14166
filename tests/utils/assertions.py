"""
Custom assertions for execution handle results

Make failures of nested sub-units readable in pytest output.
"""

from fixtureflow import T

from ..shared.test_constants import ASSERTION_MESSAGES


def get_subunit(parent: T, name: str) -> T:
    """Return the sub-unit ``name`` run under ``parent``"""
    sub = parent.child(name)
    assert sub is not None, ASSERTION_MESSAGES["subunit_missing"].format(
        name=name, parent=parent.full_name
    )
    return sub


def assert_passed(parent: T, name: str) -> T:
    """Assert the sub-unit ran and passed"""
    sub = get_subunit(parent, name)
    assert not sub.failed, ASSERTION_MESSAGES["status_mismatch"].format(
        name=sub.full_name, expected="PASS", actual=f"FAIL\n{sub.report()}"
    )
    return sub


def assert_failed(parent: T, name: str, fragment: str | None = None) -> T:
    """Assert the sub-unit ran and failed, optionally with a matching message"""
    sub = get_subunit(parent, name)
    assert sub.failed, ASSERTION_MESSAGES["status_mismatch"].format(
        name=sub.full_name, expected="FAIL", actual="PASS"
    )
    if fragment is not None:
        assert any(fragment in message for message in sub.messages), (
            ASSERTION_MESSAGES["message_missing"].format(
                name=sub.full_name, fragment=fragment, messages=sub.messages
            )
        )
    return sub


def assert_subunit_names(parent: T, expected: list[str]):
    """Assert exactly these sub-units ran, in this order"""
    actual = [sub.name for sub in parent.children]
    assert actual == expected, ASSERTION_MESSAGES["status_mismatch"].format(
        name=parent.full_name, expected=expected, actual=actual
    )


__all__ = ["assert_failed", "assert_passed", "assert_subunit_names", "get_subunit"]
