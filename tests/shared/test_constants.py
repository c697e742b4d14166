"""
Test constants

Assertion message templates shared by the test utilities.
"""

ASSERTION_MESSAGES = {
    "subunit_missing": "sub-unit {name} was not run under {parent}",
    "status_mismatch": "sub-unit {name}: expected {expected}, got {actual}",
    "message_missing": "sub-unit {name} has no message containing {fragment!r}, got {messages}",
    "count_mismatch": "expected count {expected}, got {actual}",
}

# Events recorded by RecordingGroup, in the order a passing case produces them
CASE_EVENTS = ("before_each", "body", "after_each")

__all__ = ["ASSERTION_MESSAGES", "CASE_EVENTS"]
