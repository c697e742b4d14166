"""
Exception hierarchy for fixtureflow.

Registration errors are raised to the caller for explicit handling. Resolution
and signature errors are raised by the resolver and the runner and end up
reported against the execution handle as fatal failures.
"""

from typing import Any


class FixtureFlowError(Exception):
    """Base class for all fixtureflow errors"""

    def __init__(
        self, message: str, fixture_name: str | None = None, **kwargs: Any
    ) -> None:
        self.fixture_name = fixture_name
        self.context = kwargs
        super().__init__(message)


class ConfigurationError(FixtureFlowError):
    """Invalid fixtureflow settings"""


# ==================== registration ====================


class RegistrationError(FixtureFlowError):
    """Raised when a fixture cannot be registered"""


class DuplicateName(RegistrationError):
    """A fixture is already registered under the requested name"""

    def __init__(self, message: str, fixture_name: str, existing_scope: Any) -> None:
        self.existing_scope = existing_scope
        super().__init__(message, fixture_name)


class InvalidContract(RegistrationError):
    """A fixture's construct/destruct shape does not match the fixture protocol"""


# ==================== resolution ====================


class ResolutionError(FixtureFlowError):
    """Raised while building a dependency shape for a test case"""

    def __init__(
        self,
        message: str,
        fixture_name: str | None = None,
        caller: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.caller = caller
        super().__init__(message, fixture_name, **kwargs)


class UnregisteredFixture(ResolutionError):
    """A dependency shape references a name that is not in the registry"""


class FieldNotAssignable(ResolutionError):
    """A resolved value cannot be placed into its target field"""

    def __init__(
        self,
        message: str,
        field_name: str,
        fixture_name: str | None = None,
        caller: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.field_name = field_name
        super().__init__(message, fixture_name, caller, **kwargs)


class CircularDependency(ResolutionError):
    """Fixtures depend on each other in a cycle"""

    def __init__(self, message: str, chain: list[str], **kwargs: Any) -> None:
        self.chain = chain
        super().__init__(message, chain[-1] if chain else None, **kwargs)


# ==================== orchestration ====================


class MalformedTestSignature(FixtureFlowError):
    """A discovered test-case method violates the (t[, fixtures]) convention"""

    def __init__(self, message: str, method_name: str, **kwargs: Any) -> None:
        self.method_name = method_name
        super().__init__(message, **kwargs)


__all__ = [
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
