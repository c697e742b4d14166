"""
Fixture data models

Scopes, fixture references used to tag dependency-shape fields, and the
immutable registry entry.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .handle import ExecutionHandle


class FixtureScope(str, Enum):
    """Caching policy for repeated references within one test case"""

    # every reference constructs a fresh value
    PER_CALL = "call"
    # first reference constructs, later references in the same subtest reuse it
    PER_SUBTEST = "subtest"


@dataclass(frozen=True)
class FixtureRef:
    """Marks a dependency-shape field for injection.

    Used as ``Annotated`` metadata::

        class Fixtures:
            user_id: Annotated[str, FixtureRef("UserId")]
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("FixtureRef name must be a non-empty string")


class NoFixtures:
    """Empty dependency shape for fixtures without dependencies"""


class FixtureEntry(BaseModel):
    """A registered fixture. Created once at registration and never mutated."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Registry key")
    scope: FixtureScope = Field(..., description="Caching policy")
    instance: Any = Field(..., description="Object implementing the fixture protocol")
    dependency_shape: type[Any] = Field(
        NoFixtures, description="Shape taken by the instance's construct method"
    )


class Fixture(ABC):
    """Optional base class documenting the fixture protocol.

    Registration checks structure, not inheritance, so any object with matching
    ``construct`` and ``destruct`` methods can be registered.
    """

    @abstractmethod
    def construct(self, t: ExecutionHandle, fixtures: NoFixtures) -> tuple[Any, Any]:
        """Return ``(value, ctx)``: value goes to the test, ctx goes to destruct."""

    @abstractmethod
    def destruct(self, t: ExecutionHandle, ctx: Any) -> None:
        """Release whatever construct acquired."""


__all__ = [
    "FixtureScope",
    "FixtureRef",
    "NoFixtures",
    "FixtureEntry",
    "Fixture",
]
