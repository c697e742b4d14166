"""
Fixture Registry

Maps fixture names to their scope and implementing instance. Registration is
expected to finish before any test case resolves fixtures; after that the
registry is only read.
"""

import logging
import threading
from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from .contract import validate_fixture
from .exceptions import DuplicateName, RegistrationError
from .models import FixtureEntry, FixtureScope

logger = logging.getLogger("fixtureflow.registry")


class FixtureRegistry:
    """Name -> FixtureEntry mapping with registration-time contract checks"""

    def __init__(self) -> None:
        self._entries: dict[str, FixtureEntry] = {}
        self._registry_lock = threading.RLock()

    def register(
        self,
        name: str,
        instance: Any,
        scope: FixtureScope | str = FixtureScope.PER_CALL,
    ) -> FixtureEntry:
        """
        Register a fixture instance under a name.

        Args:
            name: Registry key referenced by FixtureRef annotations
            instance: Object exposing construct and destruct
            scope: FixtureScope or its string value

        Returns:
            The stored entry

        Raises:
            RegistrationError: If the name or scope is invalid
            DuplicateName: If the name is already taken; the first entry is kept
            InvalidContract: If construct/destruct do not match the protocol
        """
        if not isinstance(name, str) or not name:
            raise RegistrationError(
                f"Fixture name must be a non-empty string, got {name!r}"
            )
        try:
            scope = FixtureScope(scope)
        except ValueError as e:
            raise RegistrationError(
                f"Fixture '{name}' has an invalid scope {scope!r}, expected one "
                f"of: {', '.join(s.value for s in FixtureScope)}",
                fixture_name=name,
            ) from e

        with self._registry_lock:
            existing = self._entries.get(name)
            if existing is not None:
                raise DuplicateName(
                    f"Fixture '{name}' has already been registered under scope: "
                    f"{existing.scope.value}",
                    fixture_name=name,
                    existing_scope=existing.scope,
                )

            shape = validate_fixture(instance)
            try:
                entry = FixtureEntry(
                    name=name, scope=scope, instance=instance, dependency_shape=shape
                )
            except ValidationError as e:
                raise RegistrationError(
                    f"Invalid registration for fixture '{name}': {e}",
                    fixture_name=name,
                ) from e
            self._entries[name] = entry

        logger.debug(
            f"Registered fixture '{name}' ({type(instance).__name__}) "
            f"with scope '{scope.value}'"
        )
        return entry

    def must_register(
        self,
        name: str,
        instance: Any,
        scope: FixtureScope | str = FixtureScope.PER_CALL,
    ) -> FixtureEntry:
        """Register a fixture for initialization code that cannot recover."""
        try:
            return self.register(name, instance, scope)
        except RegistrationError as e:
            logger.critical(f"Failed to register fixture '{name}': {e}")
            raise RuntimeError(f"Failed to register fixture: {e}") from e

    def lookup(self, name: str) -> FixtureEntry | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FixtureEntry]:
        return iter(list(self._entries.values()))

    def __repr__(self) -> str:
        return f"FixtureRegistry(fixtures={self.names()})"


__all__ = ["FixtureRegistry"]
