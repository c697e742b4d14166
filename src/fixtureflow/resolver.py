"""
Fixture Resolver

One resolver is created per test-case invocation. It walks a dependency shape,
recursively builds the fixtures it references, caches PER_SUBTEST values for
the lifetime of the invocation and accumulates destruct actions in
construction order.
"""

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, get_args, get_origin, get_type_hints

from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError, PydanticUserError
from pydantic_core import SchemaError

from .exceptions import (
    CircularDependency,
    FieldNotAssignable,
    InvalidContract,
    ResolutionError,
    UnregisteredFixture,
)
from .handle import ExecutionHandle, FatalFailure
from .models import FixtureEntry, FixtureRef, FixtureScope
from .registry import FixtureRegistry

logger = logging.getLogger("fixtureflow.resolver")


@dataclass(frozen=True)
class ShapeField:
    """One annotated field of a dependency shape"""

    name: str
    annotation: Any
    ref: FixtureRef | None


def shape_fields(shape: type, caller: str = "<unknown>") -> list[ShapeField]:
    """List the fields of a dependency shape in declaration order."""
    try:
        hints = get_type_hints(shape, include_extras=True)
    except (NameError, TypeError) as e:
        raise ResolutionError(
            f"Cannot read fields of dependency shape {shape.__name__} "
            f"for caller {caller}: {e}",
            caller=caller,
        ) from e

    fields = []
    for name, hint in hints.items():
        if get_origin(hint) is ClassVar:
            continue
        annotation, ref = hint, None
        if get_origin(hint) is Annotated:
            annotation, *metadata = get_args(hint)
            ref = next((m for m in metadata if isinstance(m, FixtureRef)), None)
        fields.append(ShapeField(name=name, annotation=annotation, ref=ref))
    return fields


@functools.lru_cache(maxsize=256)
def _type_adapter(annotation: Any) -> TypeAdapter | None:
    """Strict validator for a field annotation, None if it cannot be checked."""
    try:
        return TypeAdapter(annotation)
    except PydanticSchemaGenerationError:
        pass
    except (SchemaError, PydanticUserError) as e:
        logger.debug(f"Not checking values against {annotation!r}: {e}")
        return None

    # plain classes are checked with isinstance
    try:
        return TypeAdapter(annotation, config=ConfigDict(arbitrary_types_allowed=True))
    except (SchemaError, PydanticUserError) as e:
        # e.g. a Protocol that is not runtime_checkable
        logger.debug(f"Not checking values against {annotation!r}: {e}")
        return None


@dataclass
class _Cleanup:
    fixture_name: str
    action: Callable[[], None]

    def __call__(self) -> None:
        self.action()


class FixtureResolver:
    """Builds dependency shapes for a single test-case invocation"""

    def __init__(
        self, registry: FixtureRegistry, check_field_types: bool = True
    ) -> None:
        self._registry = registry
        self._check_field_types = check_field_types
        # keyed by id() of the registered instance, so two names bound to the
        # same instance share one cached value
        self._resolved: dict[int, Any] = {}
        self._resolving: list[FixtureEntry] = []
        self.cleanups: list[_Cleanup] = []

    def resolve(self, t: ExecutionHandle, shape: type, caller: str) -> Any:
        """
        Build an instance of ``shape`` with every tagged field injected.

        Args:
            t: Handle passed on to construct and destruct
            shape: Dependency shape class
            caller: Name used in error messages

        Raises:
            UnregisteredFixture: A field references an unknown fixture name
            FieldNotAssignable: A field is untagged, private, read-only or of
                an incompatible type
            CircularDependency: Fixtures depend on each other in a cycle
            InvalidContract: A construct call did not return (value, ctx)
        """
        fields = shape_fields(shape, caller)
        try:
            fixtures = shape.__new__(shape)
        except TypeError as e:
            raise ResolutionError(
                f"Cannot instantiate dependency shape {shape.__name__} "
                f"for caller {caller}: {e}",
                caller=caller,
            ) from e

        for field in fields:
            if field.ref is None:
                raise FieldNotAssignable(
                    f"Shape field ({field.name} {_type_name(field.annotation)}) "
                    f"missing fixture tag for caller {caller}",
                    field_name=field.name,
                    caller=caller,
                )
            if field.name.startswith("_"):
                raise FieldNotAssignable(
                    f"{caller}'s fixture {field.name} needs to be a public field",
                    field_name=field.name,
                    fixture_name=field.ref.name,
                    caller=caller,
                )

            entry = self._registry.lookup(field.ref.name)
            if entry is None:
                raise UnregisteredFixture(
                    f"Unregistered fixture found for caller {caller}: "
                    f"{field.ref.name}",
                    fixture_name=field.ref.name,
                    caller=caller,
                )

            value = self._value_of(t, entry)
            self._assign(fixtures, field, entry, value, caller)

        return fixtures

    def _value_of(self, t: ExecutionHandle, entry: FixtureEntry) -> Any:
        key = id(entry.instance)
        if entry.scope is FixtureScope.PER_SUBTEST and key in self._resolved:
            logger.debug(f"Reusing cached value of fixture '{entry.name}'")
            return self._resolved[key]

        if any(pending.instance is entry.instance for pending in self._resolving):
            chain = [pending.name for pending in self._resolving] + [entry.name]
            raise CircularDependency(
                f"Circular fixture dependency: {' -> '.join(chain)}", chain=chain
            )

        label = type(entry.instance).__name__
        self._resolving.append(entry)
        try:
            dependencies = self.resolve(
                t, entry.dependency_shape, caller=f"{label}.construct"
            )
        finally:
            self._resolving.pop()

        logger.debug(f"Constructing fixture '{entry.name}' ({entry.scope.value})")
        result = entry.instance.construct(t, dependencies)
        if not isinstance(result, tuple) or len(result) != 2:
            raise InvalidContract(
                f"{label}'s construct method needs to return exactly 2 values as "
                f"value and destruct context, got: {type(result).__name__}",
                fixture_name=entry.name,
            )
        value, ctx = result

        self.cleanups.append(
            _Cleanup(entry.name, functools.partial(entry.instance.destruct, t, ctx))
        )
        if entry.scope is FixtureScope.PER_SUBTEST:
            self._resolved[key] = value
        return value

    def _assign(
        self,
        fixtures: Any,
        field: ShapeField,
        entry: FixtureEntry,
        value: Any,
        caller: str,
    ) -> None:
        adapter = None
        if self._check_field_types and field.annotation not in (Any, object):
            try:
                adapter = _type_adapter(field.annotation)
            except TypeError as e:
                raise FieldNotAssignable(
                    f"{caller}'s fixture {field.name} has an uncheckable type "
                    f"annotation: {e}",
                    field_name=field.name,
                    fixture_name=entry.name,
                    caller=caller,
                ) from e

        if adapter is not None:
            try:
                adapter.validate_python(value, strict=True)
            except ValidationError as e:
                raise FieldNotAssignable(
                    f"{caller}'s fixture {field.name} "
                    f"({_type_name(field.annotation)}) cannot accept value of "
                    f"fixture '{entry.name}' ({type(value).__name__}): "
                    f"{e.error_count()} validation error(s)",
                    field_name=field.name,
                    fixture_name=entry.name,
                    caller=caller,
                ) from e

        try:
            setattr(fixtures, field.name, value)
        except AttributeError as e:
            raise FieldNotAssignable(
                f"{caller}'s fixture {field.name} needs to be an assignable field",
                field_name=field.name,
                fixture_name=entry.name,
                caller=caller,
            ) from e

    def run_cleanups(self, t: ExecutionHandle) -> None:
        """Destruct everything constructed so far, in construction order.

        A failing destruct is reported on ``t``; the remaining ones still run.
        """
        cleanups, self.cleanups = self.cleanups, []
        for cleanup in cleanups:
            logger.debug(f"Destructing fixture '{cleanup.fixture_name}'")
            try:
                cleanup()
            except FatalFailure:
                # already recorded on t by t.fatal()
                continue
            except Exception as e:
                t.fail(
                    f"Destruct of fixture '{cleanup.fixture_name}' failed: "
                    f"{type(e).__name__}: {e}"
                )
        self._resolved.clear()


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", repr(annotation))


__all__ = ["FixtureResolver", "ShapeField", "shape_fields"]
