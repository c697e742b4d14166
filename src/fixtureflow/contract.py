"""
Contract validation for fixtures and test-case methods.

Everything here is structural inspection of signatures and annotations; a
fixture is never invoked while it is being validated.
"""

import inspect
from collections.abc import Callable
from typing import Any, get_args, get_origin, get_type_hints

from .exceptions import FixtureFlowError, InvalidContract, MalformedTestSignature
from .handle import ExecutionHandle

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)
_EMPTY = inspect.Parameter.empty


def _signature(
    func: Callable, describe: str, error: Callable[[str], FixtureFlowError]
) -> tuple[list[inspect.Parameter], dict[str, Any]]:
    """Parameters of a bound callable (self excluded) and its resolved hints."""
    try:
        params = list(inspect.signature(func).parameters.values())
        hints = get_type_hints(inspect.unwrap(getattr(func, "__func__", func)))
    except (NameError, TypeError, ValueError) as e:
        raise error(f"Cannot inspect signature of {describe}: {e}") from e
    return params, hints


def _is_handle_annotation(annotation: Any) -> bool:
    if annotation is _EMPTY:
        return True
    return isinstance(annotation, type) and issubclass(annotation, ExecutionHandle)


def _is_value_ctx_pair(annotation: Any) -> bool:
    args = get_args(annotation)
    return get_origin(annotation) is tuple and len(args) == 2 and Ellipsis not in args


def _is_shape_class(annotation: Any) -> bool:
    return isinstance(annotation, type) and annotation.__module__ != "builtins"


def _type_name(annotation: Any) -> str:
    if annotation is _EMPTY:
        return "nothing"
    return getattr(annotation, "__name__", repr(annotation))


def validate_construct(instance: Any) -> type:
    """Check ``construct(t, fixtures) -> (value, ctx)``, return its shape class."""
    label = type(instance).__name__
    construct = getattr(instance, "construct", None)
    if construct is None or not callable(construct):
        raise InvalidContract(f"{label} missing required construct method.")
    if inspect.iscoroutinefunction(construct):
        raise InvalidContract(f"{label}'s construct method must not be a coroutine.")

    params, hints = _signature(construct, f"{label}.construct", InvalidContract)
    if len(params) != 2 or any(p.kind not in _POSITIONAL for p in params):
        raise InvalidContract(
            f"{label}'s construct method needs to take exactly 2 positional "
            f"parameters as handle and fixtures, got: {len(params)}."
        )

    t_param, fixtures_param = params
    t_type = hints.get(t_param.name, _EMPTY)
    if not _is_handle_annotation(t_type):
        raise InvalidContract(
            f"{label}'s construct method needs to take ExecutionHandle as first "
            f"argument, got: {_type_name(t_type)}"
        )

    shape = hints.get(fixtures_param.name, _EMPTY)
    if not _is_shape_class(shape):
        raise InvalidContract(
            f"{label}'s construct method needs to take a dependency shape class "
            f"as second argument, got: {_type_name(shape)}"
        )

    returns = hints.get("return", _EMPTY)
    if returns is not _EMPTY and not _is_value_ctx_pair(returns):
        raise InvalidContract(
            f"{label}'s construct method needs to return exactly 2 values as "
            f"value and destruct context, got: {_type_name(returns)}"
        )
    return shape


def validate_destruct(instance: Any) -> None:
    """Check ``destruct(t, ctx) -> None``."""
    label = type(instance).__name__
    destruct = getattr(instance, "destruct", None)
    if destruct is None or not callable(destruct):
        raise InvalidContract(f"{label} missing required destruct method.")
    if inspect.iscoroutinefunction(destruct):
        raise InvalidContract(f"{label}'s destruct method must not be a coroutine.")

    params, hints = _signature(destruct, f"{label}.destruct", InvalidContract)
    if len(params) != 2 or any(p.kind not in _POSITIONAL for p in params):
        raise InvalidContract(
            f"{label}'s destruct method needs to take exactly 2 positional "
            f"parameters as handle and destruct context, got {len(params)}."
        )

    t_param, ctx_param = params
    t_type = hints.get(t_param.name, _EMPTY)
    if not _is_handle_annotation(t_type):
        raise InvalidContract(
            f"{label}'s destruct method needs to take ExecutionHandle as first "
            f"argument, got: {_type_name(t_type)}"
        )

    ctx_type = hints.get(ctx_param.name, _EMPTY)
    if ctx_type not in (_EMPTY, Any, object):
        raise InvalidContract(
            f"{label}'s destruct method needs to take Any as second argument, "
            f"got: {_type_name(ctx_type)}"
        )

    returns = hints.get("return", _EMPTY)
    if returns not in (_EMPTY, type(None)):
        raise InvalidContract(
            f"{label}'s destruct method must not return a value, "
            f"got: {_type_name(returns)}"
        )


def validate_fixture(instance: Any) -> type:
    """Validate both halves of the fixture protocol.

    Returns:
        The dependency shape class taken by ``construct``.

    Raises:
        InvalidContract: describing the first mismatch found
    """
    shape = validate_construct(instance)
    validate_destruct(instance)
    return shape


def validate_test_case(method_name: str, method: Callable) -> type | None:
    """Check a test-case method takes ``(t)`` or ``(t, fixtures)``.

    Returns:
        The dependency shape class, or None when the case takes no fixtures.

    Raises:
        MalformedTestSignature
    """

    def malformed(message: str) -> MalformedTestSignature:
        return MalformedTestSignature(message, method_name=method_name)

    params, hints = _signature(method, f"method {method_name}", malformed)
    if not params:
        raise malformed(
            f"Method {method_name} must have ExecutionHandle as first parameter, "
            f"got nothing."
        )
    if len(params) > 2:
        raise malformed(
            f"Method {method_name} cannot take more than 2 parameters, "
            f"got {len(params)}."
        )
    if any(p.kind not in _POSITIONAL for p in params):
        raise malformed(f"Method {method_name} must take positional parameters only.")

    t_type = hints.get(params[0].name, _EMPTY)
    if not _is_handle_annotation(t_type):
        raise malformed(
            f"Method {method_name} must have ExecutionHandle as first parameter, "
            f"got: {_type_name(t_type)}"
        )

    if len(params) == 1:
        return None

    shape = hints.get(params[1].name, _EMPTY)
    if not _is_shape_class(shape):
        raise malformed(
            f"Method {method_name} must take a dependency shape class as second "
            f"parameter, got: {_type_name(shape)}"
        )
    return shape


__all__ = [
    "validate_construct",
    "validate_destruct",
    "validate_fixture",
    "validate_test_case",
]
