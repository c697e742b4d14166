"""
Execution handles

The engine only talks to tests through an ``ExecutionHandle``: it runs named
sub-units, records pass/fail and aborts a sub-unit on a fatal failure. ``T`` is
the in-process implementation used by the pytest plugin and the test suite.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, NoReturn

logger = logging.getLogger("fixtureflow.handle")


class FatalFailure(AssertionError):
    """Raised by ``fatal`` to abort the current sub-unit"""

    def __init__(self, message: str, handle_name: str | None = None) -> None:
        self.handle_name = handle_name
        super().__init__(message)


class ExecutionHandle(ABC):
    """Test execution primitive handed to hooks, test cases and fixtures"""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def failed(self) -> bool: ...

    @abstractmethod
    def fail(self, message: str | None = None) -> None:
        """Mark this unit failed and keep going."""

    @abstractmethod
    def fatal(self, message: str) -> NoReturn:
        """Mark this unit failed and stop it."""

    @abstractmethod
    def log(self, message: str) -> None: ...

    @abstractmethod
    def run(self, name: str, body: Callable[["ExecutionHandle"], Any]) -> bool:
        """Run ``body`` as a named sub-unit, return True if it passed."""


class T(ExecutionHandle):
    """Records results of a unit and its nested sub-units.

    A failing sub-unit marks every ancestor failed. Uncaught exceptions in a
    sub-unit body are recorded as failures of that sub-unit; siblings still run.
    """

    def __init__(self, name: str, parent: "T | None" = None) -> None:
        self._name = name
        self.parent = parent
        self.children: list[T] = []
        self.messages: list[str] = []
        self._failed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def full_name(self) -> str:
        if self.parent is None:
            return self._name
        return f"{self.parent.full_name}/{self._name}"

    @property
    def failed(self) -> bool:
        return self._failed

    def _mark_failed(self) -> None:
        handle: T | None = self
        while handle is not None and not handle._failed:
            handle._failed = True
            handle = handle.parent

    def fail(self, message: str | None = None) -> None:
        if message:
            self.messages.append(message)
            logger.warning(f"{self.full_name}: {message}")
        self._mark_failed()

    def fatal(self, message: str) -> NoReturn:
        self.fail(message)
        raise FatalFailure(message, handle_name=self.full_name)

    def log(self, message: str) -> None:
        self.messages.append(message)
        logger.info(f"{self.full_name}: {message}")

    def child(self, name: str) -> "T | None":
        for sub in self.children:
            if sub.name == name:
                return sub
        return None

    def run(self, name: str, body: Callable[["ExecutionHandle"], Any]) -> bool:
        sub = T(name, parent=self)
        self.children.append(sub)
        logger.debug(f"=== RUN {sub.full_name}")

        try:
            body(sub)
        except FatalFailure as e:
            # raised through sub.fatal() it is already recorded
            if not sub.failed:
                sub.fail(str(e))
        except AssertionError as e:
            sub.fail(f"AssertionError: {e}")
        except Exception as e:
            logger.debug(f"{sub.full_name} raised", exc_info=True)
            sub.fail(f"unexpected {type(e).__name__}: {e}")

        logger.info(f"--- {'FAIL' if sub.failed else 'PASS'}: {sub.full_name}")
        return not sub.failed

    def report(self, indent: int = 0) -> str:
        """Render this unit and its sub-units as an indented PASS/FAIL tree."""
        pad = "    " * indent
        lines = [f"{pad}--- {'FAIL' if self.failed else 'PASS'}: {self.full_name}"]
        lines.extend(f"{pad}    {message}" for message in self.messages)
        for sub in self.children:
            lines.append(sub.report(indent + 1))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"T(name='{self.full_name}', failed={self.failed})"


__all__ = ["ExecutionHandle", "FatalFailure", "T"]
