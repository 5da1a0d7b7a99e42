"""Typed Result container for the agent's success/failure returns.

The agent rides along inside a host tool and must never crash it, so the
inner layers (scanner, transport, correlator) return failures as values
instead of raising them. Only the trigger adapters at the process boundary
decide what to do with an ``Err``, and what they do is swallow it.

This module provides:
- ``Ok(value)`` / ``Err(error)``: the two variants of ``Result[T, E]``, each
  implementing the combinators for its own case,
- ``Failure`` / ``FailureKind``: the error payload every public operation uses.

Example
-------
>>> from codetracker.core.result import ok, failure, FailureKind
>>> ok("42").map(int).unwrap()
42
>>> failure(FailureKind.TRANSPORT, "timed out").unwrap(default="offline")
'offline'
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")

_MISSING: object = object()


class Result(ABC, Generic[T, E]):
    """Either ``Ok[T]`` or ``Err[E]``; never instantiated directly."""

    __slots__ = ()

    @abstractmethod
    def is_ok(self) -> bool: ...

    def is_err(self) -> bool:
        return not self.is_ok()

    @abstractmethod
    def unwrap(self, default: T = _MISSING) -> T:  # type: ignore[assignment]
        """Return the success value; on ``Err`` return ``default`` or raise ``RuntimeError``."""

    @abstractmethod
    def unwrap_err(self) -> E:
        """Return the error payload; raise ``RuntimeError`` on ``Ok``."""

    @abstractmethod
    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        """Transform the success value, leaving an error untouched."""

    @abstractmethod
    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain a step that itself returns a :class:`Result`."""


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Successful result wrapping a value of type ``T``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self, default: T = _MISSING) -> T:  # type: ignore[assignment]
        return self.value

    def unwrap_err(self) -> E:
        raise RuntimeError(f"unwrap_err() on {self!r}")

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Ok(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return fn(self.value)


@dataclass(frozen=True)
class Err(Result[T, E]):
    """Failed result wrapping an error payload of type ``E``."""

    error: E

    def is_ok(self) -> bool:
        return False

    def unwrap(self, default: T = _MISSING) -> T:  # type: ignore[assignment]
        if default is _MISSING:
            raise RuntimeError(f"unwrap() on {self!r}")
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Err(self.error)

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return Err(self.error)


class FailureKind(str, Enum):
    """Error taxonomy shared by every layer of the agent."""

    CONFIG_MISSING = "config_missing"
    FILESYSTEM = "filesystem"
    TRANSPORT = "transport"
    CORRUPT_STATE = "corrupt_state"


@dataclass(frozen=True, slots=True)
class Failure:
    """Why an operation did not succeed.

    Attributes
    ----------
    kind : FailureKind
        Coarse category used by callers to decide how loudly to log.
    message : str
        Human-readable detail, only ever written to the debug log.
    """

    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


def ok(value: T) -> Result[T, E]:
    """Build an :class:`Ok` typed as the general ``Result``."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Build an :class:`Err` typed as the general ``Result``."""
    return Err(error)


def failure(kind: FailureKind, message: str) -> Result[T, Failure]:
    """Shorthand for ``err(Failure(kind, message))``."""
    return Err(Failure(kind, message))


__all__ = ["Result", "Ok", "Err", "Failure", "FailureKind", "ok", "err", "failure"]
