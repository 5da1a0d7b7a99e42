"""Unit tests for the lightweight Result utilities."""

from __future__ import annotations

import pytest

from codetracker.core.result import Err, Failure, FailureKind, Ok, Result, err, failure, ok


def test_ok_map_and_flat_map() -> None:
    """`Ok` should map/flat_map and keep values typed."""
    r: Result[int, str] = ok(10)
    r2 = r.map(lambda x: x + 5).flat_map(lambda x: ok(x * 2))
    assert r2.is_ok() and r2.unwrap() == 30


def test_err_propagation() -> None:
    """`Err` should pass through map/flat_map untouched."""
    r: Result[int, str] = err("boom")
    assert r.is_err()
    assert r.map(lambda x: x + 1).is_err()
    r2 = r.flat_map(lambda x: ok(x * 2))
    assert isinstance(r2, Err) and r2.unwrap_err() == "boom"


def test_unwrap_variants_and_defaults() -> None:
    """Unwrap behavior: default value and explicit error raising."""
    assert ok("x").unwrap() == "x"
    assert err("e").unwrap(default="fallback") == "fallback"
    with pytest.raises(RuntimeError):
        err("e").unwrap()
    with pytest.raises(RuntimeError):
        ok(1).unwrap_err()


def test_failure_helper_builds_typed_err() -> None:
    """`failure()` wraps a `Failure` with its kind and message."""
    r: Result[str, Failure] = failure(FailureKind.TRANSPORT, "timed out")
    assert r.is_err()
    problem = r.unwrap_err()
    assert problem.kind is FailureKind.TRANSPORT
    assert str(problem) == "transport: timed out"


def test_variants_are_frozen_values() -> None:
    """`Ok` / `Err` compare by value."""
    assert Ok(3) == Ok(3)
    assert Err(Failure(FailureKind.FILESYSTEM, "x")) == Err(Failure(FailureKind.FILESYSTEM, "x"))
    assert Ok(3) != Err(3)


def test_result_base_is_abstract() -> None:
    """Only the `Ok` / `Err` variants can be built."""
    with pytest.raises(TypeError):
        Result()  # type: ignore[abstract]
