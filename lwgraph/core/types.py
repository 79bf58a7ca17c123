# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Core Types

Numeric aliases, status codes and the Result type returned by the
non-raising entry points.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Generic, Optional, TypeVar

import numpy as np

from lwgraph.errors import ConfigurationError, LwGraphError

# 1-D float64 array
Vector = np.ndarray
# 2-D float64 array, one row per time step
Matrix = np.ndarray

DTYPE = np.float64

T = TypeVar("T")


def as_vector(values) -> Vector:
    """Convert to a contiguous float64 array, keeping its shape."""
    return np.ascontiguousarray(values, dtype=DTYPE)


def as_matrix(values, width: Optional[int] = None) -> Matrix:
    """Convert to a contiguous float64 matrix (rows are time steps)."""
    arr = np.ascontiguousarray(values, dtype=DTYPE)
    if arr.ndim == 1 and width:
        arr = arr.reshape(-1, width)
    return arr


def freeze(arr: np.ndarray) -> np.ndarray:
    """Mark an array read-only."""
    arr.setflags(write=False)
    return arr


class StatusCode(Enum):
    """Result status codes for operations."""

    Ok = auto()
    ConfigurationError = auto()
    EvaluationError = auto()


@dataclass
class Status:
    """Status class for operation results."""

    code: StatusCode = StatusCode.Ok
    message: str = ""

    def ok(self) -> bool:
        return self.code == StatusCode.Ok

    @classmethod
    def Ok(cls) -> "Status":
        return cls()

    @classmethod
    def Error(cls, code: StatusCode, message: str) -> "Status":
        return cls(code=code, message=message)

    @classmethod
    def from_error(cls, error: LwGraphError) -> "Status":
        """Map an lwgraph exception to its status code."""
        if isinstance(error, ConfigurationError):
            return cls.Error(StatusCode.ConfigurationError, error.message)
        return cls.Error(StatusCode.EvaluationError, error.message)

    def __bool__(self) -> bool:
        return self.ok()


@dataclass
class Result(Generic[T]):
    """
    Value-or-status returned by the non-raising entry points.

    Exactly one of `value` and a failed `status` is meaningful.
    """

    value: Optional[T] = None
    status: Status = None
    error: Optional[LwGraphError] = field(default=None, repr=False)

    def __post_init__(self):
        if self.status is None:
            self.status = Status.Ok()

    def ok(self) -> bool:
        return self.status.ok()

    def unwrap(self) -> T:
        """Return the value, re-raising the stored failure."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: LwGraphError) -> "Result[T]":
        return cls(status=Status.from_error(error), error=error)

    def __bool__(self) -> bool:
        return self.ok()
