# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Input Sources

A source is the only way leaf nodes read external data: given an
integer slot it yields a vector or a matrix. Sources are created for
one evaluation call and discarded afterwards.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from lwgraph.errors import EvaluationError

from .types import DTYPE, Matrix, Vector, as_matrix, as_vector


class Source(ABC):
    """Slot-addressed supplier of input vectors and matrices."""

    @abstractmethod
    def vector_at(self, slot: int) -> Vector:
        """Return the input vector at `slot`."""

    @abstractmethod
    def matrix_at(self, slot: int) -> Matrix:
        """Return the input matrix (rows are time steps) at `slot`."""


def _check_slot(slot: int, count: int, kind: str) -> None:
    if not 0 <= slot < count:
        raise EvaluationError(
            f"{kind} slot {slot} out of range, {count} supplied",
            suggestions=[f"Supply at least {slot + 1} {kind} inputs"],
        )


def _check_rank(arr: np.ndarray, ndim: int, kind: str, slot: int) -> np.ndarray:
    if arr.ndim != ndim:
        raise EvaluationError(
            f"{kind} input at slot {slot} has shape {arr.shape}, "
            f"expected a {ndim}-D array"
        )
    return arr


class VectorSource(Source):
    """
    Source backed by concrete values supplied for one call.

    Example:
        source = VectorSource([np.array([1.0, 2.0])], [np.zeros((5, 3))])
        source.vector_at(0)   # array([1., 2.])
        source.matrix_at(0)   # 5 x 3 zeros
    """

    def __init__(
        self,
        vectors: Sequence[Vector],
        matrices: Sequence[Matrix] = (),
    ):
        self._vectors = tuple(
            _check_rank(as_vector(v), 1, "vector", slot) for slot, v in enumerate(vectors)
        )
        self._matrices = tuple(
            _check_rank(as_matrix(m), 2, "matrix", slot)
            for slot, m in enumerate(matrices)
        )

    def vector_at(self, slot: int) -> Vector:
        _check_slot(slot, len(self._vectors), "vector")
        return self._vectors[slot]

    def matrix_at(self, slot: int) -> Matrix:
        _check_slot(slot, len(self._matrices), "matrix")
        return self._matrices[slot]

    def __repr__(self) -> str:
        return (
            f"VectorSource(vectors={len(self._vectors)}, "
            f"matrices={len(self._matrices)})"
        )


class DummySource(Source):
    """
    Shape-only source producing zero-filled values.

    Used to dry-run a graph for width consistency without real data.

    Args:
        input_sizes: Width of each input vector.
        matrix_sizes: (n_steps, width) of each input matrix.
    """

    def __init__(
        self,
        input_sizes: Sequence[int],
        matrix_sizes: Sequence[tuple[int, int]] = (),
    ):
        self._sizes = tuple(int(s) for s in input_sizes)
        self._matrix_sizes = tuple((int(r), int(c)) for r, c in matrix_sizes)

    def vector_at(self, slot: int) -> Vector:
        _check_slot(slot, len(self._sizes), "vector")
        return np.zeros(self._sizes[slot], dtype=DTYPE)

    def matrix_at(self, slot: int) -> Matrix:
        _check_slot(slot, len(self._matrix_sizes), "matrix")
        return np.zeros(self._matrix_sizes[slot], dtype=DTYPE)

    def __repr__(self) -> str:
        return (
            f"DummySource(sizes={list(self._sizes)}, "
            f"matrix_sizes={list(self._matrix_sizes)})"
        )
