# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Input Preprocessing

Turns raw named variables into the numeric vectors and matrices the
graph consumes. Each variable is shifted and scaled with the statistics
stored in the model: y = (x + offset) * scale.
"""

from __future__ import annotations

from typing import Mapping, Sequence, Union

import numpy as np

from lwgraph.core.config import InputVariable
from lwgraph.core.types import DTYPE, Matrix, Vector, freeze
from lwgraph.errors import EvaluationError

# One mapping per time step, or one sequence of values per variable
SequenceInput = Union[
    Sequence[Mapping[str, float]],
    Mapping[str, Sequence[float]],
]


class _Scaling:
    def __init__(self, variables: Sequence[InputVariable]):
        self.names = tuple(v.name for v in variables)
        self.offsets = freeze(np.array([v.offset for v in variables], dtype=DTYPE))
        self.scales = freeze(np.array([v.scale for v in variables], dtype=DTYPE))

    @property
    def n_variables(self) -> int:
        return len(self.names)

    def missing(self, name: str) -> EvaluationError:
        return EvaluationError(
            f"can't find input variable '{name}'",
            name=name,
            suggestions=[f"Expected variables: {list(self.names)}"],
        )

    def not_numeric(self, name: str) -> EvaluationError:
        return EvaluationError(f"input variable '{name}' is not numeric", name=name)


class InputPreprocessor(_Scaling):
    """
    Scale a mapping of named scalars into a vector.

    Example:
        pre = InputPreprocessor([InputVariable("pt", offset=-10, scale=0.1)])
        pre({"pt": 30.0})   # array([2.])
    """

    def __call__(self, values: Mapping[str, float]) -> Vector:
        raw = np.empty(self.n_variables, dtype=DTYPE)
        for i, name in enumerate(self.names):
            if name not in values:
                raise self.missing(name)
            try:
                raw[i] = values[name]
            except (TypeError, ValueError):
                raise self.not_numeric(name) from None
        return (raw + self.offsets) * self.scales


class InputVectorPreprocessor(_Scaling):
    """
    Scale a sequence input into a matrix with one row per time step.

    Accepts either an ordered sequence of per-step mappings or a
    mapping of variable name to per-step values.
    """

    def __call__(self, values: SequenceInput) -> Matrix:
        if isinstance(values, Mapping):
            raw = self._from_columns(values)
        else:
            raw = self._from_steps(values)
        return (raw + self.offsets) * self.scales

    def _from_steps(self, steps: Sequence[Mapping[str, float]]) -> np.ndarray:
        raw = np.empty((len(steps), self.n_variables), dtype=DTYPE)
        for t, step in enumerate(steps):
            for i, name in enumerate(self.names):
                if name not in step:
                    raise self.missing(name)
                try:
                    raw[t, i] = step[name]
                except (TypeError, ValueError):
                    raise self.not_numeric(name) from None
        return raw

    def _from_columns(self, columns: Mapping[str, Sequence[float]]) -> np.ndarray:
        for name in self.names:
            if name not in columns:
                raise self.missing(name)
        lengths = {len(columns[name]) for name in self.names}
        if len(lengths) > 1:
            raise EvaluationError(
                f"sequence variables have different lengths: {sorted(lengths)}"
            )
        n_steps = lengths.pop() if lengths else 0
        raw = np.empty((n_steps, self.n_variables), dtype=DTYPE)
        for i, name in enumerate(self.names):
            try:
                raw[:, i] = columns[name]
            except (TypeError, ValueError):
                raise self.not_numeric(name) from None
        return raw
