# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Recurrent Layers

Layers that consume a whole sequence, given as a matrix with one row
per time step, and return one output row per time step:

- LSTMLayer: gates i, f, c, o
- GRULayer: gates z, r, h
- EmbeddingLayer: replaces integer-valued columns by learned vectors

Gate equations follow the Keras conventions the weights are exported
with.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from lwgraph.core.config import LayerConfig
from lwgraph.core.types import DTYPE, freeze
from lwgraph.errors import ConfigurationError, EvaluationError

from .activations import ActivationRegistry
from .core import _component, bias_vector, weight_matrix


class _Gate:
    """Input weights W, recurrent weights U and bias b of one gate."""

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        name: str,
        layer_index: Optional[int],
    ):
        self.W = weight_matrix(config.weights, n_inputs, f"{name} weights", layer_index)
        n_out = self.W.shape[0]
        self.U = weight_matrix(config.U, n_out, f"{name} U", layer_index)
        if self.U.shape != (n_out, n_out):
            raise ConfigurationError(
                f"gate '{name}' recurrent weights have shape {self.U.shape}, "
                f"expected {(n_out, n_out)}",
                layer_index=layer_index,
            )
        self.b = bias_vector(config.bias, n_out, f"{name} bias", layer_index)
        self.n_outputs = n_out

    def project(self, x: np.ndarray) -> np.ndarray:
        """Input contribution for every time step at once."""
        return x @ self.W.T + self.b


def _build_gates(
    n_inputs: int,
    config: LayerConfig,
    names: tuple[str, ...],
    layer_index: Optional[int],
) -> dict[str, _Gate]:
    gates = {
        name: _Gate(n_inputs, _component(config, name, layer_index), name, layer_index)
        for name in names
    }
    widths = {g.n_outputs for g in gates.values()}
    if len(widths) != 1:
        raise ConfigurationError(
            f"{config.architecture.value} gates disagree on width: {sorted(widths)}",
            layer_index=layer_index,
        )
    return gates


class LSTMLayer:
    """Long short-term memory layer returning the hidden state per step."""

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        layer_index: Optional[int] = None,
    ):
        gates = _build_gates(n_inputs, config, ("i", "f", "c", "o"), layer_index)
        self.i, self.f, self.c, self.o = (gates[k] for k in ("i", "f", "c", "o"))
        self.activation = ActivationRegistry.get(config.activation)
        self.inner_activation = ActivationRegistry.get(config.inner_activation)
        self.n_inputs = n_inputs
        self.n_outputs = self.i.n_outputs

    def scan(self, x: np.ndarray) -> np.ndarray:
        n_steps = x.shape[0]
        xi, xf, xc, xo = (g.project(x) for g in (self.i, self.f, self.c, self.o))
        h = np.zeros(self.n_outputs, dtype=DTYPE)
        cell = np.zeros(self.n_outputs, dtype=DTYPE)
        out = np.empty((n_steps, self.n_outputs), dtype=DTYPE)
        for t in range(n_steps):
            i_t = self.inner_activation(xi[t] + self.i.U @ h)
            f_t = self.inner_activation(xf[t] + self.f.U @ h)
            o_t = self.inner_activation(xo[t] + self.o.U @ h)
            cell = f_t * cell + i_t * self.activation(xc[t] + self.c.U @ h)
            h = o_t * self.activation(cell)
            out[t] = h
        return out


class GRULayer:
    """Gated recurrent unit returning the hidden state per step."""

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        layer_index: Optional[int] = None,
    ):
        gates = _build_gates(n_inputs, config, ("z", "r", "h"), layer_index)
        self.z, self.r, self.h = gates["z"], gates["r"], gates["h"]
        self.activation = ActivationRegistry.get(config.activation)
        self.inner_activation = ActivationRegistry.get(config.inner_activation)
        self.n_inputs = n_inputs
        self.n_outputs = self.z.n_outputs

    def scan(self, x: np.ndarray) -> np.ndarray:
        n_steps = x.shape[0]
        xz, xr, xh = self.z.project(x), self.r.project(x), self.h.project(x)
        h = np.zeros(self.n_outputs, dtype=DTYPE)
        out = np.empty((n_steps, self.n_outputs), dtype=DTYPE)
        for t in range(n_steps):
            z_t = self.inner_activation(xz[t] + self.z.U @ h)
            r_t = self.inner_activation(xr[t] + self.r.U @ h)
            candidate = self.activation(xh[t] + self.h.U @ (r_t * h))
            h = z_t * h + (1.0 - z_t) * candidate
            out[t] = h
        return out


class EmbeddingLayer:
    """
    Replace integer-valued input columns with embedding vectors.

    The remaining columns keep their order; embeddings are appended
    after them in declaration order.
    """

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        layer_index: Optional[int] = None,
    ):
        if not config.embedding:
            raise ConfigurationError(
                "embedding layer declares no embeddings", layer_index=layer_index
            )
        indices = [e.index for e in config.embedding]
        if len(set(indices)) != len(indices) or not all(
            0 <= i < n_inputs for i in indices
        ):
            raise ConfigurationError(
                f"embedding columns {indices} invalid for input width {n_inputs}",
                layer_index=layer_index,
            )
        self.indices = tuple(indices)
        self.tables = tuple(
            weight_matrix(e.weights, e.n_out, "embedding weights", layer_index)
            for e in config.embedding
        )
        self.kept = freeze(
            np.array([i for i in range(n_inputs) if i not in indices], dtype=np.intp)
        )
        self.n_inputs = n_inputs
        self.n_outputs = len(self.kept) + sum(t.shape[1] for t in self.tables)

    def scan(self, x: np.ndarray) -> np.ndarray:
        parts = [x[:, self.kept]]
        for column, table in zip(self.indices, self.tables):
            categories = np.rint(x[:, column]).astype(np.intp)
            if np.any((categories < 0) | (categories >= table.shape[0])):
                raise EvaluationError(
                    f"embedding category out of range [0, {table.shape[0]}) "
                    f"in column {column}"
                )
            parts.append(table[categories])
        return np.concatenate(parts, axis=1)
