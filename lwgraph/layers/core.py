# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Feed-Forward Layers

- DenseLayer: Y = act(X W^T + b)
- NormalizationLayer: Y = X * W + b (folded batch normalization)
- HighwayLayer: Y = t * act(X W_h^T + b_h) + (1 - t) * X
- MaxoutLayer: elementwise max over several dense projections

Every layer works on a vector or, row by row, on a matrix whose rows
are time steps. Weights are float64 and read-only once built.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from lwgraph.core.config import Activation, ActivationConfig, LayerConfig
from lwgraph.core.types import DTYPE, freeze
from lwgraph.errors import ConfigurationError

from .activations import ActivationRegistry


def weight_matrix(
    values: Sequence[float],
    n_in: int,
    what: str = "weights",
    layer_index: Optional[int] = None,
) -> np.ndarray:
    """
    Reshape a flat row-major weight list into an (n_out, n_in) matrix.

    Raises:
        ConfigurationError: If the list length is not a multiple of n_in.
    """
    if n_in <= 0 or len(values) == 0 or len(values) % n_in != 0:
        raise ConfigurationError(
            f"{what} has {len(values)} entries, not a positive multiple "
            f"of the input width {n_in}",
            layer_index=layer_index,
        )
    arr = np.array(values, dtype=DTYPE).reshape(len(values) // n_in, n_in)
    return freeze(arr)


def bias_vector(
    values: Sequence[float],
    n_out: int,
    what: str = "bias",
    layer_index: Optional[int] = None,
) -> np.ndarray:
    """Bias of length n_out; an empty list means zeros."""
    if len(values) == 0:
        return freeze(np.zeros(n_out, dtype=DTYPE))
    if len(values) != n_out:
        raise ConfigurationError(
            f"{what} has {len(values)} entries, expected {n_out}",
            layer_index=layer_index,
        )
    return freeze(np.array(values, dtype=DTYPE))


class DenseLayer:
    """Affine transform followed by an activation."""

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        layer_index: Optional[int] = None,
    ):
        self.W = weight_matrix(config.weights, n_inputs, layer_index=layer_index)
        self.b = bias_vector(config.bias, self.W.shape[0], layer_index=layer_index)
        self.activation = ActivationRegistry.get(config.activation)
        self.n_inputs = n_inputs
        self.n_outputs = self.W.shape[0]

    def compute(self, x: np.ndarray) -> np.ndarray:
        return self.activation(x @ self.W.T + self.b)

    def __repr__(self) -> str:
        return f"DenseLayer({self.n_inputs} -> {self.n_outputs})"


class NormalizationLayer:
    """Per-feature scale and offset."""

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        layer_index: Optional[int] = None,
    ):
        if len(config.weights) != n_inputs:
            raise ConfigurationError(
                f"normalization has {len(config.weights)} weights, "
                f"expected {n_inputs}",
                layer_index=layer_index,
            )
        self.W = freeze(np.array(config.weights, dtype=DTYPE))
        self.b = bias_vector(config.bias, n_inputs, layer_index=layer_index)
        self.n_inputs = n_inputs
        self.n_outputs = n_inputs

    def compute(self, x: np.ndarray) -> np.ndarray:
        return x * self.W + self.b


def _component(
    config: LayerConfig,
    name: str,
    layer_index: Optional[int],
) -> LayerConfig:
    if name not in config.components:
        raise ConfigurationError(
            f"{config.architecture.value} layer is missing component '{name}'",
            layer_index=layer_index,
        )
    return config.components[name]


class HighwayLayer:
    """
    Highway layer with transform gate `t` and candidate `carry`.

    The candidate uses the layer activation, the gate uses the inner
    activation (sigmoid by default).
    """

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        layer_index: Optional[int] = None,
    ):
        gate = _component(config, "t", layer_index)
        carry = _component(config, "carry", layer_index)
        self.W_t = weight_matrix(gate.weights, n_inputs, "t weights", layer_index)
        self.b_t = bias_vector(gate.bias, n_inputs, "t bias", layer_index)
        self.W_h = weight_matrix(carry.weights, n_inputs, "carry weights", layer_index)
        self.b_h = bias_vector(carry.bias, n_inputs, "carry bias", layer_index)
        if self.W_t.shape[0] != n_inputs or self.W_h.shape[0] != n_inputs:
            raise ConfigurationError(
                "highway layer must preserve its input width",
                layer_index=layer_index,
            )
        self.activation = ActivationRegistry.get(config.activation)
        self.gate_activation = ActivationRegistry.get(config.inner_activation)
        self.n_inputs = n_inputs
        self.n_outputs = n_inputs

    def compute(self, x: np.ndarray) -> np.ndarray:
        t = self.gate_activation(x @ self.W_t.T + self.b_t)
        h = self.activation(x @ self.W_h.T + self.b_h)
        return t * h + (1.0 - t) * x


class MaxoutLayer:
    """Elementwise maximum over linear projections."""

    def __init__(
        self,
        n_inputs: int,
        config: LayerConfig,
        layer_index: Optional[int] = None,
    ):
        if not config.sublayers:
            raise ConfigurationError(
                "maxout layer needs at least one sublayer",
                layer_index=layer_index,
            )
        linear = ActivationConfig(Activation.LINEAR)
        self.projections = tuple(
            DenseLayer(
                n_inputs,
                LayerConfig(weights=sub.weights, bias=sub.bias, activation=linear),
                layer_index,
            )
            for sub in config.sublayers
        )
        widths = {p.n_outputs for p in self.projections}
        if len(widths) != 1:
            raise ConfigurationError(
                f"maxout sublayers disagree on output width: {sorted(widths)}",
                layer_index=layer_index,
            )
        self.activation = ActivationRegistry.get(config.activation)
        self.n_inputs = n_inputs
        self.n_outputs = widths.pop()

    def compute(self, x: np.ndarray) -> np.ndarray:
        stacked = np.stack([p.compute(x) for p in self.projections])
        return self.activation(np.max(stacked, axis=0))
