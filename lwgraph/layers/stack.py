# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Layer Stacks

A stack chains layers so that each layer's output width is the next
layer's input width. The graph only relies on the stack contract:

- Stack: vector -> vector via `compute`
- RecurrentStack: matrix -> matrix via `scan`, keeping the number of
  rows (time steps)

Both report `n_inputs` and `n_outputs`.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from lwgraph.core.config import Architecture, LayerConfig
from lwgraph.errors import ConfigurationError, format_width_mismatch

from .core import DenseLayer, HighwayLayer, MaxoutLayer, NormalizationLayer
from .recurrent import EmbeddingLayer, GRULayer, LSTMLayer

logger = logging.getLogger("lwgraph.layers.stack")

_PLAIN_LAYERS = {
    Architecture.DENSE: DenseLayer,
    Architecture.NORMALIZATION: NormalizationLayer,
    Architecture.HIGHWAY: HighwayLayer,
    Architecture.MAXOUT: MaxoutLayer,
}

_RECURRENT_LAYERS = {
    Architecture.LSTM: LSTMLayer,
    Architecture.GRU: GRULayer,
    Architecture.EMBEDDING: EmbeddingLayer,
}


def _build_layers(
    n_inputs: int,
    layers: Sequence[LayerConfig],
    factories: dict,
    kind: str,
    layer_index: Optional[int],
) -> list:
    if n_inputs <= 0:
        raise ConfigurationError(
            f"{kind} input width must be positive, got {n_inputs}",
            layer_index=layer_index,
        )
    built = []
    width = n_inputs
    for config in layers:
        factory = factories.get(config.architecture)
        if factory is None:
            raise ConfigurationError(
                f"architecture '{config.architecture.value}' cannot be used "
                f"in a {kind}",
                layer_index=layer_index,
                suggestions=[
                    "Supported: "
                    + ", ".join(a.value for a in factories)
                ],
            )
        layer = factory(width, config, layer_index)
        built.append(layer)
        width = layer.n_outputs
    logger.debug(
        "built %s %s with %d layers: %d -> %d",
        kind,
        layer_index,
        len(built),
        n_inputs,
        width,
    )
    return built


class Stack:
    """
    Plain feed-forward stack.

    Example:
        stack = Stack(3, [LayerConfig(weights=list(np.eye(3).flat))])
        stack.compute(np.array([1.0, 2.0, 3.0]))
    """

    def __init__(
        self,
        n_inputs: int,
        layers: Sequence[LayerConfig],
        layer_index: Optional[int] = None,
    ):
        self._layers = tuple(
            _build_layers(n_inputs, layers, _PLAIN_LAYERS, "stack", layer_index)
        )
        self._n_inputs = n_inputs
        self._n_outputs = self._layers[-1].n_outputs if self._layers else n_inputs

    @property
    def n_inputs(self) -> int:
        return self._n_inputs

    @property
    def n_outputs(self) -> int:
        return self._n_outputs

    def compute(self, x: np.ndarray) -> np.ndarray:
        if x.shape != (self._n_inputs,):
            raise format_width_mismatch(self._n_inputs, x.shape[-1], "stack input")
        for layer in self._layers:
            x = layer.compute(x)
        return x

    def __repr__(self) -> str:
        return f"Stack({self._n_inputs} -> {self._n_outputs}, layers={len(self._layers)})"


class RecurrentStack:
    """
    Sequence stack; dense and normalization layers are applied to each
    time step independently.
    """

    _FACTORIES = {
        **_RECURRENT_LAYERS,
        Architecture.DENSE: DenseLayer,
        Architecture.NORMALIZATION: NormalizationLayer,
    }

    def __init__(
        self,
        n_inputs: int,
        layers: Sequence[LayerConfig],
        layer_index: Optional[int] = None,
    ):
        self._layers = tuple(
            _build_layers(
                n_inputs, layers, self._FACTORIES, "recurrent stack", layer_index
            )
        )
        self._n_inputs = n_inputs
        self._n_outputs = self._layers[-1].n_outputs if self._layers else n_inputs

    @property
    def n_inputs(self) -> int:
        return self._n_inputs

    @property
    def n_outputs(self) -> int:
        return self._n_outputs

    def scan(self, x: np.ndarray) -> np.ndarray:
        if x.ndim != 2 or x.shape[1] != self._n_inputs:
            raise format_width_mismatch(
                self._n_inputs, x.shape[-1], "recurrent stack input"
            )
        for layer in self._layers:
            if hasattr(layer, "scan"):
                x = layer.scan(x)
            else:
                x = layer.compute(x)
        return x

    def __repr__(self) -> str:
        return (
            f"RecurrentStack({self._n_inputs} -> {self._n_outputs}, "
            f"layers={len(self._layers)})"
        )
