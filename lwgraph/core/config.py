# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Model Description

Declarative, construction-time description of a network. These
dataclasses are produced by `lwgraph.parse` (or built by hand) and
consumed by `Graph` and `LightweightGraph`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class NodeType(Enum):
    """Node variants a description may declare."""

    INPUT = "input"
    TRANSFORM = "transform"
    CONCATENATE = "concatenate"
    INPUT_SEQUENCE = "input_sequence"
    RECURRENT_TRANSFORM = "recurrent_transform"


class Architecture(Enum):
    """Layer architectures understood by the layer stacks."""

    DENSE = "dense"
    NORMALIZATION = "normalization"
    HIGHWAY = "highway"
    MAXOUT = "maxout"
    LSTM = "lstm"
    GRU = "gru"
    EMBEDDING = "embedding"


class Activation(Enum):
    """Activation function names."""

    LINEAR = "linear"
    SIGMOID = "sigmoid"
    HARD_SIGMOID = "hard_sigmoid"
    RECTIFIED = "rectified"
    LEAKY_RELU = "leaky_relu"
    ELU = "elu"
    SWISH = "swish"
    TANH = "tanh"
    SOFTMAX = "softmax"
    ABS = "abs"


@dataclass(frozen=True)
class ActivationConfig:
    """Activation function plus its optional parameter."""

    function: Activation = Activation.LINEAR
    alpha: Optional[float] = None


@dataclass(frozen=True)
class EmbeddingConfig:
    """
    Embedding table for one integer-valued input column.

    `weights` holds `n_out` values per category, row-major.
    """

    index: int
    n_out: int
    weights: tuple[float, ...] = ()


@dataclass
class LayerConfig:
    """
    One layer of a stack.

    Weight lists are flat and row-major: a dense layer with `n_in`
    inputs and `n_out` outputs carries `n_out * n_in` weights. Gated
    layers (lstm, gru, highway) keep their per-gate parameters in
    `components`, keyed by gate name.
    """

    architecture: Architecture = Architecture.DENSE
    activation: ActivationConfig = field(default_factory=ActivationConfig)
    inner_activation: ActivationConfig = field(
        default_factory=lambda: ActivationConfig(Activation.SIGMOID)
    )
    weights: list[float] = field(default_factory=list)
    bias: list[float] = field(default_factory=list)
    U: list[float] = field(default_factory=list)
    components: dict[str, "LayerConfig"] = field(default_factory=dict)
    sublayers: list["LayerConfig"] = field(default_factory=list)
    embedding: list[EmbeddingConfig] = field(default_factory=list)


@dataclass
class StackConfig:
    """Ordered layers making up one plain or recurrent stack."""

    sublayers: list[LayerConfig] = field(default_factory=list)


@dataclass
class NodeConfig:
    """
    One node of the graph.

    Leaves (`input`, `input_sequence`) use `index` as the source slot
    and `size` as the declared width. Transforms use `sources[0]` as
    the referenced node and `index` as the stack. Concatenations use
    every entry of `sources`.
    """

    type: NodeType
    sources: list[int] = field(default_factory=list)
    index: int = -1
    size: int = 0


@dataclass(frozen=True)
class InputVariable:
    """A named raw variable and its scaling: (value + offset) * scale."""

    name: str
    offset: float = 0.0
    scale: float = 1.0


@dataclass
class InputNodeConfig:
    """A named graph input and its ordered variables."""

    name: str
    variables: list[InputVariable] = field(default_factory=list)


@dataclass
class OutputNodeConfig:
    """A named graph output: the node to evaluate and its labels."""

    node_index: int
    labels: list[str] = field(default_factory=list)


@dataclass
class GraphConfig:
    """Complete description of a named graph."""

    inputs: list[InputNodeConfig] = field(default_factory=list)
    input_sequences: list[InputNodeConfig] = field(default_factory=list)
    nodes: list[NodeConfig] = field(default_factory=list)
    layers: list[StackConfig] = field(default_factory=list)
    outputs: dict[str, OutputNodeConfig] = field(default_factory=dict)
