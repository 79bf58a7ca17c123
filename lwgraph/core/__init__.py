# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""lwgraph Core Module"""

from .types import (
    DTYPE,
    Matrix,
    Result,
    Status,
    StatusCode,
    Vector,
)
from .config import (
    Activation,
    ActivationConfig,
    Architecture,
    EmbeddingConfig,
    GraphConfig,
    InputNodeConfig,
    InputVariable,
    LayerConfig,
    NodeConfig,
    NodeType,
    OutputNodeConfig,
    StackConfig,
)
from .source import DummySource, Source, VectorSource
from .node import (
    ConcatenateNode,
    InputNode,
    InputSequenceNode,
    Node,
    RecurrentTransformNode,
    TransformNode,
)
from .graph import Graph

__all__ = [
    "DTYPE",
    "Matrix",
    "Result",
    "Status",
    "StatusCode",
    "Vector",
    "Activation",
    "ActivationConfig",
    "Architecture",
    "EmbeddingConfig",
    "GraphConfig",
    "InputNodeConfig",
    "InputVariable",
    "LayerConfig",
    "NodeConfig",
    "NodeType",
    "OutputNodeConfig",
    "StackConfig",
    "DummySource",
    "Source",
    "VectorSource",
    "ConcatenateNode",
    "InputNode",
    "InputSequenceNode",
    "Node",
    "RecurrentTransformNode",
    "TransformNode",
    "Graph",
]
