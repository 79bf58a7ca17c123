# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
lwgraph: Lightweight Neural Network Graph Evaluation

Evaluates pre-trained feed-forward and recurrent networks with frozen
weights, using numpy only.

Example:
    import lwgraph

    graph = lwgraph.LightweightGraph.from_json(open("model.json"))
    graph.evaluate({"jet": {"pt": 40.0, "eta": 0.3}})
"""

__version__ = "0.1.0"

from .errors import (
    LwGraphError,
    ConfigurationError,
    EvaluationError,
)

from .core import (
    Graph,
    GraphConfig,
    NodeConfig,
    NodeType,
    StackConfig,
    LayerConfig,
    InputNodeConfig,
    InputVariable,
    OutputNodeConfig,
    Source,
    VectorSource,
    DummySource,
    Result,
    Status,
    StatusCode,
)

from .preprocess import InputPreprocessor, InputVectorPreprocessor
from .lightweight import EvaluationConfig, LightweightGraph
from .parse import parse_json_graph

from .observability import set_verbosity, Verbosity

__all__ = [
    "__version__",
    # Errors
    "LwGraphError",
    "ConfigurationError",
    "EvaluationError",
    # Core
    "Graph",
    "GraphConfig",
    "NodeConfig",
    "NodeType",
    "StackConfig",
    "LayerConfig",
    "InputNodeConfig",
    "InputVariable",
    "OutputNodeConfig",
    "Source",
    "VectorSource",
    "DummySource",
    "Result",
    "Status",
    "StatusCode",
    # Named graphs
    "InputPreprocessor",
    "InputVectorPreprocessor",
    "EvaluationConfig",
    "LightweightGraph",
    "parse_json_graph",
    # Observability
    "set_verbosity",
    "Verbosity",
]
