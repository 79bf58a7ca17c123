# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Pytest configuration for lwgraph tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to sys.path so we can import lwgraph
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from lwgraph.core import (  # noqa: E402
    GraphConfig,
    InputNodeConfig,
    InputVariable,
    LayerConfig,
    NodeConfig,
    NodeType,
    OutputNodeConfig,
    StackConfig,
)
from lwgraph.observability import GraphLogger  # noqa: E402

# Skip test modules that require optional dependencies not installed
collect_ignore = []

try:
    import hypothesis  # noqa: F401
except ImportError:
    collect_ignore.append("test_property_based.py")


def identity_stack(n: int) -> StackConfig:
    """Single dense layer with identity weights."""
    return StackConfig([LayerConfig(weights=list(np.eye(n).flat))])


def variables(*names: str) -> list[InputVariable]:
    return [InputVariable(name) for name in names]


@pytest.fixture(autouse=True)
def reset_logger():
    """Each test starts with a fresh logger singleton."""
    GraphLogger.reset()
    yield
    GraphLogger.reset()


@pytest.fixture
def single_output_config() -> GraphConfig:
    """InputNode(slot=0, width=3) followed by an identity transform."""
    return GraphConfig(
        inputs=[InputNodeConfig("x", variables("f0", "f1", "f2"))],
        nodes=[
            NodeConfig(NodeType.INPUT, index=0, size=3),
            NodeConfig(NodeType.TRANSFORM, sources=[0], index=0),
        ],
        layers=[identity_stack(3)],
        outputs={"out": OutputNodeConfig(1, ["out0", "out1", "out2"])},
    )


@pytest.fixture
def two_output_config() -> GraphConfig:
    """
    Two outputs over a shared trunk.

    x -> identity -> dense(W=[[1,0,1],[0,2,0]], b=[0.5,-1])   node 2, "a"
    y                                                        node 3
    concat(node 2, node 3)                                   node 4, "b"
    """
    dense = LayerConfig(weights=[1, 0, 1, 0, 2, 0], bias=[0.5, -1.0])
    return GraphConfig(
        inputs=[
            InputNodeConfig("x", variables("f0", "f1", "f2")),
            InputNodeConfig("y", variables("g0", "g1")),
        ],
        nodes=[
            NodeConfig(NodeType.INPUT, index=0, size=3),
            NodeConfig(NodeType.TRANSFORM, sources=[0], index=0),
            NodeConfig(NodeType.TRANSFORM, sources=[1], index=1),
            NodeConfig(NodeType.INPUT, index=1, size=2),
            NodeConfig(NodeType.CONCATENATE, sources=[2, 3]),
        ],
        layers=[identity_stack(3), StackConfig([dense])],
        outputs={
            "a": OutputNodeConfig(2, ["a0", "a1"]),
            "b": OutputNodeConfig(4, ["b0", "b1", "b2", "b3"]),
        },
    )


@pytest.fixture
def sequence_config() -> GraphConfig:
    """
    Sequence input through an identity recurrent stack, joined with a
    plain input.

    node 0: input sequence "trk" (2 variables)
    node 1: recurrent transform (identity), final row used as vector
    node 2: input "jet" (1 variable)
    node 3: concat(node 1, node 2)
    """
    return GraphConfig(
        inputs=[InputNodeConfig("jet", variables("pt"))],
        input_sequences=[InputNodeConfig("trk", variables("d0", "z0"))],
        nodes=[
            NodeConfig(NodeType.INPUT_SEQUENCE, index=0, size=2),
            NodeConfig(NodeType.RECURRENT_TRANSFORM, sources=[0], index=0),
            NodeConfig(NodeType.INPUT, index=0, size=1),
            NodeConfig(NodeType.CONCATENATE, sources=[1, 2]),
        ],
        layers=[StackConfig([])],
        outputs={"out": OutputNodeConfig(3, ["d0", "z0", "pt"])},
    )
