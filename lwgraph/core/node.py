# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Graph Nodes

The closed set of node variants a Graph is made of. Nodes are frozen
and hold no values; every reference to another node or to a stack is
an index into the owning Graph. Evaluation lives in `Graph`.

Capabilities:
- vector-producing: InputNode, TransformNode, ConcatenateNode,
  RecurrentTransformNode
- sequence-producing: InputSequenceNode, RecurrentTransformNode
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from .config import NodeType


@dataclass(frozen=True)
class InputNode:
    """Reads the vector at `slot` of the source."""

    slot: int
    width: int

    kind: ClassVar[NodeType] = NodeType.INPUT
    produces_vector: ClassVar[bool] = True
    produces_sequence: ClassVar[bool] = False

    def references(self) -> tuple[int, ...]:
        return ()


@dataclass(frozen=True)
class TransformNode:
    """Applies plain stack `stack` to the vector of node `source`."""

    stack: int
    source: int
    width: int

    kind: ClassVar[NodeType] = NodeType.TRANSFORM
    produces_vector: ClassVar[bool] = True
    produces_sequence: ClassVar[bool] = False

    def references(self) -> tuple[int, ...]:
        return (self.source,)


@dataclass(frozen=True)
class ConcatenateNode:
    """Concatenates the vectors of `sources` in order."""

    sources: tuple[int, ...]
    width: int

    kind: ClassVar[NodeType] = NodeType.CONCATENATE
    produces_vector: ClassVar[bool] = True
    produces_sequence: ClassVar[bool] = False

    def references(self) -> tuple[int, ...]:
        return self.sources


@dataclass(frozen=True)
class InputSequenceNode:
    """Reads the matrix at `slot` of the source."""

    slot: int
    width: int

    kind: ClassVar[NodeType] = NodeType.INPUT_SEQUENCE
    produces_vector: ClassVar[bool] = False
    produces_sequence: ClassVar[bool] = True

    def references(self) -> tuple[int, ...]:
        return ()


@dataclass(frozen=True)
class RecurrentTransformNode:
    """
    Applies recurrent stack `stack` to the matrix of node `source`.

    Scanning yields one row per time step; computing yields the last
    row, the state after the final time step.
    """

    stack: int
    source: int
    width: int

    kind: ClassVar[NodeType] = NodeType.RECURRENT_TRANSFORM
    produces_vector: ClassVar[bool] = True
    produces_sequence: ClassVar[bool] = True

    def references(self) -> tuple[int, ...]:
        return (self.source,)


Node = Union[
    InputNode,
    TransformNode,
    ConcatenateNode,
    InputSequenceNode,
    RecurrentTransformNode,
]
