# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Graph

Owns every node and layer stack of a network and evaluates any node
against a caller-supplied source.

Construction builds nodes in the declared order. A node may only
reference nodes declared before it, which makes the declared order a
topological order and rules out cycles. Stacks are built when first
referenced, taking their input width from the referencing node's
source.

Evaluation is a recursive post-order walk from the requested node.
With `memoize=True` each node is evaluated at most once per call.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

import numpy as np

from lwgraph.errors import ConfigurationError, EvaluationError, LwGraphError
from lwgraph.errors import format_width_mismatch
from lwgraph.layers import RecurrentStack, Stack

from .config import NodeConfig, NodeType, StackConfig
from .node import (
    ConcatenateNode,
    InputNode,
    InputSequenceNode,
    Node,
    RecurrentTransformNode,
    TransformNode,
)
from .source import Source
from .types import Matrix, Result, Vector

logger = logging.getLogger("lwgraph.core.graph")

AnyStack = Union[Stack, RecurrentStack]

_VECTOR = "vector"
_SEQUENCE = "sequence"


class Graph:
    """
    Immutable computation graph.

    Example:
        nodes = [
            NodeConfig(NodeType.INPUT, index=0, size=3),
            NodeConfig(NodeType.TRANSFORM, sources=[0], index=0),
        ]
        layers = [StackConfig([LayerConfig(weights=list(np.eye(3).flat))])]
        graph = Graph(nodes, layers)
        graph.compute(VectorSource([np.array([1.0, 2.0, 3.0])]))
    """

    def __init__(
        self,
        nodes: Sequence[NodeConfig] = (),
        layers: Sequence[StackConfig] = (),
    ):
        built: list[Node] = []
        stacks: dict[int, AnyStack] = {}
        for index, config in enumerate(nodes):
            built.append(self._build_node(index, config, built, layers, stacks))

        self._nodes: tuple[Node, ...] = tuple(built)
        self._stacks: tuple[Optional[AnyStack], ...] = tuple(
            stacks.get(i) for i in range(len(layers))
        )
        unused = [i for i, s in enumerate(self._stacks) if s is None]
        if unused:
            logger.debug("stacks %s are never referenced", unused)
        logger.debug(
            "built graph with %d nodes and %d stacks",
            len(self._nodes),
            len(stacks),
        )

    @classmethod
    def build(
        cls,
        nodes: Sequence[NodeConfig],
        layers: Sequence[StackConfig],
    ) -> Result["Graph"]:
        """Build a graph, returning a Result instead of raising."""
        try:
            return Result.success(cls(nodes, layers))
        except ConfigurationError as e:
            return Result.failure(e)

    # ------------------------------------------------------------------
    # Construction

    def _build_node(
        self,
        index: int,
        config: NodeConfig,
        built: list[Node],
        layers: Sequence[StackConfig],
        stacks: dict[int, AnyStack],
    ) -> Node:
        kind = config.type

        if kind in (NodeType.INPUT, NodeType.INPUT_SEQUENCE):
            if config.index < 0:
                raise ConfigurationError(
                    f"input slot must be non-negative, got {config.index}",
                    node_index=index,
                )
            if config.size <= 0:
                raise ConfigurationError(
                    f"input width must be positive, got {config.size}",
                    node_index=index,
                )
            if kind == NodeType.INPUT:
                return InputNode(slot=config.index, width=config.size)
            return InputSequenceNode(slot=config.index, width=config.size)

        if kind == NodeType.CONCATENATE:
            if not config.sources:
                raise ConfigurationError(
                    "concatenate node needs at least one source", node_index=index
                )
            sources = tuple(
                self._resolve(index, ref, built, _VECTOR) for ref in config.sources
            )
            width = sum(built[ref].width for ref in sources)
            return ConcatenateNode(sources=sources, width=width)

        if kind in (NodeType.TRANSFORM, NodeType.RECURRENT_TRANSFORM):
            if len(config.sources) != 1:
                raise ConfigurationError(
                    f"{kind.value} node needs exactly one source, "
                    f"got {len(config.sources)}",
                    node_index=index,
                )
            if kind == NodeType.TRANSFORM:
                source = self._resolve(index, config.sources[0], built, _VECTOR)
                stack = self._stack(
                    index, config.index, layers, stacks, Stack, built[source].width
                )
                return TransformNode(
                    stack=config.index, source=source, width=stack.n_outputs
                )
            source = self._resolve(index, config.sources[0], built, _SEQUENCE)
            stack = self._stack(
                index, config.index, layers, stacks, RecurrentStack, built[source].width
            )
            return RecurrentTransformNode(
                stack=config.index, source=source, width=stack.n_outputs
            )

        raise ConfigurationError(f"unknown node type {kind!r}", node_index=index)

    @staticmethod
    def _resolve(index: int, ref: int, built: list[Node], capability: str) -> int:
        """Check that `ref` names an earlier node with `capability`."""
        if not 0 <= ref < index:
            raise ConfigurationError(
                f"node {index} references node {ref}, only nodes "
                f"0..{index - 1} are built at this point",
                node_index=index,
            )
        target = built[ref]
        has = (
            target.produces_vector
            if capability == _VECTOR
            else target.produces_sequence
        )
        if not has:
            raise ConfigurationError(
                f"node {index} needs a {capability} from node {ref}, "
                f"which is a {target.kind.value} node",
                node_index=index,
            )
        return ref

    @staticmethod
    def _stack(
        index: int,
        layer_index: int,
        layers: Sequence[StackConfig],
        stacks: dict[int, AnyStack],
        stack_type: type,
        n_inputs: int,
    ) -> AnyStack:
        """Build stack `layer_index` on first use, reuse it afterwards."""
        if not 0 <= layer_index < len(layers):
            raise ConfigurationError(
                f"stack index {layer_index} out of range, "
                f"{len(layers)} stacks declared",
                node_index=index,
                layer_index=layer_index,
            )
        existing = stacks.get(layer_index)
        if existing is None:
            stack = stack_type(n_inputs, layers[layer_index].sublayers, layer_index)
            stacks[layer_index] = stack
            return stack
        if not isinstance(existing, stack_type):
            raise ConfigurationError(
                f"stack {layer_index} is already used as a "
                f"{type(existing).__name__}",
                node_index=index,
                layer_index=layer_index,
            )
        if existing.n_inputs != n_inputs:
            raise ConfigurationError(
                f"stack {layer_index} expects {existing.n_inputs} inputs, "
                f"node {index} supplies {n_inputs}",
                node_index=index,
                layer_index=layer_index,
            )
        return existing

    # ------------------------------------------------------------------
    # Evaluation

    def compute(
        self,
        source: Source,
        node_index: Optional[int] = None,
        *,
        memoize: bool = False,
    ) -> Vector:
        """
        Evaluate the vector produced by a node.

        Args:
            source: Input values for this call.
            node_index: Node to evaluate, the last declared node if None.
            memoize: Evaluate shared dependencies once per call.

        Raises:
            EvaluationError: On a bad index, a sequence-only node or a
                failed source access.
        """
        index = self._check_index(node_index)
        return self._compute(source, index, {} if memoize else None)

    def scan(
        self,
        source: Source,
        node_index: Optional[int] = None,
        *,
        memoize: bool = False,
    ) -> Matrix:
        """Evaluate the matrix (one row per time step) produced by a node."""
        index = self._check_index(node_index)
        return self._scan(source, index, {} if memoize else None)

    def try_compute(
        self,
        source: Source,
        node_index: Optional[int] = None,
        *,
        memoize: bool = False,
    ) -> Result[Vector]:
        """Like `compute`, returning a Result instead of raising."""
        try:
            return Result.success(self.compute(source, node_index, memoize=memoize))
        except LwGraphError as e:
            return Result.failure(e)

    def _check_index(self, node_index: Optional[int]) -> int:
        if node_index is None:
            if not self._nodes:
                raise EvaluationError("graph has no nodes to evaluate")
            return len(self._nodes) - 1
        if not 0 <= node_index < len(self._nodes):
            raise EvaluationError(
                f"node index {node_index} out of range, "
                f"graph has {len(self._nodes)} nodes",
                node_index=node_index,
            )
        return node_index

    def _compute(self, source: Source, index: int, cache: Optional[dict]) -> Vector:
        if cache is not None and (index, _VECTOR) in cache:
            return cache[(index, _VECTOR)]

        node = self._nodes[index]
        if isinstance(node, InputNode):
            value = source.vector_at(node.slot)
            if value.shape != (node.width,):
                raise format_width_mismatch(
                    node.width, value.shape[-1], "input vector", index
                )
        elif isinstance(node, TransformNode):
            value = self._stacks[node.stack].compute(
                self._compute(source, node.source, cache)
            )
        elif isinstance(node, ConcatenateNode):
            value = np.concatenate(
                [self._compute(source, ref, cache) for ref in node.sources]
            )
        elif isinstance(node, RecurrentTransformNode):
            sequence = self._scan(source, index, cache)
            if sequence.shape[0] == 0:
                raise EvaluationError(
                    "cannot take the final state of an empty sequence",
                    node_index=index,
                )
            value = sequence[-1]
        elif isinstance(node, InputSequenceNode):
            raise EvaluationError(
                "input sequence node does not produce a vector",
                node_index=index,
                suggestions=["Evaluate a recurrent transform of this sequence"],
            )
        else:
            raise TypeError(f"unhandled node type {type(node).__name__}")

        if cache is not None:
            cache[(index, _VECTOR)] = value
        return value

    def _scan(self, source: Source, index: int, cache: Optional[dict]) -> Matrix:
        if cache is not None and (index, _SEQUENCE) in cache:
            return cache[(index, _SEQUENCE)]

        node = self._nodes[index]
        if isinstance(node, InputSequenceNode):
            value = source.matrix_at(node.slot)
            if value.ndim != 2 or value.shape[1] != node.width:
                raise format_width_mismatch(
                    node.width, value.shape[-1], "input sequence", index
                )
        elif isinstance(node, RecurrentTransformNode):
            value = self._stacks[node.stack].scan(
                self._scan(source, node.source, cache)
            )
        elif isinstance(node, (InputNode, TransformNode, ConcatenateNode)):
            raise EvaluationError(
                f"{node.kind.value} node does not produce a sequence",
                node_index=index,
            )
        else:
            raise TypeError(f"unhandled node type {type(node).__name__}")

        if cache is not None:
            cache[(index, _SEQUENCE)] = value
        return value

    # ------------------------------------------------------------------
    # Introspection

    @property
    def n_nodes(self) -> int:
        return len(self._nodes)

    @property
    def output_index(self) -> Optional[int]:
        """Index of the implicit output, the last declared node."""
        return len(self._nodes) - 1 if self._nodes else None

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def width(self, index: int) -> int:
        """Output width of node `index`."""
        return self._nodes[index].width

    def stack(self, index: int) -> Optional[AnyStack]:
        """Stack `index`, or None if no node references it."""
        return self._stacks[index]

    def summary(self) -> str:
        lines = [
            "Graph",
            f"  Nodes: {len(self._nodes)}",
            f"  Stacks: {sum(s is not None for s in self._stacks)}",
        ]
        for i, node in enumerate(self._nodes):
            lines.append(f"    [{i}] {node.kind.value} width={node.width}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, stacks={len(self._stacks)})"
