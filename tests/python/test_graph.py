# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for Graph construction and evaluation

Validates:
- Reference checks at construction (no forward or self references)
- Stack sharing and width inference
- Vector and sequence evaluation
- Memoized evaluation
"""

import numpy as np
import pytest

from conftest import identity_stack
from lwgraph.core import (
    Activation,
    ActivationConfig,
    ConcatenateNode,
    DummySource,
    Graph,
    InputNode,
    LayerConfig,
    NodeConfig,
    NodeType,
    RecurrentTransformNode,
    StackConfig,
    StatusCode,
    TransformNode,
    VectorSource,
)
from lwgraph.core.source import Source
from lwgraph.errors import ConfigurationError, EvaluationError


def input_node(slot=0, width=3):
    return NodeConfig(NodeType.INPUT, index=slot, size=width)


def sequence_node(slot=0, width=2):
    return NodeConfig(NodeType.INPUT_SEQUENCE, index=slot, size=width)


def transform(source, stack=0):
    return NodeConfig(NodeType.TRANSFORM, sources=[source], index=stack)


def recurrent(source, stack=0):
    return NodeConfig(NodeType.RECURRENT_TRANSFORM, sources=[source], index=stack)


def concat(*sources):
    return NodeConfig(NodeType.CONCATENATE, sources=list(sources))


class CountingSource(Source):
    """Records how often each slot is read."""

    def __init__(self, vectors, matrices=()):
        self._inner = VectorSource(vectors, matrices)
        self.vector_reads = 0
        self.matrix_reads = 0

    def vector_at(self, slot):
        self.vector_reads += 1
        return self._inner.vector_at(slot)

    def matrix_at(self, slot):
        self.matrix_reads += 1
        return self._inner.matrix_at(slot)


class TestConstruction:
    """Construction-time validation."""

    def test_empty_graph(self):
        graph = Graph()
        assert len(graph) == 0
        assert graph.output_index is None

    def test_node_kinds(self):
        graph = Graph(
            [input_node(), transform(0), concat(0, 1)],
            [identity_stack(3)],
        )
        assert isinstance(graph.node(0), InputNode)
        assert isinstance(graph.node(1), TransformNode)
        assert isinstance(graph.node(2), ConcatenateNode)
        assert graph.node(2).references() == (0, 1)

    def test_forward_reference_rejected(self):
        """A node may not reference a node declared after it."""
        with pytest.raises(ConfigurationError) as info:
            Graph([transform(1), input_node()], [identity_stack(3)])
        assert info.value.node_index == 0

    def test_self_reference_rejected(self):
        with pytest.raises(ConfigurationError):
            Graph([input_node(), transform(1)], [identity_stack(3)])

    def test_concatenate_forward_reference_rejected(self):
        with pytest.raises(ConfigurationError):
            Graph([input_node(), concat(0, 2), input_node(1)])

    def test_negative_reference_rejected(self):
        with pytest.raises(ConfigurationError):
            Graph([input_node(), concat(-1)])

    def test_stack_index_out_of_range(self):
        with pytest.raises(ConfigurationError) as info:
            Graph([input_node(), transform(0, stack=2)], [identity_stack(3)])
        assert info.value.layer_index == 2

    def test_empty_concatenate_rejected(self):
        with pytest.raises(ConfigurationError):
            Graph([input_node(), concat()])

    def test_transform_needs_one_source(self):
        bad = NodeConfig(NodeType.TRANSFORM, sources=[0, 0], index=0)
        with pytest.raises(ConfigurationError):
            Graph([input_node(), bad], [identity_stack(3)])

    def test_zero_width_input_rejected(self):
        with pytest.raises(ConfigurationError):
            Graph([input_node(width=0)])

    def test_negative_slot_rejected(self):
        with pytest.raises(ConfigurationError):
            Graph([input_node(slot=-1)])

    def test_transform_of_sequence_rejected(self):
        with pytest.raises(ConfigurationError, match="needs a vector"):
            Graph([sequence_node(), transform(0)], [identity_stack(2)])

    def test_recurrent_of_vector_rejected(self):
        with pytest.raises(ConfigurationError, match="needs a sequence"):
            Graph([input_node(), recurrent(0)], [StackConfig([])])

    def test_concatenate_of_sequence_rejected(self):
        with pytest.raises(ConfigurationError):
            Graph([sequence_node(), concat(0)])

    def test_stack_width_mismatch(self):
        """Stack weights must fit the source width."""
        with pytest.raises(ConfigurationError):
            Graph([input_node(width=4), transform(0)], [identity_stack(3)])

    def test_shared_stack(self):
        graph = Graph(
            [input_node(0), input_node(1), transform(0), transform(1)],
            [identity_stack(3)],
        )
        assert graph.width(2) == graph.width(3) == 3
        assert graph.stack(0) is not None

    def test_shared_stack_width_conflict(self):
        with pytest.raises(ConfigurationError, match="expects 3 inputs"):
            Graph(
                [input_node(0, 3), input_node(1, 2), transform(0), transform(1)],
                [StackConfig([])],
            )

    def test_stack_used_as_plain_and_recurrent(self):
        with pytest.raises(ConfigurationError, match="already used"):
            Graph(
                [input_node(0, 2), sequence_node(0, 2), transform(0), recurrent(1)],
                [StackConfig([])],
            )

    def test_unreferenced_stack_is_not_built(self):
        graph = Graph([input_node()], [identity_stack(5)])
        assert graph.stack(0) is None

    def test_concatenate_width(self):
        graph = Graph([input_node(0, 3), input_node(1, 2), concat(0, 1, 0)])
        assert graph.width(2) == 8

    def test_transform_width_from_stack(self):
        dense = LayerConfig(weights=[1.0] * 6)
        graph = Graph([input_node(width=3), transform(0)], [StackConfig([dense])])
        assert graph.width(1) == 2

    def test_build_result(self):
        result = Graph.build([transform(0)], [identity_stack(3)])
        assert not result.ok()
        assert result.status.code == StatusCode.ConfigurationError
        assert Graph.build([input_node()], []).ok()


class TestCompute:
    """Vector evaluation."""

    def test_identity_transform(self):
        graph = Graph([input_node(), transform(0)], [identity_stack(3)])
        source = VectorSource([np.array([1.0, 2.0, 3.0])])
        np.testing.assert_array_equal(graph.compute(source), [1.0, 2.0, 3.0])

    def test_default_is_last_node(self):
        graph = Graph([input_node(0, 1), input_node(1, 2)])
        source = VectorSource([[1.0], [2.0, 3.0]])
        np.testing.assert_array_equal(graph.compute(source), [2.0, 3.0])
        np.testing.assert_array_equal(graph.compute(source, 0), [1.0])

    def test_concatenate_order(self):
        graph = Graph([input_node(0, 2), input_node(1, 1), concat(1, 0)])
        source = VectorSource([[1.0, 2.0], [9.0]])
        np.testing.assert_array_equal(graph.compute(source), [9.0, 1.0, 2.0])

    def test_dense_with_activation(self):
        dense = LayerConfig(
            weights=[1.0, -1.0],
            bias=[0.5],
            activation=ActivationConfig(Activation.RECTIFIED),
        )
        graph = Graph([input_node(width=2), transform(0)], [StackConfig([dense])])
        np.testing.assert_allclose(graph.compute(VectorSource([[3.0, 1.0]])), [2.5])
        np.testing.assert_allclose(graph.compute(VectorSource([[1.0, 3.0]])), [0.0])

    def test_empty_graph_compute(self):
        with pytest.raises(EvaluationError):
            Graph().compute(VectorSource([]))

    def test_index_out_of_range(self):
        graph = Graph([input_node()])
        with pytest.raises(EvaluationError, match="out of range"):
            graph.compute(VectorSource([np.zeros(3)]), 1)

    def test_missing_slot(self):
        graph = Graph([input_node(0), input_node(1)])
        with pytest.raises(EvaluationError):
            graph.compute(VectorSource([np.zeros(3)]))

    def test_source_width_mismatch(self):
        graph = Graph([input_node(width=3)])
        with pytest.raises(EvaluationError, match="width mismatch"):
            graph.compute(VectorSource([np.zeros(2)]))

    def test_row_matrix_input_rejected(self):
        graph = Graph([input_node(width=3)])
        with pytest.raises(EvaluationError):
            graph.compute(VectorSource([np.ones((1, 3))]))

    def test_compute_sequence_node_fails(self):
        graph = Graph([sequence_node()])
        with pytest.raises(EvaluationError, match="does not produce a vector"):
            graph.compute(VectorSource([], [np.zeros((2, 2))]))

    def test_deterministic(self):
        graph = Graph([input_node(), transform(0)], [identity_stack(3)])
        source = VectorSource([np.array([0.1, 0.2, 0.3])])
        np.testing.assert_array_equal(graph.compute(source), graph.compute(source))

    def test_try_compute(self):
        graph = Graph([input_node()])
        assert graph.try_compute(VectorSource([np.zeros(3)])).ok()
        result = graph.try_compute(VectorSource([]))
        assert result.status.code == StatusCode.EvaluationError


class TestMemoization:
    """Shared dependencies and the per-call cache."""

    def diamond(self):
        return Graph(
            [input_node(), transform(0), concat(1, 1, 0)],
            [identity_stack(3)],
        )

    def test_memoized_matches_plain(self):
        graph = self.diamond()
        source = VectorSource([np.array([1.0, -2.0, 0.5])])
        np.testing.assert_array_equal(
            graph.compute(source), graph.compute(source, memoize=True)
        )

    def test_memoize_reads_each_input_once(self):
        graph = self.diamond()
        plain = CountingSource([np.ones(3)])
        graph.compute(plain)
        assert plain.vector_reads == 3

        cached = CountingSource([np.ones(3)])
        graph.compute(cached, memoize=True)
        assert cached.vector_reads == 1

    def test_cache_does_not_leak_between_calls(self):
        graph = self.diamond()
        first = graph.compute(VectorSource([np.ones(3)]), memoize=True)
        second = graph.compute(VectorSource([np.zeros(3)]), memoize=True)
        assert first.sum() == 9.0
        assert second.sum() == 0.0


class TestSequences:
    """Sequence evaluation and recurrent reduction."""

    def graph(self):
        return Graph([sequence_node(0, 2), recurrent(0)], [StackConfig([])])

    def test_scan_input_sequence(self):
        graph = self.graph()
        data = np.arange(6.0).reshape(3, 2)
        np.testing.assert_array_equal(graph.scan(VectorSource([], [data]), 0), data)

    def test_recurrent_node_kind(self):
        node = self.graph().node(1)
        assert isinstance(node, RecurrentTransformNode)
        assert node.produces_vector and node.produces_sequence

    def test_compute_is_last_row_of_scan(self):
        graph = self.graph()
        source = VectorSource([], [np.arange(8.0).reshape(4, 2)])
        scanned = graph.scan(source, 1)
        np.testing.assert_array_equal(graph.compute(source, 1), scanned[-1])
        np.testing.assert_array_equal(graph.compute(source, 1), [6.0, 7.0])

    def test_empty_sequence_has_no_final_state(self):
        graph = self.graph()
        with pytest.raises(EvaluationError, match="empty sequence"):
            graph.compute(VectorSource([], [np.zeros((0, 2))]))

    def test_scan_vector_node_fails(self):
        graph = Graph([input_node()])
        with pytest.raises(EvaluationError, match="does not produce a sequence"):
            graph.scan(VectorSource([np.zeros(3)]))

    def test_sequence_width_mismatch(self):
        with pytest.raises(EvaluationError):
            self.graph().compute(VectorSource([], [np.zeros((3, 3))]))

    def test_recurrent_feeds_vector_consumers(self):
        graph = Graph(
            [sequence_node(0, 2), recurrent(0), input_node(0, 1), concat(1, 2)],
            [StackConfig([])],
        )
        source = VectorSource([[5.0]], [[[1.0, 2.0], [3.0, 4.0]]])
        np.testing.assert_array_equal(graph.compute(source), [3.0, 4.0, 5.0])

    def test_dry_run(self):
        graph = Graph(
            [sequence_node(0, 2), recurrent(0), input_node(0, 1), concat(1, 2)],
            [StackConfig([])],
        )
        result = graph.compute(DummySource([1], [(5, 2)]))
        assert result.shape == (graph.width(3),)


class TestIntrospection:
    def test_summary(self):
        graph = Graph([input_node(), transform(0)], [identity_stack(3)])
        summary = graph.summary()
        assert "Nodes: 2" in summary
        assert "transform width=3" in summary

    def test_repr(self):
        assert "nodes=1" in repr(Graph([input_node()]))
